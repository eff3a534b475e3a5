"""
validation_shims/lexer.py
═════════════════════════

Lightweight lexer for C-family source files.

Two scans are provided, both deliberately shallow:

  * :func:`extract_import_directives` reads the leading directive block
    of a file (``using X.Y;`` / ``import X.Y;`` lines, comments,
    ``#`` preprocessor lines) and returns the imported namespaces.
  * :func:`extract_identifiers` sweeps the whole file once and collects
    every identifier that appears in code, skipping comments, string
    literals, raw string literals and character literals.

Neither scan resolves anything. The unused-import heuristic built on top
of them only needs "does this name appear in code at all".

Directive lines are recognised with a small Parsimonious PEG grammar;
when a line does not fit the grammar (generic arguments in an alias,
odd spacing, trailing garbage) the textual rules take over so that a
malformed line never raises.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, List, Optional, Set, Tuple

from parsimonious.exceptions import ParseError, VisitationError
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — DIALECT
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LexerDialect:
    """
    Surface syntax knobs for the C-family language being scanned.

    Attributes
    ----------
    import_keywords   : keywords that open an import directive
    static_keyword    : modifier that turns an import into a member import
    global_prefix     : root qualifier stripped from imported namespaces
    raw_string_prefix : character that, directly before ``"``, opens a raw string
    identifier_escape : character that may precede a keyword-shaped identifier
    """
    import_keywords: Tuple[str, ...] = ("using", "import")
    static_keyword: str = "static"
    global_prefix: str = "global::"
    raw_string_prefix: str = "@"
    identifier_escape: str = "@"


CSHARP_DIALECT = LexerDialect()
DEFAULT_DIALECT = CSHARP_DIALECT


def strip_global_prefix(name: str, dialect: LexerDialect = DEFAULT_DIALECT) -> str:
    """Drop a leading root qualifier (``global::System`` → ``System``)."""
    if dialect.global_prefix and name.startswith(dialect.global_prefix):
        return name[len(dialect.global_prefix):]
    return name


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — DIRECTIVE GRAMMAR (Parsimonious PEG)
# ═════════════════════════════════════════════════════════════════════════

_DIRECTIVE_GRAMMAR_TEMPLATE = r'''
    directive      = keyword ws static_clause? alias_clause? namespace _ ";" rest
    keyword        = {keywords}
    static_clause  = {static} ws
    alias_clause   = name _ "=" _
    namespace      = global_prefix? qualified
    global_prefix  = {global_prefix}
    qualified      = name (_ "." _ name)*
    name           = ~r"{escape}[^\W\d]\w*"
    ws             = ~r"\s+"
    _              = ~r"\s*"
    rest           = ~r".*"
'''


def _grammar_literal(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


@functools.lru_cache(maxsize=None)
def directive_grammar(dialect: LexerDialect = DEFAULT_DIALECT) -> Grammar:
    """Compile (once per dialect) the grammar for a single directive line."""
    # Longest keyword first so that PEG ordered choice never stops at a prefix.
    keywords = sorted(dialect.import_keywords, key=len, reverse=True)
    escape = ""
    if dialect.identifier_escape:
        escape = "\\" + dialect.identifier_escape + "?"
    source = _DIRECTIVE_GRAMMAR_TEMPLATE.format(
        keywords=" / ".join(_grammar_literal(k) for k in keywords),
        static=_grammar_literal(dialect.static_keyword),
        global_prefix=_grammar_literal(dialect.global_prefix or "::"),
        escape=escape,
    )
    return Grammar(source)


DIRECTIVE_GRAMMAR = directive_grammar(DEFAULT_DIALECT)


@dataclass(frozen=True)
class ImportDirective:
    """
    One parsed import line.

    ``namespace`` is already canonical: whitespace removed and any root
    qualifier stripped.
    """
    keyword: str
    namespace: str
    is_static: bool = False
    alias: Optional[str] = None

    @property
    def is_namespace_import(self) -> bool:
        """True when the directive brings a namespace's types into scope."""
        return not self.is_static and self.alias is None


def _first(value):
    """Unwrap the visited result of an optional (``x?``) rule."""
    if isinstance(value, list):
        return value[0] if value else None
    return value


class _DirectiveVisitor(NodeVisitor):
    """Turns a directive parse tree into an :class:`ImportDirective`."""

    def __init__(self, dialect: LexerDialect) -> None:
        self._dialect = dialect

    def generic_visit(self, node, visited_children):
        return visited_children or None

    def visit_directive(self, node, visited_children):
        keyword, _, static, alias, namespace, *_ = visited_children
        return ImportDirective(
            keyword=keyword,
            namespace=namespace,
            is_static=bool(_first(static)),
            alias=_first(alias),
        )

    def visit_keyword(self, node, visited_children):
        return node.text

    def visit_static_clause(self, node, visited_children):
        return True

    def visit_alias_clause(self, node, visited_children):
        return node.children[0].text

    def visit_namespace(self, node, visited_children):
        text = "".join(node.text.split())
        return strip_global_prefix(text, self._dialect)


def parse_directive_line(
    line: str,
    dialect: LexerDialect = DEFAULT_DIALECT,
) -> Optional[ImportDirective]:
    """
    Parse one trimmed directive line with the PEG grammar.

    Returns ``None`` when the line does not match the grammar; callers
    fall back to the textual rules in that case.
    """
    try:
        tree = directive_grammar(dialect).parse(line)
        return _DirectiveVisitor(dialect).visit(tree)
    except (ParseError, VisitationError):
        return None


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — LEADING DIRECTIVE BLOCK
# ═════════════════════════════════════════════════════════════════════════

def _import_keyword(line: str, dialect: LexerDialect) -> Optional[str]:
    for keyword in dialect.import_keywords:
        if (
            line.startswith(keyword)
            and len(line) > len(keyword)
            and line[len(keyword)].isspace()
        ):
            return keyword
    return None


def _iter_directive_lines(text: str) -> Iterator[str]:
    """
    Yield trimmed lines with block comments removed.

    Text after a closing ``*/`` on the same line is yielded as if it were
    its own line; lines consumed entirely by a comment are dropped.
    """
    in_block_comment = False
    for raw in text.splitlines():
        line = raw.strip()

        if in_block_comment:
            end = line.find("*/")
            if end < 0:
                continue
            line = line[end + 2:].strip()
            in_block_comment = False
            if not line:
                continue

        if line.startswith("/*"):
            end = line.find("*/", 2)
            if end < 0:
                in_block_comment = True
                continue
            line = line[end + 2:].strip()
            if not line:
                continue

        yield line


def extract_import_directives(
    text: str,
    dialect: LexerDialect = DEFAULT_DIALECT,
) -> List[str]:
    """
    Return the namespaces imported by the file's leading directive block.

    Aliasing imports (``using A = B.C;``) and static imports
    (``using static B.C;``) are skipped because neither makes the
    namespace's type names appear as bare identifiers. Scanning stops at
    the first line that is not blank, a comment, a preprocessor line or
    an import.
    """
    namespaces: List[str] = []

    for line in _iter_directive_lines(text):
        if not line or line.startswith("//") or line.startswith("#"):
            continue

        keyword = _import_keyword(line, dialect)
        if keyword is None:
            break

        directive = parse_directive_line(line, dialect)
        if directive is not None:
            if directive.is_namespace_import and directive.namespace:
                namespaces.append(directive.namespace)
            continue

        body = line[len(keyword):].lstrip()
        if body.split(None, 1)[:1] == [dialect.static_keyword]:
            continue

        semicolon = body.find(";")
        if semicolon < 0:
            break

        equals = body.find("=")
        if 0 <= equals < semicolon:
            continue

        namespace = strip_global_prefix(body[:semicolon].strip(), dialect)
        if namespace:
            logger.debug("Directive outside grammar accepted textually: %r", line)
            namespaces.append(namespace)

    return namespaces


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — IDENTIFIER SWEEP
# ═════════════════════════════════════════════════════════════════════════

class Region(Enum):
    """Lexical region the sweep is currently inside."""
    CODE = auto()
    LINE_COMMENT = auto()
    BLOCK_COMMENT = auto()
    STRING = auto()
    RAW_STRING = auto()
    CHAR = auto()


def _is_identifier_start(c: str) -> bool:
    return c.isalpha() or c == "_"


def _is_identifier_part(c: str) -> bool:
    return c.isalnum() or c == "_"


def extract_identifiers(
    text: str,
    dialect: LexerDialect = DEFAULT_DIALECT,
) -> Set[str]:
    """
    Collect every distinct identifier that appears in code.

    Comments, string literals (including raw strings, where ``""`` is an
    embedded quote) and character literals are skipped. An escaped
    identifier such as ``@class`` is recorded without its escape marker.
    Unterminated literals or comments simply end the scan.
    """
    identifiers: Set[str] = set()
    length = len(text)
    region = Region.CODE
    raw_prefix = dialect.raw_string_prefix
    escape = dialect.identifier_escape
    i = 0

    while i < length:
        c = text[i]
        nxt = text[i + 1] if i + 1 < length else ""

        if region is Region.LINE_COMMENT:
            if c == "\n":
                region = Region.CODE
            i += 1
            continue

        if region is Region.BLOCK_COMMENT:
            if c == "*" and nxt == "/":
                region = Region.CODE
                i += 2
                continue
            i += 1
            continue

        if region is Region.STRING or region is Region.CHAR:
            if c == "\\":
                i += 2
                continue
            if (c == '"' and region is Region.STRING) or (
                c == "'" and region is Region.CHAR
            ):
                region = Region.CODE
            i += 1
            continue

        if region is Region.RAW_STRING:
            if c == '"' and nxt == '"':
                i += 2
                continue
            if c == '"':
                region = Region.CODE
            i += 1
            continue

        # Region.CODE
        if c == "/" and nxt == "/":
            region = Region.LINE_COMMENT
            i += 2
            continue
        if c == "/" and nxt == "*":
            region = Region.BLOCK_COMMENT
            i += 2
            continue
        if raw_prefix and c == raw_prefix and nxt == '"':
            region = Region.RAW_STRING
            i += 2
            continue
        if c == '"':
            region = Region.STRING
            i += 1
            continue
        if c == "'":
            region = Region.CHAR
            i += 1
            continue

        if escape and c == escape and nxt and _is_identifier_start(nxt):
            i += 1
            c = nxt

        if _is_identifier_start(c):
            start = i
            i += 1
            while i < length and _is_identifier_part(text[i]):
                i += 1
            identifiers.add(text[start:i])
            continue

        i += 1

    return identifiers


__all__ = [
    "LexerDialect",
    "CSHARP_DIALECT",
    "DEFAULT_DIALECT",
    "DIRECTIVE_GRAMMAR",
    "ImportDirective",
    "Region",
    "directive_grammar",
    "extract_identifiers",
    "extract_import_directives",
    "parse_directive_line",
    "strip_global_prefix",
]
