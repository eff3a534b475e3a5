"""
validation_shims/unused_imports.py
══════════════════════════════════

Heuristic detection of unused namespace imports.

For each source file the analyzer

  1. reads the text (unreadable files are logged and skipped),
  2. extracts the leading import directives,
  3. extracts every identifier that appears in code,
  4. looks each imported namespace up in the symbol index, and
  5. flags the namespace when none of its type names or tag short names
     occur among the identifiers.

Namespaces missing from the index, and namespaces that hold extension
method containers, are never flagged. The check therefore under-reports:
an import that is only needed for a name the index does not know about
is silently accepted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Set, Tuple, Union

from validation_shims.config import get_config, get_symbol_cache
from validation_shims.errors import RecoverableReadError
from validation_shims.lexer import (
    DEFAULT_DIALECT,
    LexerDialect,
    extract_identifiers,
    extract_import_directives,
)
from validation_shims.registry import validation_method
from validation_shims.results import Fail, Pass, ValidatorResult
from validation_shims.sources import LazySource, SourceFile, iter_source_files
from validation_shims.symbol_index import SymbolIndex, SymbolIndexCache

logger = logging.getLogger(__name__)

Source = Union[SourceFile, LazySource, Tuple[str, Union[str, Callable[[], str]]]]

CONSERVATIVE_NOTE = (
    "This validator uses a conservative identifier scan, so it may miss "
    "some unused imports while avoiding false positives."
)


@dataclass(frozen=True)
class UnusedImport:
    """An import directive whose namespace appears unused in ``path``."""
    path: str
    namespace: str

    def __str__(self) -> str:
        return f"Unused import '{self.namespace}' in {self.path}"


@dataclass
class AnalysisReport:
    """
    Result of one analyzer pass.

    Attributes
    ----------
    instances     : every (file, namespace) flagged as unused
    files_scanned : files whose text was analyzed
    files_skipped : files that could not be read
    """
    instances: List[UnusedImport] = field(default_factory=list)
    files_scanned: int = 0
    files_skipped: List[str] = field(default_factory=list)

    @property
    def warnings(self) -> int:
        return len(self.instances)

    def by_file(self, path: str) -> List[UnusedImport]:
        return [u for u in self.instances if u.path == path]

    def to_result(self) -> ValidatorResult:
        if self.warnings == 0:
            return Pass()
        return Fail(
            f"Found {self.warnings} unused import directive(s). {CONSERVATIVE_NOTE}"
        )


def _read(source: Source) -> Tuple[str, str]:
    """Return ``(path, text)``; raises ``RecoverableReadError`` on failure."""
    if isinstance(source, (SourceFile, LazySource)):
        path, reader = source.path, source.read
    else:
        path, payload = source
        reader = payload if callable(payload) else (lambda: payload)
    try:
        return path, reader()
    except (OSError, UnicodeDecodeError) as exc:
        raise RecoverableReadError(path, exc) from exc


def unused_namespaces(
    namespaces: Iterable[str],
    identifiers: Set[str],
    index: SymbolIndex,
) -> List[str]:
    """The subset of ``namespaces`` none of whose names occur in ``identifiers``."""
    unused: List[str] = []
    for ns in namespaces:
        if ns not in index:
            continue
        if index.is_extension_namespace(ns):
            continue
        if any(name in identifiers for name in index.type_names(ns)):
            continue
        if any(name in identifiers for name in index.tag_names(ns)):
            continue
        unused.append(ns)
    return unused


def find_unused_imports(
    text: str,
    index: SymbolIndex,
    dialect: LexerDialect = DEFAULT_DIALECT,
) -> List[str]:
    """Namespaces imported by ``text`` that look unused; see module docstring."""
    namespaces = extract_import_directives(text, dialect)
    if not namespaces:
        return []
    return unused_namespaces(namespaces, extract_identifiers(text, dialect), index)


class UnusedImportAnalyzer:
    """
    Batch driver for :func:`find_unused_imports`.

    Parameters
    ----------
    index   : a built :class:`SymbolIndex` or a :class:`SymbolIndexCache`;
              a cache is only asked for its index once a file actually
              has imports
    dialect : lexer dialect for the analyzed language
    """

    def __init__(
        self,
        index: Union[SymbolIndex, SymbolIndexCache],
        dialect: LexerDialect = DEFAULT_DIALECT,
    ) -> None:
        self._index = index
        self.dialect = dialect

    @property
    def index(self) -> SymbolIndex:
        if isinstance(self._index, SymbolIndexCache):
            return self._index.get()
        return self._index

    def analyze_file(self, path: str, text: str) -> List[UnusedImport]:
        namespaces = extract_import_directives(text, self.dialect)
        if not namespaces:
            return []
        identifiers = extract_identifiers(text, self.dialect)
        return [
            UnusedImport(path, ns)
            for ns in unused_namespaces(namespaces, identifiers, self.index)
        ]

    def analyze(self, sources: Iterable[Source]) -> AnalysisReport:
        report = AnalysisReport()
        for source in sources:
            try:
                path, text = _read(source)
            except RecoverableReadError as exc:
                logger.warning("%s", exc)
                report.files_skipped.append(exc.path)
                continue

            report.files_scanned += 1
            for instance in self.analyze_file(path, text):
                logger.warning("%s", instance)
                report.instances.append(instance)
        return report


@validation_method
def check_for_unused_imports() -> ValidatorResult:
    """Flag import directives whose namespace is never referenced in the configured sources."""
    config = get_config()
    sources = iter_source_files(
        config.roots,
        config.suffixes,
        base=config.base_dir,
        encoding=config.encoding,
    )
    analyzer = UnusedImportAnalyzer(get_symbol_cache(), dialect=config.dialect)
    return analyzer.analyze(sources).to_result()


__all__ = [
    "AnalysisReport",
    "UnusedImport",
    "UnusedImportAnalyzer",
    "check_for_unused_imports",
    "find_unused_imports",
    "unused_namespaces",
    "CONSERVATIVE_NOTE",
]
