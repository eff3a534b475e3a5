"""
validation_shims/symbol_index.py
════════════════════════════════

Namespace → declared names index used by the unused-import heuristic.

For every namespace in the type universe the index records

  * the simple names of the types it declares (arity suffix removed,
    so ``Dictionary`2`` is stored as ``Dictionary``),
  * the short names of its tag/attribute types (``ObsoleteAttribute``
    is written ``[Obsolete]`` in source, so ``Obsolete`` is stored),
  * whether it holds an extension-method container, in which case its
    import may be used without any of its type names appearing.

The index is built once, on first use, by :class:`SymbolIndexCache` and
is never invalidated behind the caller's back. Call
:meth:`SymbolIndexCache.discard` after the universe changes.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Set

from validation_shims.lexer import DEFAULT_DIALECT, LexerDialect, strip_global_prefix
from validation_shims.metadata import TypeRecord, TypeUniverse

logger = logging.getLogger(__name__)

ARITY_MARKER = "`"
TAG_SUFFIX = "Attribute"


def strip_arity(type_name: str) -> str:
    """``List`1`` → ``List``."""
    tick = type_name.find(ARITY_MARKER)
    if tick >= 0:
        return type_name[:tick]
    return type_name


def tag_short_name(type_name: str) -> Optional[str]:
    """``ObsoleteAttribute`` → ``Obsolete``; ``None`` when there is no suffix."""
    if type_name.endswith(TAG_SUFFIX):
        return type_name[: -len(TAG_SUFFIX)] or None
    return None


@dataclass(frozen=True)
class SymbolIndex:
    """
    Immutable namespace index.

    Attributes
    ----------
    namespace_types      : namespace → declared type names
    tag_short_names      : namespace → tag short names
    extension_namespaces : namespaces containing an extension container
    errors               : load errors absorbed while building
    """
    namespace_types: Mapping[str, FrozenSet[str]] = field(default_factory=dict)
    tag_short_names: Mapping[str, FrozenSet[str]] = field(default_factory=dict)
    extension_namespaces: FrozenSet[str] = frozenset()
    errors: tuple = ()

    def __contains__(self, namespace: object) -> bool:
        return namespace in self.namespace_types

    def __len__(self) -> int:
        return len(self.namespace_types)

    def type_names(self, namespace: str) -> FrozenSet[str]:
        return self.namespace_types.get(namespace, frozenset())

    def tag_names(self, namespace: str) -> FrozenSet[str]:
        return self.tag_short_names.get(namespace, frozenset())

    def is_extension_namespace(self, namespace: str) -> bool:
        return namespace in self.extension_namespaces

    @classmethod
    def from_records(
        cls,
        records: Iterable[TypeRecord],
        errors: Iterable[str] = (),
        dialect: LexerDialect = DEFAULT_DIALECT,
    ) -> SymbolIndex:
        namespace_types: Dict[str, Set[str]] = defaultdict(set)
        tag_names: Dict[str, Set[str]] = defaultdict(set)
        extension_namespaces: Set[str] = set()

        for record in records:
            if record is None or not record.namespace:
                continue

            ns = strip_global_prefix(record.namespace, dialect)
            type_name = strip_arity(record.name)

            names = namespace_types[ns]
            if type_name:
                names.add(type_name)

            if record.is_tag:
                short = tag_short_name(type_name)
                if short:
                    tag_names[ns].add(short)

            if record.is_extension_container:
                extension_namespaces.add(ns)

        return cls(
            namespace_types={ns: frozenset(n) for ns, n in namespace_types.items()},
            tag_short_names={ns: frozenset(n) for ns, n in tag_names.items()},
            extension_namespaces=frozenset(extension_namespaces),
            errors=tuple(errors),
        )


def build_symbol_index(
    universe: TypeUniverse,
    dialect: LexerDialect = DEFAULT_DIALECT,
) -> SymbolIndex:
    """Walk every loaded type once and group names by namespace."""
    loaded = universe.load_all()
    for error in loaded.errors:
        logger.debug("Ignoring type that failed to load: %s", error)
    index = SymbolIndex.from_records(loaded.types, loaded.errors, dialect)
    logger.info(
        "Symbol index built: %d namespace(s), %d extension namespace(s), %d load error(s)",
        len(index), len(index.extension_namespaces), len(loaded.errors),
    )
    return index


class SymbolIndexCache:
    """
    Lazily built, explicitly discarded :class:`SymbolIndex`.

    Not thread-safe: callers serialise ``get()`` and ``discard()``.
    """

    def __init__(
        self,
        universe: Optional[TypeUniverse] = None,
        dialect: LexerDialect = DEFAULT_DIALECT,
    ) -> None:
        self.universe = universe if universe is not None else TypeUniverse()
        self.dialect = dialect
        self._index: Optional[SymbolIndex] = None
        self.build_count = 0

    @property
    def is_built(self) -> bool:
        return self._index is not None

    def get(self) -> SymbolIndex:
        if self._index is None:
            self._index = build_symbol_index(self.universe, self.dialect)
            self.build_count += 1
        return self._index

    def discard(self) -> None:
        self._index = None


__all__ = [
    "SymbolIndex",
    "SymbolIndexCache",
    "build_symbol_index",
    "strip_arity",
    "tag_short_name",
]
