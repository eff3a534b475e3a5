"""
validation_shims/config.py
══════════════════════════

Settings for the built-in validators and the host-owned shared state
they read: the active :class:`ValidationConfig` and the
:class:`SymbolIndexCache` built from its metadata catalogs.

    >>> from validation_shims.config import ValidationConfig, configure
    >>> configure(ValidationConfig(roots=("src",), metadata_catalogs=("types.json",)))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from validation_shims.lexer import DEFAULT_DIALECT, LexerDialect
from validation_shims.metadata import JsonMetadataModule, MetadataModule, TypeUniverse
from validation_shims.symbol_index import SymbolIndexCache

logger = logging.getLogger(__name__)

DEFAULT_ROOTS: Tuple[str, ...] = ("Assets/Scripts", "Assets/Tests")
DEFAULT_SUFFIXES: Tuple[str, ...] = (".cs",)


@dataclass(frozen=True)
class ValidationConfig:
    """Tuning knobs for the built-in validators."""
    roots: Tuple[str, ...] = DEFAULT_ROOTS
    suffixes: Tuple[str, ...] = DEFAULT_SUFFIXES
    metadata_catalogs: Tuple[str, ...] = ()
    base_dir: Optional[str] = None
    encoding: str = "utf-8"
    dialect: LexerDialect = field(default=DEFAULT_DIALECT)

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if not self.roots:
            warnings.append("no source roots configured")
        for suffix in self.suffixes:
            if not suffix.startswith("."):
                warnings.append(f"suffix {suffix!r} does not start with '.'")
        for catalog in self.catalog_paths():
            if not catalog.is_file():
                warnings.append(f"metadata catalog not found: {catalog}")
        if not self.metadata_catalogs:
            warnings.append("no metadata catalogs configured; every import will be skipped")
        return warnings

    def catalog_paths(self) -> List[Path]:
        """Catalog paths, relative ones resolved against ``base_dir`` like roots."""
        base = Path(self.base_dir) if self.base_dir is not None else Path.cwd()
        return [
            path if path.is_absolute() else base / path
            for path in map(Path, self.metadata_catalogs)
        ]

    def with_overrides(self, **changes) -> ValidationConfig:
        changes = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **changes)

    def build_universe(self, extra: Iterable[MetadataModule] = ()) -> TypeUniverse:
        universe = TypeUniverse(
            JsonMetadataModule(path, encoding=self.encoding)
            for path in self.catalog_paths()
        )
        for module in extra:
            universe.register(module)
        return universe


_active_config = ValidationConfig()
_extra_modules: List[MetadataModule] = []
_symbol_cache: Optional[SymbolIndexCache] = None


def get_config() -> ValidationConfig:
    return _active_config


def configure(config: ValidationConfig) -> ValidationConfig:
    """Install ``config`` and drop the shared symbol index so it is rebuilt."""
    global _active_config, _symbol_cache
    for warning in config.validate():
        logger.warning("ValidationConfig: %s", warning)
    _active_config = config
    _symbol_cache = None
    return config


def register_metadata_module(module: MetadataModule) -> None:
    """Add a metadata module to the shared universe and discard the index."""
    global _symbol_cache
    _extra_modules.append(module)
    _symbol_cache = None


def clear_metadata_modules() -> None:
    global _symbol_cache
    _extra_modules.clear()
    _symbol_cache = None


def get_symbol_cache() -> SymbolIndexCache:
    """The shared index cache, created for the active config on first use."""
    global _symbol_cache
    if _symbol_cache is None:
        _symbol_cache = SymbolIndexCache(
            _active_config.build_universe(_extra_modules),
            dialect=_active_config.dialect,
        )
    return _symbol_cache


def reset() -> None:
    """Restore defaults (used by tests and by hosts that reload)."""
    global _active_config, _symbol_cache
    _active_config = ValidationConfig()
    _extra_modules.clear()
    _symbol_cache = None


__all__ = [
    "ValidationConfig",
    "DEFAULT_ROOTS",
    "DEFAULT_SUFFIXES",
    "configure",
    "get_config",
    "get_symbol_cache",
    "register_metadata_module",
    "clear_metadata_modules",
    "reset",
]
