"""
validation_shims — Pluggable validators for C-family source trees
=================================================================

A small framework for discovering and running project validators, plus a
built-in heuristic that flags unused namespace imports (``using X.Y;``).

Core modules
------------
results
    ``ValidatorResult`` and the ``Pass`` / ``Fail`` constructors.
registry
    ``@validation_method`` marker, discovery, signature checks, invocation.
runner
    Single-run and run-all drivers that contain validator exceptions.
lexer
    Directive-block scan and region-aware identifier sweep.
metadata
    Type metadata modules (JSON catalogs, in-memory tables).
symbol_index
    Namespace → declared names index, lazily built and cached.
unused_imports
    The unused-import analyzer and its validator.
config
    ``ValidationConfig`` and the shared symbol index cache.

Quick start
-----------
>>> from validation_shims import ValidatorRegistry, run_all
>>> report = run_all(ValidatorRegistry())
>>> print(report.summary())
Total: 1  Passed: 1  Failed: 0

Package layout
--------------
::

    validation_shims/
    ├── __init__.py            ← this file
    ├── __main__.py
    ├── main.py
    ├── config.py
    ├── errors.py
    ├── lexer.py
    ├── metadata.py
    ├── registry.py
    ├── results.py
    ├── runner.py
    ├── sources.py
    ├── symbol_index.py
    └── unused_imports.py
"""

from __future__ import annotations

import logging

from validation_shims.config import ValidationConfig, configure, get_config, get_symbol_cache
from validation_shims.errors import (
    DiscoveryError,
    InvalidValidatorSignature,
    InvocationError,
    MetadataLoadError,
    PartialMetadataLoadError,
    RecoverableReadError,
    ValidationError,
)
from validation_shims.lexer import (
    LexerDialect,
    extract_identifiers,
    extract_import_directives,
)
from validation_shims.metadata import (
    JsonMetadataModule,
    StaticMetadataModule,
    TypeRecord,
    TypeUniverse,
)
from validation_shims.registry import (
    ReturnKind,
    ValidatorDescriptor,
    ValidatorRegistry,
    validation_method,
)
from validation_shims.results import Fail, Pass, ValidatorResult
from validation_shims.runner import RunAllReport, RunRecord, RunStatus, run_all, run_validator
from validation_shims.symbol_index import SymbolIndex, SymbolIndexCache, build_symbol_index
from validation_shims.unused_imports import (
    AnalysisReport,
    UnusedImportAnalyzer,
    check_for_unused_imports,
)

__version__ = "0.1.0"
__author__ = "validation-shims contributors"
__license__ = "MIT"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    # Outcome
    "ValidatorResult",
    "Pass",
    "Fail",
    # Registry / runner
    "validation_method",
    "ValidatorDescriptor",
    "ValidatorRegistry",
    "ReturnKind",
    "RunAllReport",
    "RunRecord",
    "RunStatus",
    "run_all",
    "run_validator",
    # Lexer
    "LexerDialect",
    "extract_identifiers",
    "extract_import_directives",
    # Symbol index
    "TypeRecord",
    "TypeUniverse",
    "StaticMetadataModule",
    "JsonMetadataModule",
    "SymbolIndex",
    "SymbolIndexCache",
    "build_symbol_index",
    # Unused imports
    "AnalysisReport",
    "UnusedImportAnalyzer",
    "check_for_unused_imports",
    # Config
    "ValidationConfig",
    "configure",
    "get_config",
    "get_symbol_cache",
    # Errors
    "ValidationError",
    "RecoverableReadError",
    "MetadataLoadError",
    "PartialMetadataLoadError",
    "DiscoveryError",
    "InvalidValidatorSignature",
    "InvocationError",
]
