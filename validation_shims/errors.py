# validation_shims/errors.py
"""
Error types for the validation framework.

Error Hierarchy:
────────────────
┌──────────────────────────────────────────────────────────────────────┐
│  ValidationError (base)                                              │
│  ├── RecoverableReadError      - one source file could not be read   │
│  ├── MetadataLoadError         - a metadata module failed entirely   │
│  │   └── PartialMetadataLoadError - a metadata module loaded a subset│
│  ├── DiscoveryError            - indexed validator lookup failed     │
│  ├── InvalidValidatorSignature - tagged function has a bad shape     │
│  └── InvocationError           - a validator body raised             │
└──────────────────────────────────────────────────────────────────────┘

None of these abort a batch. The analyzer logs read errors and moves on,
the type universe absorbs metadata errors, and the runner turns signature
and invocation errors into failing results.
"""

from __future__ import annotations

import traceback
from typing import TYPE_CHECKING, List, Optional, Sequence

if TYPE_CHECKING:
    from validation_shims.metadata import TypeRecord
    from validation_shims.registry import ValidatorDescriptor


class ValidationError(Exception):
    """Base exception for all validation framework errors."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class RecoverableReadError(ValidationError):
    """A single source file could not be read; the batch continues."""

    def __init__(self, path: str, cause: Optional[BaseException] = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to read {path}{detail}", cause=cause)
        self.path = path


class MetadataLoadError(ValidationError):
    """A metadata module could not be enumerated at all."""

    def __init__(
        self,
        module: str,
        message: str = "",
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message or f"Failed to load types from {module}", cause=cause)
        self.module = module


class PartialMetadataLoadError(MetadataLoadError):
    """
    A metadata module loaded only part of its types.

    ``loaded`` holds the records that decoded successfully; ``errors``
    describes the ones that did not.
    """

    def __init__(
        self,
        module: str,
        loaded: Sequence[TypeRecord],
        errors: Sequence[str],
    ) -> None:
        super().__init__(
            module,
            f"{len(errors)} type(s) failed to load from {module}",
        )
        self.loaded: List[TypeRecord] = list(loaded)
        self.errors: List[str] = list(errors)


class DiscoveryError(ValidationError):
    """The indexed validator lookup failed."""


class InvalidValidatorSignature(ValidationError):
    """A tagged function is not static, takes arguments, or returns the wrong type."""

    def __init__(self, descriptor: ValidatorDescriptor) -> None:
        super().__init__(
            f"Invalid validator signature on "
            f"{getattr(descriptor, 'qualified_name', '<unknown>')}."
        )
        self.descriptor = descriptor


class InvocationError(ValidationError):
    """A validator raised while running."""

    def __init__(self, descriptor: ValidatorDescriptor, cause: BaseException) -> None:
        super().__init__(
            f"{type(cause).__name__}: {cause}",
            cause=cause,
        )
        self.descriptor = descriptor

    @property
    def detail(self) -> str:
        """Formatted traceback of the underlying exception."""
        if self.cause is None:
            return self.message
        return "".join(
            traceback.format_exception(
                type(self.cause), self.cause, self.cause.__traceback__
            )
        )


__all__ = [
    "ValidationError",
    "RecoverableReadError",
    "MetadataLoadError",
    "PartialMetadataLoadError",
    "DiscoveryError",
    "InvalidValidatorSignature",
    "InvocationError",
]
