"""
validation_shims/results.py
═══════════════════════════

Outcome model shared by every validator.

A validator either returns ``bool`` or a :class:`ValidatorResult`; the
registry normalizes both shapes into a ``ValidatorResult`` so the rest of
the framework only ever deals with one type.

    >>> Pass().passed
    True
    >>> Fail("3 problems").message
    '3 problems'
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ValidatorResult:
    """
    Immutable pass/fail verdict with an optional message.

    Attributes
    ----------
    passed  : True when the validator found nothing to report
    message : Human-readable detail, ``None`` when the validator gave none
    """
    passed: bool
    message: Optional[str] = None

    @classmethod
    def passing(cls, message: Optional[str] = None) -> ValidatorResult:
        return cls(True, message)

    @classmethod
    def failing(cls, message: Optional[str] = None) -> ValidatorResult:
        return cls(False, message)

    @property
    def status(self) -> str:
        return "PASS" if self.passed else "FAIL"

    def __str__(self) -> str:
        if self.message:
            return f"{self.status} - {self.message}"
        return self.status


def Pass(message: Optional[str] = None) -> ValidatorResult:  # noqa: N802
    """Build a passing result."""
    return ValidatorResult.passing(message)


def Fail(message: Optional[str] = None) -> ValidatorResult:  # noqa: N802
    """Build a failing result."""
    return ValidatorResult.failing(message)


__all__ = ["ValidatorResult", "Pass", "Fail"]
