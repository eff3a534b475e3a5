"""
validation_shims/runner.py
══════════════════════════

Runs validators from a :class:`~validation_shims.registry.ValidatorRegistry`
and turns every outcome, including invalid signatures and exceptions,
into a :class:`RunRecord`. One validator failing or raising never stops
the others.

    >>> report = run_all(ValidatorRegistry())
    >>> print(report.summary())
    Total: 3  Passed: 2  Failed: 1
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from validation_shims.errors import InvocationError
from validation_shims.registry import ValidatorDescriptor, ValidatorRegistry
from validation_shims.results import Fail, ValidatorResult

logger = logging.getLogger(__name__)


class RunStatus(Enum):
    PASSED = "passed"
    FAILED = "failed"
    INVALID_SIGNATURE = "invalid-signature"
    EXCEPTION = "exception"


@dataclass(frozen=True)
class RunRecord:
    """
    Outcome of one validator invocation.

    Attributes
    ----------
    descriptor : the validator that ran
    result     : normalized pass/fail result
    status     : how the run ended
    exception  : traceback text when the validator raised, else ``None``
    """
    descriptor: ValidatorDescriptor
    result: ValidatorResult
    status: RunStatus
    exception: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status is RunStatus.PASSED

    @property
    def status_message(self) -> str:
        """Short text for a single-run display."""
        if self.status is RunStatus.INVALID_SIGNATURE:
            return "Validator could not run."
        if self.status is RunStatus.EXCEPTION:
            return "Exception thrown while running validator."
        if self.result.message and self.result.message.strip():
            return self.result.message
        return "Validator passed." if self.result.passed else "Validator failed."

    def line(self) -> str:
        """One summary line for a run-all report."""
        name = self.descriptor.qualified_name
        if self.status is RunStatus.INVALID_SIGNATURE:
            return f"{name}: Invalid validator signature."
        if self.status is RunStatus.EXCEPTION:
            return f"{name}: Exception - {self.result.message}"
        message = self.result.message
        if not message or not message.strip():
            message = "No message."
        outcome = "Passed" if self.result.passed else "Failed"
        return f"{name}: {outcome} - {message}"


def run_validator(registry: ValidatorRegistry, descriptor: ValidatorDescriptor) -> RunRecord:
    """Run one validator; exceptions from its body become a failing record."""
    try:
        ok, result = registry.try_run(descriptor)
    except (Exception, SystemExit) as exc:
        error = InvocationError(descriptor, exc)
        logger.error("Validator %s raised %s", descriptor.qualified_name, error)
        return RunRecord(
            descriptor=descriptor,
            result=Fail(error.message),
            status=RunStatus.EXCEPTION,
            exception=error.detail,
        )

    if not ok:
        logger.warning("%s", result.message)
        return RunRecord(descriptor, result, RunStatus.INVALID_SIGNATURE)

    status = RunStatus.PASSED if result.passed else RunStatus.FAILED
    return RunRecord(descriptor, result, status)


@dataclass
class RunAllReport:
    """Aggregate of a run-all pass."""
    records: List[RunRecord] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.records)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.records if r.passed)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def has_issues(self) -> bool:
        return self.failed > 0

    def by_status(self, status: RunStatus) -> List[RunRecord]:
        return [r for r in self.records if r.status is status]

    def lines(self) -> List[str]:
        return [r.line() for r in self.records]

    def summary(self) -> str:
        return f"Total: {self.total}  Passed: {self.passed}  Failed: {self.failed}"

    def details(self) -> str:
        if not self.records:
            return "No validators found."
        return "\n".join(self.lines())


def run_all(registry: ValidatorRegistry) -> RunAllReport:
    """Run every discovered validator independently."""
    report = RunAllReport()
    for descriptor in registry.get_validators():
        report.records.append(run_validator(registry, descriptor))
    logger.info("Run-all complete: %s", report.summary())
    return report


__all__ = ["RunStatus", "RunRecord", "RunAllReport", "run_validator", "run_all"]
