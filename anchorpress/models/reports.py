"""Verification report models — three independent checks and a summary."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class CheckStatus(str, Enum):
    """Outcome of one verification check.

    FAIL means the source was consulted and affirmatively lacks the CID;
    ERROR means the source could not be consulted at all.
    """

    PASS = "PASS"
    FAIL = "FAIL"
    WARNING = "WARNING"
    ERROR = "ERROR"


class OverallStatus(str, Enum):
    VERIFIED = "VERIFIED"
    FAILED = "FAILED"


class VerificationCheck(BaseModel):
    """A single verification check result."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: CheckStatus
    message: str
    details: dict[str, Any] | None = None


class VerificationSummary(BaseModel):
    """Counts over the checks plus the derived overall status."""

    model_config = ConfigDict(frozen=True)

    total: int
    passed: int
    failed: int
    warnings: int
    errors: int
    overall_status: OverallStatus

    @classmethod
    def from_checks(cls, checks: list[VerificationCheck]) -> VerificationSummary:
        """Summarise *checks*. Only FAIL entries downgrade the overall status."""
        statuses = [c.status for c in checks]
        failed = statuses.count(CheckStatus.FAIL)
        return cls(
            total=len(statuses),
            passed=statuses.count(CheckStatus.PASS),
            failed=failed,
            warnings=statuses.count(CheckStatus.WARNING),
            errors=statuses.count(CheckStatus.ERROR),
            overall_status=OverallStatus.VERIFIED if failed == 0 else OverallStatus.FAILED,
        )


class VerificationReport(BaseModel):
    """Independent audit of a CID's availability, durability and anchoring.

    Built completely in memory and only then returned or persisted. Holds
    no wall-clock fields, so two runs against an unchanged backend compare
    equal.
    """

    model_config = ConfigDict(frozen=True)

    cid: str
    checks: list[VerificationCheck]
    summary: VerificationSummary

    @classmethod
    def from_checks(cls, cid: str, checks: list[VerificationCheck]) -> VerificationReport:
        return cls(
            cid=cid,
            checks=list(checks),
            summary=VerificationSummary.from_checks(checks),
        )

    @property
    def overall_status(self) -> OverallStatus:
        return self.summary.overall_status

    @property
    def is_verified(self) -> bool:
        return self.summary.overall_status == OverallStatus.VERIFIED

    def check(self, name: str) -> VerificationCheck:
        """Return the check called *name*."""
        for entry in self.checks:
            if entry.name == name:
                return entry
        raise KeyError(name)
