"""Verification result models.

A check either runs and yields an ArtifactCheck (valid, invalid with a
reason, or not applicable), or it cannot run and raises. Results never
carry fatal errors.
"""

from enum import Enum

from pydantic import BaseModel
from pydantic import Field


class ArtifactStatus(str, Enum):
    """Outcome of checking a single file or link."""

    VALID = "valid"
    INVALID = "invalid"
    NOT_APPLICABLE = "not_applicable"


class ArtifactCheck(BaseModel):
    """Result of checking one artifact."""

    path: str = Field(description="Checked path")
    status: ArtifactStatus = Field(description="Check outcome")
    reason: str | None = Field(default=None, description="Diagnostic when invalid")

    @property
    def ok(self) -> bool:
        """Whether this artifact counts as valid when aggregating."""
        return self.status != ArtifactStatus.INVALID

    @classmethod
    def valid(cls, path: str) -> "ArtifactCheck":
        return cls(path=path, status=ArtifactStatus.VALID)

    @classmethod
    def invalid(cls, path: str, reason: str) -> "ArtifactCheck":
        return cls(path=path, status=ArtifactStatus.INVALID, reason=reason)

    @classmethod
    def not_applicable(cls, path: str) -> "ArtifactCheck":
        return cls(path=path, status=ArtifactStatus.NOT_APPLICABLE)


class VerificationState(str, Enum):
    """Whether a profile is recorded as active."""

    NOT_CONFIGURED = "not_configured"
    CONFIGURED = "configured"


class _CheckReport(BaseModel):
    checks: list[ArtifactCheck] = Field(default_factory=list, description="Per-artifact outcomes in scan order")

    @property
    def diagnostics(self) -> list[str]:
        """Human-readable reasons, one per failing artifact."""
        return [c.reason for c in self.checks if c.status == ArtifactStatus.INVALID and c.reason]


class LeftoverResult(_CheckReport):
    """Outcome of scanning for artifacts left behind after removal."""

    @property
    def valid(self) -> bool:
        return all(c.ok for c in self.checks)


class ConflictResult(_CheckReport):
    """Outcome of scanning symlink paths before installing a profile."""

    @property
    def conflicts_exist(self) -> bool:
        return any(c.status == ArtifactStatus.INVALID for c in self.checks)


class VerificationResult(_CheckReport):
    """Outcome of verifying the host against its active profile."""

    state: VerificationState = Field(description="Whether a profile is recorded as active")
    profile_id: str | None = Field(default=None, description="Verified profile, None when not configured")
    features: tuple[str, ...] = Field(default=(), description="Features of the verified profile")

    @property
    def valid(self) -> bool:
        return all(c.ok for c in self.checks)
