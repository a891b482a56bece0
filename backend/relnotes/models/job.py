"""
Release notes generator — Job result and pipeline output contracts.

Every run returns a JobResult with full traceability:
timings, the output hash, the missing release notes and the
non-fatal error log.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field


class JobState(str, enum.Enum):
    RECEIVED = "RECEIVED"
    SUMMARY_LOADED = "SUMMARY_LOADED"
    SHELL_CREATED = "SHELL_CREATED"
    OVERVIEW_BUILT = "OVERVIEW_BUILT"
    NEW_FEATURES_BUILT = "NEW_FEATURES_BUILT"
    ISSUES_LOADED = "ISSUES_LOADED"
    BUG_FIXES_BUILT = "BUG_FIXES_BUILT"
    ISSUES_BUILT = "ISSUES_BUILT"
    ENVIRONMENT_BUILT = "ENVIRONMENT_BUILT"
    VERIFICATION_BUILT = "VERIFICATION_BUILT"
    SUBSTITUTED = "SUBSTITUTED"
    SERIALIZED = "SERIALIZED"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"


class StepTiming(BaseModel):
    step: str
    duration_ms: int
    status: str = "ok"  # ok | skipped | failed
    detail: str = ""


class ErrorEntry(BaseModel):
    """A recovered failure: what we were doing, and what went wrong."""

    message: str
    cause: str = ""

    @classmethod
    def from_exception(cls, message: str, exc: BaseException) -> "ErrorEntry":
        return cls(message=message, cause=f"{type(exc).__name__}: {exc}")

    def format(self) -> str:
        return f"{self.message}\n\t{self.cause}" if self.cause else self.message


class JobResult(BaseModel):
    """Complete output contract for every release notes run."""

    job_id: str
    output_path: str
    content_hash: str = ""  # SHA-256 of the serialized HTML
    sections: list[str] = Field(default_factory=list)
    issue_count: int = 0
    missing_release_notes: list[str] = Field(default_factory=list)
    timings: list[StepTiming] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    errors: list[ErrorEntry] = Field(default_factory=list)
