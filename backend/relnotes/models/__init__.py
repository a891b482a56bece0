"""Release notes data models — typed contracts for the entire pipeline."""

from relnotes.models.issue import Issue, ReleaseNoteStatus
from relnotes.models.summary import ReleaseSummary
from relnotes.models.job import (
    JobState,
    StepTiming,
    ErrorEntry,
    JobResult,
)

__all__ = [
    "Issue",
    "ReleaseNoteStatus",
    "ReleaseSummary",
    "JobState",
    "StepTiming",
    "ErrorEntry",
    "JobResult",
]
