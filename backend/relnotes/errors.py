"""
Release notes generator — Structured error catalog.

Every error has a code, human message, and suggested fix.
Fatal errors abort the run before the output file is written;
per-issue release note errors are recorded and the run continues.
"""

from __future__ import annotations

from typing import Any


class RelNotesError(Exception):
    """Base error with structured code + suggestion."""

    def __init__(self, code: str, message: str, suggestion: str = "", detail: Any = None):
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.detail = detail
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "error_code": self.code,
            "message": self.message,
        }
        if self.suggestion:
            d["suggestion"] = self.suggestion
        if self.detail:
            d["detail"] = self.detail
        return d


class ValidationError(RelNotesError):
    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            code="VALIDATION_FAILED",
            message=f"Release summary validation failed: {'; '.join(errors)}",
            suggestion="Fill in every required element of the release summary (releaseID, previousReleaseID, ...).",
            detail=errors,
        )


class SummaryFormatError(RelNotesError):
    def __init__(self, path: str, reason: str):
        super().__init__(
            code="SUMMARY_INVALID",
            message=f"Cannot read release summary {path}: {reason}",
            suggestion="The summary must be a well-formed XML document with a <summary> root.",
        )


class IssueListFormatError(RelNotesError):
    def __init__(self, path: str, line_no: int, reason: str):
        super().__init__(
            code="ISSUE_LIST_INVALID",
            message=f"{path}:{line_no}: {reason}",
            suggestion="Regenerate the bug list just before running the generator.",
        )


class ReleaseMismatchError(RelNotesError):
    def __init__(self, expected: str, found: str):
        super().__init__(
            code="PREVIOUS_RELEASE_MISMATCH",
            message=(
                "previous release version mismatch between release summary "
                f"and bug list: {expected} != {found}"
            ),
            suggestion="Regenerate the bug list against the previous release named in the summary.",
        )


class ReleaseNoteFetchError(RelNotesError):
    def __init__(self, url: str, reason: str):
        super().__init__(
            code="RELEASE_NOTE_FETCH_FAILED",
            message=f"Could not fetch release note {url}: {reason}",
            suggestion="Check that the issue tracker is reachable and the attachment still exists.",
        )


class ReleaseNoteFormatError(RelNotesError):
    def __init__(self, reason: str):
        super().__init__(
            code="RELEASE_NOTE_INVALID",
            message=f"Malformed release note: {reason}",
            suggestion="Release notes must be well-formed XHTML with a 'Summary of Change' section.",
        )


class GenerationFailedError(RelNotesError):
    def __init__(self, message: str, code: str = "GENERATION_FAILED"):
        super().__init__(
            code=code,
            message=f"Error running release notes generator: {message}",
            suggestion="See the logged stack trace for the underlying cause.",
        )
