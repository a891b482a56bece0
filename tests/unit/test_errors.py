"""Unit tests for the structured error catalog."""

import pytest
from relnotes.errors import (
    RelNotesError, ValidationError, SummaryFormatError, IssueListFormatError,
    ReleaseMismatchError, ReleaseNoteFetchError, ReleaseNoteFormatError,
    GenerationFailedError,
)
from relnotes.diagnostics import AssertFailure


class TestErrorCatalog:
    """Verify every error type has the right code and serialization."""

    def test_base_error(self):
        e = RelNotesError(code="TEST", message="test msg", suggestion="try this")
        d = e.to_dict()
        assert d["error_code"] == "TEST"
        assert d["message"] == "test msg"
        assert d["suggestion"] == "try this"

    def test_base_error_omits_empty_fields(self):
        d = RelNotesError(code="TEST", message="m").to_dict()
        assert "suggestion" not in d
        assert "detail" not in d

    def test_validation_error(self):
        e = ValidationError(errors=["Missing required field: 'release_id'"])
        assert e.code == "VALIDATION_FAILED"
        assert "release_id" in e.message
        assert e.to_dict()["detail"] == ["Missing required field: 'release_id'"]

    def test_summary_format_error(self):
        e = SummaryFormatError("summary.xml", "no element found")
        assert e.code == "SUMMARY_INVALID"
        assert "summary.xml" in e.message

    def test_issue_list_format_error(self):
        e = IssueListFormatError("bugs.txt", 7, "duplicate issue DERBY-1")
        assert e.code == "ISSUE_LIST_INVALID"
        assert e.message.startswith("bugs.txt:7:")

    def test_release_mismatch(self):
        e = ReleaseMismatchError("10.6.2.1", "10.5.3.0")
        assert e.code == "PREVIOUS_RELEASE_MISMATCH"
        assert "10.6.2.1 != 10.5.3.0" in e.message

    def test_fetch_error(self):
        e = ReleaseNoteFetchError("http://x/releaseNote.html", "404")
        assert e.code == "RELEASE_NOTE_FETCH_FAILED"
        assert "http://x/releaseNote.html" in e.message

    def test_format_error(self):
        e = ReleaseNoteFormatError("no body")
        assert e.code == "RELEASE_NOTE_INVALID"

    def test_generation_failed_keeps_code(self):
        e = GenerationFailedError("boom", code="PREVIOUS_RELEASE_MISMATCH")
        assert e.code == "PREVIOUS_RELEASE_MISMATCH"
        assert e.message == "Error running release notes generator: boom"

    def test_generation_failed_default_code(self):
        assert GenerationFailedError("boom").code == "GENERATION_FAILED"

    def test_all_errors_are_exceptions(self):
        error_classes = [
            ValidationError, SummaryFormatError, IssueListFormatError,
            ReleaseMismatchError, ReleaseNoteFetchError, ReleaseNoteFormatError,
            GenerationFailedError, AssertFailure,
        ]
        for cls in error_classes:
            assert issubclass(cls, RelNotesError)
            assert issubclass(cls, Exception)

    def test_raises_like_an_exception(self):
        with pytest.raises(RelNotesError, match="duplicate"):
            raise IssueListFormatError("bugs.txt", 1, "duplicate issue DERBY-1")
