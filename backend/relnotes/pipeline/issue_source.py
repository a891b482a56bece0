"""
Release notes generator — Bug list loader.

The bug list is a tab-separated report produced by the issue tracker
export, one issue per line, already sorted by key:

    // Previous release: 10.6.2.1
    DERBY-4857<TAB>Release notes generator<TAB>10.7.1.0<TAB>12345
    DERBY-2570<TAB>Create a utility<TAB>10.7.1.0,10.6.3.0<TAB>-

The last column is the id of the releaseNote.html attachment, the
word "missing" when a note is required but not attached yet, or
empty / "-" when the issue needs no note.
"""

from __future__ import annotations

from pathlib import Path

from relnotes.errors import IssueListFormatError, ReleaseMismatchError
from relnotes.models.issue import Issue, ReleaseNoteStatus
from relnotes.utils.logging import logger, step_timer

PREVIOUS_RELEASE_MARKER = "// Previous release:"
COMMENT_PREFIX = "//"
MISSING_NOTE_TOKEN = "missing"
NO_NOTE_TOKENS = {"", "-"}


def _parse_record(
    fields: list[str],
    prefix: str,
    browse_url: str,
    attachment_url: str,
) -> tuple[Issue | None, str]:
    key = fields[0].strip()
    if key.startswith(prefix):
        key = key[len(prefix):]
    if not key:
        return None, "empty issue key"

    title = fields[1].strip()
    fix_versions = []
    if len(fields) > 2:
        fix_versions = [v.strip() for v in fields[2].split(",") if v.strip()]
    note = fields[3].strip() if len(fields) > 3 else ""

    note_address = None
    if note in NO_NOTE_TOKENS:
        status = ReleaseNoteStatus.NO_NOTE
    elif note.lower() == MISSING_NOTE_TOKEN:
        status = ReleaseNoteStatus.MISSING_NOTE
    elif note.isdigit():
        status = ReleaseNoteStatus.HAS_NOTE
        note_address = attachment_url.format(attachment_id=note)
    else:
        return None, f"bad release note attachment id {note!r}"

    issue = Issue(
        key=key,
        title=title,
        fix_versions=fix_versions,
        jira_address=browse_url.format(issue_id=prefix + key),
        release_note_address=note_address,
        release_note_status=status,
    )
    return issue, ""


def load_issues(
    path: str | Path,
    prefix: str,
    browse_url: str,
    attachment_url: str,
) -> tuple[list[Issue], str | None]:
    """
    Parse the bug list.

    Returns the issues in file order and the previous release named in
    the header, or None when the header has no such marker.
    """
    path = Path(path)
    issues: list[Issue] = []
    seen: set[str] = set()
    previous_release: str | None = None

    with step_timer("Parse bug list"):
        with path.open(encoding="utf-8") as stream:
            for line_no, raw in enumerate(stream, start=1):
                line = raw.rstrip("\r\n")
                if not line.strip():
                    continue
                if line.startswith(COMMENT_PREFIX):
                    if line.startswith(PREVIOUS_RELEASE_MARKER) and previous_release is None:
                        previous_release = line.split(":", 1)[1].strip()
                    continue

                fields = line.split("\t")
                if len(fields) < 2:
                    raise IssueListFormatError(str(path), line_no, "expected at least key and title")

                issue, problem = _parse_record(fields, prefix, browse_url, attachment_url)
                if issue is None:
                    raise IssueListFormatError(str(path), line_no, problem)
                if issue.key in seen:
                    raise IssueListFormatError(str(path), line_no, f"duplicate issue {prefix}{issue.key}")
                seen.add(issue.key)
                issues.append(issue)

        logger.info(
            "  Loaded %d issues (%d with release notes)",
            len(issues), sum(1 for i in issues if i.has_release_note()),
        )
    return issues, previous_release


def check_previous_release(marker: str | None, expected: str) -> list[str]:
    """
    Compare the bug list's previous release with the summary's.

    Returns the warnings raised (at most one). Raises ReleaseMismatchError
    when both are known and differ.
    """
    if marker is None:
        warning = "Skipped previous release version sanity check."
        logger.warning("  %s", warning)
        return [warning]
    if marker != expected:
        raise ReleaseMismatchError(expected, marker)
    return []
