"""
Release notes generator — Issue records loaded from the bug list.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field


class ReleaseNoteStatus(str, enum.Enum):
    HAS_NOTE = "has_note"
    MISSING_NOTE = "missing_note"
    NO_NOTE = "no_note"


class Issue(BaseModel):
    """One fixed issue. Immutable once the bug list has been parsed."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1)
    title: str = ""
    fix_versions: list[str] = Field(default_factory=list)
    jira_address: str
    release_note_address: str | None = None
    release_note_status: ReleaseNoteStatus = ReleaseNoteStatus.NO_NOTE

    def has_release_note(self) -> bool:
        return self.release_note_status is ReleaseNoteStatus.HAS_NOTE

    def has_missing_release_note(self) -> bool:
        return self.release_note_status is ReleaseNoteStatus.MISSING_NOTE
