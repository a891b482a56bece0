"""
Release notes generator — Typed release summary.

The summary is filled in by the release manager before each release.
Fragment fields keep their inner XHTML markup so the section builders
can copy it into the output verbatim.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from pydantic import BaseModel, Field, model_validator

FRAGMENT_FIELDS = ("overview", "new_features", "release_verification")


class ReleaseSummary(BaseModel):
    release_id: str = Field(min_length=1, max_length=50)
    previous_release_id: str = Field(min_length=1, max_length=50)
    branch: str = ""
    overview: str = ""
    new_features: str = ""
    release_verification: str = ""
    machine: str = ""
    ant_version: str = ""
    jdk14: str = ""
    java6: str = ""
    compilers: str = ""
    jsr169: str = ""
    osgi: str = ""

    @model_validator(mode="after")
    def _default_branch(self) -> "ReleaseSummary":
        # 10.7.1.0 is cut from the 10.7 branch
        if not self.branch:
            self.branch = ".".join(self.release_id.split(".")[:2])
        return self

    def fragment(self, name: str) -> ET.Element:
        """Parse a fragment field into a <div> wrapping its content."""
        if name not in FRAGMENT_FIELDS:
            raise KeyError(name)
        return ET.fromstring(f"<div>{getattr(self, name)}</div>")
