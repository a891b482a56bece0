"""
Release notes generator — Release summary loader.

Reads the filled-in summary XML and normalises it into a
ReleaseSummary. Fragment elements keep their XHTML markup;
the remaining elements are reduced to their stripped text.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from xml.sax.saxutils import escape

from relnotes.errors import SummaryFormatError
from relnotes.html.document import strip_namespaces
from relnotes.models.summary import FRAGMENT_FIELDS, ReleaseSummary
from relnotes.utils.logging import logger, step_timer
from relnotes.utils.validate import validate_summary_payload

# summary XML tag -> ReleaseSummary field
SUMMARY_TAGS = {
    "releaseID": "release_id",
    "previousReleaseID": "previous_release_id",
    "branch": "branch",
    "overview": "overview",
    "newFeatures": "new_features",
    "releaseVerification": "release_verification",
    "machine": "machine",
    "antVersion": "ant_version",
    "jdk1.4": "jdk14",
    "java6": "java6",
    "compilers": "compilers",
    "jsr169": "jsr169",
    "osgi": "osgi",
}


def _inner_markup(element: ET.Element) -> str:
    # element.text is unescaped character data; children serialize escaped
    parts = [escape(element.text or "")]
    for child in element:
        parts.append(ET.tostring(child, encoding="unicode"))
    return "".join(parts).strip()


def _inner_text(element: ET.Element) -> str:
    return " ".join("".join(element.itertext()).split())


def load_summary(path: str | Path) -> ReleaseSummary:
    """Parse the release summary file. Raises on unreadable or incomplete input."""
    path = Path(path)
    with step_timer("Load release summary"):
        try:
            root = ET.parse(path).getroot()
        except (OSError, ET.ParseError) as exc:
            raise SummaryFormatError(str(path), str(exc)) from exc

        strip_namespaces(root)
        if root.tag != "summary":
            raise SummaryFormatError(str(path), f"unexpected root element <{root.tag}>")

        elements = {child.tag: child for child in root}
        data: dict[str, str] = {}
        for tag, field in SUMMARY_TAGS.items():
            element = elements.get(tag)
            if element is None:
                continue
            if field in FRAGMENT_FIELDS:
                data[field] = _inner_markup(element)
            else:
                data[field] = _inner_text(element)

        summary = ReleaseSummary(**validate_summary_payload(data))
        logger.info(
            "  Release %s (previous %s, branch %s)",
            summary.release_id, summary.previous_release_id, summary.branch,
        )
        return summary
