"""
Release notes generator — Variable substitution.

Replaces {{ name }} tokens anywhere in the assembled page: element
text, tails and attribute values. Runs after every section has been
attached so summary fragments can use the tokens too.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET

from relnotes.models.summary import ReleaseSummary
from relnotes.utils.logging import logger

TOKEN_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][\w.]*)\s*\}\}")


def release_variables(summary: ReleaseSummary, product_name: str) -> dict[str, str]:
    return {
        "releaseID": summary.release_id,
        "previousReleaseID": summary.previous_release_id,
        "branch": summary.branch,
        "productName": product_name,
    }


def replace_variables(root: ET.Element, variables: dict[str, str]) -> int:
    """
    Substitute tokens in place. Unknown tokens are left as they are.

    Returns the number of replacements made.
    """
    count = 0
    unknown: set[str] = set()

    def _sub(value: str | None) -> str | None:
        if not value or "{{" not in value:
            return value

        def _replace(match: re.Match) -> str:
            nonlocal count
            name = match.group(1)
            if name not in variables:
                unknown.add(name)
                return match.group(0)
            count += 1
            return variables[name]

        return TOKEN_PATTERN.sub(_replace, value)

    for element in root.iter():
        element.text = _sub(element.text)
        element.tail = _sub(element.tail)
        for attr, value in list(element.attrib.items()):
            element.set(attr, _sub(value))

    for name in sorted(unknown):
        logger.warning("  Unknown variable {{ %s }} left unreplaced", name)
    return count
