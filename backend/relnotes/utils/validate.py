"""
Release notes generator — Input validation for release summary payloads.

Runs before the pydantic ReleaseSummary so that every missing
element is reported at once instead of one per run.
"""

from typing import Any

from relnotes.errors import ValidationError


REQUIRED_FIELDS = ["release_id", "previous_release_id"]

OPTIONAL_TEXT_FIELDS = [
    "branch", "overview", "new_features", "release_verification",
    "machine", "ant_version", "jdk14", "java6", "compilers", "jsr169", "osgi",
]


def validate_summary_payload(data: dict[str, Any]) -> dict[str, Any]:
    """
    Validate the fields extracted from the release summary.
    Returns the normalised data dict (with missing optional fields set to "").
    Raises ValidationError on failure.
    """
    errors: list[str] = []

    for field in REQUIRED_FIELDS:
        if field not in data or not str(data[field] or "").strip():
            errors.append(f"Missing required field: '{field}'")

    if errors:
        raise ValidationError(errors)

    for field in OPTIONAL_TEXT_FIELDS:
        if data.get(field) is None:
            data[field] = ""

    return data
