"""
Release notes generator — Section builders.

One builder per top-level section. Builders are pure: they take the
summary, the issue list and the fetched release notes, and return a
detached Section for the orchestrator to attach. The Issues builder
also returns the errors and missing notes it ran into.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from relnotes.html.document import (
    DEFAULT_TABLE_BORDER_WIDTH,
    Section,
    add_headlined_item,
    add_paragraph,
    clone_children,
    create_link,
    create_list,
    create_table,
    insert_column,
    insert_row,
    text_element,
)
from relnotes.models.issue import Issue
from relnotes.models.job import ErrorEntry
from relnotes.models.summary import ReleaseSummary
from relnotes.pipeline.release_notes import FetchOutcome
from relnotes.utils.logging import logger

# major sections, in document order
OVERVIEW_SECTION = "Overview"
NEW_FEATURES_SECTION = "New Features"
BUG_FIXES_SECTION = "Bug Fixes"
ISSUES_SECTION = "Issues"
BUILD_ENVIRONMENT_SECTION = "Build Environment"
RELEASE_VERIFICATION_SECTION = "Verifying Releases"

SECTION_ORDER = (
    OVERVIEW_SECTION,
    NEW_FEATURES_SECTION,
    BUG_FIXES_SECTION,
    ISSUES_SECTION,
    BUILD_ENVIRONMENT_SECTION,
    RELEASE_VERIFICATION_SECTION,
)

ISSUE_ID_HEADLINE = "Issue Id"
DESCRIPTION_HEADLINE = "Description"

# (headline, ReleaseSummary field) for the build environment list
ENVIRONMENT_ITEMS = (
    ("Machine", "machine"),
    ("Ant", "ant_version"),
    ("JDK 1.4", "jdk14"),
    ("Java 6", "java6"),
    ("Compiler", "compilers"),
    ("JSR 169", "jsr169"),
)
BRANCH_HEADLINE = "Branch"


@dataclass
class IssuesSectionResult:
    section: Section
    errors: list[ErrorEntry] = field(default_factory=list)
    missing: list[Issue] = field(default_factory=list)


def _copy_fragment(title: str, summary: ReleaseSummary, fragment: str) -> Section:
    section = Section(title=title)
    clone_children(summary.fragment(fragment), section.body)
    return section


def build_overview(summary: ReleaseSummary) -> Section:
    return _copy_fragment(OVERVIEW_SECTION, summary, "overview")


def build_new_features(summary: ReleaseSummary) -> Section:
    return _copy_fragment(NEW_FEATURES_SECTION, summary, "new_features")


def build_release_verification(summary: ReleaseSummary) -> Section:
    return _copy_fragment(RELEASE_VERIFICATION_SECTION, summary, "release_verification")


def build_bug_fixes(
    issues: list[Issue],
    release_id: str,
    previous_release_id: str,
    issue_prefix: str,
    product_name: str,
) -> Section:
    """One row per fixed issue, linked to the tracker, in bug list order."""
    section = Section(title=BUG_FIXES_SECTION)
    add_paragraph(
        section.body,
        f"The following issues are addressed by {product_name} release {release_id}. "
        f"These issues are not addressed in the preceding {previous_release_id} release.",
    )

    table = create_table(
        section.body, DEFAULT_TABLE_BORDER_WIDTH, [ISSUE_ID_HEADLINE, DESCRIPTION_HEADLINE],
    )
    for issue in issues:
        row = insert_row(table)
        insert_column(row).append(create_link(issue.jira_address, f"{issue_prefix}{issue.key}"))
        insert_column(row).text = issue.title

    logger.info("  Bug fixes table: %d rows", len(issues))
    return section


def build_issues(
    issues: list[Issue],
    outcomes: list[FetchOutcome],
    release_id: str,
    previous_release_id: str,
    issue_prefix: str,
    product_name: str,
) -> IssuesSectionResult:
    """
    Build the section of detailed release notes.

    Every issue that should carry a note ends up either as a
    subsection here or in the missing list, never both.
    """
    section = Section(title=ISSUES_SECTION, has_toc=True, rule_between_subsections=True)
    add_paragraph(
        section.body,
        f"Compared with the previous release ({previous_release_id}), {product_name} "
        f"release {release_id} introduces the following new features and "
        "incompatibilities. These merit your special attention.",
    )
    result = IssuesSectionResult(section=section)
    by_key = {outcome.issue.key: outcome for outcome in outcomes}

    for issue in issues:
        if issue.has_missing_release_note():
            result.missing.append(issue)
            continue
        if not issue.has_release_note():
            continue

        outcome = by_key.get(issue.key)
        if outcome is None or outcome.note is None:
            result.errors.append(
                outcome.error if outcome is not None and outcome.error is not None
                else ErrorEntry(
                    message=f"Unable to read or parse release note for {issue_prefix}{issue.key}",
                    cause="release note was not fetched",
                )
            )
            result.missing.append(issue)
            continue

        heading = f"Note for {issue_prefix}{issue.key}"
        lead = text_element("p", f"{heading}: ")
        clone_children(outcome.note.summary, lead)

        subsection = Section(title=heading, toc_label=lead)
        subsection.body.append(lead)
        clone_children(outcome.note.details, subsection.body)
        section.subsections.append(subsection)

    logger.info(
        "  Issues section: %d release notes, %d missing",
        len(section.subsections), len(result.missing),
    )
    return result


def build_environment(summary: ReleaseSummary, product_name: str) -> Section:
    section = Section(title=BUILD_ENVIRONMENT_SECTION)
    add_paragraph(
        section.body,
        f"{product_name} release {summary.release_id} was built using the following environment:",
    )
    items = create_list(section.body)
    add_headlined_item(items, BRANCH_HEADLINE, f"Source code came from the {summary.branch} branch.")
    for headline, field_name in ENVIRONMENT_ITEMS:
        add_headlined_item(items, headline, getattr(summary, field_name))
    return section
