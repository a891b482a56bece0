"""
Release notes generator — command line entry point.

    python -m relnotes SUMMARY BUG_LIST OUTPUT_PAMPHLET
"""

from __future__ import annotations

import asyncio
import sys

from relnotes.errors import GenerationFailedError
from relnotes.pipeline.orchestrator import ReleaseNotesOrchestrator
from relnotes.utils.logging import logger

USAGE = """\
Usage:

  python -m relnotes SUMMARY BUG_LIST OUTPUT_PAMPHLET

    where
        SUMMARY          Summary, a filled-in copy of releaseSummaryTemplate.xml.
        BUG_LIST         A report of issues addressed by this release, exported
                         from the issue tracker.
        OUTPUT_PAMPHLET  The output file to generate, typically RELEASE-NOTES.html.

The generator connects to the issue tracker in order to read the detailed
release notes attached to individual issues. Before running it, make sure
the tracker is reachable.

The bug list holds key, title, fix versions and release note attachment id
for each issue. For each issue with an attachment id the generator grabs
the (latest) releaseNote.html file. For this reason, it is recommended that
you freshly generate BUG_LIST just before you run this tool.
"""


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 3:
        print(USAGE)
        return 2

    summary_path, bug_list_path, output_path = args
    orchestrator = ReleaseNotesOrchestrator(summary_path, bug_list_path, output_path)
    try:
        result = asyncio.run(orchestrator.run())
    except GenerationFailedError as exc:
        logger.error("%s", exc.to_dict())
        return 1

    logger.info("Wrote %s (sha256 %s)", result.output_path, result.content_hash[:12])
    return 0
