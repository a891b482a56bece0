"""
Release notes generator — Job Orchestrator.

Runs the release notes pipeline as a state machine:

  RECEIVED → SUMMARY_LOADED → SHELL_CREATED → OVERVIEW_BUILT
  → NEW_FEATURES_BUILT → ISSUES_LOADED → BUG_FIXES_BUILT → ISSUES_BUILT
  → ENVIRONMENT_BUILT → VERIFICATION_BUILT → SUBSTITUTED → SERIALIZED
  → DELIVERED

Each step is timed, logged, and recorded in the JobResult. Per-issue
release note failures are collected and reported at the end; any
other failure moves the job to FAILED and nothing is written.
"""

from __future__ import annotations

import hashlib
import os
import tempfile
import time
import uuid
import xml.etree.ElementTree as ET
from pathlib import Path

from relnotes.core.config import AppConfig, settings
from relnotes.diagnostics import AssertFailure
from relnotes.errors import GenerationFailedError, RelNotesError
from relnotes.html.document import (
    BANNER_LEVEL,
    MAIN_SECTION_LEVEL,
    Section,
    add_paragraph,
    anchor_name,
    create_header,
    create_list,
    new_document,
    render_section,
    serialize,
)
from relnotes.models.issue import Issue
from relnotes.models.job import ErrorEntry, JobResult, JobState, StepTiming
from relnotes.models.summary import ReleaseSummary
from relnotes.pipeline.issue_source import check_previous_release, load_issues
from relnotes.pipeline.release_notes import ReleaseNoteFetcher
from relnotes.pipeline.sections import (
    SECTION_ORDER,
    build_bug_fixes,
    build_environment,
    build_issues,
    build_new_features,
    build_overview,
    build_release_verification,
)
from relnotes.pipeline.substitute import release_variables, replace_variables
from relnotes.pipeline.summary_source import load_summary
from relnotes.utils.logging import logger


class PipelineContext:
    """Accumulator threaded through the pipeline steps."""

    def __init__(self):
        self.summary: ReleaseSummary | None = None
        self.issues: list[Issue] = []
        self.html: ET.Element | None = None
        self.body: ET.Element | None = None
        self.toc: ET.Element | None = None
        self.sections: list[str] = []
        self.output: str = ""
        self.warnings: list[str] = []
        self.errors: list[ErrorEntry] = []
        self.missing: list[Issue] = []


class ReleaseNotesOrchestrator:
    """
    State-machine orchestrator for the release notes pipeline.

    The six sections are built in a fixed order; the Issues step drives
    the release note fetcher. The output file only appears once the
    whole page has been assembled and serialized.
    """

    def __init__(
        self,
        summary_path: str | Path,
        bug_list_path: str | Path,
        output_path: str | Path,
        config: AppConfig = settings,
        fetcher: ReleaseNoteFetcher | None = None,
    ):
        self.job_id = uuid.uuid4().hex[:12]
        self.summary_path = Path(summary_path)
        self.bug_list_path = Path(bug_list_path)
        self.output_path = Path(output_path)
        self.config = config
        self.fetcher = fetcher or ReleaseNoteFetcher(
            issue_prefix=config.tracker.issue_prefix,
            timeout=config.fetch_timeout,
            concurrency=config.fetch_concurrency,
        )
        self.state = JobState.RECEIVED
        self.ctx = PipelineContext()
        self.timings: list[StepTiming] = []

    def _record_step(self, name: str, start: float, status: str = "ok", detail: str = ""):
        ms = int((time.perf_counter() - start) * 1000)
        self.timings.append(StepTiming(step=name, duration_ms=ms, status=status, detail=detail))
        symbol = "✓" if status == "ok" else ("⊘" if status == "skipped" else "✗")
        logger.info("  %s %s — %dms %s", symbol, name, ms, detail)

    def _attach(self, section: Section) -> None:
        render_section(self.ctx.body, MAIN_SECTION_LEVEL, self.ctx.toc, section)
        self.ctx.sections.append(section.title)

    async def run(self) -> JobResult:
        """Execute the full pipeline. Returns a complete JobResult."""
        logger.info("=" * 60)
        logger.info("[%s] Release notes pipeline starting", self.job_id)
        logger.info("=" * 60)
        pipeline_start = time.perf_counter()

        try:
            await self._step_load_summary()
            await self._step_begin_output()
            await self._step_overview()
            await self._step_new_features()
            await self._step_load_issues()
            await self._step_bug_fixes()
            await self._step_issues()
            await self._step_environment()
            await self._step_release_verification()
            self._check_document()
            await self._step_substitute()
            await self._step_serialize()
            await self._step_write()
            self.state = JobState.DELIVERED

        except Exception as exc:
            self.state = JobState.FAILED
            logger.exception("[%s] Pipeline failed", self.job_id)
            if isinstance(exc, AssertFailure):
                logger.error("%s", exc.thread_dump)
            if isinstance(exc, RelNotesError):
                raise GenerationFailedError(exc.message, code=exc.code) from exc
            raise GenerationFailedError(str(exc)) from exc

        self._report()

        total_ms = int((time.perf_counter() - pipeline_start) * 1000)
        logger.info("=" * 60)
        logger.info(
            "[%s] Pipeline complete — %d bytes, %d issues, %d missing notes, %dms",
            self.job_id, len(self.ctx.output), len(self.ctx.issues),
            len(self.ctx.missing), total_ms,
        )
        logger.info("=" * 60)

        return JobResult(
            job_id=self.job_id,
            output_path=str(self.output_path),
            content_hash=hashlib.sha256(self.ctx.output.encode("utf-8")).hexdigest(),
            sections=list(self.ctx.sections),
            issue_count=len(self.ctx.issues),
            missing_release_notes=[issue.key for issue in self.ctx.missing],
            timings=self.timings,
            warnings=self.ctx.warnings,
            errors=self.ctx.errors,
        )

    async def _step_load_summary(self):
        t = time.perf_counter()
        try:
            self.ctx.summary = load_summary(self.summary_path)
        except Exception as exc:
            self._record_step("load_summary", t, "failed", str(exc))
            raise
        self.state = JobState.SUMMARY_LOADED
        self._record_step("load_summary", t)

    async def _step_begin_output(self):
        t = time.perf_counter()
        title_text = "Release Notes for {{ productName }} {{ releaseID }}"
        self.ctx.html, self.ctx.body = new_document(title_text)
        create_header(self.ctx.body, BANNER_LEVEL, title_text)
        add_paragraph(
            self.ctx.body,
            "These notes describe the difference between {{ productName }} release "
            "{{ releaseID }} and the preceding release {{ previousReleaseID }}.",
        )
        self.ctx.toc = create_list(self.ctx.body)
        self.state = JobState.SHELL_CREATED
        self._record_step("begin_output", t)

    async def _step_overview(self):
        t = time.perf_counter()
        self._attach(build_overview(self.ctx.summary))
        self.state = JobState.OVERVIEW_BUILT
        self._record_step("overview", t)

    async def _step_new_features(self):
        t = time.perf_counter()
        self._attach(build_new_features(self.ctx.summary))
        self.state = JobState.NEW_FEATURES_BUILT
        self._record_step("new_features", t)

    async def _step_load_issues(self):
        t = time.perf_counter()
        tracker = self.config.tracker
        try:
            issues, previous_release = load_issues(
                self.bug_list_path,
                prefix=tracker.issue_prefix,
                browse_url=tracker.browse_url,
                attachment_url=tracker.attachment_url,
            )
            warnings = check_previous_release(previous_release, self.ctx.summary.previous_release_id)
        except Exception as exc:
            self._record_step("load_issues", t, "failed", str(exc))
            raise
        self.ctx.issues = issues
        self.ctx.warnings.extend(warnings)
        self.state = JobState.ISSUES_LOADED
        self._record_step("load_issues", t, detail=f"{len(issues)} issues")

    async def _step_bug_fixes(self):
        t = time.perf_counter()
        self._attach(build_bug_fixes(
            self.ctx.issues,
            release_id=self.ctx.summary.release_id,
            previous_release_id=self.ctx.summary.previous_release_id,
            issue_prefix=self.config.tracker.issue_prefix,
            product_name=self.config.product_name,
        ))
        self.state = JobState.BUG_FIXES_BUILT
        self._record_step("bug_fixes", t)

    async def _step_issues(self):
        t = time.perf_counter()
        outcomes = await self.fetcher.fetch_all(self.ctx.issues)
        result = build_issues(
            self.ctx.issues,
            outcomes,
            release_id=self.ctx.summary.release_id,
            previous_release_id=self.ctx.summary.previous_release_id,
            issue_prefix=self.config.tracker.issue_prefix,
            product_name=self.config.product_name,
        )
        self._attach(result.section)
        self.ctx.errors.extend(result.errors)
        self.ctx.missing.extend(result.missing)
        self.state = JobState.ISSUES_BUILT
        self._record_step(
            "issues", t,
            detail=f"{len(result.section.subsections)} notes, {len(result.missing)} missing",
        )

    async def _step_environment(self):
        t = time.perf_counter()
        self._attach(build_environment(self.ctx.summary, self.config.product_name))
        self.state = JobState.ENVIRONMENT_BUILT
        self._record_step("environment", t)

    async def _step_release_verification(self):
        t = time.perf_counter()
        self._attach(build_release_verification(self.ctx.summary))
        self.state = JobState.VERIFICATION_BUILT
        self._record_step("release_verification", t)

    def _check_document(self):
        """Every main section exactly once, in order, mirrored by the table of contents."""
        if self.ctx.sections != list(SECTION_ORDER):
            raise AssertFailure(
                f"Sections out of order: expected {list(SECTION_ORDER)}, got {self.ctx.sections}"
            )

        expected = [f"#{anchor_name(title)}" for title in SECTION_ORDER]
        toc_targets = [link.get("href") for link in self.ctx.toc.findall("li/a")]
        if toc_targets != expected:
            raise AssertFailure(f"Table of contents does not match sections: {toc_targets}")

        anchors = [a.get("name") for a in self.ctx.body.findall(f"h{MAIN_SECTION_LEVEL}/a")]
        if anchors != [target[1:] for target in expected]:
            raise AssertFailure(f"Section headings do not match sections: {anchors}")

    async def _step_substitute(self):
        t = time.perf_counter()
        variables = release_variables(self.ctx.summary, self.config.product_name)
        count = replace_variables(self.ctx.html, variables)
        self.state = JobState.SUBSTITUTED
        self._record_step("substitute", t, detail=f"{count} replacements")

    async def _step_serialize(self):
        t = time.perf_counter()
        self.ctx.output = serialize(self.ctx.html)
        self.state = JobState.SERIALIZED
        self._record_step("serialize", t, detail=f"{len(self.ctx.output)} chars")

    async def _step_write(self):
        t = time.perf_counter()
        target = self.output_path
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as stream:
                stream.write(self.ctx.output)
            os.replace(tmp_name, target)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        self._record_step("write", t, detail=str(target))

    def _report(self):
        if self.ctx.missing:
            logger.warning(
                "The following issues still need release notes or the "
                "release notes provided are unreadable:"
            )
            for issue in self.ctx.missing:
                logger.warning("\t%s\t%s", issue.key, issue.title)
        for entry in self.ctx.errors:
            logger.error("%s", entry.format())
