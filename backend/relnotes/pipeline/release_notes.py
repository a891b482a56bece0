"""
Release notes generator — Per-issue release note fetcher.

Each issue flagged with a release note attachment has its
releaseNote.html downloaded and split into two fragments:

  summary — the paragraph under the "Summary of Change" heading
  details — everything else in the body, minus the page title

Fetches are attempted exactly once. A failure is turned into an
ErrorEntry on the outcome; it never aborts the run.
"""

from __future__ import annotations

import asyncio
import copy
import re
import xml.etree.ElementTree as ET
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx

from relnotes.errors import ReleaseNoteFetchError, ReleaseNoteFormatError
from relnotes.html.document import strip_namespaces
from relnotes.models.issue import Issue
from relnotes.models.job import ErrorEntry
from relnotes.utils.logging import logger, step_timer

SUMMARY_HEADING = "summary of change"
_HEADING_TAG = re.compile(r"h[1-6]")


@dataclass
class ReleaseNote:
    summary: ET.Element
    details: ET.Element


@dataclass
class FetchOutcome:
    issue: Issue
    note: ReleaseNote | None = None
    error: ErrorEntry | None = None


def _text(element: ET.Element) -> str:
    return " ".join("".join(element.itertext()).split())


def _is_heading(element: ET.Element) -> bool:
    return isinstance(element.tag, str) and bool(_HEADING_TAG.fullmatch(element.tag))


def parse_release_note(content: bytes | str) -> ReleaseNote:
    """Split a release note document into its summary and details fragments."""
    try:
        root = ET.fromstring(content)
    except ET.ParseError as exc:
        raise ReleaseNoteFormatError(str(exc)) from exc
    strip_namespaces(root)

    body = root if root.tag == "body" else root.find("body")
    if body is None:
        raise ReleaseNoteFormatError("document has no <body>")

    children = list(body)
    heading = paragraph = None
    for index, child in enumerate(children):
        if _is_heading(child) and _text(child).lower() == SUMMARY_HEADING:
            heading = child
            for follower in children[index + 1:]:
                if _is_heading(follower):
                    break
                if follower.tag == "p":
                    paragraph = follower
                    break
            break

    if heading is None:
        raise ReleaseNoteFormatError("no 'Summary of Change' heading")
    if paragraph is None:
        raise ReleaseNoteFormatError("'Summary of Change' has no paragraph")

    details = ET.Element("div")
    details.text = (body.text or "").strip() or None
    for child in children:
        if child is heading or child is paragraph or child.tag == "h1":
            continue
        details.append(copy.deepcopy(child))
    if not len(details) and not details.text:
        raise ReleaseNoteFormatError("release note has no details")

    summary = copy.deepcopy(paragraph)
    summary.tail = None
    return ReleaseNote(summary=summary, details=details)


class ReleaseNoteFetcher:
    """Downloads and parses release notes with httpx."""

    def __init__(
        self,
        issue_prefix: str,
        timeout: float = 30.0,
        concurrency: int = 1,
        client: httpx.AsyncClient | None = None,
    ):
        self.issue_prefix = issue_prefix
        self.timeout = timeout
        self.concurrency = max(concurrency, 1)
        self._client = client

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            yield client

    async def _get(self, issue: Issue, client: httpx.AsyncClient) -> ReleaseNote:
        url = issue.release_note_address
        if not url:
            raise ReleaseNoteFetchError(f"{self.issue_prefix}{issue.key}", "no release note address")
        try:
            resp = await client.get(url)
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ReleaseNoteFetchError(url, str(exc)) from exc
        return parse_release_note(resp.content)

    async def fetch(self, issue: Issue) -> ReleaseNote:
        async with self._session() as client:
            return await self._get(issue, client)

    async def fetch_all(self, issues: list[Issue]) -> list[FetchOutcome]:
        """
        Fetch the release note of every issue that has one.

        Outcomes come back in the order of the input issues regardless
        of the order in which the downloads complete.
        """
        noted = [issue for issue in issues if issue.has_release_note()]
        if not noted:
            return []

        semaphore = asyncio.Semaphore(self.concurrency)

        with step_timer(f"Fetch {len(noted)} release notes"):
            async with self._session() as client:

                async def attempt(issue: Issue) -> FetchOutcome:
                    async with semaphore:
                        try:
                            note = await self._get(issue, client)
                        except Exception as exc:
                            entry = ErrorEntry.from_exception(
                                f"Unable to read or parse release note for {self.issue_prefix}{issue.key}",
                                exc,
                            )
                            logger.warning("  %s — %s", entry.message, entry.cause)
                            return FetchOutcome(issue=issue, error=entry)
                    logger.info("  Fetched release note for %s%s", self.issue_prefix, issue.key)
                    return FetchOutcome(issue=issue, note=note)

                return list(await asyncio.gather(*(attempt(issue) for issue in noted)))
