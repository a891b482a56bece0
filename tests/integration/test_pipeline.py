"""Integration tests for the release notes orchestrator with a mocked issue tracker."""

import pytest

from relnotes.core.config import AppConfig, IssueTrackerConfig
from relnotes.diagnostics import AssertFailure
from relnotes.errors import GenerationFailedError, ReleaseMismatchError
from relnotes.html.document import MAIN_SECTION_LEVEL
from relnotes.models.job import JobState
from relnotes.pipeline.orchestrator import ReleaseNotesOrchestrator
from relnotes.pipeline.release_notes import ReleaseNoteFetcher
from relnotes.pipeline.sections import SECTION_ORDER

BROWSE = "https://tracker/browse/{issue_id}"
ATTACH = "https://tracker/attachment/{attachment_id}/releaseNote.html"
NOTE_100 = ATTACH.format(attachment_id="5001")

CONFIG = AppConfig(
    product_name="Derby",
    tracker=IssueTrackerConfig(issue_prefix="DERBY-", browse_url=BROWSE, attachment_url=ATTACH),
    fetch_timeout=5.0,
    fetch_concurrency=2,
)


@pytest.fixture
def workspace(tmp_path, corpus_dir):
    """Copy the corpus summary next to a bug list the test writes."""
    summary = tmp_path / "releaseSummary.xml"
    summary.write_bytes((corpus_dir / "releaseSummary.xml").read_bytes())

    def _bug_list(text: str):
        path = tmp_path / "fixedBugsList.txt"
        path.write_text(text, encoding="utf-8")
        return path

    return tmp_path, summary, _bug_list


def _orchestrator(summary, bug_list, output, client):
    fetcher = ReleaseNoteFetcher(issue_prefix="DERBY-", client=client)
    return ReleaseNotesOrchestrator(summary, bug_list, output, config=CONFIG, fetcher=fetcher)


def _issues_block(orch):
    """The <blockquote> body of the Issues section."""
    body = list(orch.ctx.body)
    for index, element in enumerate(body):
        anchor = element.find("a")
        if element.tag == f"h{MAIN_SECTION_LEVEL}" and anchor is not None and anchor.text == "Issues":
            return body[index + 1]
    raise AssertionError("Issues section not found")


class TestReleaseNotesOrchestrator:

    @pytest.mark.asyncio
    async def test_orchestrator_init(self, workspace):
        tmp, summary, bug_list = workspace
        orch = ReleaseNotesOrchestrator(summary, bug_list("DERBY-1\tOne\n"), tmp / "out.html", config=CONFIG)
        assert orch.state == JobState.RECEIVED
        assert len(orch.job_id) == 12
        assert orch.fetcher.issue_prefix == "DERBY-"

    @pytest.mark.asyncio
    async def test_note_fetched(self, workspace, mock_client, release_note_html):
        tmp, summary, bug_list = workspace
        bugs = bug_list(
            "// Previous release: 10.6.2.1\n"
            "DERBY-100\tFix X\t10.7.1.0\t5001\n"
            "DERBY-200\tFix Y\t10.7.1.0\t-\n"
        )
        output = tmp / "RELEASE-NOTES.html"
        orch = _orchestrator(summary, bugs, output, mock_client({NOTE_100: (200, release_note_html)}))

        result = await orch.run()

        assert orch.state == JobState.DELIVERED
        assert output.exists()
        assert result.sections == list(SECTION_ORDER)
        assert result.issue_count == 2
        assert result.missing_release_notes == []
        assert result.errors == []
        assert result.warnings == []

        toc_links = orch.ctx.toc.findall("li/a")
        assert len(toc_links) == 6
        assert all(link.text for link in toc_links)

        bug_rows = orch.ctx.body.findall(".//table/tr")[1:]
        assert [row.find("td/a").text for row in bug_rows] == ["DERBY-100", "DERBY-200"]

        issues = _issues_block(orch)
        notes = issues.findall("h3/a")
        assert [a.text for a in notes] == ["Note for DERBY-100"]
        html = output.read_text(encoding="utf-8")
        assert "Note for DERBY-100: Short desc" in html
        assert "Long body" in html

    @pytest.mark.asyncio
    async def test_fetch_not_found(self, workspace, mock_client):
        tmp, summary, bug_list = workspace
        bugs = bug_list(
            "// Previous release: 10.6.2.1\n"
            "DERBY-100\tFix X\t10.7.1.0\t5001\n"
            "DERBY-200\tFix Y\t10.7.1.0\t-\n"
        )
        output = tmp / "RELEASE-NOTES.html"
        orch = _orchestrator(summary, bugs, output, mock_client({}))

        result = await orch.run()

        assert output.exists()
        assert _issues_block(orch).findall("h3") == []
        assert result.missing_release_notes == ["100"]
        assert len(result.errors) == 1
        assert "DERBY-100" in result.errors[0].message

    @pytest.mark.asyncio
    async def test_corpus_bug_list(self, workspace, corpus_dir, mock_client, release_note_html):
        tmp, summary, _ = workspace
        output = tmp / "RELEASE-NOTES.html"
        orch = _orchestrator(
            summary, corpus_dir / "fixedBugsList.txt", output,
            mock_client({NOTE_100: (200, release_note_html)}),
        )
        result = await orch.run()
        assert result.missing_release_notes == ["300"]
        assert result.errors == []

    @pytest.mark.asyncio
    async def test_variables_substituted(self, workspace, mock_client):
        tmp, summary, bug_list = workspace
        output = tmp / "RELEASE-NOTES.html"
        orch = _orchestrator(
            summary, bug_list("// Previous release: 10.6.2.1\nDERBY-1\tOne\n"), output, mock_client({}),
        )
        await orch.run()
        html = output.read_text(encoding="utf-8")
        assert "<title>Release Notes for Derby 10.7.1.0</title>" in html
        assert "difference between Derby release 10.7.1.0 and the preceding release 10.6.2.1" in html
        assert "Release 10.7.1.0 is a feature release." in html
        assert "KEYS file of the 10.7 branch" in html
        assert "{{" not in html

    @pytest.mark.asyncio
    async def test_previous_release_mismatch(self, workspace, mock_client):
        tmp, summary, bug_list = workspace
        bugs = bug_list("// Previous release: 10.5.3.0\nDERBY-1\tOne\t10.7.1.0\t5001\n")
        output = tmp / "RELEASE-NOTES.html"
        client = mock_client({})
        orch = _orchestrator(summary, bugs, output, client)

        with pytest.raises(GenerationFailedError) as info:
            await orch.run()

        assert info.value.code == "PREVIOUS_RELEASE_MISMATCH"
        assert isinstance(info.value.__cause__, ReleaseMismatchError)
        assert orch.state == JobState.FAILED
        assert not output.exists()
        assert sorted(p.name for p in tmp.iterdir()) == ["fixedBugsList.txt", "releaseSummary.xml"]
        assert client.requested == []

    @pytest.mark.asyncio
    async def test_missing_marker_warns_once(self, workspace, mock_client):
        tmp, summary, bug_list = workspace
        output = tmp / "RELEASE-NOTES.html"
        orch = _orchestrator(summary, bug_list("DERBY-1\tOne\n"), output, mock_client({}))
        result = await orch.run()
        assert result.warnings == ["Skipped previous release version sanity check."]
        assert output.exists()

    @pytest.mark.asyncio
    async def test_deterministic_output(self, workspace, mock_client, release_note_html):
        tmp, summary, bug_list = workspace
        bugs = bug_list(
            "// Previous release: 10.6.2.1\n"
            "DERBY-100\tFix X\t10.7.1.0\t5001\n"
            "DERBY-300\tFix Z\t10.7.1.0\tmissing\n"
        )
        routes = {NOTE_100: (200, release_note_html)}

        first = await _orchestrator(summary, bugs, tmp / "a.html", mock_client(routes)).run()
        second = await _orchestrator(summary, bugs, tmp / "b.html", mock_client(routes)).run()

        assert first.content_hash == second.content_hash
        assert (tmp / "a.html").read_bytes() == (tmp / "b.html").read_bytes()
        assert first.job_id != second.job_id

    @pytest.mark.asyncio
    async def test_bad_summary_fails_before_output(self, workspace, mock_client):
        tmp, summary, bug_list = workspace
        summary.write_text("<summary><releaseID>10.7.1.0</releaseID></summary>", encoding="utf-8")
        output = tmp / "RELEASE-NOTES.html"
        orch = _orchestrator(summary, bug_list("DERBY-1\tOne\n"), output, mock_client({}))

        with pytest.raises(GenerationFailedError) as info:
            await orch.run()

        assert info.value.code == "VALIDATION_FAILED"
        assert orch.timings[-1].status == "failed"
        assert not output.exists()

    @pytest.mark.asyncio
    async def test_step_timings_recorded(self, workspace, mock_client):
        tmp, summary, bug_list = workspace
        orch = _orchestrator(
            summary, bug_list("// Previous release: 10.6.2.1\nDERBY-1\tOne\n"),
            tmp / "out.html", mock_client({}),
        )
        result = await orch.run()
        assert [t.step for t in result.timings] == [
            "load_summary", "begin_output", "overview", "new_features", "load_issues",
            "bug_fixes", "issues", "environment", "release_verification",
            "substitute", "serialize", "write",
        ]

    @pytest.mark.asyncio
    async def test_section_order_invariant(self, workspace, mock_client):
        tmp, summary, bug_list = workspace
        orch = _orchestrator(
            summary, bug_list("// Previous release: 10.6.2.1\nDERBY-1\tOne\n"),
            tmp / "out.html", mock_client({}),
        )
        await orch.run()
        orch._check_document()

        orch.ctx.sections.reverse()
        with pytest.raises(AssertFailure) as info:
            orch._check_document()
        assert "out of order" in info.value.message
        assert info.value.thread_dump
