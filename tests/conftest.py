"""Shared test configuration and fixtures for the release notes test suite."""

import sys
from pathlib import Path

import httpx
import pytest

# Add backend to Python path so imports work
backend_dir = str(Path(__file__).parent.parent / "backend")
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)


@pytest.fixture(scope="session")
def project_root():
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def corpus_dir(project_root):
    return project_root / "tests" / "corpus"


@pytest.fixture(scope="session")
def release_note_html(corpus_dir):
    return (corpus_dir / "releaseNote.html").read_bytes()


@pytest.fixture
def mock_client():
    """
    Build an httpx.AsyncClient whose responses come from a dict of
    url -> (status, body). Unknown urls answer 404. Requested urls are
    recorded on client.requested.
    """
    def _make(routes: dict[str, tuple[int, bytes]]) -> httpx.AsyncClient:
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            url = str(request.url)
            requested.append(url)
            status, body = routes.get(url, (404, b"not found"))
            return httpx.Response(status, content=body)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client.requested = requested
        return client

    return _make
