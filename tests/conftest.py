"""Shared test fixtures for all test modules."""

from collections.abc import Sequence
from pathlib import Path

import pytest
from tests.event_log_builders import RUN_END, RUN_START, event_log_lines

try:
    import httpx
except ImportError:
    httpx = None

from loadcompare.core.models import Settings
from loadcompare.runtime.context import ResultsContext

# === Results Directory Fixtures ===


@pytest.fixture
def results_dir(tmp_path: Path) -> Path:
    """Provide an empty results directory."""
    directory = tmp_path / "results"
    directory.mkdir()
    return directory


@pytest.fixture
def write_event_log(results_dir: Path):
    """Factory fixture that writes an event log file into results_dir.

    Usage:
        def test_something(write_event_log):
            path = write_event_log("smoke_coordix_2024-01-01T00-00-00.json",
                                   durations=[10, 20])
    """

    def _write(
        filename: str,
        durations: Sequence[float] = (),
        requests: int | None = None,
        failures: int = 0,
        start: str = RUN_START,
        end: str = RUN_END,
        lines: Sequence[str] | None = None,
    ) -> Path:
        if lines is None:
            lines = event_log_lines(durations, requests, failures, start, end)
        path = results_dir / filename
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def settings(results_dir: Path) -> Settings:
    """Default settings pointing at the test results directory."""
    return Settings(results_dir=results_dir)


@pytest.fixture
def results_context(settings: Settings) -> ResultsContext:
    """Fresh ResultsContext (parser, cache, locator) per test."""
    return ResultsContext(settings)


# === ASGI Test Fixtures ===


@pytest.fixture
def asgi_scope():
    """Factory fixture for creating ASGI scope dicts."""
    from loadcompare.adapters.frameworks.asgi import Scope

    def _scope(method: str = "GET", path: str = "/api/scenarios") -> Scope:
        return {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": b"",
            "headers": [],
        }

    return _scope


@pytest.fixture
def asgi_send_capture():
    """Fixture that returns a send callable and a responses list for capture.

    Returns a tuple of (send_func, responses_list) for recording ASGI messages.
    """

    responses: list[dict[str, object]] = []

    async def send(message: dict[str, object]) -> None:
        """Capture ASGI messages."""
        responses.append(message)

    return send, responses


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            app = create_asgi_app(aggregator)
            async with asgi_test_client(app) as client:
                response = await client.get("/api/scenarios")
    """
    if httpx is None:
        pytest.skip("httpx not installed")

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client
