"""ASGI adapter for the live results viewer.

This adapter provides a framework-agnostic ASGI application that can be
used with any ASGI server (uvicorn, hypercorn, daphne) without requiring
FastAPI as a dependency.

Endpoints:
    /api/scenarios             - configured scenarios and targets
    /api/results/<scenario>    - NDJSON snapshot stream for one scenario
    /api/results               - NDJSON snapshot stream for all scenarios
"""

import json
import logging
from collections.abc import AsyncIterator, Callable, Coroutine
from typing import Any
from urllib.parse import unquote

from loadcompare.core.encoding.ndjson import encode_error, encode_snapshot
from loadcompare.core.exceptions import UnknownScenarioError
from loadcompare.core.models import ResultSnapshot, utc_now
from loadcompare.runtime.aggregator import ResultSetAggregator

logger = logging.getLogger(__name__)

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]

STREAM_HEADERS = [
    (b"content-type", b"application/json"),
    (b"cache-control", b"no-cache"),
]

_RESULTS_PREFIX = "/api/results/"


async def _send_response(
    send: Send, status: int, content_type: str, body: str
) -> None:
    """Send an HTTP response with headers and body.

    Args:
        send: ASGI send callable for writing response.
        status: HTTP status code.
        content_type: Content-Type header value.
        body: Response body as string (will be encoded to bytes).
    """
    headers = [(b"content-type", content_type.encode())]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body.encode()})


async def _send_json(send: Send, status: int, payload: dict[str, Any]) -> None:
    await _send_response(send, status, "application/json", json.dumps(payload))


async def _stream_snapshots(
    send: Send,
    snapshots: AsyncIterator[ResultSnapshot],
    scenario: str | None = None,
) -> None:
    """Write each snapshot as a body chunk, then close the response.

    An exception raised while producing snapshots is reported as a final
    error document instead of a dropped connection.
    """
    start = {"type": "http.response.start", "status": 200, "headers": STREAM_HEADERS}
    await send(start)
    finished = False
    try:
        async for snapshot in snapshots:
            await send(
                {
                    "type": "http.response.body",
                    "body": encode_snapshot(snapshot).encode(),
                    "more_body": not snapshot.final,
                }
            )
            finished = snapshot.final
    except Exception as exc:
        logger.exception("Error streaming results", extra={"scenario": scenario})
        body = encode_error(str(exc), utc_now(), scenario=scenario)
        await send({"type": "http.response.body", "body": body.encode()})
        return
    if not finished:
        await send({"type": "http.response.body", "body": b""})


def _scenario_from_path(path: str) -> str:
    """Return the scenario segment of /api/results/<scenario>."""
    return unquote(path[len(_RESULTS_PREFIX) :].strip("/"))


async def _handle_scenario(
    send: Send, aggregator: ResultSetAggregator, scenario: str
) -> None:
    """Validate the scenario name, then stream its snapshots."""
    try:
        aggregator.check_scenario(scenario)
    except UnknownScenarioError as exc:
        await _send_json(send, 400, {"error": str(exc)})
        return
    await _stream_snapshots(
        send, aggregator.stream_scenario(scenario), scenario=scenario
    )


def create_asgi_app(aggregator: ResultSetAggregator) -> ASGIApp:
    """Create an ASGI app serving scenario listings and result streams.

    Args:
        aggregator: Aggregator bound to a results directory.

    Returns:
        ASGI application callable.
    """

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        path = scope["path"]
        if scope.get("method", "GET") != "GET":
            await _send_response(send, 405, "text/plain", "Method Not Allowed")
        elif path == "/api/scenarios":
            await _send_json(
                send,
                200,
                {
                    "scenarios": list(aggregator.scenarios),
                    "targets": list(aggregator.targets),
                },
            )
        elif path.rstrip("/") == "/api/results":
            await _stream_snapshots(send, aggregator.stream_all())
        elif path.startswith(_RESULTS_PREFIX):
            await _handle_scenario(send, aggregator, _scenario_from_path(path))
        else:
            await _send_response(send, 404, "text/plain", "Not Found")

    return app
