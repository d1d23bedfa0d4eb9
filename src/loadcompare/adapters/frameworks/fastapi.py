"""FastAPI adapter for the live results viewer."""

import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter
from fastapi.responses import JSONResponse, StreamingResponse

from loadcompare.core.encoding.ndjson import encode_error, encode_snapshot_stream
from loadcompare.core.exceptions import UnknownScenarioError
from loadcompare.core.models import ResultSnapshot, utc_now
from loadcompare.runtime.aggregator import ResultSetAggregator

logger = logging.getLogger(__name__)

_STREAM_HEADERS = {"Cache-Control": "no-cache"}


# @tra: Adapter.FastAPI.ResultsRouter
async def _encode_until_error(
    snapshots: AsyncIterator[ResultSnapshot], scenario: str | None = None
) -> AsyncIterator[str]:
    """Encode snapshots, ending with an error document if production fails."""
    try:
        async for chunk in encode_snapshot_stream(snapshots):
            yield chunk
    except Exception as exc:
        logger.exception("Error streaming results", extra={"scenario": scenario})
        yield encode_error(str(exc), utc_now(), scenario=scenario)


def _stream(body: AsyncIterator[str]) -> StreamingResponse:
    return StreamingResponse(
        body, media_type="application/json", headers=_STREAM_HEADERS
    )


def create_results_router(aggregator: ResultSetAggregator) -> APIRouter:
    """Create a FastAPI router with /api/scenarios and /api/results endpoints.

    Args:
        aggregator: Aggregator bound to a results directory.

    Returns:
        APIRouter with the results endpoints configured.
    """
    router = APIRouter()

    @router.get("/api/scenarios")
    async def get_scenarios() -> dict[str, list[str]]:
        """Return the configured scenarios and targets."""
        return {
            "scenarios": list(aggregator.scenarios),
            "targets": list(aggregator.targets),
        }

    @router.get("/api/results")
    async def get_all_results() -> StreamingResponse:
        """Stream NDJSON snapshots for every scenario."""
        return _stream(_encode_until_error(aggregator.stream_all()))

    @router.get("/api/results/{scenario}", response_model=None)
    async def get_scenario_results(
        scenario: str,
    ) -> StreamingResponse | JSONResponse:
        """Stream NDJSON snapshots for one scenario.

        Args:
            scenario: Scenario name; must be one of the configured scenarios.
        """
        try:
            aggregator.check_scenario(scenario)
        except UnknownScenarioError as exc:
            return JSONResponse(status_code=400, content={"error": str(exc)})
        snapshots = aggregator.stream_scenario(scenario)
        return _stream(_encode_until_error(snapshots, scenario=scenario))

    return router
