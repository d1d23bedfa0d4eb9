"""NDJSON encoding for result snapshots.

A snapshot stream is a sequence of JSON documents, one per line. Every
partial snapshot ends with a newline; the final snapshot does not, which
tells a reader the stream is complete.
"""

import json
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Mapping
from dataclasses import asdict
from typing import Any

from loadcompare.core.models import ResultSnapshot, TargetMetrics


def target_metrics_to_dict(metrics: TargetMetrics) -> dict[str, Any]:
    """Convert TargetMetrics to the JSON object served to viewers."""
    obj = asdict(metrics)
    return {
        "p50": obj["p50"],
        "p75": obj["p75"],
        "p90": obj["p90"],
        "p95": obj["p95"],
        "p99": obj["p99"],
        "p99_9": obj["p99_9"],
        "min": obj["min"],
        "max": obj["max"],
        "avg": obj["avg"],
        "med": obj["med"],
        "totalRequests": obj["total_requests"],
        "rps": obj["rps"],
        "errorRate": obj["error_rate"],
        "errors": obj["errors"],
        "file": obj["file"],
        "timestamp": obj["timestamp"],
    }


def _encode_results(results: Mapping[str, Any]) -> dict[str, Any]:
    encoded: dict[str, Any] = {}
    for key, value in results.items():
        if isinstance(value, TargetMetrics):
            encoded[key] = target_metrics_to_dict(value)
        else:
            encoded[key] = _encode_results(value)
    return encoded


def snapshot_to_dict(snapshot: ResultSnapshot) -> dict[str, Any]:
    """Convert a ResultSnapshot to its JSON object form.

    Partial snapshots carry a ``progress`` object; the final one does not.
    """
    obj: dict[str, Any] = {}
    if snapshot.scenario is not None:
        obj["scenario"] = snapshot.scenario
    obj["results"] = _encode_results(snapshot.results)
    if snapshot.progress is not None:
        obj["progress"] = {
            "processed": snapshot.progress.processed,
            "total": snapshot.progress.total,
            "completed": snapshot.progress.completed,
        }
    obj["timestamp"] = snapshot.generated_at
    return obj


def encode_snapshot(snapshot: ResultSnapshot) -> str:
    """Encode one snapshot as a stream line.

    Returns:
        The JSON document, followed by a newline unless the snapshot is final.
    """
    line = json.dumps(snapshot_to_dict(snapshot))
    return line if snapshot.final else line + "\n"


def encode_snapshots(snapshots: Iterable[ResultSnapshot]) -> str:
    """Encode a complete sequence of snapshots to NDJSON.

    Returns:
        NDJSON string. Empty string if no snapshots.
    """
    return "".join(encode_snapshot(snapshot) for snapshot in snapshots)


async def encode_snapshot_stream(
    snapshots: AsyncIterable[ResultSnapshot],
) -> AsyncIterator[str]:
    """Encode snapshots as they arrive, one chunk per snapshot."""
    async for snapshot in snapshots:
        yield encode_snapshot(snapshot)


def encode_error(message: str, generated_at: str, scenario: str | None = None) -> str:
    """Encode a terminal error document (no trailing newline)."""
    obj: dict[str, Any] = {}
    if scenario is not None:
        obj["scenario"] = scenario
    obj["error"] = message
    obj["results"] = {}
    obj["timestamp"] = generated_at
    return json.dumps(obj)
