"""Streaming parser for newline-delimited load-test event logs.

Each line of an event log is one JSON document. Only ``Point`` records
carry observations; everything else (metric declarations, malformed
lines) is skipped. The parser keeps only the numeric samples it needs,
so memory grows with the number of samples, not with the file size.
"""

import json
import logging
import math
from contextlib import aclosing
from datetime import datetime
from pathlib import Path
from typing import Any

from loadcompare.adapters.storage.async_utils import iter_lines
from loadcompare.core.models import (
    DURATION_METRIC,
    FAILED_METRIC,
    REQUESTS_METRIC,
    AggregatedMetrics,
    FailureStats,
    MetricPoint,
    ParserLimits,
    RequestStats,
)
from loadcompare.core.stats import summarize_durations

logger = logging.getLogger(__name__)


def _decode_point(line: str) -> MetricPoint | None:
    """Decode one log line into a MetricPoint, or None if it isn't one."""
    stripped = line.strip()
    if not stripped:
        return None
    try:
        obj: Any = json.loads(stripped)
    except json.JSONDecodeError:
        return None
    if not isinstance(obj, dict) or obj.get("type") != "Point":
        return None
    data = obj.get("data")
    if not isinstance(data, dict) or "value" not in data or "time" not in data:
        return None
    value = data["value"]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return MetricPoint(
        name=str(obj.get("metric", "")),
        value=float(value),
        time=str(data["time"]),
    )


def _parse_time(raw: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, tolerating 'Z' and sub-microsecond digits."""
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    if "." in text:
        head, _, rest = text.partition(".")
        digits = ""
        while rest and rest[0].isdigit():
            digits, rest = digits + rest[0], rest[1:]
        text = f"{head}.{digits[:6].ljust(6, '0')}{rest}" if digits else head + rest
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


# @tra: Adapter.EventLog.Parser
def window_seconds(
    first: str | None, last: str | None, limits: ParserLimits = ParserLimits()
) -> float:
    """Return the measurement window between two observation timestamps.

    Falls back to the default window when either bound is missing (fewer
    than two observations) or unparseable, and never returns less than the
    minimum window.
    """
    if first is None or last is None:
        return limits.default_window_seconds
    start = _parse_time(first)
    end = _parse_time(last)
    if start is None or end is None:
        return limits.default_window_seconds
    try:
        elapsed = (end - start).total_seconds()
    except TypeError:
        # naive and aware timestamps mixed in one file
        return limits.default_window_seconds
    return max(limits.min_window_seconds, elapsed)


class EventLogParser:
    """Computes AggregatedMetrics from one event log file.

    Args:
        limits: Line cap and window defaults applied during parsing.
    """

    def __init__(self, limits: ParserLimits | None = None) -> None:
        self._limits = limits or ParserLimits()

    @property
    def limits(self) -> ParserLimits:
        return self._limits

    async def get(self, path: Path) -> AggregatedMetrics:
        """Alias of parse() so the parser can act as an uncached source."""
        return await self.parse(path)

    async def parse(self, path: Path) -> AggregatedMetrics:
        """Stream the file at path and aggregate its points.

        Raises:
            OSError: If the file cannot be opened or read.
        """
        durations: list[float] = []
        requests: list[float] = []
        failures: list[float] = []
        first_time: str | None = None
        last_time: str | None = None
        lines_read = 0

        async with aclosing(iter_lines(Path(path))) as lines:
            async for line in lines:
                lines_read += 1
                if lines_read > self._limits.max_lines:
                    lines_read -= 1
                    logger.warning(
                        "Line limit reached, ignoring the rest of the file",
                        extra={"file": str(path), "max_lines": self._limits.max_lines},
                    )
                    break
                point = _decode_point(line)
                if point is None:
                    continue
                # last_time stays None until a second point bounds the window
                if first_time is None:
                    first_time = point.time
                else:
                    last_time = point.time

                if point.name == DURATION_METRIC:
                    durations.append(point.value)
                elif point.name == REQUESTS_METRIC:
                    requests.append(point.value)
                elif point.name == FAILED_METRIC and point.value > 0:
                    failures.append(point.value)

        window = window_seconds(first_time, last_time, self._limits)
        total_requests = math.fsum(requests)
        total_failed = math.fsum(failures)
        return AggregatedMetrics(
            duration=summarize_durations(durations),
            requests=RequestStats(
                count=total_requests,
                rate=total_requests / window if window > 0 else 0.0,
            ),
            failures=FailureStats(
                count=total_failed,
                rate=total_failed / total_requests if total_requests > 0 else 0.0,
            ),
            window_seconds=window,
            lines_read=lines_read,
        )


async def parse_event_log(
    path: Path, limits: ParserLimits | None = None
) -> AggregatedMetrics:
    """Parse one event log file with a fresh EventLogParser."""
    return await EventLogParser(limits).parse(path)
