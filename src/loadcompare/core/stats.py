"""Statistics helpers for latency samples."""

import math
from collections.abc import Sequence

from loadcompare.core.models import DurationStats


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Return the nearest-rank percentile of an ascending sequence.

    The result is always one of the input values, so percentiles taken
    from the same sequence are monotonic in p.

    Args:
        sorted_values: Samples sorted ascending.
        p: Percentile in [0, 100].

    Returns:
        The sample at rank ceil(p/100 * n), or 0.0 for an empty sequence.
    """
    n = len(sorted_values)
    if n == 0:
        return 0.0
    index = math.ceil((p / 100) * n) - 1
    return sorted_values[max(0, min(index, n - 1))]


def summarize_durations(values: list[float]) -> DurationStats:
    """Sort values in place and summarize them as DurationStats."""
    if not values:
        return DurationStats()
    values.sort()
    return DurationStats(
        p50=percentile(values, 50),
        p75=percentile(values, 75),
        p90=percentile(values, 90),
        p95=percentile(values, 95),
        p99=percentile(values, 99),
        p99_9=percentile(values, 99.9),
        count=len(values),
        avg=math.fsum(values) / len(values),
        min=values[0],
        max=values[-1],
    )
