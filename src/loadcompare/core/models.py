"""Core domain models for load-test result aggregation."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

DURATION_METRIC = "http_req_duration"
REQUESTS_METRIC = "http_reqs"
FAILED_METRIC = "http_req_failed"

DEFAULT_TARGETS = ("coordix", "mediatR", "wolverine")
DEFAULT_SCENARIOS = ("smoke", "rampup", "load-steady", "spike", "stress", "overnight")


@dataclass(frozen=True)
class MetricPoint:
    """A single timestamped observation from an event log.

    Attributes:
        name: Metric name (e.g., http_req_duration).
        value: The observed value.
        time: ISO-8601 observation timestamp, as written in the log.
    """

    name: str
    value: float
    time: str


@dataclass(frozen=True)
class DurationStats:
    """Latency statistics derived from the sorted duration samples.

    All values are in milliseconds and zero when no samples were seen.
    """

    p50: float = 0.0
    p75: float = 0.0
    p90: float = 0.0
    p95: float = 0.0
    p99: float = 0.0
    p99_9: float = 0.0
    count: int = 0
    avg: float = 0.0
    min: float = 0.0
    max: float = 0.0

    @property
    def med(self) -> float:
        """Median latency (same as p50)."""
        return self.p50


@dataclass(frozen=True)
class RequestStats:
    """Total requests and requests per second over the observed window."""

    count: float = 0.0
    rate: float = 0.0


@dataclass(frozen=True)
class FailureStats:
    """Total failed requests and failures per request."""

    count: float = 0.0
    rate: float = 0.0


@dataclass(frozen=True)
class AggregatedMetrics:
    """Aggregate statistics computed from one event log file.

    Attributes:
        duration: Latency percentiles and summary.
        requests: Request count and rate.
        failures: Failure count and rate.
        window_seconds: Measurement window used to compute rates.
        lines_read: Number of lines consumed from the file.
    """

    duration: DurationStats = field(default_factory=DurationStats)
    requests: RequestStats = field(default_factory=RequestStats)
    failures: FailureStats = field(default_factory=FailureStats)
    window_seconds: float = 0.0
    lines_read: int = 0

    @classmethod
    def empty(cls, window_seconds: float = 0.0) -> "AggregatedMetrics":
        """Return metrics with every count and rate set to zero."""
        return cls(window_seconds=window_seconds)


@dataclass(frozen=True)
class ResultFileDescriptor:
    """Identifies one candidate log file for a (scenario, target) pair.

    Filenames embed a sortable timestamp, so ordering by filename is
    ordering by recency.
    """

    scenario: str
    target: str
    path: Path

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def recency_key(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class TargetMetrics:
    """Flattened metrics for one target, plus the file they came from.

    This is the unit handed to reporters and streamed to the live viewer.
    """

    p50: float = 0.0
    p75: float = 0.0
    p90: float = 0.0
    p95: float = 0.0
    p99: float = 0.0
    p99_9: float = 0.0
    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0
    med: float = 0.0
    total_requests: float = 0.0
    rps: float = 0.0
    error_rate: float = 0.0
    errors: float = 0.0
    file: str | None = None
    timestamp: str | None = None

    @classmethod
    def from_aggregated(
        cls,
        metrics: AggregatedMetrics,
        file: str | None = None,
        timestamp: str | None = None,
    ) -> "TargetMetrics":
        """Build a TargetMetrics from parser output and provenance."""
        total = metrics.requests.count
        errors = metrics.failures.count
        return cls(
            p50=metrics.duration.p50,
            p75=metrics.duration.p75,
            p90=metrics.duration.p90,
            p95=metrics.duration.p95,
            p99=metrics.duration.p99,
            p99_9=metrics.duration.p99_9,
            min=metrics.duration.min,
            max=metrics.duration.max,
            avg=metrics.duration.avg,
            med=metrics.duration.med,
            total_requests=total,
            rps=metrics.requests.rate,
            error_rate=errors / total if total > 0 else 0.0,
            errors=errors,
            file=file,
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class SnapshotProgress:
    """How many lookups have completed out of those issued."""

    processed: int
    total: int

    @property
    def completed(self) -> bool:
        return self.processed == self.total


@dataclass(frozen=True)
class ResultSnapshot:
    """A point-in-time view of an aggregation in progress.

    Attributes:
        results: target -> TargetMetrics for a single scenario, or
            scenario -> target -> TargetMetrics for the all-scenarios query.
        generated_at: ISO-8601 UTC timestamp of the snapshot.
        scenario: Scenario name, or None for the all-scenarios query.
        progress: Progress counters; None on the final snapshot.
        final: True for the last snapshot of a stream.
    """

    results: Mapping[str, Any]
    generated_at: str
    scenario: str | None = None
    progress: SnapshotProgress | None = None
    final: bool = False


@dataclass(frozen=True)
class CachePolicy:
    """Expiry and size bounds for the metrics cache.

    Attributes:
        ttl_seconds: Entries older than this are recomputed.
        max_entries: Maximum number of entries kept after an insert.
    """

    ttl_seconds: float = 300.0
    max_entries: int = 50


@dataclass(frozen=True)
class ParserLimits:
    """Safety bounds applied while parsing an event log.

    Attributes:
        max_lines: Stop reading after this many lines.
        default_window_seconds: Window used when fewer than two timestamps
            were observed.
        min_window_seconds: Lower bound on the measurement window.
    """

    max_lines: int = 5_000_000
    default_window_seconds: float = 45.0
    min_window_seconds: float = 1.0


def _split_names(raw: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if not raw:
        return default
    names = tuple(name.strip() for name in raw.split(",") if name.strip())
    return names or default


def _env_float(raw: str | None, default: float) -> float:
    try:
        value = float(raw) if raw is not None else default
    except ValueError:
        return default
    if value <= 0 or value != value or value == float("inf"):
        return default
    return value


def _env_int(raw: str | None, default: int) -> int:
    try:
        value = int(raw) if raw is not None else default
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for comparison, export and the live viewer."""

    results_dir: Path = Path("results")
    targets: tuple[str, ...] = DEFAULT_TARGETS
    scenarios: tuple[str, ...] = DEFAULT_SCENARIOS
    cache: CachePolicy = field(default_factory=CachePolicy)
    parser: ParserLimits = field(default_factory=ParserLimits)
    host: str = "127.0.0.1"
    port: int = 3000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from LOADCOMPARE_* environment variables.

        Invalid numeric values fall back to the defaults.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        cache = CachePolicy(
            ttl_seconds=_env_float(
                env.get("LOADCOMPARE_CACHE_TTL"), defaults.cache.ttl_seconds
            ),
            max_entries=_env_int(
                env.get("LOADCOMPARE_CACHE_SIZE"), defaults.cache.max_entries
            ),
        )
        port_raw = env.get("LOADCOMPARE_PORT") or env.get("PORT")
        return cls(
            results_dir=Path(env.get("LOADCOMPARE_RESULTS_DIR", defaults.results_dir)),
            targets=_split_names(env.get("LOADCOMPARE_TARGETS"), defaults.targets),
            scenarios=_split_names(
                env.get("LOADCOMPARE_SCENARIOS"), defaults.scenarios
            ),
            cache=cache,
            host=env.get("LOADCOMPARE_HOST", defaults.host),
            port=_env_int(port_raw, defaults.port),
        )


def utc_now() -> str:
    """Return the current UTC time as an ISO-8601 string with a Z suffix."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )
