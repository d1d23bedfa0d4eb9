"""Bounded, time-limited cache of parsed event log metrics.

Entries are keyed by resolved file path and modification time, so
rewriting a log invalidates its entry without an explicit call. Logs that
share a name in different directories never share an entry. Entries also
expire after a fixed TTL, and the cache is trimmed to a fixed size after
each insert by keeping the most recently created entries.

The cache holds no lock. It relies on running inside a single event loop:
every read-check-insert-evict step below happens between awaits. Two
concurrent misses on the same key both parse the file, which is wasted
work but not incorrect since parsing has no side effects.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from loadcompare.adapters.storage.async_utils import stat_mtime_ns
from loadcompare.adapters.storage.event_log import EventLogParser
from loadcompare.core.models import AggregatedMetrics, CachePolicy
from loadcompare.core.ports import EventLogParserPort

logger = logging.getLogger(__name__)

CacheKey = tuple[str, int]


@dataclass(frozen=True)
class _CacheEntry:
    key: CacheKey
    metrics: AggregatedMetrics
    created_at: float


@dataclass(frozen=True)
class CacheStats:
    """Counters describing cache effectiveness."""

    hits: int
    misses: int
    size: int


def cache_key(path: Path, mtime_ns: int) -> CacheKey:
    """Return the cache key for a file at a given modification time."""
    return (str(Path(path).resolve()), mtime_ns)


def _log_fields(key: CacheKey) -> dict[str, object]:
    return {"file": key[0], "mtime_ns": key[1]}


# @tra: Adapter.MetricsCache.Bounded
# @tra: Adapter.MetricsCache.PathAndMtimeKey
class MetricsCache:
    """Memoizes EventLogParser output per (file, modification time).

    Implements MetricsSourcePort.

    Args:
        parser: Parser used on a miss. Defaults to a new EventLogParser.
        policy: TTL and size bounds.
        clock: Monotonic time source in seconds, used for TTL checks.
    """

    def __init__(
        self,
        parser: EventLogParserPort | None = None,
        policy: CachePolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._parser = parser or EventLogParser()
        self._policy = policy or CachePolicy()
        self._clock = clock
        self._entries: dict[CacheKey, _CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    @property
    def policy(self) -> CachePolicy:
        return self._policy

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    async def get(self, path: Path) -> AggregatedMetrics:
        """Return metrics for path, parsing the file only on a miss.

        Raises:
            OSError: If the file cannot be stat'ed or read.
        """
        path = Path(path)
        key = cache_key(path, await stat_mtime_ns(path))

        cached = self._lookup(key)
        if cached is not None:
            return cached

        metrics = await self._parser.parse(path)
        self._store(key, metrics)
        return metrics

    def _lookup(self, key: CacheKey) -> AggregatedMetrics | None:
        entry = self._entries.get(key)
        if entry is not None and not self._expired(entry):
            self._hits += 1
            logger.debug("Metrics cache hit", extra=_log_fields(key))
            return entry.metrics
        self._misses += 1
        logger.debug("Metrics cache miss", extra=_log_fields(key))
        return None

    def _expired(self, entry: _CacheEntry) -> bool:
        return self._clock() - entry.created_at >= self._policy.ttl_seconds

    def _store(self, key: CacheKey, metrics: AggregatedMetrics) -> None:
        self._entries[key] = _CacheEntry(
            key=key, metrics=metrics, created_at=self._clock()
        )
        if len(self._entries) > self._policy.max_entries:
            self._evict()

    def _evict(self) -> None:
        """Keep only the most recently created entries, up to max_entries."""
        newest = sorted(
            self._entries.values(), key=lambda e: e.created_at, reverse=True
        )[: self._policy.max_entries]
        self._entries = {entry.key: entry for entry in newest}

    def invalidate(self, path: Path) -> int:
        """Drop every entry for the given file, whatever its mtime.

        Returns:
            Number of entries removed.
        """
        resolved = str(Path(path).resolve())
        stale = [key for key in self._entries if key[0] == resolved]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        """Remove all entries and reset counters."""
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> CacheStats:
        """Return hit/miss counters and the current number of entries."""
        return CacheStats(
            hits=self._hits, misses=self._misses, size=len(self._entries)
        )
