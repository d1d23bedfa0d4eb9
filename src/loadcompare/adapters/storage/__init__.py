"""Storage adapters implementing core ports."""

from loadcompare.adapters.storage.cache import CacheStats, MetricsCache
from loadcompare.adapters.storage.event_log import EventLogParser, parse_event_log
from loadcompare.adapters.storage.results_dir import (
    ResultFileLocator,
    extract_run_timestamp,
)

__all__ = [
    "CacheStats",
    "EventLogParser",
    "MetricsCache",
    "ResultFileLocator",
    "extract_run_timestamp",
    "parse_event_log",
]
