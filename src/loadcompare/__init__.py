"""loadcompare: streaming aggregation of load-test event logs.

Computes latency percentiles and throughput/error statistics from
newline-delimited event logs, caches them per file, and serves them to
comparison tables, CSV export and a live NDJSON results stream.
"""

from loadcompare.adapters.storage.cache import MetricsCache
from loadcompare.adapters.storage.event_log import EventLogParser, parse_event_log
from loadcompare.adapters.storage.results_dir import ResultFileLocator
from loadcompare.core.encoding.csv import CsvExporter
from loadcompare.core.encoding.table import ComparisonReporter
from loadcompare.core.models import (
    AggregatedMetrics,
    CachePolicy,
    ParserLimits,
    ResultSnapshot,
    Settings,
    TargetMetrics,
)
from loadcompare.runtime.aggregator import ResultSetAggregator
from loadcompare.runtime.context import ResultsContext

__version__ = "0.1.0"

__all__ = [
    "AggregatedMetrics",
    "CachePolicy",
    "ComparisonReporter",
    "CsvExporter",
    "EventLogParser",
    "MetricsCache",
    "ParserLimits",
    "ResultFileLocator",
    "ResultSetAggregator",
    "ResultSnapshot",
    "ResultsContext",
    "Settings",
    "TargetMetrics",
    "parse_event_log",
]
