"""Aggregation runtime: the results context and the aggregator."""

from loadcompare.runtime.aggregator import ResultSetAggregator
from loadcompare.runtime.context import ResultsContext

__all__ = [
    "ResultSetAggregator",
    "ResultsContext",
]
