"""Port interfaces for metrics sources and result locators.

These protocols define the contracts the aggregator depends on. The
aggregator only sees these interfaces, so tests can substitute doubles
for the file-backed parser, cache and locator.
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from loadcompare.core.models import AggregatedMetrics, ResultFileDescriptor


@runtime_checkable
class MetricsSourcePort(Protocol):
    """Port for computing aggregate metrics for one log file.

    Examples: EventLogParser, MetricsCache.
    """

    async def get(self, path: Path) -> AggregatedMetrics:
        """Return aggregate metrics for the file at path.

        Raises:
            OSError: If the file cannot be read.
        """
        ...


@runtime_checkable
class EventLogParserPort(Protocol):
    """Port for the parser a MetricsCache delegates to on a miss."""

    async def parse(self, path: Path) -> AggregatedMetrics:
        """Parse the file at path into aggregate metrics."""
        ...


@runtime_checkable
class ResultLocatorPort(Protocol):
    """Port for finding result files in a results directory.

    Examples: ResultFileLocator.
    """

    async def find_latest(
        self, scenario: str, target: str
    ) -> ResultFileDescriptor | None:
        """Return the most recent file for (scenario, target), or None."""
        ...

    async def plan(
        self, scenarios: Sequence[str], targets: Sequence[str]
    ) -> list[ResultFileDescriptor]:
        """Return the latest file for every pair that has one."""
        ...
