"""Fan-out/fan-in aggregation of per-target metrics.

Lookups for every target (or every scenario/target pair) are started
together as tasks. Each one that completes adds its TargetMetrics to a
shared map and produces a partial snapshot; a failing lookup is logged
and left out without disturbing the others. Every stream ends with one
final snapshot whose map is ordered by configuration, so it is the same
for an unchanged results directory regardless of completion order.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import aclosing

from loadcompare.adapters.storage.results_dir import extract_run_timestamp
from loadcompare.core.exceptions import UnknownScenarioError
from loadcompare.core.models import (
    ResultFileDescriptor,
    ResultSnapshot,
    SnapshotProgress,
    TargetMetrics,
    utc_now,
)
from loadcompare.core.ports import MetricsSourcePort, ResultLocatorPort

logger = logging.getLogger(__name__)

_Lookup = tuple[ResultFileDescriptor, TargetMetrics | None]


class ResultSetAggregator:
    """Collects TargetMetrics for a scenario, or for all scenarios.

    Args:
        source: Provides AggregatedMetrics per file (usually a MetricsCache).
        locator: Finds the latest result file per (scenario, target).
        targets: Configured target names.
        scenarios: Configured scenario names.
    """

    def __init__(
        self,
        source: MetricsSourcePort,
        locator: ResultLocatorPort,
        targets: Sequence[str],
        scenarios: Sequence[str],
    ) -> None:
        self._source = source
        self._locator = locator
        self._targets = tuple(targets)
        self._scenarios = tuple(scenarios)

    @property
    def targets(self) -> tuple[str, ...]:
        return self._targets

    @property
    def scenarios(self) -> tuple[str, ...]:
        return self._scenarios

    def check_scenario(self, scenario: str) -> None:
        """Raise UnknownScenarioError if scenario is not configured."""
        if scenario not in self._scenarios:
            raise UnknownScenarioError(scenario, self._scenarios)

    async def _lookup(self, descriptor: ResultFileDescriptor) -> _Lookup:
        try:
            metrics = await self._source.get(descriptor.path)
        except Exception:
            logger.exception(
                "Error processing %s",
                descriptor.filename,
                extra={
                    "scenario": descriptor.scenario,
                    "target": descriptor.target,
                    "file": descriptor.filename,
                },
            )
            return descriptor, None
        return descriptor, TargetMetrics.from_aggregated(
            metrics,
            file=descriptor.filename,
            timestamp=extract_run_timestamp(descriptor.filename),
        )

    async def _collect(
        self, descriptors: Sequence[ResultFileDescriptor]
    ) -> AsyncIterator[_Lookup]:
        """Run every lookup concurrently, yielding successes as they finish.

        Lookups still pending when the consumer stops iterating are cancelled
        and awaited before the generator finishes closing.
        """
        tasks = [asyncio.create_task(self._lookup(d)) for d in descriptors]
        try:
            for next_done in asyncio.as_completed(tasks):
                descriptor, metrics = await next_done
                if metrics is not None:
                    yield descriptor, metrics
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def stream_scenario(self, scenario: str) -> AsyncIterator[ResultSnapshot]:
        """Yield growing snapshots for one scenario, then a final snapshot.

        Results map target -> TargetMetrics. Targets without a result file
        never appear in the map.

        Raises:
            UnknownScenarioError: If scenario is not configured.
        """
        self.check_scenario(scenario)
        descriptors = await self._locator.plan([scenario], self._targets)
        results: dict[str, TargetMetrics] = {}

        async with aclosing(self._collect(descriptors)) as lookups:
            async for descriptor, metrics in lookups:
                results[descriptor.target] = metrics
                yield ResultSnapshot(
                    results=dict(results),
                    generated_at=utc_now(),
                    scenario=scenario,
                    progress=SnapshotProgress(len(results), len(descriptors)),
                )

        final = {t: results[t] for t in self._targets if t in results}
        yield ResultSnapshot(
            results=final, generated_at=utc_now(), scenario=scenario, final=True
        )

    async def stream_all(self) -> AsyncIterator[ResultSnapshot]:
        """Yield growing snapshots across every configured scenario.

        Results map scenario -> target -> TargetMetrics; scenarios with no
        successful lookup never appear. The directory is listed once.
        """
        descriptors = await self._locator.plan(self._scenarios, self._targets)
        results: dict[str, dict[str, TargetMetrics]] = {}
        processed = 0

        async with aclosing(self._collect(descriptors)) as lookups:
            async for descriptor, metrics in lookups:
                by_target = results.setdefault(descriptor.scenario, {})
                by_target[descriptor.target] = metrics
                processed += 1
                yield ResultSnapshot(
                    results={s: dict(r) for s, r in results.items()},
                    generated_at=utc_now(),
                    progress=SnapshotProgress(processed, len(descriptors)),
                )

        final: dict[str, dict[str, TargetMetrics]] = {}
        for scenario in self._scenarios:
            by_target = results.get(scenario, {})
            ordered = {t: by_target[t] for t in self._targets if t in by_target}
            if ordered:
                final[scenario] = ordered
        yield ResultSnapshot(results=final, generated_at=utc_now(), final=True)

    async def query_scenario(self, scenario: str) -> dict[str, TargetMetrics]:
        """Return the final target -> TargetMetrics map for one scenario."""
        final: dict[str, TargetMetrics] = {}
        async for snapshot in self.stream_scenario(scenario):
            if snapshot.final:
                final = dict(snapshot.results)
        return final

    async def query_all(self) -> dict[str, dict[str, TargetMetrics]]:
        """Return the final scenario -> target -> TargetMetrics map."""
        final: dict[str, dict[str, TargetMetrics]] = {}
        async for snapshot in self.stream_all():
            if snapshot.final:
                final = dict(snapshot.results)
        return final
