"""Explicitly owned state shared by the CLI and the HTTP adapters."""

from loadcompare.adapters.storage.cache import MetricsCache
from loadcompare.adapters.storage.event_log import EventLogParser
from loadcompare.adapters.storage.results_dir import ResultFileLocator
from loadcompare.core.encoding.csv import CsvExporter
from loadcompare.core.encoding.table import ComparisonReporter
from loadcompare.core.models import Settings
from loadcompare.runtime.aggregator import ResultSetAggregator


class ResultsContext:
    """Owns the settings, parser, cache and locator for one results directory.

    Create one per results directory; nothing here is module-global, so
    several contexts can serve different directories side by side and
    tests get a fresh cache each time.

    Example:
        ```python
        context = ResultsContext(Settings(results_dir=Path("results")))
        results = await context.aggregator.query_scenario("smoke")
        ```
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        parser: EventLogParser | None = None,
        cache: MetricsCache | None = None,
        locator: ResultFileLocator | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.parser = parser or EventLogParser(self.settings.parser)
        self.cache = cache or MetricsCache(self.parser, self.settings.cache)
        self.locator = locator or ResultFileLocator(self.settings.results_dir)
        self.aggregator = ResultSetAggregator(
            source=self.cache,
            locator=self.locator,
            targets=self.settings.targets,
            scenarios=self.settings.scenarios,
        )

    def comparison_reporter(self) -> ComparisonReporter:
        return ComparisonReporter(self.settings.targets)

    def csv_exporter(self) -> CsvExporter:
        return CsvExporter(self.settings.targets)
