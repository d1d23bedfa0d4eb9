"""Locates load-test result files in a results directory.

Result files are named ``<scenario>_<target>_<timestamp>.json`` where the
timestamp is written so that string order equals chronological order.
The most recent run for a pair is therefore the greatest matching
filename, independent of filesystem metadata.
"""

import re
from collections.abc import Iterable, Sequence
from pathlib import Path

from loadcompare.adapters.storage.async_utils import list_json_files
from loadcompare.core.models import ResultFileDescriptor

_RUN_TIMESTAMP = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}")


def extract_run_timestamp(filename: str) -> str | None:
    """Return the run timestamp embedded in a result filename, if any."""
    match = _RUN_TIMESTAMP.search(filename)
    return match.group(0) if match else None


def matches(filename: str, scenario: str, target: str) -> bool:
    """Check whether filename is a result file for (scenario, target)."""
    return (
        filename.startswith(f"{scenario}_")
        and f"_{target}_" in filename
        and filename.endswith(".json")
    )


def latest_match(filenames: Iterable[str], scenario: str, target: str) -> str | None:
    """Return the greatest filename matching (scenario, target), or None."""
    candidates = [name for name in filenames if matches(name, scenario, target)]
    return max(candidates) if candidates else None


class ResultFileLocator:
    """Finds the most recent result file per (scenario, target).

    Args:
        results_dir: Directory holding the event log files. A missing
            directory behaves like an empty one.
    """

    def __init__(self, results_dir: Path) -> None:
        self._results_dir = Path(results_dir)

    @property
    def results_dir(self) -> Path:
        return self._results_dir

    async def list_files(self) -> list[str]:
        """Return the sorted names of all .json files in the directory."""
        return await list_json_files(self._results_dir)

    def _describe(
        self, scenario: str, target: str, filename: str
    ) -> ResultFileDescriptor:
        return ResultFileDescriptor(
            scenario=scenario,
            target=target,
            path=self._results_dir / filename,
        )

    async def find_latest(
        self, scenario: str, target: str
    ) -> ResultFileDescriptor | None:
        """Return the most recent file for (scenario, target), or None."""
        filename = latest_match(await self.list_files(), scenario, target)
        if filename is None:
            return None
        return self._describe(scenario, target, filename)

    async def plan(
        self, scenarios: Sequence[str], targets: Sequence[str]
    ) -> list[ResultFileDescriptor]:
        """Return the latest file for every (scenario, target) pair that has one.

        The directory is listed once. Results are ordered by scenario, then
        by target, following the order of the arguments.
        """
        filenames = await self.list_files()
        planned: list[ResultFileDescriptor] = []
        for scenario in scenarios:
            for target in targets:
                filename = latest_match(filenames, scenario, target)
                if filename is not None:
                    planned.append(self._describe(scenario, target, filename))
        return planned
