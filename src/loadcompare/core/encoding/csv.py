"""CSV export of per-target comparison results."""

import csv
import io
from collections.abc import Mapping, Sequence
from pathlib import Path

from loadcompare.core.models import TargetMetrics

CSV_HEADER = (
    "Target",
    "p50_ms",
    "p95_ms",
    "p99_ms",
    "Total_Requests",
    "RPS",
    "Errors",
    "Error_Rate_Percent",
)


def _count(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.2f}"


def _row(target: str, data: TargetMetrics | None) -> list[str]:
    if data is None:
        return [target] + [""] * (len(CSV_HEADER) - 1)
    return [
        target,
        f"{data.p50:.2f}",
        f"{data.p95:.2f}",
        f"{data.p99:.2f}",
        _count(data.total_requests),
        f"{data.rps:.2f}",
        _count(data.errors),
        f"{data.error_rate * 100:.2f}",
    ]


class CsvExporter:
    """Renders one scenario's results as CSV, one row per configured target.

    Targets without data get a row holding only the target name, so every
    configured target is present and every row has the header's width.

    Args:
        targets: Configured target names, in row order.
    """

    def __init__(self, targets: Sequence[str]) -> None:
        self._targets = tuple(targets)

    def rows(self, results: Mapping[str, TargetMetrics]) -> list[list[str]]:
        """Return the header row followed by one row per target."""
        return [list(CSV_HEADER)] + [
            _row(target, results.get(target)) for target in self._targets
        ]

    def render(self, results: Mapping[str, TargetMetrics]) -> str:
        """Render results as CSV text, without a trailing newline.

        Fields containing a comma, quote or line break are quoted, with
        embedded quotes doubled.
        """
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
        writer.writerows(self.rows(results))
        return buffer.getvalue().rstrip("\n")

    def export(
        self,
        scenario: str,
        results: Mapping[str, TargetMetrics],
        output_dir: Path,
    ) -> Path:
        """Write ``<scenario>_summary.csv`` into output_dir.

        Returns:
            Path of the written file.

        Raises:
            OSError: If the file cannot be written.
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / f"{scenario}_summary.csv"
        output_file.write_text(self.render(results), encoding="utf-8")
        return output_file
