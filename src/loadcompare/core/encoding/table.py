"""Terminal comparison table for one scenario's results."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from loadcompare.core.models import TargetMetrics

_COLUMNS = ("Target", "p50", "p95", "p99", "RPS", "Errors", "Error %")
_TARGET_WIDTH = 11
_CELL_WIDTH = 8
NO_DATA = "N/A"


def format_duration(ms: float | None) -> str:
    """Format a latency in milliseconds as µs, ms or s."""
    if ms is None:
        return NO_DATA
    if ms < 1:
        return f"{ms * 1000:.0f}µs"
    if ms < 1000:
        return f"{ms:.2f}ms"
    return f"{ms / 1000:.2f}s"


def format_number(value: float | None, decimals: int = 2) -> str:
    """Format a number with a fixed number of decimals."""
    if value is None:
        return NO_DATA
    return f"{value:.{decimals}f}"


@dataclass(frozen=True)
class Winner:
    """The target that did best on one measure, and its value."""

    target: str
    value: float


@dataclass(frozen=True)
class Winners:
    """Best targets across a scenario's results.

    Attributes:
        best_p95: Lowest p95 latency.
        best_rps: Highest requests per second.
        best_error_rate: Lowest error rate above zero, or None when no
            target had errors.
    """

    best_p95: Winner | None = None
    best_rps: Winner | None = None
    best_error_rate: Winner | None = None


def _border(left: str, middle: str, right: str) -> str:
    cells = ["─" * (_TARGET_WIDTH + 2)] + ["─" * (_CELL_WIDTH + 2)] * (
        len(_COLUMNS) - 1
    )
    return left + middle.join(cells) + right


def _line(cells: Sequence[str], align: str = "<") -> str:
    target, *rest = cells
    parts = [f" {target:<{_TARGET_WIDTH}} "]
    parts += [f" {cell:{align}{_CELL_WIDTH}} " for cell in rest]
    return "│" + "│".join(parts) + "│"


def _data_line(target: str, data: TargetMetrics) -> str:
    cells = [
        target,
        format_duration(data.p50),
        format_duration(data.p95),
        format_duration(data.p99),
        format_number(data.rps, 1),
        format_number(data.errors, 0),
        format_number(data.error_rate * 100, 2) + "%",
    ]
    return _line(cells, align=">")


class ComparisonReporter:
    """Renders a fixed-column comparison table for configured targets.

    Every configured target gets a row. Targets missing from the results
    are shown with N/A cells, so "not tested" and "not configured" stay
    distinguishable.

    Args:
        targets: Configured target names, in row order.
    """

    def __init__(self, targets: Sequence[str]) -> None:
        self._targets = tuple(targets)

    def winners(self, results: Mapping[str, TargetMetrics]) -> Winners:
        """Pick the best p95, best RPS and lowest non-zero error rate."""
        with_data = [(t, m) for t, m in results.items() if m is not None]
        if not with_data:
            return Winners()

        p95_target, p95_data = min(with_data, key=lambda item: item[1].p95)
        rps_target, rps_data = max(with_data, key=lambda item: item[1].rps)
        erroring = [(t, m) for t, m in with_data if m.error_rate > 0]
        best_error = None
        if erroring:
            err_target, err_data = min(erroring, key=lambda item: item[1].error_rate)
            best_error = Winner(err_target, err_data.error_rate)

        return Winners(
            best_p95=Winner(p95_target, p95_data.p95),
            best_rps=Winner(rps_target, rps_data.rps),
            best_error_rate=best_error,
        )

    def render_table(self, results: Mapping[str, TargetMetrics]) -> str:
        """Render the box table, one row per configured target."""
        lines = [
            _border("┌", "┬", "┐"),
            _line(_COLUMNS),
            _border("├", "┼", "┤"),
        ]
        for target in self._targets:
            data = results.get(target)
            if data is None:
                lines.append(_line([target] + [NO_DATA] * (len(_COLUMNS) - 1)))
            else:
                lines.append(_data_line(target, data))
        lines.append(_border("└", "┴", "┘"))
        return "\n".join(lines)

    def render_analysis(self, results: Mapping[str, TargetMetrics]) -> str:
        """Render the winners block; empty unless two or more targets have data."""
        if len(results) < 2:
            return ""
        winners = self.winners(results)
        lines = ["Analysis:"]
        if winners.best_p95 is not None:
            lines.append(
                f"   Best p95: {winners.best_p95.target} "
                f"({format_duration(winners.best_p95.value)})"
            )
        if winners.best_rps is not None:
            lines.append(
                f"   Highest RPS: {winners.best_rps.target} "
                f"({format_number(winners.best_rps.value, 1)} req/s)"
            )
        if winners.best_error_rate is not None:
            lines.append(
                f"   Lowest error rate: {winners.best_error_rate.target} "
                f"({format_number(winners.best_error_rate.value * 100, 2)}%)"
            )
        return "\n".join(lines)

    def render(self, scenario: str, results: Mapping[str, TargetMetrics]) -> str:
        """Render the full report for one scenario."""
        banner = "=" * 80
        lines = [banner, f"COMPARISON: {scenario.upper()}", banner, ""]
        lines.append(self.render_table(results))
        footer = self.render_analysis(results)
        if not results:
            footer = "No results found for this scenario"
        if footer:
            lines.extend(["", footer])
        return "\n".join(lines) + "\n"
