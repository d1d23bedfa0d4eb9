"""BDD step definitions for aggregation.feature."""

from pathlib import Path

import pytest
from pytest_bdd import given, parsers, then, when
from tests.event_log_builders import event_log_lines
from tests.features.aggregation.steps_helpers import (
    AggregationScenarioContext,
    result_filename,
    run_async,
)

from loadcompare.core.exceptions import UnknownScenarioError


@pytest.fixture
def ctx() -> AggregationScenarioContext:
    """Fresh scenario context for each test."""
    return AggregationScenarioContext()


# === Given ===
@given("an empty results directory")
def step_empty_results_dir(ctx: AggregationScenarioContext, tmp_path: Path) -> None:
    ctx.results_dir = tmp_path / "results"
    ctx.results_dir.mkdir()


@given(
    parsers.parse(
        'a "{scenario}" run for "{target}" at "{stamp}" with durations "{durations}"'
    )
)
def step_run_with_durations(
    ctx: AggregationScenarioContext,
    scenario: str,
    target: str,
    stamp: str,
    durations: str,
) -> None:
    values = [float(value) for value in durations.split(",")]
    path = ctx.results_dir / result_filename(scenario, target, stamp)
    path.write_text("\n".join(event_log_lines(values)) + "\n", encoding="utf-8")


@given(parsers.parse('an unreadable "{scenario}" run for "{target}" at "{stamp}"'))
def step_unreadable_run(
    ctx: AggregationScenarioContext, scenario: str, target: str, stamp: str
) -> None:
    # A directory with a result file's name cannot be opened for reading.
    (ctx.results_dir / result_filename(scenario, target, stamp)).mkdir()


# === When ===
@when(parsers.parse('the "{scenario}" results are queried'))
def step_query(ctx: AggregationScenarioContext, scenario: str) -> None:
    aggregator = ctx.results_context().aggregator
    try:
        ctx.results = run_async(aggregator.query_scenario(scenario))
    except UnknownScenarioError as exc:
        ctx.error = exc


@when(parsers.parse('the "{scenario}" results are queried twice'))
def step_query_twice(ctx: AggregationScenarioContext, scenario: str) -> None:
    aggregator = ctx.results_context().aggregator
    for _ in range(2):
        ctx.results = run_async(aggregator.query_scenario(scenario))


# === Then ===
@then(parsers.parse('the "{target}" p95 is {value:f} ms'))
def step_check_p95(ctx: AggregationScenarioContext, target: str, value: float) -> None:
    assert ctx.results[target].p95 == value


@then(parsers.parse('the "{target}" result came from the "{stamp}" run'))
def step_check_run(ctx: AggregationScenarioContext, target: str, stamp: str) -> None:
    assert ctx.results[target].timestamp == stamp
    assert stamp in ctx.results[target].file


@then(parsers.parse('only "{target}" has results'))
def step_only_target(ctx: AggregationScenarioContext, target: str) -> None:
    assert list(ctx.results) == [target]


@then(parsers.parse("the cache reports {hits:d} hit and {misses:d} miss"))
def step_cache_stats(ctx: AggregationScenarioContext, hits: int, misses: int) -> None:
    stats = ctx.results_context().cache.stats()
    assert (stats.hits, stats.misses) == (hits, misses)


@then(parsers.parse('the query fails with "{message}"'))
def step_query_fails(ctx: AggregationScenarioContext, message: str) -> None:
    assert ctx.error is not None
    assert str(ctx.error) == message
