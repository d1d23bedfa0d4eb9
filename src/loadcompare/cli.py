"""Command-line interface for loadcompare.

Usage:
    loadcompare compare [--scenario NAME|all] [--results-dir DIR]
    loadcompare export-csv [--scenario NAME|all] [--results-dir DIR] [--output-dir DIR]
    loadcompare serve [--host HOST] [--port PORT] [--results-dir DIR]
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from loadcompare.adapters.logging import configure_logging
from loadcompare.core.exceptions import (
    ResultsDirectoryNotFoundError,
    UnknownScenarioError,
)
from loadcompare.core.models import Settings
from loadcompare.runtime.context import ResultsContext

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all subcommands."""
    parser = argparse.ArgumentParser(
        prog="loadcompare",
        description="Compare load-test results across targets",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    compare = subparsers.add_parser("compare", help="Print comparison tables")
    export = subparsers.add_parser("export-csv", help="Write one CSV per scenario")
    serve = subparsers.add_parser("serve", help="Serve the live results API")

    for sub in (compare, export, serve):
        sub.add_argument(
            "--results-dir",
            type=Path,
            default=None,
            help="Directory holding result files (default: ./results)",
        )
    for sub in (compare, export):
        sub.add_argument(
            "--scenario",
            default="all",
            help="Scenario to process, or 'all' (default)",
        )
    export.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Where to write CSV files (default: the results directory)",
    )
    serve.add_argument("--host", default=None, help="Bind address")
    serve.add_argument("--port", type=int, default=None, help="Bind port")
    return parser


def resolve_settings(args: argparse.Namespace, base: Settings) -> Settings:
    """Apply command-line overrides on top of environment settings."""
    overrides: dict[str, object] = {}
    if args.results_dir is not None:
        overrides["results_dir"] = args.results_dir
    if getattr(args, "host", None) is not None:
        overrides["host"] = args.host
    if getattr(args, "port", None) is not None:
        overrides["port"] = args.port
    return dataclasses.replace(base, **overrides)


def select_scenarios(name: str, settings: Settings) -> list[str]:
    """Return the scenarios to process for a --scenario value.

    Raises:
        UnknownScenarioError: If name is neither 'all' nor configured.
    """
    if name == "all":
        return list(settings.scenarios)
    if name not in settings.scenarios:
        raise UnknownScenarioError(name, settings.scenarios)
    return [name]


def _require_results_dir(settings: Settings) -> None:
    if not settings.results_dir.is_dir():
        raise ResultsDirectoryNotFoundError(settings.results_dir)


async def run_compare(
    context: ResultsContext, scenarios: Sequence[str], out: TextIO
) -> None:
    """Print one comparison table per scenario."""
    reporter = context.comparison_reporter()
    for scenario in scenarios:
        results = await context.aggregator.query_scenario(scenario)
        out.write(reporter.render(scenario, results))
        out.write("\n")
    stats = context.cache.stats()
    logger.debug(
        "Comparison finished",
        extra={"cache_hits": stats.hits, "cache_misses": stats.misses},
    )


async def run_export(
    context: ResultsContext,
    scenarios: Sequence[str],
    output_dir: Path,
    out: TextIO,
) -> list[Path]:
    """Write a CSV file for every scenario that has results."""
    exporter = context.csv_exporter()
    written: list[Path] = []
    for scenario in scenarios:
        results = await context.aggregator.query_scenario(scenario)
        if not results:
            out.write(f"{scenario}: no results, skipped\n")
            continue
        path = exporter.export(scenario, results, output_dir)
        out.write(f"{scenario}: exported {path}\n")
        written.append(path)
    return written


def run_serve(context: ResultsContext) -> None:
    """Serve the results API with uvicorn until interrupted."""
    import uvicorn
    from fastapi import FastAPI

    from loadcompare.adapters.frameworks.fastapi import create_results_router

    app = FastAPI(title="loadcompare results")
    app.include_router(create_results_router(context.aggregator))
    logger.info(
        "Serving results",
        extra={
            "results_dir": str(context.settings.results_dir),
            "host": context.settings.host,
            "port": context.settings.port,
        },
    )
    uvicorn.run(app, host=context.settings.host, port=context.settings.port)


def main(argv: Sequence[str] | None = None, out: TextIO | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Process exit code: 0 on success, 1 on a usage or I/O error.
    """
    args = build_parser().parse_args(argv)
    out = out or sys.stdout
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    settings = resolve_settings(args, Settings.from_env())
    context = ResultsContext(settings)

    try:
        if args.command == "serve":
            run_serve(context)
            return 0

        scenarios = select_scenarios(args.scenario, settings)
        _require_results_dir(settings)
        if args.command == "compare":
            asyncio.run(run_compare(context, scenarios, out))
        else:
            output_dir = args.output_dir or settings.results_dir
            asyncio.run(run_export(context, scenarios, output_dir, out))
    except UnknownScenarioError as exc:
        logger.error(
            "%s (available: all, %s)", exc, ", ".join(settings.scenarios)
        )
        return 1
    except ResultsDirectoryNotFoundError as exc:
        logger.error("%s; run a load test first", exc)
        return 1
    except OSError as exc:
        logger.error("I/O error: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
