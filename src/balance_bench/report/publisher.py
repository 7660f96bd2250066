from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .formatter import format_statistics_table
from ..settings import OutputFormat

if TYPE_CHECKING:
    from ..orchestrator import BenchmarkRun
    from ..settings import BenchmarkSettings

logger = logging.getLogger(__name__)


def build_output(run: BenchmarkRun) -> dict[str, Any]:
    """Everything the run collected, as JSON-serializable data."""
    return {
        "statistics": [stats.to_row() for stats in run.statistics],
        "runs": [
            {
                "provider": r.provider,
                "processed": r.processed,
                "skipped": r.skipped,
                "error": r.error,
            }
            for r in run.runs
        ],
        "balances": run.aggregator.balances_table(),
        "timings": run.aggregator.timing_table(),
    }


def write_output(data: dict[str, Any], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    logger.info("Benchmark results written to %s", path)


def publish_results(run: BenchmarkRun, settings: BenchmarkSettings) -> None:
    """Print the statistics and dump the raw tables.

    Balances and timings are logged at DEBUG and, when ``output_path`` is set,
    written with the statistics to that file.
    """
    data = build_output(run)

    logger.debug("Balances: %s", json.dumps(data["balances"]))
    logger.debug("Timings: %s", json.dumps(data["timings"]))

    if settings.output_format == OutputFormat.JSON:
        print(json.dumps(data["statistics"], indent=2))
    else:
        format_statistics_table(run.statistics, run.runs)

    if settings.output_path is not None:
        write_output(data, settings.output_path)
