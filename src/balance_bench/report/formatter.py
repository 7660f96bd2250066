"""Rich console formatter for benchmark results."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..aggregator import ProviderStatistics
from ..chains import ChainId
from ..orchestrator import ProviderRun


def _format_ms(value: float | None) -> str:
    if value is None:
        return "n/a"
    return f"{value:,.1f}"


def _chains_in(statistics: list[ProviderStatistics]) -> list[ChainId]:
    seen = {
        chain
        for stats in statistics
        for chain in (*stats.avg_time_by_chain, *stats.missing_tokens_by_chain)
    }
    return [chain for chain in ChainId if chain in seen]


def build_statistics_table(statistics: list[ProviderStatistics]) -> Table:
    table = Table(title=None, expand=True, show_lines=False)
    table.add_column("Provider", style="cyan", no_wrap=True)
    table.add_column("Calls", justify="right")
    table.add_column("Avg (ms)", justify="right", style="green")
    table.add_column("Min (ms)", justify="right", style="dim")
    table.add_column("Max (ms)", justify="right", style="dim")
    table.add_column("Total (ms)", justify="right", style="dim")

    chains = _chains_in(statistics)
    for chain in chains:
        table.add_column(f"Avg {chain.value}", justify="right", style="yellow")

    for stats in statistics:
        table.add_row(
            stats.provider,
            str(stats.count),
            _format_ms(stats.avg_time),
            _format_ms(stats.min_time),
            _format_ms(stats.max_time),
            _format_ms(stats.total_time),
            *[_format_ms(stats.avg_time_by_chain.get(chain)) for chain in chains],
        )
    return table


def build_coverage_table(statistics: list[ProviderStatistics]) -> Table | None:
    """Tokens each provider missed, or None when every provider saw everything."""
    rows = [
        (stats.provider, chain.value, missing)
        for stats in statistics
        for chain, missing in stats.missing_tokens_by_chain.items()
        if missing
    ]
    if not rows:
        return None

    table = Table(expand=True)
    table.add_column("Provider", style="cyan", no_wrap=True)
    table.add_column("Chain", style="yellow", no_wrap=True)
    table.add_column("Missing tokens", overflow="fold")
    for row in rows:
        table.add_row(*row)
    return table


def format_statistics_table(
    statistics: list[ProviderStatistics],
    runs: list[ProviderRun] | None = None,
    console: Console | None = None,
) -> None:
    """Print the provider ranking and coverage gaps to stdout."""
    console = console or Console()

    console.print()
    console.print(
        Panel(
            build_statistics_table(statistics),
            title="[bold]Provider Timing[/]",
            border_style="blue",
        )
    )

    coverage = build_coverage_table(statistics)
    if coverage is not None:
        console.print(
            Panel(coverage, title="[bold]Token Coverage Gaps[/]", border_style="cyan")
        )

    aborted = [run for run in runs or [] if run.aborted]
    for run in aborted:
        console.print(
            f"[red]✗ {run.provider}[/] aborted after {run.processed} keys: {run.error}"
        )
    console.print()
