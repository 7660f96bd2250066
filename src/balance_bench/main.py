"""CLI entrypoint for balance-bench."""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Annotated, Any

import typer

from .chains import ChainId
from .logger import setup_logging
from .settings import CONFIG_ENV_VAR, BenchmarkSettings, OutputFormat
from .state import AppState

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Benchmark blockchain balance APIs against each other.",
)


@app.callback(invoke_without_command=True)
def benchmark(
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [balance_bench] table).",
        ),
    ] = None,
    chains: Annotated[
        list[ChainId] | None,
        typer.Option(
            "--chain",
            help="Chain to benchmark; repeat for several. Defaults to all chains.",
        ),
    ] = None,
    providers: Annotated[
        list[str] | None,
        typer.Option(
            "--provider",
            "-p",
            help="Provider to benchmark; repeat for several.",
        ),
    ] = None,
    dataset_dir: Annotated[
        Path | None,
        typer.Option(
            "--dataset-dir",
            help="Directory with query-result JSON exports (1.json .. 6.json).",
        ),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option("--limit", help="Maximum number of public keys to query."),
    ] = None,
    skip_test_addresses: Annotated[
        bool | None,
        typer.Option(
            "--skip-test-addresses/--include-test-addresses",
            help="Leave out the built-in test addresses.",
        ),
    ] = None,
    min_sleep_ms: Annotated[
        int | None,
        typer.Option(
            "--min-sleep-ms",
            help="Base pause between requests of a provider; 0 disables throttling.",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat | None,
        typer.Option("--output-format", help="Statistics output: table or json."),
    ] = None,
    output_path: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write statistics, balances and timings as JSON to this file.",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR).",
        ),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Query every provider with the same public keys and compare them.

    Loads configuration, runs all providers concurrently and prints the
    providers ranked by average response time with their token coverage gaps.
    """
    if config_path:
        os.environ[CONFIG_ENV_VAR] = str(config_path)

    init_kwargs: dict[str, Any] = {}
    if chains:
        init_kwargs["benchmark_chains"] = chains
    if providers:
        init_kwargs["providers"] = providers
    if dataset_dir is not None:
        init_kwargs["dataset_dir"] = dataset_dir
    if limit is not None:
        init_kwargs["limit_public_keys"] = limit
    if skip_test_addresses is not None:
        init_kwargs["skip_test_addresses"] = skip_test_addresses
    if min_sleep_ms is not None:
        init_kwargs["min_sleep_ms"] = min_sleep_ms
    if output_format is not None:
        init_kwargs["output_format"] = output_format
    if output_path is not None:
        init_kwargs["output_path"] = output_path
    if log_level is not None:
        init_kwargs["log_level"] = log_level

    try:
        settings = BenchmarkSettings(**init_kwargs)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    setup_logging(settings.log_level)
    state = AppState.from_settings(settings)

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    from .pipeline import run_benchmark

    asyncio.run(run_benchmark(state))


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
