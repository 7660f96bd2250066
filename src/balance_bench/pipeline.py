"""High-level benchmark run."""

from __future__ import annotations

from .datasets import get_public_keys
from .orchestrator import BenchmarkRun, execute_benchmark
from .report import publish_results
from .state import AppState


async def run_benchmark(state: AppState) -> BenchmarkRun:
    """Load public keys, benchmark every provider and publish the results.

    Provider failures never abort the run; the published statistics cover
    whatever each provider completed.
    """
    s = state.settings
    log = state.logger

    public_keys = get_public_keys(
        s.benchmark_chains,
        dataset_dir=s.dataset_dir,
        skip_test_addresses=s.skip_test_addresses,
        limit=s.limit_public_keys,
    )
    if not public_keys:
        log.warning("No public keys to benchmark")

    log.info(
        "Starting benchmark",
        extra={
            "providers": s.providers,
            "chains": [chain.value for chain in s.benchmark_chains],
        },
    )

    run = await execute_benchmark(s, public_keys)
    publish_results(run, s)

    log.info("Benchmark completed")
    return run
