from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .aggregator import Aggregator, ProviderStatistics
from .engine import ExecutionEngine
from .logger import get_logger
from .providers import get_provider_class

if TYPE_CHECKING:
    from .settings import BenchmarkSettings

logger = get_logger(__name__)


@dataclass
class ProviderRun:
    """Outcome of one provider's pass over the public keys."""

    provider: str
    processed: int = 0
    skipped: int = 0
    error: str | None = None

    @property
    def aborted(self) -> bool:
        return self.error is not None


@dataclass
class BenchmarkRun:
    aggregator: Aggregator
    statistics: list[ProviderStatistics] = field(default_factory=list)
    runs: list[ProviderRun] = field(default_factory=list)


def build_engines(
    settings: BenchmarkSettings, aggregator: Aggregator
) -> list[ExecutionEngine]:
    """Create one engine per configured provider and register it."""
    engines = []
    for provider_name in settings.providers:
        adapter_cls = get_provider_class(provider_name)
        adapter = adapter_cls(settings, settings.benchmark_chains)
        aggregator.register_provider(adapter.name)
        logger.debug(
            "Provider %s → chains: %s",
            adapter.name,
            ", ".join(chain.value for chain in adapter.querying_chains) or "<none>",
        )
        engines.append(ExecutionEngine(adapter, aggregator, settings))
    return engines


async def run_provider(engine: ExecutionEngine, public_keys: list[str]) -> ProviderRun:
    """Run one provider over every key, stopping at the first failure.

    Keys after a failure are counted as skipped; the error is logged and kept
    on the returned ProviderRun instead of being raised.
    """
    run = ProviderRun(provider=engine.name)
    for public_key in public_keys:
        if run.aborted:
            run.skipped += 1
            continue
        try:
            await engine.exec(public_key)
            run.processed += 1
        except Exception as e:
            run.error = str(e) or type(e).__name__
            logger.error(
                "Provider '%s' aborted at %s: %s", engine.name, public_key, run.error
            )
    return run


async def execute_benchmark(
    settings: BenchmarkSettings,
    public_keys: list[str],
    aggregator: Aggregator | None = None,
) -> BenchmarkRun:
    """Benchmark every configured provider concurrently.

    Each provider processes the keys sequentially; providers are independent
    tasks, so a failing provider never affects the others.

    Args:
        settings: Benchmark settings
        public_keys: Addresses to query
        aggregator: Collector for the run; a fresh one is created when omitted

    Returns:
        The aggregator, statistics sorted by average time, and per-provider runs
    """
    if aggregator is None:
        aggregator = Aggregator()
    engines = build_engines(settings, aggregator)

    logger.info(
        "Benchmarking %d providers over %d public keys...",
        len(engines),
        len(public_keys),
    )

    results = await asyncio.gather(
        *[run_provider(engine, public_keys) for engine in engines],
        return_exceptions=True,
    )

    runs: list[ProviderRun] = []
    for engine, result in zip(engines, results):
        match result:
            case ProviderRun() as run:
                logger.info(
                    "Provider '%s' finished: %d keys processed, %d skipped",
                    run.provider,
                    run.processed,
                    run.skipped,
                )
                runs.append(run)
            case BaseException() as e:
                logger.error("Provider '%s' crashed: %s", engine.name, e)
                runs.append(ProviderRun(provider=engine.name, error=str(e)))

    return BenchmarkRun(
        aggregator=aggregator,
        statistics=aggregator.compute_statistics(),
        runs=runs,
    )
