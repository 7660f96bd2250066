import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
import requests

from balance_bench import orchestrator
from balance_bench.aggregator import Aggregator
from balance_bench.chains import ChainId
from balance_bench.exceptions import ForbiddenError
from balance_bench.orchestrator import execute_benchmark, run_provider
from balance_bench.settings import BenchmarkSettings

KEYS = [
    "0x1d17371f4502357942b199cb0de90c6821f01fa5",
    "0x9adb88d3c48b8a0bcbe88b9d2b351a1fc768edc1",
    "0x38a7e25a4b7ce22f3e51b62672fc7bd9d82dc6dc",
]


def _response(status: int = 200, payload=None) -> Mock:
    response = Mock()
    response.status_code = status
    response.text = json.dumps(payload)
    response.json.return_value = payload
    return response


@pytest.mark.asyncio
async def test_run_provider_aborts_after_first_failure():
    engine = MagicMock()
    engine.name = "p1"
    engine.exec = AsyncMock(side_effect=[[], ForbiddenError("denied"), []])

    run = await run_provider(engine, KEYS)

    assert engine.exec.await_count == 2
    assert run.processed == 1
    assert run.skipped == 1
    assert run.aborted
    assert run.error == "denied"


@pytest.mark.asyncio
async def test_run_provider_processes_every_key():
    engine = MagicMock()
    engine.name = "p1"
    engine.exec = AsyncMock(return_value=[])

    run = await run_provider(engine, KEYS)

    assert [c.args[0] for c in engine.exec.await_args_list] == KEYS
    assert run.processed == 3
    assert not run.aborted


@pytest.mark.asyncio
async def test_failing_provider_does_not_affect_others(monkeypatch):
    def fake_request(method, url, headers=None, json=None, timeout=None):
        if "covalenthq" in url:
            return _response(401)
        return _response(
            200, {"result": {"assets": [{"tokenSymbol": "ETH", "balance": "1"}]}}
        )

    mock_request = Mock(side_effect=fake_request)
    monkeypatch.setattr(requests, "request", mock_request)
    settings = BenchmarkSettings(
        providers=["ankr", "covalenthq"],
        benchmark_chains=[ChainId.ETHEREUM],
        min_sleep_ms=0,
    )

    result = await execute_benchmark(settings, KEYS)

    runs = {r.provider: r for r in result.runs}
    assert runs["ankr"].processed == 3
    assert not runs["ankr"].aborted
    assert runs["covalenthq"].processed == 0
    assert runs["covalenthq"].skipped == 2
    assert runs["covalenthq"].aborted

    # zero-sample providers report avg_time 0 and sort first
    assert [s.provider for s in result.statistics] == ["covalenthq", "ankr"]
    assert result.statistics[0].count == 0
    assert result.statistics[1].count == 3
    assert result.statistics[1].missing_tokens_by_chain == {ChainId.ETHEREUM: ""}


@pytest.mark.asyncio
async def test_providers_run_concurrently_and_sequentially_within(monkeypatch):
    events: list[str] = []

    def make_engine(name: str, delay: float):
        engine = MagicMock()
        engine.name = name

        async def _exec(key: str):
            events.append(f"{name}:start:{key}")
            await asyncio.sleep(delay)
            events.append(f"{name}:end:{key}")
            return []

        engine.exec = _exec
        return engine

    slow = make_engine("slow", 0.05)
    fast = make_engine("fast", 0.0)
    monkeypatch.setattr(
        orchestrator, "build_engines", lambda _settings, _agg: [slow, fast]
    )

    result = await execute_benchmark(BenchmarkSettings(), ["k1", "k2"])

    # the fast provider finishes while the slow one is still on its first key
    assert events.index("fast:end:k2") < events.index("slow:end:k1")
    # within a provider, keys never overlap
    assert events.index("slow:end:k1") < events.index("slow:start:k2")
    assert [r.provider for r in result.runs] == ["slow", "fast"]


def test_build_engines_registers_providers():
    settings = BenchmarkSettings(
        providers=["moralis", "debank"],
        benchmark_chains=[ChainId.SOLANA, ChainId.POLYGON],
    )
    aggregator = Aggregator()

    engines = orchestrator.build_engines(settings, aggregator)

    assert [e.name for e in engines] == ["moralis", "debank"]
    assert aggregator.provider_names == ["moralis", "debank"]
    assert engines[0].adapter.querying_chains == [ChainId.SOLANA, ChainId.POLYGON]
    assert engines[1].adapter.querying_chains == [ChainId.POLYGON]
