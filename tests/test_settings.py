"""Tests for settings configuration loading."""

from __future__ import annotations

from textwrap import dedent

import pytest
from pydantic import ValidationError

from balance_bench.chains import ChainId
from balance_bench.settings import BenchmarkSettings, OutputFormat


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("BALANCE_BENCH_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))


def test_defaults():
    settings = BenchmarkSettings()

    assert settings.benchmark_chains == list(ChainId)
    assert settings.providers == ["ankr", "bitquery", "covalenthq", "moralis"]
    assert settings.min_sleep_ms == 500
    assert settings.max_attempts == 2
    assert settings.output_format == OutputFormat.TABLE


def test_toml_config_loaded(tmp_path, monkeypatch):
    config_path = tmp_path / "bench.toml"
    config_path.write_text(
        dedent(
            """
            [balance_bench]
            benchmark_chains = ["ethereum", "solana"]
            providers = ["Zerion", "ankr"]
            min_sleep_ms = 0
            limit_public_keys = 5
            """
        ).strip()
    )
    monkeypatch.setenv("BALANCE_BENCH_CONFIG", str(config_path))

    settings = BenchmarkSettings()

    assert settings.benchmark_chains == [ChainId.ETHEREUM, ChainId.SOLANA]
    assert settings.providers == ["zerion", "ankr"]
    assert settings.min_sleep_ms == 0
    assert settings.limit_public_keys == 5


def test_local_config_file_discovered(tmp_path):
    (tmp_path / "balance-bench.toml").write_text('providers = ["debank"]\n')

    assert BenchmarkSettings().providers == ["debank"]


def test_precedence_cli_over_env_over_file(tmp_path, monkeypatch):
    (tmp_path / "balance-bench.toml").write_text(
        "min_sleep_ms = 100\nmax_attempts = 4\n"
    )
    monkeypatch.setenv("BALANCE_BENCH_MIN_SLEEP_MS", "200")

    from_env = BenchmarkSettings()
    from_cli = BenchmarkSettings(min_sleep_ms=300)

    assert from_env.min_sleep_ms == 200
    assert from_env.max_attempts == 4
    assert from_cli.min_sleep_ms == 300


def test_secrets_rejected_in_toml(tmp_path):
    (tmp_path / "balance-bench.toml").write_text('moralis_api_key = "leaked"\n')

    with pytest.raises(ValueError, match="Security violation"):
        BenchmarkSettings()


def test_secrets_from_env_are_redacted(monkeypatch):
    monkeypatch.setenv("BALANCE_BENCH_MORALIS_API_KEY", "super-secret")

    settings = BenchmarkSettings()

    assert settings.secret("moralis_api_key") == "super-secret"
    assert settings.secret("debank_access_key") == ""
    safe = settings.as_safe_dict()
    assert safe["moralis_api_key"] == "***redacted***"
    assert safe["debank_access_key"] is None
    assert "super-secret" not in str(safe)


def test_unknown_provider_rejected():
    with pytest.raises(ValidationError, match="Unknown provider"):
        BenchmarkSettings(providers=["ankr", "etherscan"])


@pytest.mark.parametrize(
    "kwargs",
    [{"max_attempts": 0}, {"min_sleep_ms": -1}, {"limit_public_keys": 0}],
)
def test_invalid_numbers_rejected(kwargs):
    with pytest.raises(ValidationError):
        BenchmarkSettings(**kwargs)
