"""Collects per-provider timing and token observations for one benchmark run."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .chains import ChainId
from .models import Balance

TOKEN_SEPARATOR = ", "


@dataclass
class ProviderState:
    """Everything one provider reported during the run."""

    timing_by_chain: dict[ChainId, list[float]] = field(default_factory=dict)
    tokens_by_chain: dict[ChainId, set[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class BalanceResult:
    result: list[Balance]
    token_list: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "result": [balance.to_dict() for balance in self.result],
            "token_list": self.token_list,
        }


@dataclass(frozen=True)
class ProviderStatistics:
    """Summary of one provider's run.

    ``min_time`` is None when the provider recorded no samples.
    ``missing_tokens_by_chain`` holds, for each chain the provider reported
    tokens on, the tokens other providers found there but this one did not.
    """

    provider: str
    total_time: float
    count: int
    avg_time: float
    max_time: float
    min_time: float | None
    avg_time_by_chain: dict[ChainId, float] = field(default_factory=dict)
    missing_tokens_by_chain: dict[ChainId, str] = field(default_factory=dict)

    def to_row(self) -> dict[str, Any]:
        """Flatten into a single mapping with one key per chain statistic."""
        row: dict[str, Any] = {
            "provider": self.provider,
            "total_time": self.total_time,
            "count": self.count,
            "avg_time": self.avg_time,
            "max_time": self.max_time,
            "min_time": self.min_time,
        }
        for chain, avg in self.avg_time_by_chain.items():
            row[f"avg_time_for_{chain.value}"] = avg
        for chain, missing in self.missing_tokens_by_chain.items():
            row[f"missing_tokens_for_{chain.value}"] = missing
        return row


class Aggregator:
    """Owned by a single benchmark run; every provider task writes into it.

    Providers run as tasks on one event loop, so each ``record_*`` call
    completes without interleaving. Guard the shared maps with a lock before
    calling these methods from multiple threads.
    """

    def __init__(self) -> None:
        self._providers: dict[str, ProviderState] = {}
        # dict keys keep first-seen order for the coverage report
        self._all_tokens_by_chain: dict[ChainId, dict[str, None]] = {}
        self._balances: dict[str, dict[ChainId, dict[str, BalanceResult]]] = {}

    @property
    def provider_names(self) -> list[str]:
        return list(self._providers)

    def register_provider(self, name: str) -> None:
        """Start (or restart) tracking a provider with empty state."""
        self._providers[name] = ProviderState()

    def _state(self, provider: str) -> ProviderState:
        try:
            return self._providers[provider]
        except KeyError:
            raise ValueError(f"Provider '{provider}' is not registered") from None

    def record_timing(self, provider: str, chain: ChainId, duration_ms: float) -> None:
        if duration_ms < 0:
            raise ValueError(f"Negative duration {duration_ms} for {provider}")
        state = self._state(provider)
        state.timing_by_chain.setdefault(chain, []).append(duration_ms)

    def record_tokens(
        self, provider: str, chain: ChainId, tokens: Iterable[str]
    ) -> None:
        state = self._state(provider)
        tokens = list(tokens)
        state.tokens_by_chain.setdefault(chain, set()).update(tokens)
        universe = self._all_tokens_by_chain.setdefault(chain, {})
        for token in tokens:
            universe.setdefault(token, None)

    def record_balances(
        self,
        provider: str,
        address: str,
        chain: ChainId,
        balances: list[Balance],
        tokens: list[str],
    ) -> None:
        """Keep the normalized response of one call for the final dump."""
        self._state(provider)
        by_chain = self._balances.setdefault(address, {})
        by_chain.setdefault(chain, {})[provider] = BalanceResult(
            result=list(balances), token_list=TOKEN_SEPARATOR.join(tokens)
        )

    def tokens_for(self, chain: ChainId) -> list[str]:
        """Union of tokens every provider reported on ``chain``."""
        return list(self._all_tokens_by_chain.get(chain, {}))

    def _time_statistics(self, state: ProviderState) -> dict[str, Any]:
        samples = [t for times in state.timing_by_chain.values() for t in times]
        total_time = sum(samples)
        count = len(samples)
        return {
            "total_time": total_time,
            "count": count,
            "avg_time": total_time / count if count > 0 else 0,
            "max_time": max(samples, default=0),
            "min_time": min(samples, default=None),
            "avg_time_by_chain": {
                chain: sum(times) / len(times)
                for chain, times in state.timing_by_chain.items()
                if times
            },
        }

    def _missing_tokens(self, state: ProviderState) -> dict[ChainId, str]:
        return {
            chain: TOKEN_SEPARATOR.join(
                token for token in self.tokens_for(chain) if token not in tokens
            )
            for chain, tokens in state.tokens_by_chain.items()
        }

    def compute_statistics(self) -> list[ProviderStatistics]:
        """Summarize every registered provider, fastest average first.

        Providers without samples have ``avg_time`` 0 and therefore sort first.
        """
        stats = [
            ProviderStatistics(
                provider=name,
                missing_tokens_by_chain=self._missing_tokens(state),
                **self._time_statistics(state),
            )
            for name, state in self._providers.items()
        ]
        return sorted(stats, key=lambda s: s.avg_time)

    def timing_table(self) -> dict[str, dict[str, dict[str, Any]]]:
        """Raw samples and average per provider and chain."""
        return {
            name: {
                chain.value: {
                    "results": list(times),
                    "avg_time": sum(times) / len(times) if times else 0,
                }
                for chain, times in state.timing_by_chain.items()
            }
            for name, state in self._providers.items()
        }

    def balances_table(self) -> dict[str, dict[str, dict[str, Any]]]:
        """Normalized balances per address, chain and provider."""
        return {
            address: {
                chain.value: {
                    provider: result.to_dict() for provider, result in results.items()
                }
                for chain, results in by_chain.items()
            }
            for address, by_chain in self._balances.items()
        }
