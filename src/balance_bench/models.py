from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from .chains import ChainId


@dataclass(frozen=True)
class Balance:
    """One token holding observed for an address on a chain."""

    amount: str  # raw, provider-native precision
    decimals: int | None = None
    token: str | None = None
    amount_usd: str | None = None
    chain: ChainId | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.chain is not None:
            data["chain"] = self.chain.value
        return data


@dataclass(frozen=True)
class RequestSpec:
    """A single HTTP call a provider wants to issue."""

    url: str
    chain: ChainId
    body: dict[str, Any] | None = None
    address: str | None = None
    method: str | None = None  # overrides the provider default when set


@dataclass(frozen=True)
class TimingSample:
    chain: ChainId
    provider: str
    duration_ms: float
