from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from ..chains import ChainId
from ..models import Balance, RequestSpec

if TYPE_CHECKING:
    from ..settings import BenchmarkSettings

SendRequest = Callable[[RequestSpec], Awaitable[Any]]

DEFAULT_HEADERS = {"Content-Type": "application/json"}


@dataclass(frozen=True)
class ProviderConfig:
    """Constant description of a provider's API."""

    name: str
    base_url: str
    method: str
    min_interval_seconds: float  # published rate limit
    chain_codes: Mapping[str, ChainId]  # native chain code -> ChainId


def to_str(value: Any) -> str:
    """Render a raw amount as a string, keeping provider precision."""
    if value is None:
        return "0"
    return str(value)


def to_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


class BaseProviderAdapter(ABC):
    """Abstract base class for provider adapters.

    Subclasses declare a ``config`` and know how to build requests for an
    address and turn a provider response into balances. Throttling, retries
    and timing live in the execution engine.
    """

    config: ClassVar[ProviderConfig]

    def __init__(self, settings: BenchmarkSettings, benchmark_chains: list[ChainId]):
        """Initialize the adapter with configuration.

        Args:
            settings: Benchmark settings (credentials are read from here)
            benchmark_chains: Chains requested for this run; chains the
                provider does not support are dropped
        """
        self.settings = settings
        self.querying_chain_codes = self._prepare_chain_codes(benchmark_chains)

    def _prepare_chain_codes(self, benchmark_chains: list[ChainId]) -> list[str]:
        codes = []
        for chain in benchmark_chains:
            code = self.code_for_chain(chain)
            if code is not None:
                codes.append(code)
        return codes

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def querying_chains(self) -> list[ChainId]:
        return [self.chain_for_code(code) for code in self.querying_chain_codes]

    def chain_for_code(self, code: str) -> ChainId:
        return self.config.chain_codes[code]

    def code_for_chain(self, chain: ChainId) -> str | None:
        for code, mapped in self.config.chain_codes.items():
            if mapped == chain:
                return code
        return None

    def headers(self) -> dict[str, str]:
        return dict(DEFAULT_HEADERS)

    @abstractmethod
    def request_specs(self, address: str) -> list[RequestSpec]:
        """Requests to issue for ``address``, in execution order."""
        ...

    @abstractmethod
    def transform_response(self, chain: ChainId, payload: Any) -> list[Balance]:
        """Map a parsed JSON response to balances."""
        ...

    async def collect(self, spec: RequestSpec, send: SendRequest) -> list[Balance]:
        """Execute ``spec`` through ``send`` and return its balances.

        Override when a logical request needs more than one HTTP call.
        """
        payload = await send(spec)
        return self.transform_response(spec.chain, payload)
