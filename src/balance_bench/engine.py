"""Drives one provider through its requests for an address."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any

import backoff
import requests

from .aggregator import Aggregator
from .chains import ChainId
from .exceptions import (
    NotOkError,
    ProviderTimeoutError,
    SkippableProviderError,
    classify_status,
)
from .logger import get_logger
from .models import Balance, RequestSpec, TimingSample
from .providers.base import BaseProviderAdapter
from .validation import is_valid_address

if TYPE_CHECKING:
    from .settings import BenchmarkSettings

logger = get_logger(__name__)


def _token_sort_key(balance: Balance) -> tuple[str, str]:
    token = balance.token or ""
    return token.casefold(), token


def normalize_balances(balances: list[Balance]) -> list[Balance]:
    """Drop balances without a token symbol and sort by symbol, ignoring case."""
    kept = [balance for balance in balances if balance.token]
    return sorted(kept, key=_token_sort_key)


def unique_tokens(balances: list[Balance]) -> list[str]:
    return list(dict.fromkeys(b.token for b in balances if b.token))


class ExecutionEngine:
    """Executes a provider adapter's requests with throttling and retries.

    Requests for an address run one after another; after each one the engine
    sleeps long enough to respect the provider's published rate limit.
    """

    def __init__(
        self,
        adapter: BaseProviderAdapter,
        aggregator: Aggregator,
        settings: BenchmarkSettings,
    ):
        self.adapter = adapter
        self.aggregator = aggregator
        self.min_sleep_ms = settings.min_sleep_ms
        self.max_attempts = settings.max_attempts
        self.request_timeout = settings.request_timeout

    @property
    def name(self) -> str:
        return self.adapter.name

    @property
    def sleep_seconds(self) -> float:
        """Pause between two requests; 0 when throttling is disabled."""
        if self.min_sleep_ms <= 0:
            return 0.0
        return (
            self.min_sleep_ms + self.adapter.config.min_interval_seconds * 1000
        ) / 1000

    async def sleep(self) -> None:
        if self.sleep_seconds > 0:
            await asyncio.sleep(self.sleep_seconds)

    async def exec(self, address: str) -> list[TimingSample]:
        """Run every request the adapter wants for ``address``.

        Requests whose target address is not valid on the request's chain are
        skipped without being timed.

        Returns:
            The timing samples recorded for this address.

        Raises:
            ProviderError: When a request fails for good.
        """
        samples: list[TimingSample] = []
        for spec in self.adapter.request_specs(address):
            target = spec.address or address
            if not is_valid_address(spec.chain, target):
                logger.debug(
                    "%s: skipping %s, not a valid %s address",
                    self.name,
                    target,
                    spec.chain.value,
                )
                continue

            started = time.perf_counter()
            balances = await self.execute_with_retry(spec)
            duration_ms = (time.perf_counter() - started) * 1000

            self.aggregator.record_timing(self.name, spec.chain, duration_ms)
            samples.append(TimingSample(spec.chain, self.name, duration_ms))
            self._save_balances(target, spec.chain, balances)

            await self.sleep()
        return samples

    async def execute_with_retry(self, spec: RequestSpec) -> list[Balance]:
        """Collect balances for ``spec``, retrying transient failures."""

        def _on_backoff(details: Any) -> None:
            logger.warning(
                "%s: %s request failed (attempt %d of %d): %r",
                self.name,
                spec.chain.value,
                details["tries"],
                self.max_attempts,
                details.get("exception"),
            )

        def _on_giveup(details: Any) -> None:
            logger.error(
                "%s: %s request failed after %d attempts: %r",
                self.name,
                spec.chain.value,
                details["tries"],
                details.get("exception"),
            )

        @backoff.on_exception(
            backoff.constant,
            SkippableProviderError,
            max_tries=self.max_attempts,
            interval=self.sleep_seconds,
            jitter=None,
            on_backoff=_on_backoff,
            on_giveup=_on_giveup,
        )
        async def _collect() -> list[Balance]:
            balances = await self.adapter.collect(spec, self.send)
            return normalize_balances(balances)

        return await _collect()

    async def send(self, spec: RequestSpec) -> Any:
        """Issue one HTTP call and return the parsed JSON body.

        Raises:
            ProviderError: Subclass matching the HTTP status or transport failure.
        """
        method = spec.method or self.adapter.config.method
        logger.debug("%s: %s %s", self.name, method, spec.url)
        try:
            response = await asyncio.to_thread(
                requests.request,
                method,
                spec.url,
                headers=self.adapter.headers(),
                json=spec.body,
                timeout=self.request_timeout,
            )
        except requests.exceptions.Timeout as e:
            raise ProviderTimeoutError(f"{self.name}: request timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise NotOkError(f"{self.name}: request failed: {e}") from e

        error_cls = classify_status(response.status_code)
        if error_cls is not None:
            logger.debug(
                "%s: HTTP %d from %s: %s",
                self.name,
                response.status_code,
                spec.url,
                response.text[:500],
            )
            raise error_cls(
                f"{self.name}: HTTP {response.status_code} for {spec.chain.value}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise NotOkError(
                f"{self.name}: invalid JSON from {spec.url}",
                status_code=response.status_code,
            ) from e

    def _save_balances(
        self, address: str, request_chain: ChainId, balances: list[Balance]
    ) -> None:
        """Record balances and tokens per chain each balance was found on."""
        by_chain: dict[ChainId, list[Balance]] = {request_chain: []}
        for balance in balances:
            by_chain.setdefault(balance.chain or request_chain, []).append(balance)

        for chain, chain_balances in by_chain.items():
            tokens = unique_tokens(chain_balances)
            self.aggregator.record_balances(
                self.name, address, chain, chain_balances, tokens
            )
            self.aggregator.record_tokens(self.name, chain, tokens)
