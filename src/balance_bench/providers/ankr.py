from __future__ import annotations

from typing import Any

from ..chains import ChainId
from ..models import Balance, RequestSpec
from .base import BaseProviderAdapter, ProviderConfig, optional_str, to_str


class AnkrAdapter(BaseProviderAdapter):
    """ANKR Advanced API (multichain JSON-RPC)."""

    config = ProviderConfig(
        name="ankr",
        base_url="https://rpc.ankr.com/multichain",
        method="POST",
        min_interval_seconds=60 / 30000,
        chain_codes={
            "eth": ChainId.ETHEREUM,
            "polygon": ChainId.POLYGON,
            "bsc": ChainId.BSC,
            "avalanche": ChainId.AVALANCHE,
            "fantom": ChainId.FANTOM,
            "arbitrum": ChainId.ARBITRUM,
            "optimism": ChainId.OPTIMISM,
        },
    )

    def request_specs(self, address: str) -> list[RequestSpec]:
        return [
            RequestSpec(
                url=self.config.base_url,
                chain=self.chain_for_code(code),
                body={
                    "jsonrpc": "2.0",
                    "method": "ankr_getAccountBalance",
                    "params": {"blockchain": code, "walletAddress": address},
                    "id": 1,
                },
            )
            for code in self.querying_chain_codes
        ]

    def transform_response(self, chain: ChainId, payload: Any) -> list[Balance]:
        assets = ((payload or {}).get("result") or {}).get("assets") or []
        return [
            Balance(
                chain=chain,
                token=asset.get("tokenSymbol"),
                amount=to_str(asset.get("balance")),
                amount_usd=optional_str(asset.get("balanceUsd")),
            )
            for asset in assets
        ]
