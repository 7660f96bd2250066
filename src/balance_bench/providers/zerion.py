from __future__ import annotations

import base64
from typing import Any

from ..chains import ChainId
from ..models import Balance, RequestSpec
from .base import BaseProviderAdapter, ProviderConfig, optional_str, to_int, to_str


class ZerionAdapter(BaseProviderAdapter):
    """Zerion wallet positions.

    One call returns positions on every chain, so a single request is issued
    per address and each balance carries the chain it was found on.
    """

    config = ProviderConfig(
        name="zerion",
        base_url=(
            "https://api.zerion.io/v1/wallets/{address}/positions/"
            "?currency=usd&filter[position_types]=wallet"
        ),
        method="GET",
        min_interval_seconds=60 / 120,
        chain_codes={
            "arbitrum": ChainId.ARBITRUM,
            "avalanche": ChainId.AVALANCHE,
            "binance-smart-chain": ChainId.BSC,
            "ethereum": ChainId.ETHEREUM,
            "fantom": ChainId.FANTOM,
            "optimism": ChainId.OPTIMISM,
            "polygon": ChainId.POLYGON,
            "solana": ChainId.SOLANA,
        },
    )

    def headers(self) -> dict[str, str]:
        credentials = "{}:{}".format(
            self.settings.secret("zerion_user_key"),
            self.settings.secret("zerion_user_pass"),
        )
        token = base64.b64encode(credentials.encode()).decode()
        return {**super().headers(), "Authorization": f"Basic {token}"}

    def request_specs(self, address: str) -> list[RequestSpec]:
        if not self.querying_chain_codes:
            return []
        return [
            RequestSpec(
                url=self.config.base_url.format(address=address),
                chain=ChainId.ETHEREUM,
                address=address,
            )
        ]

    def transform_response(self, chain: ChainId, payload: Any) -> list[Balance]:
        balances = []
        for position in (payload or {}).get("data") or []:
            chain_code = (
                ((position.get("relationships") or {}).get("chain") or {}).get("data")
                or {}
            ).get("id", "ethereum")
            # positions on chains outside the benchmark are ignored
            if chain_code not in self.querying_chain_codes:
                continue
            attributes = position.get("attributes") or {}
            quantity = attributes.get("quantity") or {}
            balances.append(
                Balance(
                    chain=self.chain_for_code(chain_code),
                    token=(attributes.get("fungible_info") or {}).get("symbol"),
                    decimals=to_int(quantity.get("decimals")),
                    amount=to_str(quantity.get("int")),
                    amount_usd=optional_str(attributes.get("value")),
                )
            )
        return balances
