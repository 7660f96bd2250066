from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from ..chains import ChainId
from ..models import Balance, RequestSpec
from .base import BaseProviderAdapter, ProviderConfig, optional_str, to_int, to_str


class CovalentHQAdapter(BaseProviderAdapter):
    """CovalentHQ balances_v2 endpoint, chains addressed by numeric id."""

    config = ProviderConfig(
        name="covalenthq",
        base_url="https://api.covalenthq.com/v1/{chain}/address/{address}/balances_v2/",
        method="GET",
        min_interval_seconds=60 / 300,
        chain_codes={
            "1": ChainId.ETHEREUM,
            "137": ChainId.POLYGON,
            "56": ChainId.BSC,
            "43114": ChainId.AVALANCHE,
            "250": ChainId.FANTOM,
            "2020": ChainId.RONIN,
            "8217": ChainId.KLAYTN,
            "1399811149": ChainId.SOLANA,
            "42161": ChainId.ARBITRUM,
        },
    )

    def request_specs(self, address: str) -> list[RequestSpec]:
        query = urlencode({"key": self.settings.secret("covalenthq_api_key")})
        return [
            RequestSpec(
                url=self.config.base_url.format(chain=code, address=address)
                + "?"
                + query,
                chain=self.chain_for_code(code),
            )
            for code in self.querying_chain_codes
        ]

    def transform_response(self, chain: ChainId, payload: Any) -> list[Balance]:
        items = ((payload or {}).get("data") or {}).get("items") or []
        return [
            Balance(
                chain=chain,
                token=item.get("contract_ticker_symbol"),
                amount=to_str(item.get("balance")),
                amount_usd=optional_str(item.get("quote")),
                decimals=to_int(item.get("contract_decimals")),
            )
            for item in items
        ]
