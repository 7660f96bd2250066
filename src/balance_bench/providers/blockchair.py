from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from ..chains import ChainId
from ..models import Balance, RequestSpec
from .base import BaseProviderAdapter, ProviderConfig, optional_str, to_int, to_str

BTC_DECIMALS = 8


class BlockchairAdapter(BaseProviderAdapter):
    """Blockchair address dashboards."""

    config = ProviderConfig(
        name="blockchair",
        base_url="https://api.blockchair.com/{chain}/dashboards/address/{address}",
        method="GET",
        min_interval_seconds=60 / 30,
        chain_codes={
            "ethereum": ChainId.ETHEREUM,
            "btc": ChainId.BITCOIN,
        },
    )

    def _query(self) -> str:
        params = {"erc_20": "true", "assets_in_usd": "true"}
        key = self.settings.secret("blockchair_api_key")
        if key:
            params["key"] = key
        return urlencode(params)

    def request_specs(self, address: str) -> list[RequestSpec]:
        return [
            RequestSpec(
                url=self.config.base_url.format(chain=code, address=address)
                + "?"
                + self._query(),
                chain=self.chain_for_code(code),
            )
            for code in self.querying_chain_codes
        ]

    def transform_response(self, chain: ChainId, payload: Any) -> list[Balance]:
        data = (payload or {}).get("data") or {}
        # keyed by the queried address
        dashboard = next(iter(data.values()), None) or {}

        if chain == ChainId.BITCOIN:
            address = dashboard.get("address") or {}
            return [
                Balance(
                    chain=chain,
                    token="BTC",
                    amount=to_str(address.get("balance")),
                    decimals=BTC_DECIMALS,
                )
            ]

        erc_20 = (dashboard.get("layer_2") or {}).get("erc_20") or []
        return [
            Balance(
                chain=chain,
                token=asset.get("token_symbol"),
                decimals=to_int(asset.get("token_decimals")),
                amount=to_str(asset.get("balance_approximate")),
                amount_usd=optional_str(asset.get("balance_usd")),
            )
            for asset in erc_20
        ]
