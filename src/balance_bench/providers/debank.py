from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from ..chains import ChainId
from ..models import Balance, RequestSpec
from .base import BaseProviderAdapter, ProviderConfig, optional_str, to_int, to_str


class DebankAdapter(BaseProviderAdapter):
    """DeBank Cloud OpenAPI token list."""

    config = ProviderConfig(
        name="debank",
        base_url="https://pro-openapi.debank.com/v1/user/token_list",
        method="GET",
        min_interval_seconds=60 / 6000,
        chain_codes={
            "eth": ChainId.ETHEREUM,
            "matic": ChainId.POLYGON,
            "bsc": ChainId.BSC,
            "avax": ChainId.AVALANCHE,
        },
    )

    def headers(self) -> dict[str, str]:
        return {
            **super().headers(),
            "AccessKey": self.settings.secret("debank_access_key"),
        }

    def request_specs(self, address: str) -> list[RequestSpec]:
        return [
            RequestSpec(
                url=(
                    f"{self.config.base_url}?"
                    f"{urlencode({'id': address, 'chain_id': code})}"
                ),
                chain=self.chain_for_code(code),
            )
            for code in self.querying_chain_codes
        ]

    def transform_response(self, chain: ChainId, payload: Any) -> list[Balance]:
        return [
            Balance(
                chain=chain,
                token=asset.get("symbol"),
                amount=to_str(asset.get("balance")),
                amount_usd=optional_str(asset.get("price")),
                decimals=to_int(asset.get("decimals")),
            )
            for asset in payload or []
        ]
