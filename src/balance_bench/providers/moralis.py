from __future__ import annotations

from typing import Any

from ..chains import ChainId
from ..models import Balance, RequestSpec
from .base import (
    BaseProviderAdapter,
    ProviderConfig,
    SendRequest,
    to_int,
    to_str,
)

NATIVE_DECIMALS = 18


class MoralisAdapter(BaseProviderAdapter):
    """Moralis Web3 Data API.

    EVM chains need two calls per address: ERC20 balances and the native
    balance. Solana uses the portfolio endpoint, which includes both.
    """

    config = ProviderConfig(
        name="moralis",
        base_url="https://deep-index.moralis.io/api/v2/{address}/erc20?chain={chain}",
        method="GET",
        min_interval_seconds=60 / 1500,
        chain_codes={
            "eth": ChainId.ETHEREUM,
            "polygon": ChainId.POLYGON,
            "bsc": ChainId.BSC,
            "avalanche": ChainId.AVALANCHE,
            "fantom": ChainId.FANTOM,
            "solana": ChainId.SOLANA,
        },
    )

    native_url = "https://deep-index.moralis.io/api/v2/{address}/balance?chain={chain}"
    solana_url = "https://solana-gateway.moralis.io/account/mainnet/{address}/portfolio"

    native_tokens: dict[ChainId, str] = {
        ChainId.ETHEREUM: "ETH",
        ChainId.POLYGON: "MATIC",
        ChainId.BSC: "BNB",
        ChainId.AVALANCHE: "AVAX",
        ChainId.FANTOM: "FTM",
        ChainId.SOLANA: "SOL",
    }

    def headers(self) -> dict[str, str]:
        return {
            **super().headers(),
            "X-API-Key": self.settings.secret("moralis_api_key"),
        }

    def request_specs(self, address: str) -> list[RequestSpec]:
        specs = []
        for code in self.querying_chain_codes:
            chain = self.chain_for_code(code)
            if chain == ChainId.SOLANA:
                url = self.solana_url.format(address=address)
            else:
                url = self.config.base_url.format(address=address, chain=code)
            specs.append(RequestSpec(url=url, chain=chain, address=address))
        return specs

    async def collect(self, spec: RequestSpec, send: SendRequest) -> list[Balance]:
        balances = await super().collect(spec, send)
        if spec.chain == ChainId.SOLANA:
            return balances

        code = self.code_for_chain(spec.chain)
        native_spec = RequestSpec(
            url=self.native_url.format(address=spec.address, chain=code),
            chain=spec.chain,
            address=spec.address,
        )
        native_payload = await send(native_spec)
        return self.transform_native(spec.chain, native_payload) + balances

    def transform_native(self, chain: ChainId, payload: Any) -> list[Balance]:
        return [
            Balance(
                chain=chain,
                token=self.native_tokens[chain],
                amount=to_str((payload or {}).get("balance")),
                decimals=NATIVE_DECIMALS,
            )
        ]

    def transform_response(self, chain: ChainId, payload: Any) -> list[Balance]:
        if chain != ChainId.SOLANA:
            return [
                Balance(
                    chain=chain,
                    token=asset.get("symbol"),
                    amount=to_str(asset.get("balance")),
                    decimals=to_int(asset.get("decimals")),
                )
                for asset in payload or []
            ]

        payload = payload or {}
        balances = [
            Balance(
                chain=chain,
                token=token.get("associatedTokenAddress"),
                amount=to_str(token.get("amount")),
                decimals=to_int(token.get("decimals")),
            )
            for token in payload.get("tokens") or []
        ]
        native = (payload.get("nativeBalance") or {}).get("solana")
        if native:
            balances.append(
                Balance(
                    chain=chain,
                    token="SOL",
                    amount=to_str(native),
                    decimals=NATIVE_DECIMALS,
                )
            )
        return balances
