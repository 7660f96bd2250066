from __future__ import annotations

from typing import Any

from ..chains import ChainId
from ..models import Balance, RequestSpec
from .base import BaseProviderAdapter, ProviderConfig, to_str

SOLANA_QUERY = """{
  solana(network: %(network)s) {
    address(address: {is: "%(address)s"}) {
      balance
    }
  }
}
"""

BITCOIN_QUERY = """{
  bitcoin(network: %(network)s) {
    inputs(inputAddress: {is: "%(address)s"}) {
      value
    }
    outputs(outputAddress: {is: "%(address)s"}) {
      value
    }
  }
}
"""

EVM_QUERY = """{
  ethereum(network: %(network)s) {
    address(address: {is: "%(address)s"}) {
      balances {
        currency {
          symbol
        }
        value
      }
    }
  }
}
"""


class BitQueryAdapter(BaseProviderAdapter):
    """BitQuery GraphQL API."""

    config = ProviderConfig(
        name="bitquery",
        base_url="https://graphql.bitquery.io",
        method="POST",
        min_interval_seconds=60 / 10,
        chain_codes={
            "ethereum": ChainId.ETHEREUM,
            "matic": ChainId.POLYGON,
            "bsc": ChainId.BSC,
            "avalanche": ChainId.AVALANCHE,
            "fantom": ChainId.FANTOM,
            "klaytn": ChainId.KLAYTN,
            "solana": ChainId.SOLANA,
            "bitcoin": ChainId.BITCOIN,
        },
    )

    def headers(self) -> dict[str, str]:
        return {
            **super().headers(),
            "X-API-KEY": self.settings.secret("bitquery_api_key"),
        }

    def build_query(self, code: str, address: str) -> str:
        match self.chain_for_code(code):
            case ChainId.SOLANA:
                template = SOLANA_QUERY
            case ChainId.BITCOIN:
                template = BITCOIN_QUERY
            case _:
                template = EVM_QUERY
        return template % {"network": code, "address": address}

    def request_specs(self, address: str) -> list[RequestSpec]:
        specs = []
        for code in self.querying_chain_codes:
            chain = self.chain_for_code(code)
            specs.append(
                RequestSpec(
                    url=self.config.base_url,
                    chain=chain,
                    body={
                        "variables": {},
                        "query": self.build_query(code, address),
                    },
                )
            )
        return specs

    def transform_response(self, chain: ChainId, payload: Any) -> list[Balance]:
        data = (payload or {}).get("data") or {}
        match chain:
            case ChainId.SOLANA:
                addresses = (data.get("solana") or {}).get("address") or [{}]
                return [
                    Balance(
                        chain=chain,
                        token="SOL",
                        amount=to_str(addresses[0].get("balance")),
                    )
                ]
            case ChainId.BITCOIN:
                outputs = (data.get("bitcoin") or {}).get("outputs") or [{}]
                return [
                    Balance(
                        chain=chain,
                        token="BTC",
                        amount=to_str(outputs[0].get("value")),
                    )
                ]
            case _:
                addresses = (data.get("ethereum") or {}).get("address") or [{}]
                balances = addresses[0].get("balances") or []
                return [
                    Balance(
                        chain=chain,
                        token=(asset.get("currency") or {}).get("symbol"),
                        amount=to_str(asset.get("value")),
                    )
                    for asset in balances
                ]
