"""Chain identifiers shared by every provider."""

from __future__ import annotations

from enum import Enum


class ChainId(str, Enum):
    ETHEREUM = "ethereum"
    BSC = "bsc"
    POLYGON = "polygon"
    RONIN = "ronin"
    AVALANCHE = "avalanche"
    KLAYTN = "klaytn"
    SOLANA = "solana"
    BITCOIN = "bitcoin"
    FANTOM = "fantom"
    ARBITRUM = "arbitrum"
    OPTIMISM = "optimism"


ALL_CHAINS: list[ChainId] = list(ChainId)
