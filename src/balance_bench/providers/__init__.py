from __future__ import annotations

from .ankr import AnkrAdapter
from .base import BaseProviderAdapter, ProviderConfig
from .bitquery import BitQueryAdapter
from .blockchair import BlockchairAdapter
from .covalenthq import CovalentHQAdapter
from .debank import DebankAdapter
from .moralis import MoralisAdapter
from .zerion import ZerionAdapter

PROVIDER_REGISTRY: dict[str, type[BaseProviderAdapter]] = {
    adapter.config.name: adapter
    for adapter in (
        AnkrAdapter,
        BitQueryAdapter,
        BlockchairAdapter,
        CovalentHQAdapter,
        DebankAdapter,
        MoralisAdapter,
        ZerionAdapter,
    )
}


def get_provider_class(provider_name: str) -> type[BaseProviderAdapter]:
    """Get adapter class by provider name.

    Args:
        provider_name: Name of the provider (case-insensitive)

    Returns:
        Adapter class

    Raises:
        ValueError: If provider_name is not recognized
    """
    normalized = provider_name.lower()
    if normalized not in PROVIDER_REGISTRY:
        raise ValueError(
            f"Unknown provider '{provider_name}'. "
            f"Available: {', '.join(PROVIDER_REGISTRY.keys())}"
        )
    return PROVIDER_REGISTRY[normalized]


__all__ = [
    "PROVIDER_REGISTRY",
    "AnkrAdapter",
    "BaseProviderAdapter",
    "BitQueryAdapter",
    "BlockchairAdapter",
    "CovalentHQAdapter",
    "DebankAdapter",
    "MoralisAdapter",
    "ProviderConfig",
    "ZerionAdapter",
    "get_provider_class",
]
