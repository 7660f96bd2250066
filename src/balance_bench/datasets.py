"""Public keys to benchmark: built-in test addresses plus query-result exports."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .chains import ChainId
from .logger import get_logger

logger = get_logger(__name__)

TEST_ADDRESSES = [
    "0x1d17371f4502357942b199cb0de90c6821f01fa5",  # ethereum
    "0x9adb88d3c48b8a0bcbe88b9d2b351a1fc768edc1",  # bsc
    "0x38a7e25a4b7ce22f3e51b62672fc7bd9d82dc6dc",  # avalanche
    "0x0ac5018cd80820184fcf2828cc8f973b71c1dc0a",  # bsc
    "0xa20863ebd65d24dd3d96083533c8502f150644af",  # polygon
    "0x8d62c6f79e8a526fb575dd2fe3aaf2f841c42635",  # polygon
    "ronin:3b43a8be1b7c173575ca4dc7b223a1ac7baaaf80",  # ronin
    "ronin:41ea8053d7a3cfe6e755c658d8b8a04478eeb26b",  # ronin
    "0x9696ece5ce9e73624351754b0e6dc93518c0ab76",  # klaytn
    "AT3MJdtURZvWisMciEUW1Ngt6EqAxF2CbUo94PszW7Ko",  # solana
    "341XXhcZ9QfWEnVdtt5RCD5BUgfjLKnKwr",  # bitcoin
    "0x1111111254fb6c44bAC0beD2854e76F90643097d",  # polygon
]


@dataclass(frozen=True)
class DatasetSource:
    """Which rows of a query-result export hold keys for a chain."""

    chain: ChainId
    filename: str
    row_filter: Callable[[dict[str, Any]], bool]


def _always(_row: dict[str, Any]) -> bool:
    return True


def _blockchain_id(value: str) -> Callable[[dict[str, Any]], bool]:
    return lambda row: str(row.get("blockchainId")) == value


DATASET_SOURCES = [
    DatasetSource(
        ChainId.ETHEREUM, "1.json", lambda row: "ETH" in str(row.get("f0_", ""))
    ),
    DatasetSource(ChainId.BSC, "2.json", _always),
    DatasetSource(ChainId.POLYGON, "3.json", _always),
    DatasetSource(ChainId.RONIN, "4.json", _always),
    DatasetSource(ChainId.AVALANCHE, "5.json", _blockchain_id("43114")),
    DatasetSource(ChainId.KLAYTN, "5.json", _blockchain_id("8217")),
    DatasetSource(ChainId.SOLANA, "6.json", _blockchain_id("SOLANA")),
]


def _load_rows(path: Path) -> list[dict[str, Any]]:
    if not path.exists():
        logger.warning("Dataset file %s not found, skipping", path)
        return []
    with path.open("r", encoding="utf-8") as f:
        rows = json.load(f)
    if not isinstance(rows, list):
        raise ValueError(f"Dataset file {path} must contain a JSON array")
    return rows


def load_dataset_keys(chains: list[ChainId], dataset_dir: Path) -> list[str]:
    """Read public keys for ``chains`` from the exports in ``dataset_dir``."""
    cache: dict[str, list[dict[str, Any]]] = {}
    keys: list[str] = []
    for source in DATASET_SOURCES:
        if source.chain not in chains:
            continue
        if source.filename not in cache:
            cache[source.filename] = _load_rows(dataset_dir / source.filename)
        chain_keys = [
            row["userPublicKey"]
            for row in cache[source.filename]
            if row.get("userPublicKey") and source.row_filter(row)
        ]
        logger.debug(
            "Loaded %d %s keys from %s",
            len(chain_keys),
            source.chain.value,
            source.filename,
        )
        keys.extend(chain_keys)
    return keys


def get_public_keys(
    chains: list[ChainId],
    dataset_dir: Path | None = None,
    skip_test_addresses: bool = False,
    limit: int | None = None,
) -> list[str]:
    """Build the ordered, de-duplicated list of public keys to benchmark.

    Args:
        chains: Chains requested for the run
        dataset_dir: Directory holding the query-result exports, if any
        skip_test_addresses: Drop the built-in test addresses
        limit: Maximum number of keys returned (after skipping)

    Returns:
        Public keys, first occurrence order preserved
    """
    keys = list(TEST_ADDRESSES)
    if dataset_dir is not None:
        keys.extend(load_dataset_keys(chains, dataset_dir))

    unique = list(dict.fromkeys(keys))

    start = len(TEST_ADDRESSES) if skip_test_addresses else 0
    end = start + limit if limit else None
    return unique[start:end]
