"""Address format checks that gate every provider request."""

from __future__ import annotations

import re
from functools import lru_cache

import base58
from bip_utils import Bech32ChecksumError, SegwitBech32Decoder
from solders.pubkey import Pubkey

from .chains import ChainId
from .logger import get_logger

logger = get_logger(__name__)

RONIN_PREFIX = "ronin:"
EVM_PREFIX = "0x"

_NON_BASE58_RE = re.compile(
    r"[^123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz]"
)

# P2PKH / P2SH version bytes for mainnet and testnet.
_BTC_BASE58_VERSIONS = {0x00, 0x05, 0x6F, 0xC4}
_BTC_BECH32_HRPS = {"bc", "tb", "bcrt"}


def _is_valid_base58check_bitcoin(address: str) -> bool:
    try:
        payload = base58.b58decode_check(address)
    except ValueError:
        return False
    return len(payload) == 21 and payload[0] in _BTC_BASE58_VERSIONS


def _is_valid_segwit_bitcoin(address: str) -> bool:
    hrp, sep, _ = address.lower().rpartition("1")
    if not sep or hrp not in _BTC_BECH32_HRPS:
        return False
    try:
        SegwitBech32Decoder.Decode(hrp, address)
    except (Bech32ChecksumError, ValueError):
        return False
    return True


@lru_cache(maxsize=1024)
def is_valid_bitcoin_address(address: str) -> bool:
    """Return True for Base58Check (P2PKH/P2SH) or segwit addresses.

    Segwit covers Bech32 v0 (P2WPKH/P2WSH) and Bech32m v1+ (P2TR) programs.
    """
    if not address:
        return False
    return _is_valid_base58check_bitcoin(address) or _is_valid_segwit_bitcoin(
        address
    )


@lru_cache(maxsize=1024)
def is_valid_solana_address(address: str) -> bool:
    """Return True when the address is a Base58 Ed25519 public key on the curve.

    Strings that are also valid Bitcoin addresses are rejected, since both
    share the Base58 alphabet.
    """
    if not address or _NON_BASE58_RE.search(address):
        return False
    if is_valid_bitcoin_address(address):
        return False
    try:
        pubkey = Pubkey.from_string(address)
    except Exception as e:
        logger.debug("Invalid Solana public key %s: %s", address, e)
        return False
    return pubkey.is_on_curve()


def is_valid_address(chain: ChainId, address: str) -> bool:
    """Check that ``address`` has the format expected on ``chain``."""
    match chain:
        case ChainId.RONIN:
            return address.startswith(RONIN_PREFIX)
        case ChainId.BITCOIN:
            return is_valid_bitcoin_address(address)
        case ChainId.SOLANA:
            return is_valid_solana_address(address)
        case _:
            return address.startswith(EVM_PREFIX)


__all__ = [
    "is_valid_address",
    "is_valid_bitcoin_address",
    "is_valid_solana_address",
]
