"""
Coin id calculation.

Coin ID = SHA256(parent_coin_info || puzzle_hash || amount as 8-byte big-endian)
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable

from loguru import logger

from xchwallet.constants import BYTES32_HEX_LENGTH, MAX_COIN_AMOUNT
from xchwallet.errors import CoinIdBatchError, InvalidAmount, InvalidFieldFormat
from xchwallet.wallet.models import Coin
from xchwallet.wallet.normalize import CoinRecord, normalize_coin, strip_hex_prefix

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def _bytes32(value: str, field: str) -> bytes:
    clean = strip_hex_prefix(value)
    if len(clean) != BYTES32_HEX_LENGTH or not _HEX_RE.fullmatch(clean):
        raise InvalidFieldFormat(field, len(clean), BYTES32_HEX_LENGTH)
    return bytes.fromhex(clean)


def amount_to_bytes(amount: int) -> bytes:
    """Encode a coin amount as 8-byte big-endian."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(amount, "must be an integer")
    if amount < 0:
        raise InvalidAmount(amount, "must be non-negative")
    if amount > MAX_COIN_AMOUNT:
        raise InvalidAmount(amount, "exceeds 64 bits")
    return amount.to_bytes(8, "big")


def coin_id_bytes(coin: Coin) -> bytes:
    """
    Calculate the 32-byte coin id.

    Raises:
        InvalidFieldFormat: If parent_coin_info or puzzle_hash is not 64 hex chars
        InvalidAmount: If amount is negative, not an integer, or over 64 bits
    """
    parent = _bytes32(coin.parent_coin_info, "parent_coin_info")
    puzzle_hash = _bytes32(coin.puzzle_hash, "puzzle_hash")
    return hashlib.sha256(parent + puzzle_hash + amount_to_bytes(coin.amount)).digest()


def compute_coin_id(coin: Coin) -> str:
    """Calculate the coin id as lowercase hex."""
    return coin_id_bytes(coin).hex()


def compute_coin_ids(records: Iterable[CoinRecord]) -> list[tuple[Coin, str]]:
    """
    Calculate coin ids for many coins.

    Stops at the first failure instead of skipping it.

    Raises:
        CoinIdBatchError: Naming the failing coin's parent and chaining the cause
    """
    results: list[tuple[Coin, str]] = []
    for index, record in enumerate(records):
        parent = "unknown"
        try:
            coin = normalize_coin(record)
            parent = coin.parent_coin_info
            results.append((coin, compute_coin_id(coin)))
        except (ValueError, TypeError) as e:
            logger.debug(f"Coin id calculation failed for coin #{index} (parent {parent}): {e}")
            raise CoinIdBatchError(parent, index, e) from e
    return results


def is_valid_coin_id(coin_id: str) -> bool:
    """Check a coin id is 64 hex characters, 0x prefix allowed."""
    clean = strip_hex_prefix(coin_id)
    return len(clean) == BYTES32_HEX_LENGTH and bool(_HEX_RE.fullmatch(clean))
