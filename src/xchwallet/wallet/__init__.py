"""
Coin handling: normalization, ids, categorization, selection and addresses.
"""

from xchwallet.wallet.address import (
    DecodedAddress,
    Encoding,
    address_to_puzzle_hash,
    bech32_decode,
    bech32_encode,
    is_valid_address,
    puzzle_hash_to_address,
    resolve_puzzle_hash,
)
from xchwallet.wallet.categorize import categorize_coins, coins_of_kind
from xchwallet.wallet.coin_id import (
    coin_id_bytes,
    compute_coin_id,
    compute_coin_ids,
    is_valid_coin_id,
)
from xchwallet.wallet.models import (
    AssetKind,
    Coin,
    CoinBuckets,
    DriverInfo,
    HydratedCoin,
    InsufficientFunds,
    NftMetadata,
    NormalizationResult,
    ParentSpendInfo,
    SelectionResult,
    parse_hydrated_coins,
)
from xchwallet.wallet.normalize import (
    coin_from_bytes,
    coin_from_canonical,
    coin_from_record,
    coin_from_wire,
    ensure_hex_prefix,
    normalize_coin,
    normalize_coins,
    normalize_nft_metadata,
    strip_hex_prefix,
)
from xchwallet.wallet.selection import CoinSelector
from xchwallet.wallet.units import format_xch, mojos_to_xch, xch_to_mojos

__all__ = [
    "AssetKind",
    "Coin",
    "CoinBuckets",
    "CoinSelector",
    "DecodedAddress",
    "DriverInfo",
    "Encoding",
    "HydratedCoin",
    "InsufficientFunds",
    "NftMetadata",
    "NormalizationResult",
    "ParentSpendInfo",
    "SelectionResult",
    "address_to_puzzle_hash",
    "bech32_decode",
    "bech32_encode",
    "categorize_coins",
    "coin_from_bytes",
    "coin_from_canonical",
    "coin_from_record",
    "coin_from_wire",
    "coin_id_bytes",
    "coins_of_kind",
    "compute_coin_id",
    "compute_coin_ids",
    "ensure_hex_prefix",
    "format_xch",
    "is_valid_address",
    "is_valid_coin_id",
    "mojos_to_xch",
    "normalize_coin",
    "normalize_coins",
    "normalize_nft_metadata",
    "parse_hydrated_coins",
    "puzzle_hash_to_address",
    "resolve_puzzle_hash",
    "strip_hex_prefix",
    "xch_to_mojos",
]
