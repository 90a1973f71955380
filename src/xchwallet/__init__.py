"""
xchwallet - UTXO wallet engine for Chia

Coin normalization and ids, categorization, coin selection, bech32m addresses
and settlement against a remote signing wallet service.
"""

__version__ = "0.1.0"

from xchwallet.errors import (
    AddressError,
    CoinFormatError,
    InvalidTarget,
    SettlementError,
    SettlementErrorCode,
    WalletError,
)
from xchwallet.settlement import (
    AssetTarget,
    SettlementOrchestrator,
    SettlementOutcome,
    SettlementReceipt,
    SettlementRequest,
    SettlementState,
)
from xchwallet.wallet import (
    AssetKind,
    Coin,
    CoinSelector,
    HydratedCoin,
    InsufficientFunds,
    SelectionResult,
    address_to_puzzle_hash,
    categorize_coins,
    compute_coin_id,
    normalize_coin,
    puzzle_hash_to_address,
)

__all__ = [
    "AddressError",
    "AssetKind",
    "AssetTarget",
    "Coin",
    "CoinFormatError",
    "CoinSelector",
    "HydratedCoin",
    "InsufficientFunds",
    "InvalidTarget",
    "SelectionResult",
    "SettlementError",
    "SettlementErrorCode",
    "SettlementOrchestrator",
    "SettlementOutcome",
    "SettlementReceipt",
    "SettlementRequest",
    "SettlementState",
    "WalletError",
    "address_to_puzzle_hash",
    "categorize_coins",
    "compute_coin_id",
    "normalize_coin",
    "puzzle_hash_to_address",
]
