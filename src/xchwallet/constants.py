"""
Chia wallet constants.

Address format follows BIP-0350 (bech32m) with Chia's human-readable prefixes:
- xch: mainnet puzzle hashes
- txch: testnet puzzle hashes
"""

from __future__ import annotations

# Base unit of the native asset
MOJO_PER_XCH = 10**12

# Largest amount a coin can carry (unsigned 64-bit)
MAX_COIN_AMOUNT = 2**64 - 1

# Hex length of a 32-byte identifier (parent coin info, puzzle hash, coin id)
BYTES32_HEX_LENGTH = 64

# Address format
ADDRESS_PREFIX_MAINNET = "xch"
ADDRESS_SEPARATOR = "1"
ADDRESS_MAX_LENGTH = 90
CHECKSUM_LENGTH = 6
BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"

# Number of 5-bit words that carry exactly 32 bytes (256 bits, 4 padding bits)
PUZZLE_HASH_WORDS = 52

# Final polymod value for each checksum variant
BECH32_CONST = 1
BECH32M_CONST = 0x2BC830A3
