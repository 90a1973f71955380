"""
Chia address encoding utilities.

Addresses are bech32m (BIP-0350) strings over a 32-byte puzzle hash:
<prefix>1<data><checksum>, e.g. xch1...
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from xchwallet.constants import (
    ADDRESS_MAX_LENGTH,
    ADDRESS_PREFIX_MAINNET,
    ADDRESS_SEPARATOR,
    BECH32_CHARSET,
    BECH32_CONST,
    BECH32M_CONST,
    BYTES32_HEX_LENGTH,
    CHECKSUM_LENGTH,
    PUZZLE_HASH_WORDS,
)
from xchwallet.errors import (
    AddressError,
    DataTooShort,
    ExceedsLengthLimit,
    InvalidChecksum,
    InvalidDataLength,
    InvalidPrefix,
    MissingPrefix,
    MissingSeparator,
    MixedCase,
    NonZeroPadding,
    UnknownCharacter,
)
from xchwallet.wallet.normalize import strip_hex_prefix

_PUZZLE_HASH_RE = re.compile(r"[0-9a-fA-F]{64}")


class Encoding(Enum):
    """Checksum variant, by the constant the final polymod must equal."""

    BECH32 = BECH32_CONST
    BECH32M = BECH32M_CONST


@dataclass(frozen=True)
class DecodedAddress:
    prefix: str
    words: list[int]


def bech32_polymod(values: Sequence[int]) -> int:
    """Bech32 checksum polymod"""
    gen = [0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3]
    chk = 1
    for v in values:
        b = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ v
        for i in range(5):
            chk ^= gen[i] if ((b >> i) & 1) else 0
    return chk


def bech32_hrp_expand(hrp: str) -> list[int]:
    """Expand HRP for bech32"""
    return [ord(x) >> 5 for x in hrp] + [0] + [ord(x) & 31 for x in hrp]


def bech32_verify_checksum(hrp: str, data: Sequence[int], encoding: Encoding) -> bool:
    return bech32_polymod(bech32_hrp_expand(hrp) + list(data)) == encoding.value


def bech32_create_checksum(hrp: str, data: Sequence[int], encoding: Encoding) -> list[int]:
    """Create bech32/bech32m checksum"""
    values = bech32_hrp_expand(hrp) + list(data)
    polymod = bech32_polymod(values + [0] * CHECKSUM_LENGTH) ^ encoding.value
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(CHECKSUM_LENGTH)]


def bech32_encode(
    hrp: str,
    data: Sequence[int],
    encoding: Encoding = Encoding.BECH32M,
    max_length: int = ADDRESS_MAX_LENGTH,
) -> str:
    """
    Encode a bech32/bech32m string.

    Raises:
        ExceedsLengthLimit: If a data word is not 5-bit or the result is too long
    """
    hrp = hrp.lower()
    for word in data:
        if word < 0 or word >> 5:
            raise ExceedsLengthLimit(f"Data word {word} is not a 5-bit value")

    combined = list(data) + bech32_create_checksum(hrp, data, encoding)
    encoded = hrp + ADDRESS_SEPARATOR + "".join([BECH32_CHARSET[d] for d in combined])
    if len(encoded) > max_length:
        raise ExceedsLengthLimit(
            f"Encoded address is {len(encoded)} characters, limit is {max_length}"
        )
    return encoded


def bech32_decode(
    bech: str,
    encoding: Encoding = Encoding.BECH32M,
    max_length: int = ADDRESS_MAX_LENGTH,
) -> DecodedAddress:
    """
    Validate a bech32/bech32m string and split it into prefix and data words.

    The returned words exclude the 6 checksum words. All-uppercase input is
    accepted and comes back with a lowercase prefix, so re-encoding yields the
    lowercase form of the address.
    """
    if bech.lower() != bech and bech.upper() != bech:
        raise MixedCase()
    if len(bech) > max_length:
        raise ExceedsLengthLimit(f"Address is {len(bech)} characters, limit is {max_length}")
    for position, char in enumerate(bech):
        if ord(char) < 33 or ord(char) > 126:
            raise UnknownCharacter(char, position)

    bech = bech.lower()
    pos = bech.rfind(ADDRESS_SEPARATOR)
    if pos < 0:
        raise MissingSeparator()
    if pos == 0:
        raise MissingPrefix()

    hrp = bech[:pos]
    data_part = bech[pos + 1 :]
    if len(data_part) < CHECKSUM_LENGTH:
        raise DataTooShort(len(data_part))

    data = []
    for offset, char in enumerate(data_part):
        value = BECH32_CHARSET.find(char)
        if value < 0:
            raise UnknownCharacter(char, pos + 1 + offset)
        data.append(value)

    if not bech32_verify_checksum(hrp, data, encoding):
        raise InvalidChecksum()
    return DecodedAddress(prefix=hrp, words=data[:-CHECKSUM_LENGTH])


def convertbits(data: Sequence[int], frombits: int, tobits: int, pad: bool = True) -> list[int]:
    """Convert between bit groups"""
    acc = 0
    bits = 0
    ret = []
    maxv = (1 << tobits) - 1
    max_acc = (1 << (frombits + tobits - 1)) - 1

    for value in data:
        if value < 0 or (value >> frombits):
            raise ValueError(f"Value {value} does not fit in {frombits} bits")
        acc = ((acc << frombits) | value) & max_acc
        bits += frombits
        while bits >= tobits:
            bits -= tobits
            ret.append((acc >> bits) & maxv)

    if pad:
        if bits:
            ret.append((acc << (tobits - bits)) & maxv)
    elif bits >= frombits or ((acc << (tobits - bits)) & maxv):
        raise NonZeroPadding()

    return ret


def address_to_puzzle_hash(address: str, prefix: str = ADDRESS_PREFIX_MAINNET) -> bytes:
    """
    Decode an address into its 32-byte puzzle hash.

    Raises:
        AddressError: Any decoding failure, InvalidPrefix for a foreign prefix,
            InvalidDataLength unless the payload is exactly 52 words
    """
    decoded = bech32_decode(address.strip())
    if decoded.prefix != prefix:
        raise InvalidPrefix(decoded.prefix, prefix)
    if len(decoded.words) != PUZZLE_HASH_WORDS:
        raise InvalidDataLength(len(decoded.words), PUZZLE_HASH_WORDS)
    return bytes(convertbits(decoded.words, 5, 8, pad=False))


def puzzle_hash_to_address(puzzle_hash: bytes | str, prefix: str = ADDRESS_PREFIX_MAINNET) -> str:
    """Encode a 32-byte puzzle hash (bytes or hex, 0x allowed) as an address."""
    if isinstance(puzzle_hash, str):
        clean = strip_hex_prefix(puzzle_hash)
        if not _PUZZLE_HASH_RE.fullmatch(clean):
            raise ValueError(f"Invalid puzzle hash: expected {BYTES32_HEX_LENGTH} hex characters")
        puzzle_hash = bytes.fromhex(clean)
    if len(puzzle_hash) != 32:
        raise ValueError(f"Invalid puzzle hash length: {len(puzzle_hash)} bytes")
    return bech32_encode(prefix, convertbits(puzzle_hash, 8, 5))


def resolve_puzzle_hash(destination: str, prefix: str = ADDRESS_PREFIX_MAINNET) -> str:
    """
    Turn a payment destination into a puzzle hash hex string.

    A 64-character hex value (0x allowed) is already a puzzle hash; anything else
    is decoded as an address.
    """
    clean = strip_hex_prefix(destination.strip())
    if _PUZZLE_HASH_RE.fullmatch(clean):
        return clean.lower()
    return address_to_puzzle_hash(destination, prefix).hex()


def is_valid_address(address: str, prefix: str = ADDRESS_PREFIX_MAINNET) -> bool:
    try:
        address_to_puzzle_hash(address, prefix)
    except AddressError:
        return False
    return True
