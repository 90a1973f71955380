"""
Coin normalization.

The wallet service and its callers disagree on coin shape: camelCase or
snake_case field names, hex with or without a 0x prefix, or raw bytes. Each
accepted shape has its own adapter producing the canonical Coin.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from xchwallet.errors import InvalidAmount, MissingField
from xchwallet.wallet.models import Coin, NftMetadata, NormalizationResult

HEX_PREFIX = "0x"

# (canonical name, wire name) for each coin field
PARENT_FIELDS = ("parentCoinInfo", "parent_coin_info")
PUZZLE_HASH_FIELDS = ("puzzleHash", "puzzle_hash")
AMOUNT_FIELD = "amount"

CoinRecord = Coin | Mapping[str, Any]


def strip_hex_prefix(value: str) -> str:
    """Remove a leading 0x, if present."""
    if value[:2].lower() == HEX_PREFIX:
        return value[2:]
    return value


def ensure_hex_prefix(value: str) -> str:
    """Add a leading 0x, if missing."""
    if value[:2].lower() == HEX_PREFIX:
        return value
    return HEX_PREFIX + value


def _hex_value(value: Any, field: str) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if value is None or value == "":
        raise MissingField(field)
    if isinstance(value, str):
        return value
    raise TypeError(f"{field} must be a hex string or bytes, got {type(value).__name__}")


def _amount_value(value: Any) -> int:
    """Accept an int or a decimal integer string."""
    if isinstance(value, bool):
        raise InvalidAmount(value, "must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text[:1] in ("-", "+") else text
        if digits.isdigit():
            return int(text)
    raise InvalidAmount(value, "must be an integer or a decimal integer string")


def _build(parent: Any, puzzle_hash: Any, amount: Any) -> Coin:
    if amount is None:
        raise MissingField(AMOUNT_FIELD)
    return Coin(
        parent_coin_info=_hex_value(parent, PARENT_FIELDS[0]),
        puzzle_hash=_hex_value(puzzle_hash, PUZZLE_HASH_FIELDS[0]),
        amount=_amount_value(amount),
    )


def coin_from_canonical(record: Mapping[str, Any]) -> Coin:
    """Adapter for camelCase records ({"parentCoinInfo", "puzzleHash", "amount"})."""
    return _build(
        record.get(PARENT_FIELDS[0]),
        record.get(PUZZLE_HASH_FIELDS[0]),
        record.get(AMOUNT_FIELD),
    )


def coin_from_wire(record: Mapping[str, Any]) -> Coin:
    """Adapter for snake_case records ({"parent_coin_info", "puzzle_hash", "amount"})."""
    return _build(
        record.get(PARENT_FIELDS[1]),
        record.get(PUZZLE_HASH_FIELDS[1]),
        record.get(AMOUNT_FIELD),
    )


def coin_from_bytes(
    parent_coin_info: bytes, puzzle_hash: bytes, amount: int | str
) -> Coin:
    """Adapter for raw 32-byte buffers."""
    return _build(parent_coin_info, puzzle_hash, amount)


def _first_present(record: Mapping[str, Any], names: tuple[str, str]) -> Any:
    for name in names:
        value = record.get(name)
        if value is not None and value != "":
            return value
    return None


def coin_from_record(record: Mapping[str, Any]) -> Coin:
    """
    Adapter for records that may mix conventions field by field.

    The canonical name wins when both are present.
    """
    return _build(
        _first_present(record, PARENT_FIELDS),
        _first_present(record, PUZZLE_HASH_FIELDS),
        record.get(AMOUNT_FIELD),
    )


def normalize_coin(record: CoinRecord) -> Coin:
    """
    Return the canonical Coin for any accepted coin shape.

    Raises:
        MissingField: If an identifier field resolves under neither name
        InvalidAmount: If amount is not an integer or integer string
    """
    if isinstance(record, Coin):
        return record
    if not isinstance(record, Mapping):
        raise TypeError(f"Cannot normalize coin from {type(record).__name__}")
    return coin_from_record(record)


def normalize_coins(records: Iterable[CoinRecord]) -> list[Coin]:
    return [normalize_coin(record) for record in records]


def _as_list(value: Any, name: str, warnings: list[str]) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        kept = [item for item in value if isinstance(item, str)]
        if len(kept) != len(value):
            warnings.append(f"{name}: dropped {len(value) - len(kept)} non-string entries")
        return kept
    warnings.append(f"{name}: ignored value of type {type(value).__name__}")
    return []


def normalize_nft_metadata(raw: Any) -> NormalizationResult[NftMetadata]:
    """
    Coerce NFT metadata into NftMetadata.

    Never raises for bad input; whatever could not be used is reported in the
    result's warnings so the caller decides whether partial metadata is enough.
    """
    warnings: list[str] = []
    if raw is None:
        return NormalizationResult(NftMetadata(), ["metadata missing"])
    if not isinstance(raw, Mapping):
        return NormalizationResult(
            NftMetadata(), [f"metadata is {type(raw).__name__}, expected a mapping"]
        )

    values: dict[str, Any] = {}
    for attr, model_field in NftMetadata.model_fields.items():
        alias = model_field.alias or attr
        value = raw.get(alias, raw.get(attr))
        if value is None:
            continue
        if attr.endswith("_uris"):
            values[attr] = _as_list(value, alias, warnings)
        elif attr.startswith("edition_"):
            try:
                values[attr] = int(value)
            except (TypeError, ValueError):
                warnings.append(f"{alias}: not an integer ({value!r})")
        elif isinstance(value, str):
            values[attr] = value
        else:
            warnings.append(f"{alias}: ignored value of type {type(value).__name__}")

    try:
        metadata = NftMetadata(**values)
    except ValidationError as e:
        warnings.append(f"metadata rejected: {e.error_count()} validation errors")
        metadata = NftMetadata()
    return NormalizationResult(metadata, warnings)
