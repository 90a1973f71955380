"""
Wallet data models.

Coins and hydrated coins arrive from the remote wallet service as JSON; they are
parsed with Pydantic and kept immutable. Selection and categorization results are
plain dataclasses produced per call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class AssetKind(str, Enum):
    NATIVE = "native"
    CAT = "cat"
    NFT = "nft"
    DID = "did"


class Coin(BaseModel):
    """
    Canonical unspent coin record.

    Attribute names are snake_case; the canonical serialized names are camelCase
    (parentCoinInfo, puzzleHash, amount). Hex fields keep whatever 0x prefix they
    were given, the coin id calculation strips it.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    parent_coin_info: str
    puzzle_hash: str
    amount: int

    def to_canonical(self) -> dict[str, Any]:
        """camelCase dict, as sent to the signing endpoints."""
        return self.model_dump(by_alias=True)

    def to_wire(self) -> dict[str, Any]:
        """snake_case dict, as returned by the ledger endpoints."""
        return self.model_dump(by_alias=False)


class DriverInfo(BaseModel):
    """Asset-kind tag attached to a hydrated coin's parent spend."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel, extra="allow"
    )

    type: str | None = None
    asset_id: str | None = None
    coin: Coin | None = None
    info: dict[str, Any] | None = None
    proof: dict[str, Any] | None = None

    @property
    def kind(self) -> AssetKind:
        kind = (self.type or "").upper()
        if kind == "CAT":
            return AssetKind.CAT
        if kind == "NFT":
            return AssetKind.NFT
        if kind == "DID":
            return AssetKind.DID
        return AssetKind.NATIVE

    @property
    def launcher_id(self) -> str | None:
        if not self.info:
            return None
        return self.info.get("launcherId") or self.info.get("launcher_id")

    @property
    def metadata(self) -> Any:
        if not self.info:
            return None
        return self.info.get("metadata")


class ParentSpendInfo(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    coin: Coin | None = None
    driver_info: DriverInfo | None = None
    parent_coin_id: str | None = None
    spent_block_index: int | None = None


class HydratedCoin(BaseModel):
    """
    A coin plus ledger context: its id, creation height, optional spent height and
    the parent spend info that identifies its asset kind.

    Snapshots are never mutated; a refresh replaces the whole list.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    coin: Coin
    coin_id: str = ""
    created_height: int | None = None
    spent_height: int | None = None
    parent_spend_info: ParentSpendInfo = Field(default_factory=ParentSpendInfo)

    @field_validator("coin_id")
    @classmethod
    def clean_coin_id(cls, v: str) -> str:
        v = v.strip().lower()
        return v[2:] if v.startswith("0x") else v

    @model_validator(mode="after")
    def fill_coin_id(self) -> HydratedCoin:
        """Compute the coin id when the payload does not carry one."""
        if not self.coin_id:
            from xchwallet.wallet.coin_id import compute_coin_id

            object.__setattr__(self, "coin_id", compute_coin_id(self.coin))
        return self

    @property
    def amount(self) -> int:
        return self.coin.amount

    @property
    def driver_info(self) -> DriverInfo | None:
        return self.parent_spend_info.driver_info

    @property
    def asset_kind(self) -> AssetKind:
        driver_info = self.driver_info
        if driver_info is None:
            return AssetKind.NATIVE
        return driver_info.kind

    @property
    def asset_id(self) -> str | None:
        driver_info = self.driver_info
        return driver_info.asset_id if driver_info else None


def parse_hydrated_coins(payload: Any) -> list[HydratedCoin]:
    """
    Parse a hydrated coins response.

    Accepts a bare list, {"data": [...]} or the nested {"data": {"data": [...]}}
    shape some service environments return.
    """
    items = payload
    for _ in range(2):
        if isinstance(items, dict) and "data" in items:
            items = items["data"]
    if not isinstance(items, list):
        raise ValueError(f"Unexpected hydrated coins response structure: {type(payload).__name__}")
    return [HydratedCoin.model_validate(item) for item in items]


class NftMetadata(BaseModel):
    """On-chain NFT metadata, accepting either naming convention."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    data_hash: str | None = None
    data_uris: list[str] = Field(default_factory=list)
    metadata_hash: str | None = None
    metadata_uris: list[str] = Field(default_factory=list)
    license_hash: str | None = None
    license_uris: list[str] = Field(default_factory=list)
    edition_number: int | None = None
    edition_total: int | None = None

    @property
    def metadata_uri(self) -> str | None:
        if self.metadata_uris:
            return self.metadata_uris[0]
        if self.data_uris:
            return self.data_uris[0]
        return None


T = TypeVar("T")


@dataclass
class NormalizationResult(Generic[T]):
    """Best-effort normalization output plus what had to be dropped or coerced."""

    value: T
    warnings: list[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.warnings)


@dataclass
class SelectionResult(Generic[T]):
    """Result of coin selection"""

    coins: list[T]
    total_amount: int
    change: int
    target: int


@dataclass
class InsufficientFunds:
    """Coin selection could not cover the target. A normal outcome, not a defect."""

    target: int
    available: int

    @property
    def shortfall(self) -> int:
        return self.target - self.available


@dataclass
class CoinBuckets:
    """Hydrated coins split by asset kind"""

    native: list[HydratedCoin] = field(default_factory=list)
    cat: list[HydratedCoin] = field(default_factory=list)
    nft: list[HydratedCoin] = field(default_factory=list)
    did: list[HydratedCoin] = field(default_factory=list)
    # Sum over every input coin regardless of kind; not a spendable balance
    total_amount: int = 0
    coin_count: int = 0
