"""
Test configuration for xchwallet tests.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable

import pytest

from xchwallet.wallet.models import Coin, DriverInfo, HydratedCoin, ParentSpendInfo

PUZZLE_HASH = "0x" + "cd" * 32
CAT_ASSET_ID = "a628c1c2c6fcb74d53746157e438e108eab5c0bb3e5c80ff9b1910b3e4832913"


@pytest.fixture
def parent_hex() -> str:
    return "0x" + "ab" * 32


@pytest.fixture
def puzzle_hash_hex() -> str:
    return PUZZLE_HASH


@pytest.fixture
def cat_asset_id() -> str:
    return CAT_ASSET_ID


@pytest.fixture
def make_coin() -> Callable[..., HydratedCoin]:
    """
    Factory for hydrated coins with distinct parents.

    kind is one of None (no driver info), "CAT", "NFT", "DID" or any other
    driver type string.
    """
    counter = itertools.count(1)

    def _make(
        amount: int,
        kind: str | None = None,
        asset_id: str | None = None,
    ) -> HydratedCoin:
        coin = Coin(
            parent_coin_info=f"0x{next(counter):064x}",
            puzzle_hash=PUZZLE_HASH,
            amount=amount,
        )
        driver_info = None
        if kind is not None:
            if kind.upper() == "CAT" and asset_id is None:
                asset_id = CAT_ASSET_ID
            driver_info = DriverInfo(type=kind, asset_id=asset_id)
        return HydratedCoin(
            coin=coin,
            created_height=1_000,
            parent_spend_info=ParentSpendInfo(driver_info=driver_info),
        )

    return _make


@pytest.fixture
def hydrated_payload() -> list[dict]:
    """Hydrated coins as the wallet service returns them."""
    return [
        {
            "coin": {
                "parentCoinInfo": "0x" + "01" * 32,
                "puzzleHash": PUZZLE_HASH,
                "amount": 1_000_000_000_000,
            },
            "createdHeight": "5000000",
            "parentSpendInfo": {"driverInfo": None},
        },
        {
            "coin": {
                "parentCoinInfo": "0x" + "02" * 32,
                "puzzleHash": PUZZLE_HASH,
                "amount": 5_000,
            },
            "createdHeight": "5000001",
            "parentSpendInfo": {
                "driverInfo": {"type": "CAT", "assetId": CAT_ASSET_ID},
                "parentCoinId": "0x" + "0f" * 32,
            },
        },
        {
            "coin": {
                "parentCoinInfo": "0x" + "03" * 32,
                "puzzleHash": PUZZLE_HASH,
                "amount": 1,
            },
            "createdHeight": "5000002",
            "parentSpendInfo": {
                "driverInfo": {
                    "type": "NFT",
                    "info": {"launcherId": "0x" + "0e" * 32, "metadata": {}},
                },
            },
        },
    ]
