"""
Tests for wallet models and error classification helpers.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from xchwallet.errors import (
    CoinAlreadySpent,
    CoinRecordNotFound,
    SettlementErrorCode,
    SettlementFailed,
    settlement_error_for,
)
from xchwallet.wallet.coin_id import compute_coin_id
from xchwallet.wallet.models import (
    AssetKind,
    Coin,
    DriverInfo,
    HydratedCoin,
    parse_hydrated_coins,
)


class TestHydratedCoin:
    """Tests for HydratedCoin parsing and derived properties."""

    def test_from_wire(self, hydrated_payload):
        coin = HydratedCoin.model_validate(hydrated_payload[1])
        assert coin.amount == 5_000
        assert coin.created_height == 5_000_001
        assert coin.spent_height is None
        assert coin.asset_kind == AssetKind.CAT
        assert coin.parent_spend_info.parent_coin_id == "0x" + "0f" * 32

    def test_coin_id_filled_when_missing(self, hydrated_payload):
        coin = HydratedCoin.model_validate(hydrated_payload[0])
        assert coin.coin_id == compute_coin_id(coin.coin)

    def test_coin_id_normalized(self, hydrated_payload):
        record = dict(hydrated_payload[0], coinId="0x" + "AB" * 32)
        assert HydratedCoin.model_validate(record).coin_id == "ab" * 32

    def test_native_without_driver_info(self, hydrated_payload):
        assert HydratedCoin.model_validate(hydrated_payload[0]).asset_kind == AssetKind.NATIVE

    def test_nft_driver_info(self, hydrated_payload):
        coin = HydratedCoin.model_validate(hydrated_payload[2])
        assert coin.asset_kind == AssetKind.NFT
        assert coin.driver_info.launcher_id == "0x" + "0e" * 32
        assert coin.driver_info.metadata == {}

    def test_frozen(self, hydrated_payload):
        coin = HydratedCoin.model_validate(hydrated_payload[0])
        with pytest.raises(ValidationError):
            coin.coin_id = "00" * 32

    def test_bad_coin_rejected(self):
        with pytest.raises(ValidationError):
            HydratedCoin.model_validate(
                {"coin": {"parentCoinInfo": "0x12", "puzzleHash": "cd" * 32, "amount": 1}}
            )


class TestDriverInfo:
    @pytest.mark.parametrize(
        ("type_tag", "kind"),
        [
            ("CAT", AssetKind.CAT),
            ("nft", AssetKind.NFT),
            ("Did", AssetKind.DID),
            ("OTHER", AssetKind.NATIVE),
            (None, AssetKind.NATIVE),
        ],
    )
    def test_kind(self, type_tag, kind):
        assert DriverInfo(type=type_tag).kind == kind

    def test_extra_fields_kept(self):
        info = DriverInfo.model_validate({"type": "CAT", "assetId": "aa", "lineage": {"x": 1}})
        assert info.asset_id == "aa"
        assert info.model_extra == {"lineage": {"x": 1}}


class TestParseHydratedCoins:
    def test_shapes(self, hydrated_payload):
        for payload in (
            hydrated_payload,
            {"data": hydrated_payload},
            {"data": {"data": hydrated_payload}},
        ):
            assert len(parse_hydrated_coins(payload)) == 3

    def test_rejects_other_shapes(self):
        with pytest.raises(ValueError):
            parse_hydrated_coins({"data": {"coins": []}})
        with pytest.raises(ValueError):
            parse_hydrated_coins("nope")


class TestCoinModel:
    def test_camel_and_snake_input(self):
        a = Coin.model_validate({"parentCoinInfo": "aa", "puzzleHash": "bb", "amount": 1})
        b = Coin.model_validate({"parent_coin_info": "aa", "puzzle_hash": "bb", "amount": 1})
        assert a == b

    def test_hashable(self):
        coin = Coin(parent_coin_info="aa", puzzle_hash="bb", amount=1)
        assert coin in {coin}


class TestSettlementErrors:
    def test_factory(self):
        assert isinstance(
            settlement_error_for(SettlementErrorCode.ALREADY_SPENT, "x"), CoinAlreadySpent
        )
        assert isinstance(
            settlement_error_for(SettlementErrorCode.RECORD_NOT_FOUND, "x"), CoinRecordNotFound
        )
        failed = settlement_error_for(SettlementErrorCode.TIMEOUT, "slow", 504)
        assert isinstance(failed, SettlementFailed)
        assert failed.code == SettlementErrorCode.TIMEOUT
        assert failed.status_code == 504
        assert not failed.is_stale

    @pytest.mark.parametrize(
        ("raw", "code"),
        [
            ("already_spent", SettlementErrorCode.ALREADY_SPENT),
            ("RECORD_NOT_FOUND", SettlementErrorCode.RECORD_NOT_FOUND),
            ("something_new", SettlementErrorCode.UNKNOWN),
            (None, SettlementErrorCode.UNKNOWN),
            ("", SettlementErrorCode.UNKNOWN),
        ],
    )
    def test_parse_code(self, raw, code):
        assert SettlementErrorCode.parse(raw) == code
