"""
Tests for the settlement orchestrator and its single stale-coin retry.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from xchwallet.errors import (
    AddressError,
    CoinAlreadySpent,
    CoinRecordNotFound,
    InvalidTarget,
    SettlementError,
    SettlementErrorCode,
    SettlementFailed,
)
from xchwallet.settlement import (
    AssetTarget,
    OutcomeStatus,
    SettlementOrchestrator,
    SettlementReceipt,
    SettlementRequest,
    SettlementState,
)
from xchwallet.wallet.address import puzzle_hash_to_address
from xchwallet.wallet.models import AssetKind

NATIVE = AssetTarget(kind=AssetKind.NATIVE)


@pytest.fixture
def receipt() -> SettlementReceipt:
    return SettlementReceipt(transaction_id="tx-123")


class TestSelection:
    """Tests for selection against the current snapshot."""

    def test_select_coin_ids(self, make_coin):
        small = make_coin(100)
        large = make_coin(1_000)
        orchestrator = SettlementOrchestrator([small, large, make_coin(5_000, "CAT")])
        assert orchestrator.select_coin_ids(NATIVE, 500) == [large.coin_id]

    def test_select_cat(self, make_coin, cat_asset_id):
        cat = make_coin(50, "CAT")
        orchestrator = SettlementOrchestrator([make_coin(1_000), cat])
        target = AssetTarget(kind=AssetKind.CAT, asset_id=cat_asset_id)
        assert orchestrator.select_coin_ids(target, 10) == [cat.coin_id]

    def test_all_coin_ids(self, make_coin):
        coins = [make_coin(1), make_coin(2), make_coin(3, "NFT")]
        orchestrator = SettlementOrchestrator(coins)
        assert orchestrator.all_coin_ids(NATIVE) == [coins[0].coin_id, coins[1].coin_id]

    def test_native_selection_covers_fee(self, make_coin):
        coins = [make_coin(600), make_coin(500)]
        orchestrator = SettlementOrchestrator(coins)
        assert orchestrator.select_coin_ids(NATIVE, 600) == [coins[0].coin_id]
        assert orchestrator.select_coin_ids(NATIVE, 600, fee=100) == [
            coins[0].coin_id,
            coins[1].coin_id,
        ]

    def test_cat_selection_ignores_fee(self, make_coin, cat_asset_id):
        cat = make_coin(50, "CAT")
        orchestrator = SettlementOrchestrator([cat, make_coin(10, "CAT")])
        target = AssetTarget(kind=AssetKind.CAT, asset_id=cat_asset_id)
        assert orchestrator.select_coin_ids(target, 50, fee=100) == [cat.coin_id]


class TestSettle:
    """Tests for SettlementOrchestrator.settle."""

    @pytest.mark.asyncio
    async def test_first_attempt_succeeds(self, make_coin, receipt):
        coin = make_coin(1_000)
        submit = AsyncMock(return_value=receipt)
        refresh = AsyncMock()
        orchestrator = SettlementOrchestrator([coin])

        outcome = await orchestrator.settle(NATIVE, 500, submit, refresh, fee=10)

        assert outcome.success
        assert outcome.status == OutcomeStatus.DONE
        assert outcome.transaction_id == "tx-123"
        assert outcome.attempts == 1
        assert outcome.coin_ids == [coin.coin_id]
        assert orchestrator.state == SettlementState.DONE
        refresh.assert_not_awaited()

        request = submit.await_args.args[0]
        assert isinstance(request, SettlementRequest)
        assert request.coin_ids == [coin.coin_id]
        assert request.amount == 500
        assert request.fee == 10
        assert request.target == NATIVE
        assert request.coins == [coin.coin]

    @pytest.mark.asyncio
    async def test_fee_paid_from_selected_coins(self, make_coin, receipt):
        coins = [make_coin(600), make_coin(500)]
        submit = AsyncMock(return_value=receipt)
        orchestrator = SettlementOrchestrator(coins)

        await orchestrator.settle(NATIVE, 600, submit, AsyncMock(), fee=100)

        request = submit.await_args.args[0]
        assert sum(c.amount for c in request.coins) >= 600 + 100
        assert request.coin_ids == [coins[0].coin_id, coins[1].coin_id]

    @pytest.mark.asyncio
    async def test_fee_can_make_funds_insufficient(self, make_coin):
        submit = AsyncMock()
        orchestrator = SettlementOrchestrator([make_coin(1_000)])

        outcome = await orchestrator.settle(NATIVE, 1_000, submit, AsyncMock(), fee=1)

        assert outcome.status == OutcomeStatus.INSUFFICIENT_FUNDS
        assert outcome.insufficient.target == 1_001
        assert outcome.insufficient.shortfall == 1
        submit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_insufficient_funds_is_an_outcome(self, make_coin):
        submit = AsyncMock()
        refresh = AsyncMock()
        orchestrator = SettlementOrchestrator([make_coin(100)])

        outcome = await orchestrator.settle(NATIVE, 1_000, submit, refresh)

        assert not outcome.success
        assert outcome.status == OutcomeStatus.INSUFFICIENT_FUNDS
        assert outcome.insufficient.shortfall == 900
        assert outcome.attempts == 0
        assert orchestrator.state == SettlementState.FAILED
        submit.assert_not_awaited()
        refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_target(self, make_coin):
        orchestrator = SettlementOrchestrator([make_coin(100)])
        with pytest.raises(InvalidTarget):
            await orchestrator.settle(NATIVE, 0, AsyncMock(), AsyncMock())
        assert orchestrator.state == SettlementState.FAILED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("stale_error", [CoinAlreadySpent(), CoinRecordNotFound()])
    async def test_stale_coins_retry_once(self, make_coin, receipt, stale_error):
        stale = make_coin(1_000)
        fresh_a = make_coin(600)
        fresh_b = make_coin(700)
        fresh_cat = make_coin(9_000, "CAT")
        submit = AsyncMock(side_effect=[stale_error, receipt])
        refresh = AsyncMock(return_value=[fresh_a, fresh_b, fresh_cat])
        orchestrator = SettlementOrchestrator([stale])

        outcome = await orchestrator.settle(NATIVE, 500, submit, refresh)

        assert outcome.success
        assert outcome.attempts == 2
        assert submit.await_count == 2
        refresh.assert_awaited_once()

        retry_request = submit.await_args_list[1].args[0]
        # Every matching-kind coin of the fresh snapshot, not a fresh minimal selection
        assert retry_request.coin_ids == [fresh_a.coin_id, fresh_b.coin_id]
        assert retry_request.coins == [fresh_a.coin, fresh_b.coin]
        assert retry_request.amount == 500
        assert outcome.coin_ids == retry_request.coin_ids
        assert orchestrator.coins == [fresh_a, fresh_b, fresh_cat]
        assert orchestrator.state == SettlementState.DONE

    @pytest.mark.asyncio
    async def test_cat_retry_uses_matching_asset(self, make_coin, receipt, cat_asset_id):
        target = AssetTarget(kind=AssetKind.CAT, asset_id=cat_asset_id)
        fresh_cat = make_coin(50, "CAT")
        other_cat = make_coin(50, "CAT", asset_id="ee" * 32)
        submit = AsyncMock(side_effect=[CoinAlreadySpent(), receipt])
        refresh = AsyncMock(return_value=[make_coin(10**12), fresh_cat, other_cat])
        orchestrator = SettlementOrchestrator([make_coin(100, "CAT")])

        await orchestrator.settle(target, 10, submit, refresh)

        assert submit.await_args_list[1].args[0].coin_ids == [fresh_cat.coin_id]

    @pytest.mark.asyncio
    async def test_retry_submits_even_with_no_fresh_coins(self, make_coin, receipt):
        submit = AsyncMock(side_effect=[CoinAlreadySpent(), receipt])
        refresh = AsyncMock(return_value=[])
        orchestrator = SettlementOrchestrator([make_coin(1_000)])

        await orchestrator.settle(NATIVE, 500, submit, refresh)

        assert submit.await_args_list[1].args[0].coin_ids == []

    @pytest.mark.asyncio
    async def test_never_more_than_one_retry(self, make_coin):
        second = CoinRecordNotFound("still stale")
        submit = AsyncMock(side_effect=[CoinAlreadySpent(), second, AssertionError("third")])
        refresh = AsyncMock(return_value=[make_coin(1_000)])
        orchestrator = SettlementOrchestrator([make_coin(1_000)])

        with pytest.raises(CoinRecordNotFound) as exc_info:
            await orchestrator.settle(NATIVE, 500, submit, refresh)

        assert exc_info.value is second
        assert submit.await_count == 2
        refresh.assert_awaited_once()
        assert orchestrator.attempts == 2
        assert orchestrator.state == SettlementState.FAILED
        assert "settlement attempt 2 of 2" in exc_info.value.__notes__

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "code",
        [
            SettlementErrorCode.INSUFFICIENT_FEE,
            SettlementErrorCode.MALFORMED_REQUEST,
            SettlementErrorCode.AUTH_FAILED,
            SettlementErrorCode.TIMEOUT,
            SettlementErrorCode.UNKNOWN,
        ],
    )
    async def test_non_stale_error_not_retried(self, make_coin, code):
        error = SettlementFailed("rejected", code)
        submit = AsyncMock(side_effect=error)
        refresh = AsyncMock()
        orchestrator = SettlementOrchestrator([make_coin(1_000)])

        with pytest.raises(SettlementError) as exc_info:
            await orchestrator.settle(NATIVE, 500, submit, refresh)

        assert exc_info.value is error
        assert exc_info.value.code == code
        assert str(exc_info.value) == "rejected"
        assert submit.await_count == 1
        refresh.assert_not_awaited()
        assert orchestrator.state == SettlementState.FAILED
        assert "settlement attempt 1 of 2" in exc_info.value.__notes__

    @pytest.mark.asyncio
    async def test_message_text_does_not_trigger_retry(self, make_coin):
        error = SettlementFailed("coin has already been spent", SettlementErrorCode.UNKNOWN)
        submit = AsyncMock(side_effect=error)
        refresh = AsyncMock()
        orchestrator = SettlementOrchestrator([make_coin(1_000)])

        with pytest.raises(SettlementFailed):
            await orchestrator.settle(NATIVE, 500, submit, refresh)

        refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_error_propagates(self, make_coin):
        submit = AsyncMock(side_effect=RuntimeError("boom"))
        orchestrator = SettlementOrchestrator([make_coin(1_000)])

        with pytest.raises(RuntimeError, match="boom"):
            await orchestrator.settle(NATIVE, 500, submit, AsyncMock())

        assert orchestrator.state == SettlementState.FAILED

    @pytest.mark.asyncio
    async def test_refresh_failure_propagates(self, make_coin):
        submit = AsyncMock(side_effect=CoinAlreadySpent())
        refresh = AsyncMock(side_effect=ConnectionError("offline"))
        orchestrator = SettlementOrchestrator([make_coin(1_000)])

        with pytest.raises(ConnectionError):
            await orchestrator.settle(NATIVE, 500, submit, refresh)

        assert submit.await_count == 1
        assert orchestrator.state == SettlementState.FAILED

    @pytest.mark.asyncio
    async def test_destination_address_resolved(self, make_coin, receipt):
        puzzle_hash = bytes(range(32))
        submit = AsyncMock(return_value=receipt)
        orchestrator = SettlementOrchestrator([make_coin(1_000)])

        await orchestrator.settle(
            NATIVE, 500, submit, AsyncMock(), destination=puzzle_hash_to_address(puzzle_hash)
        )

        assert submit.await_args.args[0].destination_puzzle_hash == puzzle_hash.hex()

    @pytest.mark.asyncio
    async def test_destination_uses_configured_prefix(self, make_coin, receipt):
        puzzle_hash = bytes(range(32))
        submit = AsyncMock(return_value=receipt)
        orchestrator = SettlementOrchestrator([make_coin(1_000)], address_prefix="txch")

        address = puzzle_hash_to_address(puzzle_hash, "txch")
        await orchestrator.settle(NATIVE, 500, submit, AsyncMock(), destination=address)

        assert submit.await_args.args[0].destination_puzzle_hash == puzzle_hash.hex()

    @pytest.mark.asyncio
    async def test_destination_puzzle_hash_passthrough(self, make_coin, receipt):
        submit = AsyncMock(return_value=receipt)
        orchestrator = SettlementOrchestrator([make_coin(1_000)])

        await orchestrator.settle(NATIVE, 500, submit, AsyncMock(), destination="0x" + "AA" * 32)

        assert submit.await_args.args[0].destination_puzzle_hash == "aa" * 32

    @pytest.mark.asyncio
    async def test_invalid_destination_fails_before_submit(self, make_coin):
        submit = AsyncMock()
        orchestrator = SettlementOrchestrator([make_coin(1_000)])

        with pytest.raises(AddressError):
            await orchestrator.settle(NATIVE, 500, submit, AsyncMock(), destination="xch1nope")

        submit.assert_not_awaited()
        assert orchestrator.state == SettlementState.FAILED

    @pytest.mark.asyncio
    async def test_orchestrator_reusable(self, make_coin, receipt):
        submit = AsyncMock(side_effect=[CoinAlreadySpent(), receipt, receipt])
        refresh = AsyncMock(return_value=[make_coin(2_000)])
        orchestrator = SettlementOrchestrator([make_coin(1_000)])

        first = await orchestrator.settle(NATIVE, 500, submit, refresh)
        second = await orchestrator.settle(NATIVE, 500, submit, refresh)

        assert first.attempts == 2
        assert second.attempts == 1
