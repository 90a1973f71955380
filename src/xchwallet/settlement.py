"""
Settlement orchestration.

Drives a single settlement (e.g. taking an offer) against the remote wallet
service:
1. Select coins of the required asset kind from the current snapshot
2. Submit the selected coin ids
3. If the service reports the coins as already spent or unknown, refresh the
   snapshot and resubmit once with every coin of that kind

Coins can be consumed by another session holding the same keys between
selection and submission; the single refresh-and-retry covers that race.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from loguru import logger
from pydantic import BaseModel, Field

from xchwallet.constants import ADDRESS_PREFIX_MAINNET
from xchwallet.errors import SettlementError
from xchwallet.wallet.address import resolve_puzzle_hash
from xchwallet.wallet.categorize import coins_of_kind
from xchwallet.wallet.models import AssetKind, Coin, HydratedCoin, InsufficientFunds
from xchwallet.wallet.selection import CoinSelector


class SettlementState(str, Enum):
    """Settlement states."""

    IDLE = "idle"
    SELECTING_COINS = "selecting_coins"
    SUBMITTING = "submitting"
    REFRESHING = "refreshing"
    RETRYING = "retrying"
    DONE = "done"
    FAILED = "failed"


class AssetTarget(BaseModel):
    """Which coins pay for the settlement."""

    kind: AssetKind = AssetKind.NATIVE
    asset_id: str | None = None


class SettlementRequest(BaseModel):
    """What the submit collaborator receives."""

    coin_ids: list[str]
    coins: list[Coin] = Field(default_factory=list)
    target: AssetTarget
    amount: int = Field(..., gt=0)
    fee: int = Field(default=0, ge=0)
    destination_puzzle_hash: str | None = None


class SettlementReceipt(BaseModel):
    transaction_id: str
    status: str = "SUCCESS"


SubmitFn = Callable[[SettlementRequest], Awaitable[SettlementReceipt]]
RefreshFn = Callable[[], Awaitable[Sequence[HydratedCoin]]]


class OutcomeStatus(str, Enum):
    DONE = "done"
    INSUFFICIENT_FUNDS = "insufficient_funds"


@dataclass
class SettlementOutcome:
    """Terminal result of a settle() call that did not raise."""

    status: OutcomeStatus
    attempts: int = 0
    receipt: SettlementReceipt | None = None
    coin_ids: list[str] | None = None
    insufficient: InsufficientFunds | None = None

    @property
    def success(self) -> bool:
        return self.status == OutcomeStatus.DONE

    @property
    def transaction_id(self) -> str | None:
        return self.receipt.transaction_id if self.receipt else None


class SettlementOrchestrator:
    """
    Runs settlements against a coin snapshot owned by the ledger service.

    The snapshot is replaced wholesale on refresh, never edited in place.
    """

    MAX_ATTEMPTS = 2

    def __init__(
        self,
        coins: Sequence[HydratedCoin],
        selector: CoinSelector | None = None,
        address_prefix: str = ADDRESS_PREFIX_MAINNET,
    ):
        self.coins: list[HydratedCoin] = list(coins)
        self.address_prefix = address_prefix
        self.selector = selector or CoinSelector()
        self.state = SettlementState.IDLE
        self.attempts = 0
        self.coin_ids: list[str] = []

    @staticmethod
    def amount_needed(target: AssetTarget, amount: int, fee: int = 0) -> int:
        """The fee is paid in XCH, so native selections must cover it too."""
        return amount + fee if target.kind == AssetKind.NATIVE else amount

    def select_coins(
        self, target: AssetTarget, amount: int, fee: int = 0
    ) -> list[HydratedCoin] | InsufficientFunds:
        """Minimal selection of matching-kind coins from the current snapshot."""
        candidates = coins_of_kind(self.coins, target.kind, target.asset_id)
        result = self.selector.select(candidates, self.amount_needed(target, amount, fee))
        if isinstance(result, InsufficientFunds):
            return result
        return list(result.coins)

    def select_coin_ids(
        self, target: AssetTarget, amount: int, fee: int = 0
    ) -> list[str] | InsufficientFunds:
        result = self.select_coins(target, amount, fee)
        if isinstance(result, InsufficientFunds):
            return result
        return [coin.coin_id for coin in result]

    def all_coins(self, target: AssetTarget) -> list[HydratedCoin]:
        """Every matching-kind coin in the current snapshot."""
        return coins_of_kind(self.coins, target.kind, target.asset_id)

    def all_coin_ids(self, target: AssetTarget) -> list[str]:
        return [coin.coin_id for coin in self.all_coins(target)]

    async def _submit(self, submit: SubmitFn, request: SettlementRequest) -> SettlementReceipt:
        self.attempts += 1
        try:
            return await submit(request)
        except Exception as e:
            e.add_note(f"settlement attempt {self.attempts} of {self.MAX_ATTEMPTS}")
            raise

    async def settle(
        self,
        target: AssetTarget,
        amount: int,
        submit: SubmitFn,
        refresh_coins: RefreshFn,
        fee: int = 0,
        destination: str | None = None,
    ) -> SettlementOutcome:
        """
        Select coins and submit the settlement, retrying once on stale coins.

        Args:
            target: Asset kind (and CAT asset id) paying for the settlement
            amount: Amount needed, in base units of that asset. Native
                selections also cover the fee
            submit: Collaborator performing the submission
            refresh_coins: Collaborator returning a fresh coin snapshot
            fee: Network fee in mojos
            destination: Optional address or puzzle hash receiving the payment

        Returns:
            SettlementOutcome with status DONE or INSUFFICIENT_FUNDS

        Raises:
            SettlementError: The terminal submission failure, unchanged
            InvalidTarget: If amount is not positive
            AddressError: If destination is not a valid address
        """
        self.state = SettlementState.IDLE
        self.attempts = 0
        self.coin_ids = []

        try:
            destination_puzzle_hash = (
                resolve_puzzle_hash(destination, self.address_prefix) if destination else None
            )

            self.state = SettlementState.SELECTING_COINS
            logger.info(f"Selecting {target.kind.value} coins for {amount}...")
            selection = self.select_coins(target, amount, fee)
            if isinstance(selection, InsufficientFunds):
                logger.warning(
                    f"Insufficient funds: need {selection.target:,}, "
                    f"have {selection.available:,} (short {selection.shortfall:,})"
                )
                self.state = SettlementState.FAILED
                return SettlementOutcome(
                    status=OutcomeStatus.INSUFFICIENT_FUNDS, insufficient=selection
                )

            request = SettlementRequest(
                coin_ids=[coin.coin_id for coin in selection],
                coins=[coin.coin for coin in selection],
                target=target,
                amount=amount,
                fee=fee,
                destination_puzzle_hash=destination_puzzle_hash,
            )
            self.coin_ids = request.coin_ids

            self.state = SettlementState.SUBMITTING
            logger.info(f"Submitting settlement with {len(selection)} coin(s)...")
            try:
                receipt = await self._submit(submit, request)
            except SettlementError as e:
                if not e.is_stale:
                    raise
                logger.warning(f"Selected coins are stale ({e.code.value}): {e}")
                receipt = await self._retry_with_fresh_coins(
                    request, target, submit, refresh_coins
                )

            self.state = SettlementState.DONE
            logger.info(f"Settlement complete: {receipt.transaction_id} ({receipt.status})")
            return SettlementOutcome(
                status=OutcomeStatus.DONE,
                attempts=self.attempts,
                receipt=receipt,
                coin_ids=self.coin_ids,
            )

        except Exception as e:
            self.state = SettlementState.FAILED
            logger.error(f"Settlement failed after {self.attempts} attempt(s): {e}")
            raise

    async def _retry_with_fresh_coins(
        self,
        request: SettlementRequest,
        target: AssetTarget,
        submit: SubmitFn,
        refresh_coins: RefreshFn,
    ) -> SettlementReceipt:
        self.state = SettlementState.REFRESHING
        logger.info("Refreshing coins...")
        self.coins = list(await refresh_coins())

        fresh = self.all_coins(target)
        coin_ids = [coin.coin_id for coin in fresh]
        self.coin_ids = coin_ids
        retry_request = request.model_copy(
            update={"coin_ids": coin_ids, "coins": [coin.coin for coin in fresh]}
        )

        self.state = SettlementState.RETRYING
        logger.info(f"Retrying settlement with {len(coin_ids)} refreshed coin(s)...")
        return await self._submit(submit, retry_request)
