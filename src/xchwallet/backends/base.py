"""
Base wallet service backend interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from xchwallet.settlement import RefreshFn, SettlementReceipt, SettlementRequest, SubmitFn
from xchwallet.wallet.models import HydratedCoin


class WalletBackend(ABC):
    """
    Abstract remote wallet service.

    The service owns the ledger view and the keys; this side only reads coin
    snapshots and asks it to settle.
    """

    @abstractmethod
    async def get_hydrated_coins(self, address: str) -> list[HydratedCoin]:
        """Get the unspent hydrated coins of an address"""

    @abstractmethod
    async def take_offer(self, offer: str, request: SettlementRequest) -> SettlementReceipt:
        """
        Take an offer paying with the coins in request.coin_ids.

        Raises:
            SettlementError: With a structured code on any service-side failure
        """

    @abstractmethod
    async def send_xch(self, request: SettlementRequest) -> SettlementReceipt:
        """
        Send request.amount of XCH to request.destination_puzzle_hash, spending
        the coin records in request.coins.

        Raises:
            SettlementError: With a structured code on any service-side failure
        """

    def refresh_for(self, address: str) -> RefreshFn:
        """Coin refresh callable for SettlementOrchestrator.settle()."""

        async def refresh() -> Sequence[HydratedCoin]:
            return await self.get_hydrated_coins(address)

        return refresh

    def submit_for_offer(self, offer: str) -> SubmitFn:
        """Submit callable for SettlementOrchestrator.settle()."""

        async def submit(request: SettlementRequest) -> SettlementReceipt:
            return await self.take_offer(offer, request)

        return submit

    def submit_for_send(self) -> SubmitFn:
        """Submit callable sending XCH, for SettlementOrchestrator.settle()."""

        async def submit(request: SettlementRequest) -> SettlementReceipt:
            return await self.send_xch(request)

        return submit

    async def close(self) -> None:
        """Close backend connection"""
        pass
