"""
Coin selection.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, TypeVar

from loguru import logger

from xchwallet.errors import InvalidTarget
from xchwallet.wallet.models import InsufficientFunds, SelectionResult


class HasAmount(Protocol):
    @property
    def amount(self) -> int: ...


C = TypeVar("C", bound=HasAmount)


class CoinSelector:
    """
    Greedy largest-first coin selection.

    If any single coin covers the target, the largest coin is used on its own,
    even when a smaller coin would also cover it. Otherwise coins are taken in
    descending amount order until the target is reached.
    """

    def select(
        self, coins: Iterable[C], target_amount: int
    ) -> SelectionResult[C] | InsufficientFunds:
        """
        Select coins covering target_amount.

        Returns:
            SelectionResult, or InsufficientFunds if all coins together fall short

        Raises:
            InvalidTarget: If target_amount is not a positive integer
        """
        if isinstance(target_amount, bool) or not isinstance(target_amount, int):
            raise InvalidTarget(target_amount)
        if target_amount <= 0:
            raise InvalidTarget(target_amount)

        # Stable sort: equal amounts keep their input order
        eligible = sorted(coins, key=lambda c: c.amount, reverse=True)

        for coin in eligible:
            if coin.amount >= target_amount:
                return SelectionResult(
                    coins=[coin],
                    total_amount=coin.amount,
                    change=coin.amount - target_amount,
                    target=target_amount,
                )

        selected: list[C] = []
        total = 0
        for coin in eligible:
            selected.append(coin)
            total += coin.amount
            if total >= target_amount:
                return SelectionResult(
                    coins=selected,
                    total_amount=total,
                    change=total - target_amount,
                    target=target_amount,
                )

        logger.debug(f"Insufficient funds: need {target_amount}, have {total}")
        return InsufficientFunds(target=target_amount, available=total)
