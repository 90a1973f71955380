"""
Split hydrated coins by asset kind.
"""

from __future__ import annotations

from collections.abc import Iterable

from xchwallet.wallet.models import AssetKind, CoinBuckets, HydratedCoin
from xchwallet.wallet.normalize import strip_hex_prefix


def categorize_coins(coins: Iterable[HydratedCoin]) -> CoinBuckets:
    """
    Partition coins into native, CAT and NFT buckets.

    DID coins are kept apart in `did` and never land in the three spendable
    buckets. total_amount adds every input coin's amount whatever its kind, so
    NFT placeholder amounts and CAT units are mixed in; treat it as a display
    figure rather than a balance.
    """
    buckets = CoinBuckets()
    for coin in coins:
        buckets.total_amount += coin.amount
        buckets.coin_count += 1

        kind = coin.asset_kind
        if kind == AssetKind.CAT:
            buckets.cat.append(coin)
        elif kind == AssetKind.NFT:
            buckets.nft.append(coin)
        elif kind == AssetKind.DID:
            buckets.did.append(coin)
        else:
            buckets.native.append(coin)
    return buckets


def _same_id(a: str | None, b: str) -> bool:
    if a is None:
        return False
    return strip_hex_prefix(a).lower() == strip_hex_prefix(b).lower()


def coins_of_kind(
    coins: Iterable[HydratedCoin], kind: AssetKind, asset_id: str | None = None
) -> list[HydratedCoin]:
    """
    Coins of one asset kind, in input order.

    For CATs, asset_id narrows the result to a single token.
    """
    buckets = categorize_coins(coins)
    if kind == AssetKind.NATIVE:
        return buckets.native
    if kind == AssetKind.NFT:
        return buckets.nft
    if kind == AssetKind.DID:
        return buckets.did
    if asset_id is None:
        return buckets.cat
    return [coin for coin in buckets.cat if _same_id(coin.asset_id, asset_id)]
