"""
Command-line interface for the XCH wallet engine.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Annotated

import httpx
import typer
from loguru import logger

from xchwallet.config import get_settings
from xchwallet.errors import AddressError, WalletError
from xchwallet.settlement import AssetTarget, SettlementOrchestrator
from xchwallet.wallet.address import address_to_puzzle_hash, puzzle_hash_to_address
from xchwallet.wallet.categorize import categorize_coins, coins_of_kind
from xchwallet.wallet.coin_id import compute_coin_id, compute_coin_ids
from xchwallet.wallet.models import AssetKind, InsufficientFunds, parse_hydrated_coins
from xchwallet.wallet.normalize import normalize_coin
from xchwallet.wallet.selection import CoinSelector
from xchwallet.wallet.units import format_xch, xch_to_mojos

app = typer.Typer(
    name="xch-wallet",
    help="XCH wallet engine - coin ids, addresses, coin selection and settlement",
    add_completion=False,
)


def setup_logging(level: str) -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


def _parse_kind(kind: str) -> AssetKind:
    try:
        return AssetKind(kind.lower())
    except ValueError:
        logger.error(f"Invalid asset kind: {kind} (expected native, cat, nft or did)")
        raise typer.Exit(1)


@app.command()
def coin_id(
    parent: Annotated[
        str | None, typer.Option("--parent", help="Parent coin id (hex, 0x optional)")
    ] = None,
    puzzle_hash: Annotated[
        str | None, typer.Option("--puzzle-hash", help="Puzzle hash (hex, 0x optional)")
    ] = None,
    amount: Annotated[int | None, typer.Option("--amount", help="Amount in mojos")] = None,
    coins_file: Annotated[
        Path | None, typer.Option("--file", "-f", help="JSON file with a list of coin records")
    ] = None,
    log_level: Annotated[str | None, typer.Option("--log-level", "-l", help="Log level")] = None,
) -> None:
    """Compute the id of a coin, or of every coin in a JSON file."""
    setup_logging(log_level or get_settings().log_level)

    try:
        if coins_file is not None:
            records = json.loads(coins_file.read_text())
            for _coin, cid in compute_coin_ids(records):
                typer.echo(cid)
            return

        coin = normalize_coin(
            {"parentCoinInfo": parent, "puzzleHash": puzzle_hash, "amount": amount}
        )
        typer.echo(compute_coin_id(coin))
    except (OSError, json.JSONDecodeError, WalletError) as e:
        logger.error(str(e))
        raise typer.Exit(1)


@app.command()
def decode_address(
    address: Annotated[str, typer.Argument(help="Bech32m address")],
    prefix: Annotated[
        str | None, typer.Option("--prefix", help="Expected address prefix")
    ] = None,
) -> None:
    """Print the puzzle hash an address encodes."""
    settings = get_settings()
    setup_logging(settings.log_level)

    try:
        puzzle_hash = address_to_puzzle_hash(address, prefix or settings.address_prefix)
    except AddressError as e:
        logger.error(f"Invalid address: {e}")
        raise typer.Exit(1)
    typer.echo(puzzle_hash.hex())


@app.command()
def encode_address(
    puzzle_hash: Annotated[str, typer.Argument(help="32-byte puzzle hash (hex, 0x optional)")],
    prefix: Annotated[str | None, typer.Option("--prefix", help="Address prefix")] = None,
) -> None:
    """Print the address of a puzzle hash."""
    settings = get_settings()
    setup_logging(settings.log_level)

    try:
        address = puzzle_hash_to_address(puzzle_hash, prefix or settings.address_prefix)
    except ValueError as e:
        logger.error(str(e))
        raise typer.Exit(1)
    typer.echo(address)


@app.command()
def select(
    coins_file: Annotated[Path, typer.Argument(help="JSON file with hydrated coins")],
    amount: Annotated[int, typer.Option("--amount", "-a", help="Target amount in base units")],
    kind: Annotated[str, typer.Option("--kind", "-k", help="native | cat | nft | did")] = "native",
    asset_id: Annotated[
        str | None, typer.Option("--asset-id", help="CAT asset id to select from")
    ] = None,
    log_level: Annotated[str | None, typer.Option("--log-level", "-l", help="Log level")] = None,
) -> None:
    """Select coins covering an amount from a hydrated-coins JSON file."""
    setup_logging(log_level or get_settings().log_level)
    asset_kind = _parse_kind(kind)

    if not coins_file.exists():
        logger.error(f"Coins file not found: {coins_file}")
        raise typer.Exit(1)

    try:
        coins = parse_hydrated_coins(json.loads(coins_file.read_text()))
        result = CoinSelector().select(coins_of_kind(coins, asset_kind, asset_id), amount)
    except (json.JSONDecodeError, ValueError) as e:
        logger.error(f"Failed to select coins: {e}")
        raise typer.Exit(1)

    if isinstance(result, InsufficientFunds):
        logger.error(
            f"Insufficient funds: need {result.target:,}, have {result.available:,} "
            f"(short {result.shortfall:,})"
        )
        raise typer.Exit(1)

    for coin in result.coins:
        typer.echo(f"{coin.coin_id}  {coin.amount:>20,}")
    typer.echo(f"Total: {result.total_amount:,}  Change: {result.change:,}")


@app.command()
def balance(
    address: Annotated[str, typer.Argument(help="Wallet address")],
    api_url: Annotated[
        str | None, typer.Option("--api-url", envvar="XCHWALLET_API_URL", help="Wallet API URL")
    ] = None,
    jwt_token: Annotated[
        str | None, typer.Option("--jwt", envvar="XCHWALLET_JWT_TOKEN", help="Bearer token")
    ] = None,
    log_level: Annotated[str | None, typer.Option("--log-level", "-l", help="Log level")] = None,
) -> None:
    """Show the balance of an address by asset kind."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    asyncio.run(
        _show_balance(
            address,
            api_url or settings.api_url,
            jwt_token or settings.jwt_token,
            settings.request_timeout,
        )
    )


async def _show_balance(address: str, api_url: str, jwt_token: str, timeout: float) -> None:
    """Show balance implementation."""
    from xchwallet.backends.cloud_wallet import CloudWalletBackend

    backend = CloudWalletBackend(base_url=api_url, jwt_token=jwt_token, timeout=timeout)
    try:
        coins = await backend.get_hydrated_coins(address)
    except (ValueError, httpx.HTTPError) as e:
        logger.error(f"Failed to fetch coins: {e}")
        raise typer.Exit(1)
    finally:
        await backend.close()

    buckets = categorize_coins(coins)
    native_total = sum(c.amount for c in buckets.native)
    typer.echo(f"\nXCH: {format_xch(native_total)} ({len(buckets.native)} coins)")

    cat_totals: dict[str, int] = {}
    for coin in buckets.cat:
        key = coin.asset_id or "unknown"
        cat_totals[key] = cat_totals.get(key, 0) + coin.amount
    for asset, total in sorted(cat_totals.items()):
        typer.echo(f"CAT {asset}: {total:,}")

    typer.echo(f"NFTs: {len(buckets.nft)}")
    if buckets.did:
        typer.echo(f"DIDs: {len(buckets.did)}")
    typer.echo(f"Coins: {buckets.coin_count}")


@app.command()
def settle(
    address: Annotated[str, typer.Argument(help="Wallet address owning the coins")],
    offer: Annotated[str, typer.Option("--offer", help="Offer string (offer1...)")],
    amount: Annotated[int, typer.Option("--amount", "-a", help="Amount needed in base units")],
    kind: Annotated[str, typer.Option("--kind", "-k", help="native | cat")] = "native",
    asset_id: Annotated[
        str | None, typer.Option("--asset-id", help="CAT asset id paying for the offer")
    ] = None,
    fee: Annotated[int | None, typer.Option("--fee", help="Network fee in mojos")] = None,
    api_url: Annotated[
        str | None, typer.Option("--api-url", envvar="XCHWALLET_API_URL", help="Wallet API URL")
    ] = None,
    jwt_token: Annotated[
        str | None, typer.Option("--jwt", envvar="XCHWALLET_JWT_TOKEN", help="Bearer token")
    ] = None,
    log_level: Annotated[str | None, typer.Option("--log-level", "-l", help="Log level")] = None,
) -> None:
    """Take an offer, paying with coins of the given asset kind."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    target = AssetTarget(kind=_parse_kind(kind), asset_id=asset_id)
    if target.kind == AssetKind.CAT and not asset_id:
        logger.error("--asset-id is required when paying with a CAT")
        raise typer.Exit(1)

    asyncio.run(
        _settle(
            address,
            offer,
            target,
            amount,
            settings.default_fee if fee is None else fee,
            api_url or settings.api_url,
            jwt_token or settings.jwt_token,
            settings.synthetic_public_key,
            settings.address_prefix,
            settings.request_timeout,
        )
    )


@app.command()
def send(
    address: Annotated[str, typer.Argument(help="Wallet address owning the coins")],
    to: Annotated[str, typer.Option("--to", help="Recipient address or puzzle hash")],
    xch: Annotated[str, typer.Option("--xch", help="Amount to send in XCH (e.g. 0.25)")],
    fee: Annotated[int | None, typer.Option("--fee", help="Network fee in mojos")] = None,
    api_url: Annotated[
        str | None, typer.Option("--api-url", envvar="XCHWALLET_API_URL", help="Wallet API URL")
    ] = None,
    jwt_token: Annotated[
        str | None, typer.Option("--jwt", envvar="XCHWALLET_JWT_TOKEN", help="Bearer token")
    ] = None,
    log_level: Annotated[str | None, typer.Option("--log-level", "-l", help="Log level")] = None,
) -> None:
    """Send XCH to an address, paying the fee from the same coins."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    try:
        amount = xch_to_mojos(xch)
    except WalletError as e:
        logger.error(f"Invalid amount: {e}")
        raise typer.Exit(1)

    asyncio.run(
        _settle(
            address,
            None,
            AssetTarget(),
            amount,
            settings.default_fee if fee is None else fee,
            api_url or settings.api_url,
            jwt_token or settings.jwt_token,
            settings.synthetic_public_key,
            settings.address_prefix,
            settings.request_timeout,
            destination=to,
        )
    )


async def _settle(
    address: str,
    offer: str | None,
    target: AssetTarget,
    amount: int,
    fee: int,
    api_url: str,
    jwt_token: str,
    synthetic_public_key: str,
    address_prefix: str,
    timeout: float,
    destination: str | None = None,
) -> None:
    """Settle implementation; sends XCH to destination when there is no offer."""
    from xchwallet.backends.cloud_wallet import CloudWalletBackend

    backend = CloudWalletBackend(
        base_url=api_url,
        jwt_token=jwt_token,
        synthetic_public_key=synthetic_public_key,
        address_prefix=address_prefix,
        timeout=timeout,
    )
    submit = backend.submit_for_offer(offer) if offer else backend.submit_for_send()
    try:
        coins = await backend.get_hydrated_coins(address)
        orchestrator = SettlementOrchestrator(coins, address_prefix=address_prefix)
        outcome = await orchestrator.settle(
            target,
            amount,
            submit=submit,
            refresh_coins=backend.refresh_for(address),
            fee=fee,
            destination=destination,
        )
    except (WalletError, ValueError, httpx.HTTPError) as e:
        logger.error(f"Settlement failed: {e}")
        raise typer.Exit(1)
    finally:
        await backend.close()

    if not outcome.success:
        raise typer.Exit(1)
    typer.echo(f"Transaction: {outcome.transaction_id} (attempts: {outcome.attempts})")


def main() -> None:
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
