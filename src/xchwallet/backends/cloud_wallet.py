"""
Cloud wallet HTTP backend.

The cloud wallet service holds the keys and signs; this client fetches hydrated
coins and submits settlements. Failures come back with a structured
"error_code" field which is mapped onto SettlementErrorCode; the human-readable
message is passed through untouched and never parsed.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from xchwallet.backends.base import WalletBackend
from xchwallet.constants import ADDRESS_PREFIX_MAINNET
from xchwallet.errors import (
    SettlementError,
    SettlementErrorCode,
    settlement_error_for,
)
from xchwallet.settlement import SettlementReceipt, SettlementRequest
from xchwallet.wallet.address import puzzle_hash_to_address
from xchwallet.wallet.models import AssetKind, HydratedCoin, parse_hydrated_coins

DEFAULT_API_URL = "https://api.chiacloudwallet.example/v1"

# Timeout for regular API calls (seconds)
DEFAULT_REQUEST_TIMEOUT = 30.0

HYDRATED_COINS_PATH = "/wallet/hydrated-unspent-coins"
TAKE_OFFER_PATH = "/wallet/offer/take"
SEND_XCH_PATH = "/wallet/transaction/send-xch"
BROADCAST_PATH = "/wallet/transaction/broadcast"


class CloudWalletBackend(WalletBackend):
    """
    Wallet backend talking to the cloud wallet REST API with a bearer token.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        jwt_token: str | None = None,
        synthetic_public_key: str = "",
        address_prefix: str = ADDRESS_PREFIX_MAINNET,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.synthetic_public_key = synthetic_public_key
        self.address_prefix = address_prefix
        headers = {"Content-Type": "application/json"}
        if jwt_token:
            headers["Authorization"] = f"Bearer {jwt_token}"
        self.client = httpx.AsyncClient(
            base_url=self.base_url, headers=headers, timeout=timeout, transport=transport
        )

    async def get_hydrated_coins(self, address: str) -> list[HydratedCoin]:
        """
        Fetch unspent hydrated coins.

        Raises:
            ValueError: On an error response or unexpected payload
            httpx.HTTPError: On connection/timeout errors
        """
        try:
            response = await self.client.get(HYDRATED_COINS_PATH, params={"address": address})
        except httpx.HTTPError as e:
            logger.error(f"Hydrated coins request failed: {e}")
            raise

        data = self._json(response)
        if response.is_error or data.get("success") is False:
            message = data.get("error") or f"HTTP {response.status_code}"
            raise ValueError(f"Failed to get unspent hydrated coins: {message}")

        coins = parse_hydrated_coins(data)
        logger.debug(f"Fetched {len(coins)} hydrated coins")
        return coins

    async def take_offer(self, offer: str, request: SettlementRequest) -> SettlementReceipt:
        if not offer.startswith("offer1"):
            raise settlement_error_for(
                SettlementErrorCode.MALFORMED_REQUEST,
                'Invalid offer format: offer must start with "offer1"',
            )

        is_native = request.target.kind == AssetKind.NATIVE
        body = {
            "offer_string": offer,
            "synthetic_public_key": self.synthetic_public_key,
            "xch_coins": request.coin_ids if is_native else [],
            "cat_coins": [] if is_native else request.coin_ids,
            "fee": request.fee,
        }

        data = await self._post(TAKE_OFFER_PATH, body)
        return self._receipt(TAKE_OFFER_PATH, data.get("data", data))

    async def send_xch(self, request: SettlementRequest) -> SettlementReceipt:
        """
        Pay request.amount to request.destination_puzzle_hash.

        The service signs a spend of request.coins, which is then broadcast.

        Raises:
            SettlementError: With a structured code on any service-side failure
        """
        if request.target.kind != AssetKind.NATIVE:
            raise settlement_error_for(
                SettlementErrorCode.MALFORMED_REQUEST, "Only XCH can be sent with send-xch"
            )
        if not request.destination_puzzle_hash:
            raise settlement_error_for(
                SettlementErrorCode.MALFORMED_REQUEST, "A destination is required for sending XCH"
            )
        if not request.coins:
            raise settlement_error_for(
                SettlementErrorCode.MALFORMED_REQUEST, "Selected coins are required for sending XCH"
            )

        address = puzzle_hash_to_address(request.destination_puzzle_hash, self.address_prefix)
        body = {
            "payments": [{"address": address, "amount": request.amount}],
            "selected_coins": [coin.to_canonical() for coin in request.coins],
            "fee": request.fee,
        }
        data = await self._post(SEND_XCH_PATH, body)

        bundle = data.get("signed_spend_bundle")
        if bundle is None and isinstance(data.get("data"), dict):
            bundle = data["data"].get("signed_spend_bundle")
        if not isinstance(bundle, dict) or "aggregated_signature" not in bundle:
            raise settlement_error_for(
                SettlementErrorCode.UNKNOWN,
                f"Malformed send-xch response: no signed spend bundle in {data!r}",
            )
        logger.debug(f"Signed spend of {len(request.coins)} coin(s), broadcasting...")

        data = await self._post(
            BROADCAST_PATH,
            {
                "coinSpends": bundle.get("coin_spends", []),
                "signature": bundle["aggregated_signature"],
            },
        )
        return self._receipt(BROADCAST_PATH, data.get("data", data))

    async def _post(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self.client.post(path, json=body)
        except httpx.TimeoutException as e:
            logger.error(f"Request to {path} timed out: {e}")
            raise settlement_error_for(
                SettlementErrorCode.TIMEOUT, f"Request timed out for {path}"
            ) from e

        data = self._json(response)
        if response.is_error or data.get("success") is False:
            raise self._classify(response, data)
        return data

    @staticmethod
    def _receipt(path: str, payload: Any) -> SettlementReceipt:
        if not isinstance(payload, dict) or not isinstance(payload.get("transaction_id"), str):
            raise settlement_error_for(
                SettlementErrorCode.UNKNOWN,
                f"Malformed {path} response: no transaction_id in {payload!r}",
            )
        return SettlementReceipt(
            transaction_id=payload["transaction_id"],
            status=str(payload.get("status") or "SUCCESS"),
        )

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {"data": data}

    @staticmethod
    def _classify(response: httpx.Response, data: dict[str, Any]) -> SettlementError:
        message = data.get("error") or data.get("message") or f"HTTP {response.status_code}"
        code = SettlementErrorCode.parse(data.get("error_code"))
        if code == SettlementErrorCode.UNKNOWN:
            if response.status_code in (401, 403):
                code = SettlementErrorCode.AUTH_FAILED
            elif response.status_code in (400, 422):
                code = SettlementErrorCode.MALFORMED_REQUEST
        logger.debug(f"Settlement rejected ({code.value}, HTTP {response.status_code}): {message}")
        return settlement_error_for(code, message, response.status_code)

    async def close(self) -> None:
        await self.client.aclose()
