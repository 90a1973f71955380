"""
Error kinds raised by the wallet engine.

Normalization, identification and address errors are always raised to the
immediate caller. Only the settlement orchestrator retries, and only for the
stale-coin codes of SettlementErrorCode.
"""

from __future__ import annotations

from enum import Enum


class WalletError(Exception):
    """Base class for all wallet engine errors."""

    pass


# Coin format errors


class CoinFormatError(WalletError, ValueError):
    """A coin record could not be turned into a usable canonical coin."""

    pass


class MissingField(CoinFormatError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing required coin field: {field}")


class InvalidFieldFormat(CoinFormatError):
    def __init__(self, field: str, length: int, expected: int = 64):
        self.field = field
        self.length = length
        self.expected = expected
        super().__init__(
            f"Invalid {field}: expected {expected} hex characters, got {length}"
        )


class InvalidAmount(CoinFormatError):
    def __init__(self, amount: object, reason: str = "must be a non-negative 64-bit integer"):
        self.amount = amount
        super().__init__(f"Invalid amount {amount!r}: {reason}")


class CoinIdBatchError(CoinFormatError):
    """Raised by batch coin id computation on the first failing coin."""

    def __init__(self, parent: str, index: int, cause: Exception):
        self.parent = parent
        self.index = index
        self.cause = cause
        super().__init__(
            f"Failed to calculate coin ID for coin #{index} with parent {parent}: {cause}"
        )


class InvalidTarget(WalletError, ValueError):
    def __init__(self, target: object):
        self.target = target
        super().__init__(f"Target amount must be a positive integer, got {target!r}")


# Address codec errors


class AddressError(WalletError, ValueError):
    """Base class for bech32/bech32m decoding and encoding failures."""

    pass


class MixedCase(AddressError):
    def __init__(self) -> None:
        super().__init__("Address mixes upper and lower case characters")


class MissingSeparator(AddressError):
    def __init__(self) -> None:
        super().__init__("Address has no separator character '1'")


class MissingPrefix(AddressError):
    def __init__(self) -> None:
        super().__init__("Address has an empty human-readable prefix")


class DataTooShort(AddressError):
    def __init__(self, length: int):
        self.length = length
        super().__init__(f"Address data part too short: {length} characters, need at least 6")


class UnknownCharacter(AddressError):
    def __init__(self, char: str, position: int):
        self.char = char
        self.position = position
        super().__init__(f"Unknown character {char!r} at position {position}")


class InvalidChecksum(AddressError):
    def __init__(self) -> None:
        super().__init__("Invalid address checksum")


class InvalidPrefix(AddressError):
    def __init__(self, prefix: str, expected: str):
        self.prefix = prefix
        self.expected = expected
        super().__init__(f'Invalid address prefix: must be "{expected}", got "{prefix}"')


class InvalidDataLength(AddressError):
    def __init__(self, length: int, expected: int):
        self.length = length
        self.expected = expected
        super().__init__(f"Invalid address data length: expected {expected} words, got {length}")


class NonZeroPadding(AddressError):
    def __init__(self) -> None:
        super().__init__("Invalid padding bits in address data")


class ExceedsLengthLimit(AddressError):
    pass


# Settlement errors


class SettlementErrorCode(str, Enum):
    """Structured failure codes returned by the settlement service."""

    ALREADY_SPENT = "already_spent"
    RECORD_NOT_FOUND = "record_not_found"
    INSUFFICIENT_FEE = "insufficient_fee"
    MALFORMED_REQUEST = "malformed_request"
    AUTH_FAILED = "auth_failed"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> SettlementErrorCode:
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value.lower())
        except ValueError:
            return cls.UNKNOWN


# Codes meaning the coin snapshot used for selection no longer matches the ledger
STALE_COIN_CODES = frozenset(
    {SettlementErrorCode.ALREADY_SPENT, SettlementErrorCode.RECORD_NOT_FOUND}
)


class SettlementError(WalletError):
    """A settlement submission failed with a classified error code."""

    def __init__(
        self,
        message: str,
        code: SettlementErrorCode = SettlementErrorCode.UNKNOWN,
        status_code: int | None = None,
    ):
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_stale(self) -> bool:
        return self.code in STALE_COIN_CODES


class CoinAlreadySpent(SettlementError):
    def __init__(
        self, message: str = "Coin has already been spent", status_code: int | None = None
    ):
        super().__init__(message, SettlementErrorCode.ALREADY_SPENT, status_code)


class CoinRecordNotFound(SettlementError):
    def __init__(self, message: str = "Coin record not found", status_code: int | None = None):
        super().__init__(message, SettlementErrorCode.RECORD_NOT_FOUND, status_code)


class SettlementFailed(SettlementError):
    """Any non-retryable settlement failure."""

    pass


def settlement_error_for(
    code: SettlementErrorCode, message: str, status_code: int | None = None
) -> SettlementError:
    """Build the most specific SettlementError subclass for a code."""
    if code == SettlementErrorCode.ALREADY_SPENT:
        return CoinAlreadySpent(message, status_code)
    if code == SettlementErrorCode.RECORD_NOT_FOUND:
        return CoinRecordNotFound(message, status_code)
    return SettlementFailed(message, code, status_code)
