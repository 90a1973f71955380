"""
Conversion between XCH and mojos.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from xchwallet.constants import MOJO_PER_XCH
from xchwallet.errors import InvalidAmount


def xch_to_mojos(xch: Decimal | int | str) -> int:
    """
    Convert an XCH amount to mojos.

    Floats are rejected; pass a string or Decimal to keep full precision.
    """
    if isinstance(xch, float):
        raise InvalidAmount(xch, "pass XCH amounts as str or Decimal, not float")
    try:
        value = Decimal(xch)
    except (InvalidOperation, TypeError) as e:
        raise InvalidAmount(xch, "not a number") from e
    if not value.is_finite() or value < 0:
        raise InvalidAmount(xch, "must be a non-negative number")

    mojos = value * MOJO_PER_XCH
    if mojos != mojos.to_integral_value():
        raise InvalidAmount(xch, "more precise than one mojo")
    return int(mojos)


def mojos_to_xch(mojos: int | str) -> Decimal:
    try:
        value = int(mojos)
    except (TypeError, ValueError) as e:
        raise InvalidAmount(mojos, "not an integer") from e
    return Decimal(value) / MOJO_PER_XCH


def format_xch(mojos: int | str, places: int = 12) -> str:
    """Render mojos as an XCH string, trailing zeros trimmed."""
    xch = mojos_to_xch(mojos).quantize(Decimal(1).scaleb(-places))
    text = f"{xch:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} XCH"
