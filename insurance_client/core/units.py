"""
Conversion between human-entered decimal amounts and contract base units.

Both directions use integer arithmetic only, so
`from_base_units(to_base_units(s))` reproduces `s` exactly (normalized).
"""
from __future__ import annotations

import re
from typing import Final

from insurance_client.core.errors import InvalidAmount


DEFAULT_DECIMALS: Final[int] = 18

# Plain non-negative ASCII numerals only: no sign, no exponent, no separators.
_DECIMAL_NUMERAL = re.compile(r"^(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)$")


def _validate_decimals(decimals: int) -> int:
    if not isinstance(decimals, int) or isinstance(decimals, bool) or decimals < 0:
        raise ValueError("decimals must be a non-negative integer")
    return decimals


def to_base_units(amount: str, decimals: int = DEFAULT_DECIMALS, *, field: str = "amount") -> int:
    """
    Convert a decimal currency string into integer base units.

    Args:
        amount: Decimal numeral as typed by the user, e.g. "1.5".
        decimals: Number of fractional digits of the base unit (18 for wei).
        field: Field label used in the error message.

    Returns:
        The amount scaled to base units.

    Raises:
        InvalidAmount: If the input is empty, not a plain non-negative
            numeral, or carries more fractional digits than `decimals`.
    """
    decimals = _validate_decimals(decimals)
    if not isinstance(amount, str):
        raise InvalidAmount(f"{field} must be a decimal string", field=field)

    text = amount.strip()
    if not text:
        raise InvalidAmount(f"{field} cannot be empty", field=field)
    if not _DECIMAL_NUMERAL.match(text):
        raise InvalidAmount(f"{field} must be a non-negative decimal number, got {amount!r}", field=field)

    whole, _, fraction = text.partition(".")
    if len(fraction) > decimals:
        raise InvalidAmount(
            f"{field} has more than {decimals} decimal places",
            field=field,
        )

    # Integer scaling; Decimal context precision would round long numerals.
    return int(whole or "0") * 10 ** decimals + int(fraction.ljust(decimals, "0") or "0")


def from_base_units(value: int, decimals: int = DEFAULT_DECIMALS) -> str:
    """
    Render integer base units as a normalized decimal string.

    Trailing fractional zeros and a dangling decimal point are removed, so
    10**18 renders as "1" and 15 * 10**17 as "1.5".
    """
    decimals = _validate_decimals(decimals)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount("base-unit value must be an integer")
    if value < 0:
        raise InvalidAmount("base-unit value cannot be negative")

    if decimals == 0:
        return str(value)

    whole, fraction = divmod(value, 10 ** decimals)
    if fraction == 0:
        return str(whole)
    fraction_text = str(fraction).rjust(decimals, "0").rstrip("0")
    return f"{whole}.{fraction_text}"


def normalize_amount(amount: str, decimals: int = DEFAULT_DECIMALS) -> str:
    """Canonical display form of a user-entered amount."""
    return from_base_units(to_base_units(amount, decimals), decimals)


__all__ = [
    "DEFAULT_DECIMALS",
    "to_base_units",
    "from_base_units",
    "normalize_amount",
]
