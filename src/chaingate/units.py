"""
Unit conversion between decimal strings and integer base units.

All conversions go through ``decimal.Decimal`` so that ``"1.5"`` ether is
exactly ``1500000000000000000`` wei.
"""

from __future__ import annotations

from decimal import Decimal, Inexact, InvalidOperation, localcontext
from typing import Union

UNITS = {
    "wei": 0,
    "kwei": 3,
    "mwei": 6,
    "gwei": 9,
    "szabo": 12,
    "finney": 15,
    "ether": 18,
}

Amount = Union[str, int, Decimal]


def _decimals(unit: Union[str, int]) -> int:
    if isinstance(unit, int):
        return unit
    try:
        return UNITS[unit.lower()]
    except KeyError:
        raise ValueError(f"Unknown unit: {unit}") from None


def parse_units(value: Amount, unit: Union[str, int] = "ether") -> int:
    """
    Convert a decimal amount into integer base units.

    Args:
        value: Decimal string (e.g. "1.5"), int or Decimal. Floats are refused.
        unit: Unit name ("ether", "gwei", ...) or number of decimals

    Returns:
        Amount in base units

    Raises:
        ValueError: If the value is not a decimal number or carries more
                    fractional digits than the unit allows
        TypeError: If a float is passed
    """
    if isinstance(value, float):
        raise TypeError("Floats are not accepted; pass a decimal string")

    decimals = _decimals(unit)
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid decimal amount: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Invalid decimal amount: {value!r}")

    with localcontext() as ctx:
        ctx.prec = 100
        ctx.traps[Inexact] = True
        try:
            scaled = amount.scaleb(decimals)
        except Inexact:
            raise ValueError(f"Too many significant digits: {value!r}") from None
        if scaled != scaled.to_integral_value():
            raise ValueError(f"Too many decimal places for {unit}: {value!r}")
    return int(scaled)


def parse_ether(value: Amount) -> int:
    return parse_units(value, "ether")


def format_units(value: int, unit: Union[str, int] = "ether") -> str:
    """Render base units as a decimal string, always with a fractional part."""
    decimals = _decimals(unit)
    sign = "-" if value < 0 else ""
    whole, frac = divmod(abs(int(value)), 10 ** decimals)
    if decimals == 0:
        return f"{sign}{whole}.0"
    frac_str = str(frac).rjust(decimals, "0").rstrip("0") or "0"
    return f"{sign}{whole}.{frac_str}"


def format_ether(value: int) -> str:
    return format_units(value, "ether")
