"""
German (de-DE) number formatting.

Output matches the browser ``Intl.NumberFormat("de-DE")`` rendering that the
presentation layer has always shown, byte for byte. The gap before the unit
is a no-break space (U+00A0):

    1234.56 EUR  -> "1.234,56 €"
    3.5 percent  -> "3,50 %"
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from .currency import EUR, Currency

NBSP = "\u00a0"
THOUSANDS_SEPARATOR = "."
DECIMAL_SEPARATOR = ","


def format_number(value: float | int | Decimal, decimals: int = 0) -> str:
    """
    Format a number with German separators and a fixed precision.

    Args:
        value: Number to format
        decimals: Exact number of fraction digits to render

    Returns:
        The formatted string, e.g. ``format_number(1234567.891, 2) == "1.234.567,89"``
    """
    number = value if isinstance(value, Decimal) else Decimal(str(value))
    quantum = Decimal("1").scaleb(-decimals)
    rounded = number.quantize(quantum, rounding=ROUND_HALF_UP)

    sign = "-" if rounded < 0 else ""
    digits = f"{abs(rounded):f}"
    whole, _, fraction = digits.partition(".")

    groups = []
    while len(whole) > 3:
        groups.insert(0, whole[-3:])
        whole = whole[:-3]
    groups.insert(0, whole)
    text = THOUSANDS_SEPARATOR.join(groups)

    if decimals > 0:
        text = f"{text}{DECIMAL_SEPARATOR}{fraction}"
    return f"{sign}{text}"


def format_currency(value: float | int | Decimal, currency: Currency = EUR) -> str:
    """Format an amount in major units, e.g. ``"300.000,00 €"``."""
    return f"{format_number(value, currency.decimals)}{NBSP}{currency.symbol}"


def format_percent(value: float | int | Decimal, decimals: int = 2) -> str:
    """Format a percentage given in percent units, e.g. ``3.5 -> "3,50 %"``."""
    return f"{format_number(value, decimals)}{NBSP}%"
