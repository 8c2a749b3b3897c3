"""
Currency and precision handling for MortgageLab.
"""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal
from enum import Enum


class RoundingPolicy(Enum):
    """Rounding policies for currency calculations."""

    BANKERS = ROUND_HALF_EVEN
    HALF_UP = ROUND_HALF_UP


class Currency:
    """
    Currency definition with precision and rounding rules.

    Attributes:
        code: ISO currency code (e.g., 'EUR')
        symbol: Display symbol used by the German formatters
        decimals: Number of decimal places for this currency
        rounding: Rounding policy for calculations
    """

    def __init__(
        self,
        code: str,
        symbol: str,
        decimals: int = 2,
        rounding: RoundingPolicy = RoundingPolicy.HALF_UP,
    ):
        self.code = code.upper()
        self.symbol = symbol
        self.decimals = decimals
        self.rounding = rounding

    def quantize(self, amount: Decimal) -> Decimal:
        """Quantize amount to currency precision."""
        quantum = Decimal("1").scaleb(-self.decimals)  # 0.01 for 2 dp
        return amount.quantize(quantum, rounding=self.rounding.value)

    def to_minor_units(self, amount: float | int | Decimal) -> int:
        """Convert a major-unit amount (euros) to rounded minor units (cents)."""
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        return int(self.quantize(value).scaleb(self.decimals))

    def from_minor_units(self, units: int) -> Decimal:
        """Convert minor units back to a Decimal in major units."""
        return Decimal(units).scaleb(-self.decimals)

    def has_excess_precision(self, amount: float | int | Decimal) -> bool:
        """True when ``amount`` carries more decimals than the currency allows."""
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        return value != value.quantize(Decimal("1").scaleb(-self.decimals))

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency('{self.code}', decimals={self.decimals})"


# The engine settles in euros only; cents round half-up like German bank statements
EUR = Currency("EUR", "€", decimals=2, rounding=RoundingPolicy.HALF_UP)
