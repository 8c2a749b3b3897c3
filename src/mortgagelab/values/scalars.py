"""
Scalar value types: Money, Percentage, PositiveInteger and PositiveDecimal.

Each type is a single-field frozen dataclass. Instances are meant to be built
through the ``create_*`` smart constructors, which validate finiteness, sign,
integrality and range in that order and return a ``Result``. Operations whose
output provably stays in range return the new value directly; the others
return a ``Result``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from mortgagelab.core.currency import EUR
from mortgagelab.core.formatting import format_currency, format_number, format_percent
from mortgagelab.core.result import Result
from mortgagelab.core.utils import is_finite_number

MAX_MONEY_CENTS = 999_999_999_00  # 999,999,999.00 EUR
MIN_PERCENTAGE = 0.0
MAX_PERCENTAGE = 100.0
PERCENTAGE_EPSILON = 0.001
DECIMAL_EPSILON = 1e-10


# --- Money ------------------------------------------------------------------


class MoneyError(str, Enum):
    """Validation failures for Money."""

    NEGATIVE_AMOUNT = "NegativeAmount"
    INVALID_AMOUNT = "InvalidAmount"
    EXCEEDS_MAXIMUM = "ExceedsMaximum"
    TOO_MANY_DECIMALS = "TooManyDecimals"


@dataclass(frozen=True, order=True)
class Money:
    """
    Non-negative euro amount stored as integer cents.

    Attributes:
        cents: Amount in cents, within [0, MAX_MONEY_CENTS]
    """

    cents: int

    @property
    def euros(self) -> float:
        """Amount in euros."""
        return self.cents / 100

    def to_decimal(self) -> Decimal:
        """Exact amount in euros."""
        return EUR.from_minor_units(self.cents)

    def add(self, other: Money) -> Result[Money]:
        """Sum of two amounts, failing with ExceedsMaximum past the cap."""
        total = self.cents + other.cents
        if total > MAX_MONEY_CENTS:
            return Result.fail(MoneyError.EXCEEDS_MAXIMUM)
        return Result.ok(Money(total))

    def subtract(self, other: Money) -> Result[Money]:
        """Difference of two amounts, failing with NegativeAmount below zero."""
        remainder = self.cents - other.cents
        if remainder < 0:
            return Result.fail(MoneyError.NEGATIVE_AMOUNT)
        return Result.ok(Money(remainder))

    def multiply(self, factor: float) -> Result[Money]:
        """Scale by a non-negative factor, rounding half-up to cents."""
        if not is_finite_number(factor) or factor < 0:
            return Result.fail(MoneyError.INVALID_AMOUNT)
        cents = EUR.to_minor_units(EUR.from_minor_units(self.cents) * Decimal(str(factor)))
        if cents > MAX_MONEY_CENTS:
            return Result.fail(MoneyError.EXCEEDS_MAXIMUM)
        return Result.ok(Money(cents))

    def __str__(self) -> str:
        return format_money(self)


def create_money(euros: float | int | Decimal, *, strict: bool = False) -> Result[Money]:
    """
    Smart constructor for Money.

    Args:
        euros: Amount in euros; rounded half-up to cents
        strict: Reject amounts with more than two decimals instead of rounding

    Returns:
        Result with Money, or one of InvalidAmount, NegativeAmount,
        TooManyDecimals, ExceedsMaximum (checked in that order)
    """
    if not is_finite_number(euros):
        return Result.fail(MoneyError.INVALID_AMOUNT)
    if euros < 0:
        return Result.fail(MoneyError.NEGATIVE_AMOUNT)
    if strict and EUR.has_excess_precision(euros):
        return Result.fail(MoneyError.TOO_MANY_DECIMALS)

    cents = EUR.to_minor_units(euros)
    if cents > MAX_MONEY_CENTS:
        return Result.fail(MoneyError.EXCEEDS_MAXIMUM)
    return Result.ok(Money(cents))


def money_from_cents(cents: int) -> Result[Money]:
    """Build Money from a cent count."""
    if isinstance(cents, bool) or not isinstance(cents, int):
        return Result.fail(MoneyError.INVALID_AMOUNT)
    if cents < 0:
        return Result.fail(MoneyError.NEGATIVE_AMOUNT)
    if cents > MAX_MONEY_CENTS:
        return Result.fail(MoneyError.EXCEEDS_MAXIMUM)
    return Result.ok(Money(cents))


def to_euros(money: Money) -> float:
    return money.euros


def to_cents(money: Money) -> int:
    return money.cents


def add_money(a: Money, b: Money) -> Result[Money]:
    return a.add(b)


def subtract_money(a: Money, b: Money) -> Result[Money]:
    return a.subtract(b)


def multiply_money(money: Money, factor: float) -> Result[Money]:
    return money.multiply(factor)


def compare_money(a: Money, b: Money) -> int:
    """Negative, zero or positive cent difference ``a - b``."""
    return a.cents - b.cents


def is_equal_money(a: Money, b: Money) -> bool:
    return a.cents == b.cents


def format_money(money: Money) -> str:
    """German currency rendering, e.g. ``"1.234,56 €"``."""
    return format_currency(money.to_decimal(), EUR)


ZERO_MONEY = Money(0)


# --- Percentage -------------------------------------------------------------


class PercentageError(str, Enum):
    """Validation failures for Percentage."""

    INVALID_VALUE = "InvalidValue"
    OUT_OF_RANGE = "OutOfRange"


@dataclass(frozen=True, order=True)
class Percentage:
    """
    Percentage in percent units (3.5 means 3.5 %), within [0, 100].
    """

    value: float

    def to_decimal(self) -> float:
        """Fraction form, e.g. 3.5 % -> 0.035."""
        return self.value / 100

    @classmethod
    def from_decimal(cls, fraction: float) -> Result[Percentage]:
        """Inverse of ``to_decimal``."""
        if not is_finite_number(fraction):
            return Result.fail(PercentageError.INVALID_VALUE)
        return create_percentage(round(fraction * 100, 10))

    def add(self, other: Percentage) -> Result[Percentage]:
        return create_percentage(self.value + other.value)

    def subtract(self, other: Percentage) -> Result[Percentage]:
        return create_percentage(self.value - other.value)

    def multiply(self, factor: float) -> Result[Percentage]:
        if not is_finite_number(factor) or factor < 0:
            return Result.fail(PercentageError.INVALID_VALUE)
        return create_percentage(self.value * factor)

    def __str__(self) -> str:
        return format_percentage(self)


def create_percentage(value: float) -> Result[Percentage]:
    """
    Smart constructor for Percentage.

    Returns:
        Result with Percentage, or InvalidValue (NaN / infinity) or OutOfRange
    """
    if not is_finite_number(value):
        return Result.fail(PercentageError.INVALID_VALUE)
    if value < MIN_PERCENTAGE or value > MAX_PERCENTAGE:
        return Result.fail(PercentageError.OUT_OF_RANGE)
    return Result.ok(Percentage(float(value)))


def to_decimal(percentage: Percentage) -> float:
    return percentage.to_decimal()


def from_decimal(fraction: float) -> Result[Percentage]:
    return Percentage.from_decimal(fraction)


def add_percentages(a: Percentage, b: Percentage) -> Result[Percentage]:
    return a.add(b)


def subtract_percentages(a: Percentage, b: Percentage) -> Result[Percentage]:
    return a.subtract(b)


def multiply_percentage(percentage: Percentage, factor: float) -> Result[Percentage]:
    return percentage.multiply(factor)


def compare_percentages(a: Percentage, b: Percentage) -> float:
    return a.value - b.value


def is_equal_percentage(a: Percentage, b: Percentage) -> bool:
    """Equality within 0.001 percentage points."""
    return abs(a.value - b.value) < PERCENTAGE_EPSILON


def format_percentage(percentage: Percentage, decimals: int = 2) -> str:
    """German percent rendering, e.g. ``"3,50 %"``."""
    return format_percent(percentage.value, decimals)


ZERO_PERCENT = Percentage(0.0)
FIFTY_PERCENT = Percentage(50.0)
HUNDRED_PERCENT = Percentage(100.0)


# --- PositiveInteger --------------------------------------------------------


class PositiveIntegerError(str, Enum):
    """Validation failures for PositiveInteger."""

    INVALID_VALUE = "InvalidValue"
    NOT_POSITIVE = "NotPositive"
    NOT_INTEGER = "NotInteger"


@dataclass(frozen=True, order=True)
class PositiveInteger:
    """Whole number >= 1."""

    value: int

    def add(self, other: PositiveInteger) -> PositiveInteger:
        return PositiveInteger(self.value + other.value)

    def multiply(self, other: PositiveInteger) -> PositiveInteger:
        return PositiveInteger(self.value * other.value)

    def subtract(self, other: PositiveInteger) -> Result[PositiveInteger]:
        return create_positive_integer(self.value - other.value)

    def divide(self, other: PositiveInteger) -> Result[PositiveInteger]:
        """Floor division; fails with NotPositive when the quotient is 0."""
        return create_positive_integer(self.value // other.value)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return format_positive_integer(self)


def create_positive_integer(value: float | int) -> Result[PositiveInteger]:
    """
    Smart constructor for PositiveInteger.

    Checks run finite -> positive -> integer, so ``-2.5`` yields NotPositive
    and ``2.5`` yields NotInteger.
    """
    if not is_finite_number(value):
        return Result.fail(PositiveIntegerError.INVALID_VALUE)
    if value <= 0:
        return Result.fail(PositiveIntegerError.NOT_POSITIVE)
    if value != math.floor(value):
        return Result.fail(PositiveIntegerError.NOT_INTEGER)
    return Result.ok(PositiveInteger(int(value)))


def compare_positive_integers(a: PositiveInteger, b: PositiveInteger) -> int:
    return a.value - b.value


def format_positive_integer(number: PositiveInteger) -> str:
    """German grouping, e.g. ``"1.000"``."""
    return format_number(number.value, 0)


ONE = PositiveInteger(1)
TWELVE = PositiveInteger(12)


# --- PositiveDecimal --------------------------------------------------------


class PositiveDecimalError(str, Enum):
    """Validation failures for PositiveDecimal."""

    INVALID_VALUE = "InvalidValue"
    NOT_POSITIVE = "NotPositive"


@dataclass(frozen=True, order=True)
class PositiveDecimal:
    """Real number > 0."""

    value: float

    def add(self, other: PositiveDecimal) -> PositiveDecimal:
        return PositiveDecimal(self.value + other.value)

    def multiply(self, other: PositiveDecimal) -> PositiveDecimal:
        return PositiveDecimal(self.value * other.value)

    def divide(self, other: PositiveDecimal) -> PositiveDecimal:
        return PositiveDecimal(self.value / other.value)

    def subtract(self, other: PositiveDecimal) -> Result[PositiveDecimal]:
        return create_positive_decimal(self.value - other.value)

    def multiply_by_factor(self, factor: float) -> Result[PositiveDecimal]:
        if not is_finite_number(factor) or factor <= 0:
            return Result.fail(PositiveDecimalError.INVALID_VALUE)
        return create_positive_decimal(self.value * factor)

    def __float__(self) -> float:
        return self.value

    def __str__(self) -> str:
        return format_positive_decimal(self)


def create_positive_decimal(value: float) -> Result[PositiveDecimal]:
    """Smart constructor for PositiveDecimal (finite, then > 0)."""
    if not is_finite_number(value):
        return Result.fail(PositiveDecimalError.INVALID_VALUE)
    if value <= 0:
        return Result.fail(PositiveDecimalError.NOT_POSITIVE)
    return Result.ok(PositiveDecimal(float(value)))


def compare_positive_decimals(a: PositiveDecimal, b: PositiveDecimal) -> float:
    return a.value - b.value


def is_equal_positive_decimal(
    a: PositiveDecimal, b: PositiveDecimal, epsilon: float = DECIMAL_EPSILON
) -> bool:
    return abs(a.value - b.value) < epsilon


def format_positive_decimal(number: PositiveDecimal, decimals: int = 2) -> str:
    return format_number(number.value, decimals)


def round_positive_decimal(number: PositiveDecimal, places: int) -> Result[PositiveDecimal]:
    """Round half-up; fails with NotPositive if the value rounds to zero."""
    rounded = Decimal(str(number.value)).quantize(
        Decimal("1").scaleb(-places), rounding=ROUND_HALF_UP
    )
    return create_positive_decimal(float(rounded))


ONE_DECIMAL = PositiveDecimal(1.0)
HALF = PositiveDecimal(0.5)
