"""
Domain value types: LoanAmount, InterestRate, MonthCount, YearCount, PaymentMonth.

Every type narrows a scalar type to a business range. Construction first runs
the scalar constructor and maps its failure to a single wrapper error (for
example ``PercentageValidationError``), then applies the business bounds.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from mortgagelab.core.formatting import format_currency, format_percent
from mortgagelab.core.result import Result
from mortgagelab.core.utils import is_finite_number

from .scalars import Money, create_money, create_percentage, create_positive_integer

MIN_LOAN_AMOUNT = 1_000.0
MAX_LOAN_AMOUNT = 10_000_000.0
MIN_INTEREST_RATE = 0.1
MAX_INTEREST_RATE = 25.0
MIN_TERM_MONTHS = 1
MAX_TERM_MONTHS = 480
MIN_TERM_YEARS = 1
MAX_TERM_YEARS = 40
MIN_PAYMENT_MONTH = 1
MAX_PAYMENT_MONTH = 480
MONTHS_PER_YEAR = 12


# --- LoanAmount -------------------------------------------------------------


class LoanAmountError(str, Enum):
    MONEY_VALIDATION_ERROR = "MoneyValidationError"
    BELOW_MINIMUM = "BelowMinimum"
    ABOVE_MAXIMUM = "AboveMaximum"


@dataclass(frozen=True, order=True)
class LoanAmount:
    """Loan principal in [1,000; 10,000,000] EUR."""

    money: Money

    @property
    def euros(self) -> float:
        return self.money.euros

    def __str__(self) -> str:
        return format_loan_amount(self)


def create_loan_amount(euros: float) -> Result[LoanAmount]:
    money = create_money(euros)
    if not money:
        return money.map_error(LoanAmountError.MONEY_VALIDATION_ERROR)
    if money.data.euros < MIN_LOAN_AMOUNT:
        return Result.fail(LoanAmountError.BELOW_MINIMUM)
    if money.data.euros > MAX_LOAN_AMOUNT:
        return Result.fail(LoanAmountError.ABOVE_MAXIMUM)
    return Result.ok(LoanAmount(money.data))


def loan_amount_to_money(amount: LoanAmount) -> Money:
    return amount.money


def format_loan_amount(amount: LoanAmount) -> str:
    return format_currency(amount.money.to_decimal())


def get_minimum_loan_amount() -> LoanAmount:
    return create_loan_amount(MIN_LOAN_AMOUNT).unwrap()


def get_maximum_loan_amount() -> LoanAmount:
    return create_loan_amount(MAX_LOAN_AMOUNT).unwrap()


# --- InterestRate -----------------------------------------------------------


class InterestRateError(str, Enum):
    PERCENTAGE_VALIDATION_ERROR = "PercentageValidationError"
    BELOW_MINIMUM_RATE = "BelowMinimumRate"
    ABOVE_MAXIMUM_RATE = "AboveMaximumRate"


@dataclass(frozen=True, order=True)
class InterestRate:
    """
    Nominal annual interest rate in percent units, within [0.1; 25.0].

    ``InterestRate(3.5)`` is 3.5 % p.a.; its monthly rate is 0.035 / 12.
    """

    value: float

    def to_decimal(self) -> float:
        return self.value / 100

    def to_monthly_rate(self) -> float:
        return self.value / 100 / MONTHS_PER_YEAR

    @classmethod
    def from_decimal(cls, fraction: float) -> Result[InterestRate]:
        if not is_finite_number(fraction):
            return Result.fail(InterestRateError.PERCENTAGE_VALIDATION_ERROR)
        # round away float noise such as 0.035 * 100 == 3.5000000000000004
        return create_interest_rate(round(fraction * 100, 10))

    @classmethod
    def from_monthly_rate(cls, monthly: float) -> Result[InterestRate]:
        if not is_finite_number(monthly):
            return Result.fail(InterestRateError.PERCENTAGE_VALIDATION_ERROR)
        return create_interest_rate(round(monthly * MONTHS_PER_YEAR * 100, 10))

    def add_basis_points(self, basis_points: float) -> Result[InterestRate]:
        """Shift the rate by ``basis_points`` (100 bp == 1 percentage point)."""
        if not is_finite_number(basis_points):
            return Result.fail(InterestRateError.PERCENTAGE_VALIDATION_ERROR)
        return create_interest_rate(round(self.value + basis_points / 100, 10))

    def __str__(self) -> str:
        return format_interest_rate(self)


def create_interest_rate(percent: float) -> Result[InterestRate]:
    """
    Smart constructor for InterestRate.

    Examples:
        ``create_interest_rate(-0.1)`` fails with PercentageValidationError,
        ``create_interest_rate(0.05)`` with BelowMinimumRate and
        ``create_interest_rate(25.1)`` with AboveMaximumRate.
    """
    percentage = create_percentage(percent)
    if not percentage:
        return percentage.map_error(InterestRateError.PERCENTAGE_VALIDATION_ERROR)
    value = percentage.data.value
    if value < MIN_INTEREST_RATE:
        return Result.fail(InterestRateError.BELOW_MINIMUM_RATE)
    if value > MAX_INTEREST_RATE:
        return Result.fail(InterestRateError.ABOVE_MAXIMUM_RATE)
    return Result.ok(InterestRate(value))


def compare_interest_rates(a: InterestRate, b: InterestRate) -> float:
    return a.value - b.value


def format_interest_rate(rate: InterestRate, decimals: int = 2) -> str:
    return format_percent(rate.value, decimals)


TYPICAL_LOW_RATE = create_interest_rate(1.5).unwrap()
TYPICAL_CURRENT_RATE = create_interest_rate(3.5).unwrap()
TYPICAL_HIGH_RATE = create_interest_rate(6.0).unwrap()
STRESS_TEST_RATE = create_interest_rate(10.0).unwrap()


# --- MonthCount -------------------------------------------------------------


class MonthCountError(str, Enum):
    POSITIVE_INTEGER_VALIDATION_ERROR = "PositiveIntegerValidationError"
    BELOW_MINIMUM_TERM = "BelowMinimumTerm"
    ABOVE_MAXIMUM_TERM = "AboveMaximumTerm"


@dataclass(frozen=True, order=True)
class MonthCount:
    """Loan term in months, within [1; 480]."""

    value: int

    def to_years(self) -> float:
        return self.value / MONTHS_PER_YEAR

    @classmethod
    def from_years(cls, years: float) -> Result[MonthCount]:
        """Whole months closest to ``years``; 2.5 years -> 30 months."""
        if not is_finite_number(years):
            return Result.fail(MonthCountError.POSITIVE_INTEGER_VALIDATION_ERROR)
        return create_month_count(round(years * MONTHS_PER_YEAR))

    def add(self, other: MonthCount) -> Result[MonthCount]:
        return create_month_count(self.value + other.value)

    def subtract(self, other: MonthCount) -> Result[MonthCount]:
        return create_month_count(self.value - other.value)

    def remaining_after(self, elapsed: int) -> Result[MonthCount]:
        """Months left after ``elapsed`` payments; fails once nothing is left."""
        return create_month_count(self.value - elapsed)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return format_month_count(self)


def create_month_count(months: float | int) -> Result[MonthCount]:
    positive = create_positive_integer(months)
    if not positive:
        return positive.map_error(MonthCountError.POSITIVE_INTEGER_VALIDATION_ERROR)
    value = positive.data.value
    if value < MIN_TERM_MONTHS:
        return Result.fail(MonthCountError.BELOW_MINIMUM_TERM)
    if value > MAX_TERM_MONTHS:
        return Result.fail(MonthCountError.ABOVE_MAXIMUM_TERM)
    return Result.ok(MonthCount(value))


def remaining_months(total: MonthCount, elapsed: int) -> Result[MonthCount]:
    return total.remaining_after(elapsed)


def _plural(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def format_month_count(months: MonthCount) -> str:
    """
    German term rendering.

    ``1 -> "1 Monat"``, ``6 -> "6 Monate"``, ``12 -> "1 Jahr"``,
    ``300 -> "25 Jahre"``, ``27 -> "2 Jahre 3 Monate"``.
    """
    years, rest = divmod(months.value, MONTHS_PER_YEAR)
    if years == 0:
        return _plural(rest, "Monat", "Monate")
    if rest == 0:
        return _plural(years, "Jahr", "Jahre")
    return f"{_plural(years, 'Jahr', 'Jahre')} {_plural(rest, 'Monat', 'Monate')}"


SHORT_TERM = create_month_count(60).unwrap()
MEDIUM_TERM = create_month_count(180).unwrap()
LONG_TERM = create_month_count(300).unwrap()
MAX_STANDARD_TERM = create_month_count(360).unwrap()


# --- YearCount --------------------------------------------------------------


class YearCountError(str, Enum):
    POSITIVE_INTEGER_VALIDATION_ERROR = "PositiveIntegerValidationError"
    BELOW_MINIMUM_TERM = "BelowMinimumTerm"
    ABOVE_MAXIMUM_TERM = "AboveMaximumTerm"


@dataclass(frozen=True, order=True)
class YearCount:
    """Term in whole years, within [1; 40]."""

    value: int

    def to_months(self) -> int:
        return self.value * MONTHS_PER_YEAR

    @classmethod
    def from_months(cls, months: int) -> Result[YearCount]:
        if not is_finite_number(months):
            return Result.fail(YearCountError.POSITIVE_INTEGER_VALIDATION_ERROR)
        return create_year_count(round(months / MONTHS_PER_YEAR))

    def add(self, other: YearCount) -> Result[YearCount]:
        return create_year_count(self.value + other.value)

    def subtract(self, other: YearCount) -> Result[YearCount]:
        return create_year_count(self.value - other.value)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return format_year_count(self)


def create_year_count(years: float | int) -> Result[YearCount]:
    positive = create_positive_integer(years)
    if not positive:
        return positive.map_error(YearCountError.POSITIVE_INTEGER_VALIDATION_ERROR)
    value = positive.data.value
    if value < MIN_TERM_YEARS:
        return Result.fail(YearCountError.BELOW_MINIMUM_TERM)
    if value > MAX_TERM_YEARS:
        return Result.fail(YearCountError.ABOVE_MAXIMUM_TERM)
    return Result.ok(YearCount(value))


def format_year_count(years: YearCount) -> str:
    return _plural(years.value, "Jahr", "Jahre")


FIVE_YEARS = create_year_count(5).unwrap()
FIFTEEN_YEARS = create_year_count(15).unwrap()
TWENTY_FIVE_YEARS = create_year_count(25).unwrap()
THIRTY_YEARS = create_year_count(30).unwrap()


# --- PaymentMonth -----------------------------------------------------------


class PaymentMonthError(str, Enum):
    POSITIVE_INTEGER_VALIDATION_ERROR = "PositiveIntegerValidationError"
    INVALID_PAYMENT_MONTH = "InvalidPaymentMonth"


@dataclass(frozen=True, order=True)
class PaymentMonth:
    """1-based month index inside a payment schedule, within [1; 480]."""

    value: int

    @property
    def payment_year(self) -> int:
        """Loan year containing this month: months 1-12 -> 1, 13-24 -> 2."""
        return math.ceil(self.value / MONTHS_PER_YEAR)

    @property
    def month_in_year(self) -> int:
        return (self.value - 1) % MONTHS_PER_YEAR + 1

    @classmethod
    def from_year_and_month(cls, year: int, month: int) -> Result[PaymentMonth]:
        if not is_finite_number(year) or not is_finite_number(month):
            return Result.fail(PaymentMonthError.POSITIVE_INTEGER_VALIDATION_ERROR)
        if not 1 <= month <= MONTHS_PER_YEAR:
            return Result.fail(PaymentMonthError.INVALID_PAYMENT_MONTH)
        return create_payment_month((year - 1) * MONTHS_PER_YEAR + month)

    def add_months(self, months: int) -> Result[PaymentMonth]:
        return create_payment_month(self.value + months)

    def is_first_year(self) -> bool:
        return self.value <= MONTHS_PER_YEAR

    def is_end_of_year(self) -> bool:
        return self.value % MONTHS_PER_YEAR == 0

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return format_payment_month(self)


def create_payment_month(month: float | int) -> Result[PaymentMonth]:
    positive = create_positive_integer(month)
    if not positive:
        return positive.map_error(PaymentMonthError.POSITIVE_INTEGER_VALIDATION_ERROR)
    value = positive.data.value
    if not MIN_PAYMENT_MONTH <= value <= MAX_PAYMENT_MONTH:
        return Result.fail(PaymentMonthError.INVALID_PAYMENT_MONTH)
    return Result.ok(PaymentMonth(value))


def format_payment_month(month: PaymentMonth) -> str:
    """E.g. ``"Monat 14 (Jahr 2, 2. Monat)"``."""
    return f"Monat {month.value} (Jahr {month.payment_year}, {month.month_in_year}. Monat)"


FIRST_PAYMENT = create_payment_month(1).unwrap()
END_OF_FIRST_YEAR = create_payment_month(12).unwrap()
END_OF_FIFTH_YEAR = create_payment_month(60).unwrap()
