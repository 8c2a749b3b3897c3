"""
Fixed-rate period (Zinsbindung) of a German mortgage.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from mortgagelab.core.result import Result
from mortgagelab.core.settings import EngineSettings, resolve_settings
from mortgagelab.core.utils import add_years, is_finite_number
from mortgagelab.values.domain import (
    InterestRate,
    YearCount,
    create_interest_rate,
    create_year_count,
    format_interest_rate,
    format_year_count,
)

MIN_FIXED_PERIOD_YEARS = 1
MAX_FIXED_PERIOD_YEARS = 40
MAX_START_DATE_AGE_YEARS = 5
TYPICAL_FIXED_PERIODS = (5, 10, 15, 20, 25, 30)
DAYS_PER_YEAR = 365.25
DAYS_PER_MONTH_APPROX = 30


class FixedRateType(str, Enum):
    FIXED = "Fixed"
    INITIAL_FIXED = "InitialFixed"
    CAP_FIXED = "CapFixed"

    @property
    def label(self) -> str:
        return _RATE_TYPE_LABELS[self]


_RATE_TYPE_LABELS = {
    FixedRateType.FIXED: "Festzins",
    FixedRateType.INITIAL_FIXED: "Zinsbindung",
    FixedRateType.CAP_FIXED: "Zinsobergrenze",
}


class FixedRatePeriodError(str, Enum):
    INVALID_PERIOD_LENGTH = "InvalidPeriodLength"
    INVALID_INTEREST_RATE = "InvalidInterestRate"
    INVALID_START_DATE = "InvalidStartDate"
    UNSUPPORTED_RATE_TYPE = "UnsupportedRateType"
    PERIOD_TOO_SHORT = "PeriodTooShort"
    PERIOD_TOO_LONG = "PeriodTooLong"


@dataclass(frozen=True)
class FixedRatePeriod:
    """
    Interval during which the interest rate is contractually locked.

    Attributes:
        period_years: Length of the period
        initial_rate: Locked rate
        rate_type: Kind of lock
        start_date: First day of the period
    """

    period_years: YearCount
    initial_rate: InterestRate
    rate_type: FixedRateType
    start_date: date

    @property
    def end_date(self) -> date:
        return add_years(self.start_date, self.period_years.value)

    def is_currently_active(self, on: date) -> bool:
        return self.start_date <= on <= self.end_date

    def remaining_years(self, on: date) -> float:
        """Years left in the period as of ``on``, two decimals; 0 when inactive."""
        if not self.is_currently_active(on):
            return 0.0
        return max(0.0, round((self.end_date - on).days / DAYS_PER_YEAR, 2))

    def days_until_expiry(self, on: date) -> int:
        return max(0, (self.end_date - on).days)

    def is_expiring_soon(
        self, on: date, months_threshold: int | None = None, *, settings: EngineSettings | None = None
    ) -> bool:
        """True when the period ends within ``months_threshold`` months (30-day months)."""
        if months_threshold is None:
            months_threshold = resolve_settings(settings).fixed_period_expiry_warning_months
        days = self.days_until_expiry(on)
        return 0 < days <= months_threshold * DAYS_PER_MONTH_APPROX

    def is_typical(self) -> bool:
        return self.period_years.value in TYPICAL_FIXED_PERIODS

    def __str__(self) -> str:
        return format_fixed_rate_period(self)


def create_fixed_rate_period(
    period_years: int,
    initial_rate: float,
    rate_type: FixedRateType | str = FixedRateType.INITIAL_FIXED,
    start_date: date | None = None,
    *,
    as_of: date | None = None,
) -> Result[FixedRatePeriod]:
    """
    Smart constructor for FixedRatePeriod.

    Args:
        period_years: Length in whole years, within [1; 40]
        initial_rate: Locked annual rate in percent
        rate_type: ``FixedRateType`` member or its value
        start_date: First day of the period; defaults to ``as_of`` or today
        as_of: Reference date; when given, start dates more than five years
            before it are rejected with InvalidStartDate
    """
    if not is_finite_number(period_years):
        return Result.fail(FixedRatePeriodError.INVALID_PERIOD_LENGTH)
    if period_years < MIN_FIXED_PERIOD_YEARS:
        return Result.fail(FixedRatePeriodError.PERIOD_TOO_SHORT)
    if period_years > MAX_FIXED_PERIOD_YEARS:
        return Result.fail(FixedRatePeriodError.PERIOD_TOO_LONG)

    years = create_year_count(period_years)
    if not years:
        return years.map_error(FixedRatePeriodError.INVALID_PERIOD_LENGTH)

    rate = create_interest_rate(initial_rate)
    if not rate:
        return rate.map_error(FixedRatePeriodError.INVALID_INTEREST_RATE)

    if start_date is None:
        start_date = as_of or date.today()
    if as_of is not None and start_date < add_years(as_of, -MAX_START_DATE_AGE_YEARS):
        return Result.fail(FixedRatePeriodError.INVALID_START_DATE)

    try:
        kind = FixedRateType(rate_type)
    except ValueError:
        return Result.fail(FixedRatePeriodError.UNSUPPORTED_RATE_TYPE)

    return Result.ok(FixedRatePeriod(years.data, rate.data, kind, start_date))


def create_standard_german_period(
    years: int, rate: float, start_date: date | None = None
) -> Result[FixedRatePeriod]:
    """Zinsbindung of one of the typical lengths."""
    if years not in TYPICAL_FIXED_PERIODS:
        return Result.fail(FixedRatePeriodError.INVALID_PERIOD_LENGTH)
    return create_fixed_rate_period(years, rate, FixedRateType.INITIAL_FIXED, start_date)


def compare_by_end_date(a: FixedRatePeriod, b: FixedRatePeriod) -> int:
    return (a.end_date - b.end_date).days


def format_fixed_rate_period(period: FixedRatePeriod) -> str:
    """E.g. ``"10 Jahre Zinsbindung @ 3,50 %"``."""
    return (
        f"{format_year_count(period.period_years)} {period.rate_type.label} "
        f"@ {format_interest_rate(period.initial_rate)}"
    )

