"""
Amortization engine.

Derives the month-by-month schedule of a loan configuration under optional
extra payments (Sondertilgungen), summary metrics against the plain schedule,
and the mid-schedule status of loans that started in the past.

Every amount in a schedule is rounded to cents per month. The last contractual
month settles whatever balance the rounding left over, so the principal and
extra components of a complete schedule always add up to the loan amount.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from itertools import islice
from typing import Iterable, Iterator

import numpy as np
import pandas as pd

from mortgagelab.core.result import Result
from mortgagelab.core.settings import EngineSettings, resolve_settings
from mortgagelab.core.utils import add_months, month_range, months_between, warn_once
from mortgagelab.types.extra_payment import ExtraPayment
from mortgagelab.types.loan_configuration import LoanConfiguration

logger = logging.getLogger(__name__)

WORTHWHILE_MIN_ROI_PCT = 2.0


class AmortizationError(str, Enum):
    PAYMENT_BELOW_INTEREST = "PaymentBelowInterest"
    DUPLICATE_PAYMENT_MONTH = "DuplicatePaymentMonth"
    MONTH_OUT_OF_RANGE = "MonthOutOfRange"


@dataclass(frozen=True)
class PaymentDetail:
    """
    One row of an amortization schedule.

    Attributes:
        month: 1-based schedule month
        interest_component: Interest paid this month
        principal_component: Regular repayment this month
        extra_payment: Sondertilgung applied this month (0 if none)
        remaining_balance: Balance after all payments of the month
    """

    month: int
    interest_component: float
    principal_component: float
    extra_payment: float
    remaining_balance: float

    @property
    def regular_payment(self) -> float:
        return round(self.interest_component + self.principal_component, 2)

    @property
    def total_payment(self) -> float:
        return round(self.regular_payment + self.extra_payment, 2)

    @property
    def payment_year(self) -> int:
        return math.ceil(self.month / 12)


@dataclass(frozen=True)
class ScheduleMetrics:
    """Aggregates over a schedule, compared with the same loan without extra payments."""

    total_payments: float
    total_interest: float
    total_principal: float
    total_extra_payments: float
    actual_term: int
    interest_saved: float
    term_reduction: int
    average_monthly_payment: float
    largest_payment: float
    smallest_payment: float
    payoff_month: int
    payoff_year: int


@dataclass(frozen=True)
class AmortizationSchedule:
    """
    Complete schedule of a loan.

    Attributes:
        configuration: Loan the schedule was derived from
        entries: One PaymentDetail per month until payoff
        extra_payments: Extra payments that were applied, ordered by month
        metrics: Totals and savings
    """

    configuration: LoanConfiguration
    entries: tuple[PaymentDetail, ...]
    extra_payments: tuple[ExtraPayment, ...]
    metrics: ScheduleMetrics

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[PaymentDetail]:
        return iter(self.entries)

    def to_frame(self, start_date: date | None = None) -> pd.DataFrame:
        """
        Schedule as a DataFrame indexed by month.

        Args:
            start_date: Loan start; when given, a ``date`` column holds the
                calendar month of each payment (first payment one month later)

        Returns:
            DataFrame with interest, principal, extra, payment and balance columns
        """
        frame = pd.DataFrame(
            {
                "interest": [e.interest_component for e in self.entries],
                "principal": [e.principal_component for e in self.entries],
                "extra_payment": [e.extra_payment for e in self.entries],
                "total_payment": [e.total_payment for e in self.entries],
                "remaining_balance": [e.remaining_balance for e in self.entries],
            },
            index=pd.Index([e.month for e in self.entries], name="month"),
        )
        if start_date is not None:
            dates = month_range(add_months(start_date, 1), len(self.entries))
            frame.insert(0, "date", dates.astype("datetime64[ns]"))
        return frame


def _extras_by_month(
    extra_payments: Iterable[ExtraPayment],
) -> Result[dict[int, float]]:
    by_month: dict[int, float] = {}
    for payment in sorted(extra_payments):
        month = payment.month.value
        if month in by_month:
            return Result.fail(AmortizationError.DUPLICATE_PAYMENT_MONTH)
        by_month[month] = payment.amount.euros
    return Result.ok(by_month)


def _iterate_schedule(
    config: LoanConfiguration, extras: dict[int, float], settlement_tolerance: float
) -> Iterator[PaymentDetail]:
    """Yield schedule rows until the balance reaches zero or the term ends."""
    term = config.term_in_months.value
    c = config.monthly_rate
    payment = config.monthly_payment.euros
    straight_line = round(config.amount.euros / term, 2)
    balance = config.amount.euros

    for month in range(1, term + 1):
        interest = round(balance * c, 2)
        if month == term:
            principal = balance
            settlement = interest + principal - payment
            if settlement > settlement_tolerance:
                warn_once(
                    "FINAL_SETTLEMENT",
                    f"term-{term}-payment-{payment:.2f}",
                    f"The final month settles a residual of {settlement:.2f} above the "
                    f"regular payment of {payment:.2f}.",
                )
        elif config.is_zero_rate:
            principal = min(straight_line, balance)
        else:
            principal = min(round(payment - interest, 2), balance)
        balance = round(balance - principal, 2)

        extra = 0.0
        if month in extras:
            extra = min(extras[month], balance)
            if extra < extras[month]:
                warn_once(
                    "EXTRA_TRUNCATED",
                    f"month-{month}",
                    f"Extra payment in month {month} exceeds the outstanding balance "
                    f"and was truncated to {extra:.2f}.",
                )
            balance = round(balance - extra, 2)

        yield PaymentDetail(month, interest, round(principal, 2), extra, max(0.0, balance))
        if balance <= 0:
            return


def _metrics(entries: list[PaymentDetail], baseline: list[PaymentDetail]) -> ScheduleMetrics:
    interest = np.array([e.interest_component for e in entries])
    principal = np.array([e.principal_component for e in entries])
    extra = np.array([e.extra_payment for e in entries])
    totals = interest + principal + extra
    baseline_interest = float(sum(e.interest_component for e in baseline))
    payoff = entries[-1].month
    return ScheduleMetrics(
        total_payments=round(float(totals.sum()), 2),
        total_interest=round(float(interest.sum()), 2),
        total_principal=round(float(principal.sum()), 2),
        total_extra_payments=round(float(extra.sum()), 2),
        actual_term=len(entries),
        interest_saved=round(max(0.0, baseline_interest - float(interest.sum())), 2),
        term_reduction=max(0, len(baseline) - len(entries)),
        average_monthly_payment=round(float(totals.mean()), 2),
        largest_payment=round(float(totals.max()), 2),
        smallest_payment=round(float(totals.min()), 2),
        payoff_month=payoff,
        payoff_year=math.ceil(payoff / 12),
    )


def _check_amortizing(config: LoanConfiguration) -> bool:
    if config.is_zero_rate:
        return True
    return config.monthly_payment.euros > config.amount.euros * config.monthly_rate


def generate_amortization_schedule(
    config: LoanConfiguration,
    extra_payments: Iterable[ExtraPayment] = (),
    *,
    settings: EngineSettings | None = None,
) -> Result[AmortizationSchedule]:
    """
    Build the full schedule of ``config``.

    Args:
        config: Validated loan configuration
        extra_payments: Extra payments, at most one per month; payments after
            the payoff month are ignored with a MortgageLabWarning
        settings: Tolerance above which a final-month settlement is reported

    Returns:
        Result with the schedule, PaymentBelowInterest when the payment never
        amortizes the loan, or DuplicatePaymentMonth for uncombined extras
    """
    if not _check_amortizing(config):
        return Result.fail(AmortizationError.PAYMENT_BELOW_INTEREST)

    extra_payments = tuple(extra_payments)
    extras = _extras_by_month(extra_payments)
    if not extras:
        return extras

    tolerance = resolve_settings(settings).annuity_tolerance
    entries = list(_iterate_schedule(config, extras.data, tolerance))
    baseline = entries if not extras.data else list(_iterate_schedule(config, {}, tolerance))

    payoff = entries[-1].month
    late = [m for m in extras.data if m > payoff]
    if late:
        warn_once(
            "EXTRA_AFTER_PAYOFF",
            f"payoff-{payoff}",
            f"{len(late)} extra payment(s) fall after the payoff month {payoff} and were ignored.",
        )

    applied = tuple(p for p in sorted(extra_payments) if p.month.value <= payoff)
    metrics = _metrics(entries, baseline)
    logger.debug(
        "Schedule generated: %d months, payoff month %d, interest %.2f",
        metrics.actual_term,
        metrics.payoff_month,
        metrics.total_interest,
    )
    return Result.ok(AmortizationSchedule(config, tuple(entries), applied, metrics))


def get_schedule_entry(schedule: AmortizationSchedule, month: int) -> Result[PaymentDetail]:
    if not 1 <= month <= len(schedule.entries):
        return Result.fail(AmortizationError.MONTH_OUT_OF_RANGE)
    return Result.ok(schedule.entries[month - 1])


def get_remaining_balance(schedule: AmortizationSchedule, month: int) -> float:
    """Balance after ``month``; the loan amount for month 0 and 0 after payoff."""
    if month <= 0:
        return schedule.configuration.amount.euros
    if month > len(schedule.entries):
        return 0.0
    return schedule.entries[month - 1].remaining_balance


@dataclass(frozen=True)
class ScheduleComparison:
    """
    How ``alternative`` performs against ``base``.

    Attributes:
        interest_savings: Base interest minus alternative interest
        term_reduction: Months saved
        additional_extra_payments: Extra payments the alternative adds
        return_on_investment: Interest saved per extra EUR, in percent
        is_worthwhile: Savings are positive and the return exceeds 2 %
    """

    interest_savings: float
    term_reduction: int
    additional_extra_payments: float
    return_on_investment: float
    is_worthwhile: bool


def compare_schedules(base: AmortizationSchedule, alternative: AmortizationSchedule) -> ScheduleComparison:
    savings = round(base.metrics.total_interest - alternative.metrics.total_interest, 2)
    extra = round(
        alternative.metrics.total_extra_payments - base.metrics.total_extra_payments, 2
    )
    roi = round(savings / extra * 100, 2) if extra > 0 else 0.0
    return ScheduleComparison(
        interest_savings=savings,
        term_reduction=base.metrics.actual_term - alternative.metrics.actual_term,
        additional_extra_payments=extra,
        return_on_investment=roi,
        is_worthwhile=savings > 0 and roi > WORTHWHILE_MIN_ROI_PCT,
    )


# --- Mid-schedule status ----------------------------------------------------


@dataclass(frozen=True)
class LoanStatus:
    """
    Position of a running loan at ``as_of``.

    Attributes:
        current_balance: Outstanding balance after the elapsed months
        months_elapsed: Payments made, capped at the term
        remaining_months: Payments still needed at the regular rate
        payoff_date: ``as_of`` shifted by the remaining months
        remaining_interest: Interest still to be paid at the regular rate
        future_schedule: Rows after ``as_of`` when requested, else None
    """

    current_balance: float
    months_elapsed: int
    remaining_months: int
    payoff_date: date
    remaining_interest: float
    future_schedule: tuple[PaymentDetail, ...] | None = None

    @property
    def is_paid_off(self) -> bool:
        return self.current_balance <= 0


def remaining_months_for_balance(balance: float, payment: float, monthly_rate: float) -> int | None:
    """
    Payments needed to clear ``balance``, from the inverse annuity formula.

    Returns None when the payment does not cover the interest.
    """
    if balance <= 0:
        return 0
    if monthly_rate == 0:
        return math.ceil(balance / payment - 1e-9)
    ratio = balance * monthly_rate / payment
    if ratio >= 1:
        return None
    return math.ceil(-math.log(1 - ratio) / math.log(1 + monthly_rate) - 1e-9)


def calculate_loan_status(
    config: LoanConfiguration,
    start_date: date,
    as_of: date | None = None,
    extra_payments: Iterable[ExtraPayment] = (),
    include_schedule: bool = False,
    *,
    settings: EngineSettings | None = None,
) -> Result[LoanStatus]:
    """
    Replay a loan that started at ``start_date`` up to ``as_of``.

    Only the elapsed months are simulated; the rest is derived analytically.
    With ``include_schedule=True`` the future rows are materialised as well.
    A loan paid off early by extra payments reports the payoff month as
    elapsed.
    """
    as_of = as_of or date.today()
    if not _check_amortizing(config):
        return Result.fail(AmortizationError.PAYMENT_BELOW_INTEREST)
    extras = _extras_by_month(extra_payments)
    if not extras:
        return extras

    elapsed = min(months_between(start_date, as_of), config.term_in_months.value)
    rows = _iterate_schedule(config, extras.data, resolve_settings(settings).annuity_tolerance)
    replayed = list(islice(rows, elapsed))
    elapsed = len(replayed)
    balance = replayed[-1].remaining_balance if replayed else config.amount.euros

    payment = config.monthly_payment.euros
    remaining = remaining_months_for_balance(balance, payment, config.monthly_rate)
    if remaining is None:
        return Result.fail(AmortizationError.PAYMENT_BELOW_INTEREST)
    remaining = min(remaining, config.term_in_months.value - elapsed) if balance > 0 else 0

    future = tuple(rows) if include_schedule else None
    logger.debug(
        "Loan status as of %s: %d months elapsed, balance %.2f, %d remaining",
        as_of,
        elapsed,
        balance,
        remaining,
    )
    return Result.ok(
        LoanStatus(
            current_balance=balance,
            months_elapsed=elapsed,
            remaining_months=remaining,
            payoff_date=add_months(as_of, remaining),
            remaining_interest=round(max(0.0, remaining * payment - balance), 2),
            future_schedule=future,
        )
    )
