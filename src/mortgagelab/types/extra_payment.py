"""
Extra repayments (Sondertilgungen) and plans grouping them per loan year.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from mortgagelab.core.result import Result
from mortgagelab.values.domain import LoanAmount, PaymentMonth, create_payment_month, format_payment_month
from mortgagelab.values.scalars import (
    ZERO_MONEY,
    Money,
    Percentage,
    create_money,
    format_money,
    format_percentage,
)

MIN_EXTRA_PAYMENT = 1.0
MAX_EXTRA_PAYMENT = 1_000_000.0
LARGE_EXTRA_PAYMENT = 10_000.0


class ExtraPaymentError(str, Enum):
    INVALID_PAYMENT_MONTH = "InvalidPaymentMonth"
    INVALID_AMOUNT = "InvalidAmount"
    AMOUNT_TOO_SMALL = "AmountTooSmall"
    AMOUNT_TOO_LARGE = "AmountTooLarge"


@dataclass(frozen=True, order=True)
class ExtraPayment:
    """
    A one-off principal repayment made in a given schedule month.

    Attributes:
        month: Schedule month the payment is made in
        amount: Payment amount, within [1; 1,000,000] EUR
    """

    month: PaymentMonth
    amount: Money

    @property
    def payment_year(self) -> int:
        return self.month.payment_year

    def is_large(self) -> bool:
        return self.amount.euros >= LARGE_EXTRA_PAYMENT

    def __str__(self) -> str:
        return format_extra_payment(self)


def create_extra_payment(month: PaymentMonth | int, amount: float) -> Result[ExtraPayment]:
    """
    Smart constructor for ExtraPayment.

    ``month`` may be a validated PaymentMonth or a raw month number.
    """
    if not isinstance(month, PaymentMonth):
        payment_month = create_payment_month(month)
        if not payment_month:
            return payment_month.map_error(ExtraPaymentError.INVALID_PAYMENT_MONTH)
        month = payment_month.data

    money = create_money(amount)
    if not money:
        return money.map_error(ExtraPaymentError.INVALID_AMOUNT)
    return _bounded(month, money.data)


def _bounded(month: PaymentMonth, amount: Money) -> Result[ExtraPayment]:
    if amount.euros < MIN_EXTRA_PAYMENT:
        return Result.fail(ExtraPaymentError.AMOUNT_TOO_SMALL)
    if amount.euros > MAX_EXTRA_PAYMENT:
        return Result.fail(ExtraPaymentError.AMOUNT_TOO_LARGE)
    return Result.ok(ExtraPayment(month, amount))


def combine_extra_payments(a: ExtraPayment, b: ExtraPayment) -> Result[ExtraPayment]:
    """Merge two payments of the same month into one."""
    if a.month != b.month:
        return Result.fail(ExtraPaymentError.INVALID_PAYMENT_MONTH)
    total = a.amount.add(b.amount)
    if not total:
        return total.map_error(ExtraPaymentError.INVALID_AMOUNT)
    return _bounded(a.month, total.data)


def group_by_month(payments: Iterable[ExtraPayment]) -> Result[list[ExtraPayment]]:
    """Combine payments sharing a month and return them ordered by month."""
    merged: dict[PaymentMonth, ExtraPayment] = {}
    for payment in payments:
        existing = merged.get(payment.month)
        if existing is None:
            merged[payment.month] = payment
            continue
        combined = combine_extra_payments(existing, payment)
        if not combined:
            return combined
        merged[payment.month] = combined.data
    return Result.ok(sorted(merged.values()))


def filter_by_year(payments: Iterable[ExtraPayment], year: int) -> list[ExtraPayment]:
    """Payments falling into loan year ``year`` (months 12·(year−1)+1 .. 12·year)."""
    return [p for p in payments if p.payment_year == year]


def total_extra_payments(payments: Iterable[ExtraPayment]) -> Result[Money]:
    total = ZERO_MONEY
    for payment in payments:
        added = total.add(payment.amount)
        if not added:
            return added.map_error(ExtraPaymentError.INVALID_AMOUNT)
        total = added.data
    return Result.ok(total)


def yearly_totals(payments: Iterable[ExtraPayment]) -> dict[int, float]:
    """Sum of payment euros per loan year."""
    totals: dict[int, float] = defaultdict(float)
    for payment in payments:
        totals[payment.payment_year] += payment.amount.euros
    return dict(totals)


def format_extra_payment(payment: ExtraPayment) -> str:
    """E.g. ``"Sondertilgung: 5.000,00 € in Monat 12 (Jahr 1, 12. Monat)"``."""
    return f"Sondertilgung: {format_money(payment.amount)} in {format_payment_month(payment.month)}"


# --- Plans ------------------------------------------------------------------


class ExtraPaymentPlanError(str, Enum):
    NO_PAYMENTS = "NoPayments"
    DUPLICATE_PAYMENT_MONTH = "DuplicatePaymentMonth"
    EXCEEDS_YEARLY_LIMIT = "ExceedsYearlyLimit"


@dataclass(frozen=True)
class YearlyPaymentSummary:
    year: int
    total_amount: float
    payment_count: int
    average_payment: float


@dataclass(frozen=True)
class ExtraPaymentPlan:
    """
    Ordered extra payments, at most one per month.

    Attributes:
        payments: Payments sorted by month
        yearly_limit: Max share of the original loan payable per loan year,
            or None for an unlimited plan
        loan_amount: Original loan amount the limit refers to
    """

    payments: tuple[ExtraPayment, ...]
    yearly_limit: Percentage | None
    loan_amount: LoanAmount

    @property
    def max_yearly_amount(self) -> float | None:
        if self.yearly_limit is None:
            return None
        return self.loan_amount.euros * self.yearly_limit.value / 100

    def remaining_yearly_limit(self, year: int) -> float | None:
        """Euros still payable in ``year``; None for unlimited plans."""
        if self.max_yearly_amount is None:
            return None
        used = yearly_totals(self.payments).get(year, 0.0)
        return round(max(0.0, self.max_yearly_amount - used), 2)

    def __str__(self) -> str:
        return format_extra_payment_plan(self)


def _check_plan(
    payments: tuple[ExtraPayment, ...], yearly_limit: Percentage | None, loan_amount: LoanAmount
) -> ExtraPaymentPlanError | None:
    months = [p.month for p in payments]
    if len(months) != len(set(months)):
        return ExtraPaymentPlanError.DUPLICATE_PAYMENT_MONTH
    if yearly_limit is not None:
        cap = loan_amount.euros * yearly_limit.value / 100
        if any(total > cap + 1e-9 for total in yearly_totals(payments).values()):
            return ExtraPaymentPlanError.EXCEEDS_YEARLY_LIMIT
    return None


def create_extra_payment_plan(
    payments: Iterable[ExtraPayment],
    loan_amount: LoanAmount,
    yearly_limit: Percentage | None = None,
) -> Result[ExtraPaymentPlan]:
    """
    Smart constructor for ExtraPaymentPlan.

    A limited plan needs at least one payment (NoPayments). Two payments in
    the same month fail with DuplicatePaymentMonth: combine them first.
    """
    ordered = tuple(sorted(payments))
    if not ordered and yearly_limit is not None:
        return Result.fail(ExtraPaymentPlanError.NO_PAYMENTS)
    error = _check_plan(ordered, yearly_limit, loan_amount)
    if error is not None:
        return Result.fail(error)
    return Result.ok(ExtraPaymentPlan(ordered, yearly_limit, loan_amount))


def add_payment_to_plan(plan: ExtraPaymentPlan, payment: ExtraPayment) -> Result[ExtraPaymentPlan]:
    """New plan containing ``payment``."""
    payments = tuple(sorted((*plan.payments, payment)))
    error = _check_plan(payments, plan.yearly_limit, plan.loan_amount)
    if error is not None:
        return Result.fail(error)
    return Result.ok(ExtraPaymentPlan(payments, plan.yearly_limit, plan.loan_amount))


def remove_payment_from_plan(plan: ExtraPaymentPlan, month: PaymentMonth) -> ExtraPaymentPlan:
    payments = tuple(p for p in plan.payments if p.month != month)
    return ExtraPaymentPlan(payments, plan.yearly_limit, plan.loan_amount)


def yearly_summaries(plan: ExtraPaymentPlan) -> list[YearlyPaymentSummary]:
    """One summary per loan year that has payments, ordered by year."""
    grouped: dict[int, list[float]] = defaultdict(list)
    for payment in plan.payments:
        grouped[payment.payment_year].append(payment.amount.euros)
    return [
        YearlyPaymentSummary(
            year=year,
            total_amount=round(sum(amounts), 2),
            payment_count=len(amounts),
            average_payment=round(sum(amounts) / len(amounts), 2),
        )
        for year, amounts in sorted(grouped.items())
    ]


def format_extra_payment_plan(plan: ExtraPaymentPlan) -> str:
    total = total_extra_payments(plan.payments).unwrap_or(ZERO_MONEY)
    if plan.yearly_limit is None:
        limit = "Unbegrenzte Sondertilgungen"
    else:
        limit = f"Maximal {format_percentage(plan.yearly_limit, 0)} der Darlehenssumme pro Jahr"
    return f"Sondertilgungsplan: {len(plan.payments)} Zahlungen, Gesamt: {format_money(total)} ({limit})"
