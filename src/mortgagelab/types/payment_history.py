"""
Payment history of a running mortgage.

Records what the borrower actually paid against the scheduled payment of each
month, classifies every record (on time, late, partial, ...) and derives the
statistics banks look at when judging whether a loan is in good standing.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields, replace
from datetime import date
from enum import Enum
from typing import Iterable

import pandas as pd

from mortgagelab.core.result import Result
from mortgagelab.core.utils import add_years, is_finite_number, months_between
from mortgagelab.values.domain import PaymentMonth, create_payment_month, format_payment_month
from mortgagelab.values.scalars import ZERO_MONEY, Money, create_money, format_money

from .monthly_payment import MonthlyPayment

logger = logging.getLogger(__name__)

MAX_LATE_DAYS = 90
MIN_PARTIAL_PAYMENT_PCT = 10.0
OVERPAYMENT_TOLERANCE = 0.01
MAX_HISTORY_AGE_YEARS = 10

# Good standing thresholds
MIN_CONSISTENCY_SCORE = 90
MAX_MISSED_PAYMENTS = 1
MAX_LATE_PAYMENTS = 2


class PaymentStatus(str, Enum):
    SCHEDULED = "Scheduled"
    ON_TIME = "OnTime"
    LATE = "Late"
    PARTIAL = "Partial"
    OVERPAID = "Overpaid"
    MISSED = "Missed"
    REVERSED = "Reversed"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    PaymentStatus.SCHEDULED: "Geplant",
    PaymentStatus.ON_TIME: "Pünktlich",
    PaymentStatus.LATE: "Verspätet",
    PaymentStatus.PARTIAL: "Teilzahlung",
    PaymentStatus.OVERPAID: "Überzahlung",
    PaymentStatus.MISSED: "Ausgefallen",
    PaymentStatus.REVERSED: "Rückgängig",
}


class PaymentMethod(str, Enum):
    SEPA_DIRECT_DEBIT = "SEPA_DirectDebit"
    BANK_TRANSFER = "BankTransfer"
    ONLINE_BANKING = "OnlineBanking"
    STANDING_ORDER = "Standing_Order"
    CASH = "Cash"
    CHECK = "Check"

    @property
    def label(self) -> str:
        return _METHOD_LABELS[self]


_METHOD_LABELS = {
    PaymentMethod.SEPA_DIRECT_DEBIT: "SEPA Lastschrift",
    PaymentMethod.BANK_TRANSFER: "Überweisung",
    PaymentMethod.ONLINE_BANKING: "Online Banking",
    PaymentMethod.STANDING_ORDER: "Dauerauftrag",
    PaymentMethod.CASH: "Bar",
    PaymentMethod.CHECK: "Scheck",
}


class PaymentHistoryError(str, Enum):
    INVALID_LOAN_ID = "InvalidLoanId"
    INVALID_START_DATE = "InvalidStartDate"
    DUPLICATE_PAYMENT_MONTH = "DuplicatePaymentMonth"
    INVALID_PAYMENT_RECORD = "InvalidPaymentRecord"
    FUTURE_PAYMENT_DATE = "FuturePaymentDate"
    NEGATIVE_PAYMENT_AMOUNT = "NegativePaymentAmount"


@dataclass(frozen=True)
class PaymentRecord:
    """
    One month's payment as it actually happened.

    Attributes:
        month: Schedule month the payment belongs to
        scheduled_payment: Payment the schedule asked for
        actual_payment: Amount received (0 for a missed payment)
        payment_date: Date the money arrived
        status: Classification of the payment
        method: How the payment was made
        extra_payment: Sondertilgung made together with this payment
        due_date: Contractual due date, if known
        notes: Free text
    """

    month: PaymentMonth
    scheduled_payment: MonthlyPayment
    actual_payment: Money
    payment_date: date
    status: PaymentStatus
    method: PaymentMethod = PaymentMethod.SEPA_DIRECT_DEBIT
    extra_payment: Money | None = None
    due_date: date | None = None
    notes: str = ""

    @property
    def total_paid(self) -> float:
        extra = self.extra_payment.euros if self.extra_payment is not None else 0.0
        return round(self.actual_payment.euros + extra, 2)

    @property
    def variance(self) -> float:
        """Actual minus scheduled amount, without the extra payment."""
        return round(self.actual_payment.euros - self.scheduled_payment.total.euros, 2)

    def __str__(self) -> str:
        return format_payment_record(self)


def determine_payment_status(
    actual_amount: float,
    scheduled_amount: float,
    payment_date: date | None = None,
    due_date: date | None = None,
) -> PaymentStatus:
    """
    Classify a payment by amount and, when both dates are known, by timing.

    Less than 10 % of the scheduled amount counts as missed. A full payment
    arriving after ``due_date`` is late.
    """
    if actual_amount == 0 or scheduled_amount <= 0:
        return PaymentStatus.MISSED
    paid_pct = actual_amount / scheduled_amount * 100
    if paid_pct < MIN_PARTIAL_PAYMENT_PCT:
        return PaymentStatus.MISSED
    if actual_amount - scheduled_amount > OVERPAYMENT_TOLERANCE:
        return PaymentStatus.OVERPAID
    if paid_pct < 100 and scheduled_amount - actual_amount > OVERPAYMENT_TOLERANCE:
        return PaymentStatus.PARTIAL
    if payment_date is not None and due_date is not None and payment_date > due_date:
        return PaymentStatus.LATE
    return PaymentStatus.ON_TIME


def _amount(value: float) -> Result[Money]:
    if is_finite_number(value) and value < 0:
        return Result.fail(PaymentHistoryError.NEGATIVE_PAYMENT_AMOUNT)
    return create_money(value).map_error(PaymentHistoryError.INVALID_PAYMENT_RECORD)


def create_payment_record(
    month: PaymentMonth | int,
    scheduled_payment: MonthlyPayment,
    actual_amount: float,
    payment_date: date,
    method: PaymentMethod | str = PaymentMethod.SEPA_DIRECT_DEBIT,
    extra_amount: float | None = None,
    notes: str = "",
    *,
    due_date: date | None = None,
    as_of: date | None = None,
) -> Result[PaymentRecord]:
    """
    Smart constructor for PaymentRecord.

    Args:
        month: Schedule month, validated PaymentMonth or raw number
        scheduled_payment: Payment the schedule asked for
        actual_amount: Amount received in EUR
        payment_date: Date the money arrived; may not lie after ``as_of``
        method: ``PaymentMethod`` member or its value
        extra_amount: Sondertilgung paid together with the instalment
        notes: Free text
        due_date: Contractual due date; enables the Late classification
        as_of: Reference date for the future-date check (defaults to today)

    Returns:
        Result with the record, the status derived from amounts and dates
    """
    if not isinstance(month, PaymentMonth):
        payment_month = create_payment_month(month)
        if not payment_month:
            return payment_month.map_error(PaymentHistoryError.INVALID_PAYMENT_RECORD)
        month = payment_month.data

    actual = _amount(actual_amount)
    if not actual:
        return actual

    extra = None
    if extra_amount is not None:
        extra_result = _amount(extra_amount)
        if not extra_result:
            return extra_result
        extra = extra_result.data

    if payment_date > (as_of or date.today()):
        return Result.fail(PaymentHistoryError.FUTURE_PAYMENT_DATE)

    try:
        method = PaymentMethod(method)
    except ValueError:
        return Result.fail(PaymentHistoryError.INVALID_PAYMENT_RECORD)

    status = determine_payment_status(
        actual.data.euros, scheduled_payment.total.euros, payment_date, due_date
    )
    return Result.ok(
        PaymentRecord(
            month=month,
            scheduled_payment=scheduled_payment,
            actual_payment=actual.data,
            payment_date=payment_date,
            status=status,
            method=method,
            extra_payment=extra,
            due_date=due_date,
            notes=notes,
        )
    )


# --- History ----------------------------------------------------------------


@dataclass(frozen=True)
class PaymentHistory:
    """
    Payment records of one loan, ordered by month, at most one per month.

    Attributes:
        loan_id: Identifier of the loan
        start_date: Date the loan started
        payments: Records sorted by month
        last_updated: Date of the last change
    """

    loan_id: str
    start_date: date
    payments: tuple[PaymentRecord, ...] = ()
    last_updated: date | None = None

    def get(self, month: int) -> PaymentRecord | None:
        return next((p for p in self.payments if p.month.value == month), None)

    @property
    def last_payment(self) -> PaymentRecord | None:
        return self.payments[-1] if self.payments else None


def _ordered(payments: Iterable[PaymentRecord]) -> Result[tuple[PaymentRecord, ...]]:
    ordered = tuple(sorted(payments, key=lambda p: p.month.value))
    months = [p.month.value for p in ordered]
    if len(months) != len(set(months)):
        return Result.fail(PaymentHistoryError.DUPLICATE_PAYMENT_MONTH)
    return Result.ok(ordered)


def create_payment_history(
    loan_id: str,
    start_date: date,
    payments: Iterable[PaymentRecord] = (),
    *,
    as_of: date | None = None,
) -> Result[PaymentHistory]:
    """
    Smart constructor for PaymentHistory.

    The start date must lie within the ten years before ``as_of`` (defaults
    to today). Records are sorted by month; two records for the same month
    fail with DuplicatePaymentMonth.
    """
    as_of = as_of or date.today()
    if not loan_id.strip():
        return Result.fail(PaymentHistoryError.INVALID_LOAN_ID)
    if start_date > as_of or start_date < add_years(as_of, -MAX_HISTORY_AGE_YEARS):
        return Result.fail(PaymentHistoryError.INVALID_START_DATE)

    ordered = _ordered(payments)
    if not ordered:
        return ordered
    return Result.ok(PaymentHistory(loan_id.strip(), start_date, ordered.data, as_of))


def add_payment_record(history: PaymentHistory, record: PaymentRecord) -> Result[PaymentHistory]:
    """New history including ``record``."""
    if history.get(record.month.value) is not None:
        return Result.fail(PaymentHistoryError.DUPLICATE_PAYMENT_MONTH)
    ordered = _ordered((*history.payments, record)).unwrap()
    return Result.ok(replace(history, payments=ordered, last_updated=date.today()))


def update_payment_record(history: PaymentHistory, month: int, **changes) -> Result[PaymentHistory]:
    """
    Replace fields of the record for ``month``.

    The month itself cannot be changed. Unknown months, unknown fields and
    month changes fail with InvalidPaymentRecord.
    """
    allowed = {f.name for f in fields(PaymentRecord)} - {"month"}
    if history.get(month) is None or not changes.keys() <= allowed:
        return Result.fail(PaymentHistoryError.INVALID_PAYMENT_RECORD)
    payments = tuple(
        replace(p, **changes) if p.month.value == month else p for p in history.payments
    )
    return Result.ok(replace(history, payments=payments, last_updated=date.today()))


def total_payments_made(history: PaymentHistory) -> Money:
    """Everything received, regular instalments plus extra payments."""
    total = sum(p.total_paid for p in history.payments)
    return create_money(round(total, 2)).unwrap_or(ZERO_MONEY)


def total_scheduled_payments(history: PaymentHistory) -> Money:
    total = sum(p.scheduled_payment.total.euros for p in history.payments)
    return create_money(round(total, 2)).unwrap_or(ZERO_MONEY)


def payment_variance(history: PaymentHistory) -> float:
    """Paid minus scheduled; positive when the borrower paid ahead."""
    return round(total_payments_made(history).euros - total_scheduled_payments(history).euros, 2)


@dataclass(frozen=True)
class PaymentStatistics:
    total_payments: int = 0
    on_time_payments: int = 0
    late_payments: int = 0
    missed_payments: int = 0
    partial_payments: int = 0
    overpayments: int = 0
    average_payment_amount: float = 0.0
    consistency_score: int = 0


def get_payment_statistics(history: PaymentHistory) -> PaymentStatistics:
    """
    Counts per status, the average instalment and a 0-100 consistency score.

    The score is the share of on-time and overpaid records.
    """
    payments = history.payments
    if not payments:
        return PaymentStatistics()

    counts = {status: 0 for status in PaymentStatus}
    for payment in payments:
        counts[payment.status] += 1
    positive = counts[PaymentStatus.ON_TIME] + counts[PaymentStatus.OVERPAID]
    average = sum(p.actual_payment.euros for p in payments) / len(payments)
    return PaymentStatistics(
        total_payments=len(payments),
        on_time_payments=counts[PaymentStatus.ON_TIME],
        late_payments=counts[PaymentStatus.LATE],
        missed_payments=counts[PaymentStatus.MISSED],
        partial_payments=counts[PaymentStatus.PARTIAL],
        overpayments=counts[PaymentStatus.OVERPAID],
        average_payment_amount=round(average, 2),
        consistency_score=math.floor(positive / len(payments) * 100 + 0.5),
    )


def payments_by_status(history: PaymentHistory, status: PaymentStatus) -> list[PaymentRecord]:
    return [p for p in history.payments if p.status is status]


def payments_in_date_range(history: PaymentHistory, start: date, end: date) -> list[PaymentRecord]:
    """Records paid between ``start`` and ``end``, both inclusive."""
    return [p for p in history.payments if start <= p.payment_date <= end]


def missing_months(history: PaymentHistory, as_of: date | None = None) -> list[int]:
    """Schedule months due by ``as_of`` that have no record at all."""
    due = months_between(history.start_date, as_of or date.today())
    recorded = {p.month.value for p in history.payments}
    return [month for month in range(1, due + 1) if month not in recorded]


def is_in_good_standing(history: PaymentHistory) -> bool:
    """
    At least 90 % consistency, at most one missed and two late payments.

    An empty history is in good standing.
    """
    stats = get_payment_statistics(history)
    if stats.total_payments == 0:
        return True
    return (
        stats.consistency_score >= MIN_CONSISTENCY_SCORE
        and stats.missed_payments <= MAX_MISSED_PAYMENTS
        and stats.late_payments <= MAX_LATE_PAYMENTS
    )


def calculate_days_late(record: PaymentRecord, due_date: date | None = None) -> int:
    """Days between due date and payment for late records, else 0."""
    due_date = due_date or record.due_date
    if record.status is not PaymentStatus.LATE or due_date is None:
        return 0
    return max(0, (record.payment_date - due_date).days)


def is_seriously_delinquent(record: PaymentRecord, due_date: date | None = None) -> bool:
    return calculate_days_late(record, due_date) > MAX_LATE_DAYS


@dataclass(frozen=True)
class PaymentSummary:
    loan_id: str
    total_payments: int
    total_amount: float
    average_payment: float
    consistency_score: int
    good_standing: bool
    last_payment_date: date | None


def export_payment_summary(history: PaymentHistory) -> PaymentSummary:
    stats = get_payment_statistics(history)
    last = history.last_payment
    summary = PaymentSummary(
        loan_id=history.loan_id,
        total_payments=stats.total_payments,
        total_amount=total_payments_made(history).euros,
        average_payment=stats.average_payment_amount,
        consistency_score=stats.consistency_score,
        good_standing=is_in_good_standing(history),
        last_payment_date=last.payment_date if last is not None else None,
    )
    logger.debug(
        "Payment summary for %s: %d records, score %d, good standing %s",
        summary.loan_id,
        summary.total_payments,
        summary.consistency_score,
        summary.good_standing,
    )
    return summary


def payment_history_to_frame(history: PaymentHistory) -> pd.DataFrame:
    """One row per record, indexed by schedule month."""
    rows = [
        {
            "month": p.month.value,
            "payment_date": p.payment_date,
            "scheduled": p.scheduled_payment.total.euros,
            "actual": p.actual_payment.euros,
            "extra_payment": p.extra_payment.euros if p.extra_payment is not None else 0.0,
            "variance": p.variance,
            "status": p.status.value,
            "method": p.method.value,
        }
        for p in history.payments
    ]
    columns = [
        "month",
        "payment_date",
        "scheduled",
        "actual",
        "extra_payment",
        "variance",
        "status",
        "method",
    ]
    return pd.DataFrame(rows, columns=columns).set_index("month")


def format_payment_record(record: PaymentRecord) -> str:
    """E.g. ``"Monat 3 (Jahr 1, 3. Monat): 1.501,87 € (geplant: 1.501,87 €) - Pünktlich"``."""
    text = (
        f"{format_payment_month(record.month)}: {format_money(record.actual_payment)} "
        f"(geplant: {format_money(record.scheduled_payment.total)}) - {record.status.label}"
    )
    if record.extra_payment is not None and record.extra_payment.euros > 0:
        text += f" + Sondertilgung: {format_money(record.extra_payment)}"
    return text
