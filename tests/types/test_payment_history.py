"""
Tests for payment records and the payment history of a running loan.
"""

from datetime import date

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mortgagelab.core.utils import add_months
from mortgagelab.types.monthly_payment import create_monthly_payment
from mortgagelab.types.payment_history import (
    PaymentHistoryError,
    PaymentMethod,
    PaymentStatus,
    add_payment_record,
    calculate_days_late,
    create_payment_history,
    create_payment_record,
    determine_payment_status,
    export_payment_summary,
    get_payment_statistics,
    is_in_good_standing,
    is_seriously_delinquent,
    missing_months,
    payment_history_to_frame,
    payment_variance,
    payments_by_status,
    payments_in_date_range,
    total_payments_made,
    total_scheduled_payments,
    update_payment_record,
)

AS_OF = date(2026, 6, 30)
START = date(2024, 1, 1)
SCHEDULED = create_monthly_payment(626.87, 875.00).unwrap()


def _record(month, amount, paid_on=None, **kwargs):
    paid_on = paid_on or add_months(START, month)
    return create_payment_record(month, SCHEDULED, amount, paid_on, as_of=AS_OF, **kwargs).unwrap()


@pytest.fixture
def mixed_history():
    """One record of every classified status in months 1-5."""
    records = [
        _record(1, 1501.87, due_date=date(2024, 2, 1)),
        _record(2, 1501.87, paid_on=date(2024, 3, 5), due_date=date(2024, 3, 1)),
        _record(3, 800),
        _record(4, 100),
        _record(5, 2000, extra_amount=5_000, method=PaymentMethod.BANK_TRANSFER),
    ]
    return create_payment_history("home", START, reversed(records), as_of=AS_OF).unwrap()


class TestPaymentStatus:
    """Amounts decide the status first, the due date only for full payments."""

    @pytest.mark.parametrize(
        "actual, status",
        [
            (1501.87, PaymentStatus.ON_TIME),
            (1501.865, PaymentStatus.ON_TIME),
            (2000, PaymentStatus.OVERPAID),
            (800, PaymentStatus.PARTIAL),
            (150.19, PaymentStatus.PARTIAL),
            (150.18, PaymentStatus.MISSED),
            (0, PaymentStatus.MISSED),
        ],
    )
    def test_amounts(self, actual, status):
        assert determine_payment_status(actual, 1501.87) is status

    def test_late_needs_both_dates(self):
        assert determine_payment_status(1501.87, 1501.87, date(2024, 3, 5)) is PaymentStatus.ON_TIME
        late = determine_payment_status(1501.87, 1501.87, date(2024, 3, 5), date(2024, 3, 1))
        assert late is PaymentStatus.LATE

    @given(extra=st.floats(min_value=0.02, max_value=100_000, allow_nan=False))
    def test_any_overpayment_is_overpaid(self, extra):
        assert determine_payment_status(1501.87 + extra, 1501.87) is PaymentStatus.OVERPAID

    def test_labels(self):
        assert PaymentStatus.MISSED.label == "Ausgefallen"
        assert PaymentMethod.STANDING_ORDER.label == "Dauerauftrag"


class TestPaymentRecord:
    def test_valid(self):
        record = _record(5, 2000, extra_amount=5_000, method="BankTransfer")
        assert record.month.value == 5
        assert record.method is PaymentMethod.BANK_TRANSFER
        assert record.total_paid == 7_000
        assert record.variance == pytest.approx(498.13)

    @pytest.mark.parametrize(
        "kwargs, error",
        [
            ({"month": 0}, PaymentHistoryError.INVALID_PAYMENT_RECORD),
            ({"actual_amount": -1}, PaymentHistoryError.NEGATIVE_PAYMENT_AMOUNT),
            ({"actual_amount": float("nan")}, PaymentHistoryError.INVALID_PAYMENT_RECORD),
            ({"extra_amount": -5}, PaymentHistoryError.NEGATIVE_PAYMENT_AMOUNT),
            ({"payment_date": date(2026, 7, 1)}, PaymentHistoryError.FUTURE_PAYMENT_DATE),
            ({"method": "Bitcoin"}, PaymentHistoryError.INVALID_PAYMENT_RECORD),
        ],
    )
    def test_invalid(self, kwargs, error):
        arguments = {
            "month": 1,
            "scheduled_payment": SCHEDULED,
            "actual_amount": 1501.87,
            "payment_date": date(2024, 2, 1),
            **kwargs,
        }
        assert create_payment_record(**arguments, as_of=AS_OF).error == error

    def test_days_late(self):
        late = _record(2, 1501.87, paid_on=date(2024, 3, 5), due_date=date(2024, 3, 1))
        assert calculate_days_late(late) == 4
        assert calculate_days_late(late, date(2024, 1, 1)) == 64
        assert not is_seriously_delinquent(late)
        assert is_seriously_delinquent(late, date(2023, 11, 1))

    def test_days_late_only_for_late_records(self):
        on_time = _record(1, 1501.87)
        assert calculate_days_late(on_time, date(2023, 1, 1)) == 0

    def test_format(self):
        record = _record(5, 2000, extra_amount=5_000)
        assert str(record) == (
            "Monat 5 (Jahr 1, 5. Monat): 2.000,00\u00a0€ (geplant: 1.501,87\u00a0€) "
            "- Überzahlung + Sondertilgung: 5.000,00\u00a0€"
        )


class TestPaymentHistory:
    def test_create_sorts_records(self, mixed_history):
        assert mixed_history.loan_id == "home"
        assert [p.month.value for p in mixed_history.payments] == [1, 2, 3, 4, 5]
        assert mixed_history.last_updated == AS_OF

    @pytest.mark.parametrize(
        "loan_id, start, error",
        [
            ("  ", START, PaymentHistoryError.INVALID_LOAN_ID),
            ("home", date(2026, 7, 1), PaymentHistoryError.INVALID_START_DATE),
            ("home", date(2016, 6, 29), PaymentHistoryError.INVALID_START_DATE),
        ],
    )
    def test_invalid(self, loan_id, start, error):
        assert create_payment_history(loan_id, start, as_of=AS_OF).error == error

    def test_duplicate_months(self):
        records = [_record(1, 1501.87), _record(1, 800)]
        result = create_payment_history("home", START, records, as_of=AS_OF)
        assert result.error == PaymentHistoryError.DUPLICATE_PAYMENT_MONTH

    def test_add_record(self, mixed_history):
        grown = add_payment_record(mixed_history, _record(6, 1501.87)).unwrap()
        assert grown.get(6) is not None
        assert mixed_history.get(6) is None
        duplicate = add_payment_record(grown, _record(6, 1501.87))
        assert duplicate.error == PaymentHistoryError.DUPLICATE_PAYMENT_MONTH

    def test_update_record(self, mixed_history):
        updated = update_payment_record(
            mixed_history, 4, status=PaymentStatus.REVERSED, notes="Lastschrift zurück"
        ).unwrap()
        assert updated.get(4).status is PaymentStatus.REVERSED
        assert updated.get(4).notes == "Lastschrift zurück"
        assert mixed_history.get(4).status is PaymentStatus.MISSED

    @pytest.mark.parametrize(
        "month, changes",
        [(9, {"notes": "x"}), (4, {"month": 5}), (4, {"colour": "blue"})],
    )
    def test_invalid_update(self, mixed_history, month, changes):
        result = update_payment_record(mixed_history, month, **changes)
        assert result.error == PaymentHistoryError.INVALID_PAYMENT_RECORD


class TestPaymentAnalysis:
    def test_totals_and_variance(self, mixed_history):
        assert total_payments_made(mixed_history).euros == pytest.approx(10_903.74)
        assert total_scheduled_payments(mixed_history).euros == pytest.approx(7_509.35)
        assert payment_variance(mixed_history) == pytest.approx(3_394.39)

    def test_statistics(self, mixed_history):
        stats = get_payment_statistics(mixed_history)
        assert stats.total_payments == 5
        assert (
            stats.on_time_payments,
            stats.late_payments,
            stats.partial_payments,
            stats.missed_payments,
            stats.overpayments,
        ) == (1, 1, 1, 1, 1)
        assert stats.average_payment_amount == pytest.approx(1_180.75)
        assert stats.consistency_score == 40

    def test_filters(self, mixed_history):
        assert [p.month.value for p in payments_by_status(mixed_history, PaymentStatus.LATE)] == [2]
        in_range = payments_in_date_range(mixed_history, date(2024, 3, 1), date(2024, 4, 1))
        assert [p.month.value for p in in_range] == [2, 3]

    def test_missing_months(self, mixed_history):
        assert missing_months(mixed_history, date(2024, 7, 15)) == [6]
        assert missing_months(mixed_history, date(2024, 3, 1)) == []

    def test_good_standing(self, mixed_history):
        assert not is_in_good_standing(mixed_history)
        assert is_in_good_standing(create_payment_history("new", START, as_of=AS_OF).unwrap())

    def test_one_late_payment_in_ten_keeps_good_standing(self):
        records = [_record(m, 1501.87) for m in range(1, 10)]
        records.append(_record(10, 1501.87, paid_on=date(2024, 11, 20), due_date=date(2024, 11, 1)))
        history = create_payment_history("home", START, records, as_of=AS_OF).unwrap()
        assert get_payment_statistics(history).consistency_score == 90
        assert is_in_good_standing(history)

    def test_two_missed_payments_break_good_standing(self):
        records = [_record(m, 1501.87) for m in range(1, 19)]
        records += [_record(19, 0, paid_on=date(2025, 8, 1)), _record(20, 0, paid_on=date(2025, 9, 1))]
        history = create_payment_history("home", START, records, as_of=AS_OF).unwrap()
        assert get_payment_statistics(history).consistency_score == 90
        assert not is_in_good_standing(history)

    def test_summary(self, mixed_history):
        summary = export_payment_summary(mixed_history)
        assert summary.loan_id == "home"
        assert summary.total_payments == 5
        assert summary.total_amount == pytest.approx(10_903.74)
        assert not summary.good_standing
        assert summary.last_payment_date == date(2024, 6, 1)

    def test_to_frame(self, mixed_history):
        frame = payment_history_to_frame(mixed_history)
        assert frame.index.name == "month"
        assert list(frame.index) == [1, 2, 3, 4, 5]
        assert frame.loc[5, "extra_payment"] == 5_000
        assert frame.loc[2, "status"] == "Late"
        assert frame["scheduled"].sum() == pytest.approx(7_509.35)
