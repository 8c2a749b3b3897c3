"""
Tests for amortization schedules, schedule comparison and loan status.
"""

from dataclasses import replace
from datetime import date

import pandas as pd
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from mortgagelab.calculations.amortization import (
    AmortizationError,
    calculate_loan_status,
    compare_schedules,
    generate_amortization_schedule,
    get_remaining_balance,
    get_schedule_entry,
    remaining_months_for_balance,
)
from mortgagelab.core.utils import MortgageLabWarning, add_months
from mortgagelab.types.extra_payment import create_extra_payment
from mortgagelab.types.loan_configuration import (
    create_loan_configuration,
    loan_configuration_from_input,
)
from mortgagelab.values.scalars import create_money

# Module-level so hypothesis tests do not depend on function-scoped fixtures
STANDARD = loan_configuration_from_input(300_000, 3.5, term_in_months=300).unwrap()
BASE_SCHEDULE = generate_amortization_schedule(STANDARD).unwrap()


def _extra(month, amount):
    return create_extra_payment(month, amount).unwrap()


class TestScheduleGeneration:
    """Schedules pay the loan off exactly."""

    def test_standard_loan_pays_off(self, standard_config):
        schedule = generate_amortization_schedule(standard_config).unwrap()
        assert len(schedule) <= 300
        assert schedule.entries[-1].remaining_balance == 0
        assert schedule.entries[0].interest_component == 875.00
        assert schedule.entries[0].principal_component == 626.87
        assert schedule.metrics.payoff_month == len(schedule)
        assert schedule.metrics.payoff_year == 25

    def test_balances_decrease(self, standard_config):
        schedule = generate_amortization_schedule(standard_config).unwrap()
        balances = [e.remaining_balance for e in schedule]
        assert all(a > b for a, b in zip(balances, balances[1:]))

    def test_principal_adds_up_to_loan(self, standard_config):
        schedule = generate_amortization_schedule(standard_config).unwrap()
        metrics = schedule.metrics
        assert metrics.total_principal == pytest.approx(300_000, abs=1.0)
        assert metrics.total_payments == pytest.approx(
            metrics.total_interest + metrics.total_principal, abs=0.01
        )

    def test_each_month_adds_up(self, standard_config):
        for entry in generate_amortization_schedule(standard_config).unwrap():
            assert entry.regular_payment == pytest.approx(
                entry.interest_component + entry.principal_component, abs=0.005
            )

    def test_zero_rate_schedule(self):
        config = create_loan_configuration(12_000, 0, 120, 100).unwrap()
        schedule = generate_amortization_schedule(config).unwrap()
        assert len(schedule) == 120
        assert {e.principal_component for e in schedule} == {100.0}
        assert schedule.metrics.total_interest == 0

    def test_final_settlement_above_payment_warns(self):
        """A payment just inside the tolerance leaves a residual for the last month."""
        config = create_loan_configuration(300_000, 3.5, 300, 1500.88).unwrap()
        with pytest.warns(MortgageLabWarning, match="final month settles"):
            schedule = generate_amortization_schedule(config).unwrap()
        last = schedule.entries[-1]
        assert len(schedule) == 300
        assert last.remaining_balance == 0
        assert last.interest_component + last.principal_component > 1500.88 + 1.0

    def test_exact_annuity_settles_quietly(self, standard_config, recwarn):
        generate_amortization_schedule(standard_config).unwrap()
        assert not [w for w in recwarn if issubclass(w.category, MortgageLabWarning)]

    def test_payment_below_interest(self, standard_config):
        broken = replace(standard_config, monthly_payment=create_money(875).unwrap())
        result = generate_amortization_schedule(broken)
        assert result.error == AmortizationError.PAYMENT_BELOW_INTEREST

    def test_duplicate_extra_months(self, standard_config):
        result = generate_amortization_schedule(
            standard_config, [_extra(12, 1_000), _extra(12, 2_000)]
        )
        assert result.error == AmortizationError.DUPLICATE_PAYMENT_MONTH

    def test_accepts_generators(self, standard_config):
        schedule = generate_amortization_schedule(
            standard_config, (_extra(m, 1_000) for m in (12, 24))
        ).unwrap()
        assert [p.month.value for p in schedule.extra_payments] == [12, 24]
        assert schedule.metrics.total_extra_payments == 2_000


class TestExtraPayments:
    def test_extra_payment_shortens_loan(self, standard_config):
        schedule = generate_amortization_schedule(standard_config, [_extra(12, 20_000)]).unwrap()
        assert schedule.entries[11].extra_payment == 20_000
        assert schedule.metrics.term_reduction > 0
        assert schedule.metrics.interest_saved > 0
        assert schedule.metrics.total_principal + schedule.metrics.total_extra_payments == (
            pytest.approx(300_000, abs=1.0)
        )

    def test_oversized_extra_is_truncated(self, standard_config):
        with pytest.warns(MortgageLabWarning, match="truncated"):
            schedule = generate_amortization_schedule(
                standard_config, [_extra(1, 300_000)]
            ).unwrap()
        assert len(schedule) == 1
        assert schedule.entries[0].extra_payment == pytest.approx(300_000 - 626.87)
        assert schedule.entries[0].remaining_balance == 0

    def test_extras_after_payoff_are_ignored(self, standard_config):
        with pytest.warns(MortgageLabWarning, match="after the payoff month"):
            schedule = generate_amortization_schedule(
                standard_config, [_extra(1, 299_373.13), _extra(5, 1_000)]
            ).unwrap()
        assert len(schedule) == 1
        assert [p.month.value for p in schedule.extra_payments] == [1]

    @settings(max_examples=40, deadline=None)
    @given(
        month=st.integers(min_value=1, max_value=300),
        amount=st.floats(min_value=1, max_value=100_000, allow_nan=False),
    )
    def test_extra_payment_never_lengthens_the_loan(self, month, amount):
        """Adding a valid extra payment never increases the months to payoff."""
        schedule = generate_amortization_schedule(STANDARD, [_extra(month, amount)]).unwrap()
        assert len(schedule) <= len(BASE_SCHEDULE)
        assert schedule.metrics.total_interest <= BASE_SCHEDULE.metrics.total_interest

    @settings(max_examples=40, deadline=None)
    @given(
        months=st.sets(st.integers(min_value=1, max_value=300), max_size=5),
        amount=st.integers(min_value=1, max_value=30_000),
    )
    def test_conservation(self, months, amount):
        """Principal and extra components always sum to the loan amount."""
        extras = [_extra(m, amount) for m in months]
        schedule = generate_amortization_schedule(STANDARD, extras).unwrap()
        repaid = schedule.metrics.total_principal + schedule.metrics.total_extra_payments
        assert repaid == pytest.approx(300_000, abs=1.0)
        assert schedule.entries[-1].remaining_balance == 0


class TestScheduleQueries:
    def test_entry_lookup(self):
        assert get_schedule_entry(BASE_SCHEDULE, 1).data.month == 1
        assert get_schedule_entry(BASE_SCHEDULE, 0).error == AmortizationError.MONTH_OUT_OF_RANGE
        assert get_schedule_entry(BASE_SCHEDULE, 301).error == AmortizationError.MONTH_OUT_OF_RANGE

    def test_remaining_balance_lookup(self):
        assert get_remaining_balance(BASE_SCHEDULE, 0) == 300_000
        assert get_remaining_balance(BASE_SCHEDULE, 1) == 299_373.13
        assert get_remaining_balance(BASE_SCHEDULE, 1_000) == 0

    def test_to_frame(self):
        frame = BASE_SCHEDULE.to_frame()
        assert frame.index.name == "month"
        assert list(frame.columns) == [
            "interest",
            "principal",
            "extra_payment",
            "total_payment",
            "remaining_balance",
        ]
        assert len(frame) == len(BASE_SCHEDULE)
        assert frame["principal"].sum() == pytest.approx(300_000, abs=1.0)

    def test_to_frame_with_dates(self):
        frame = BASE_SCHEDULE.to_frame(start_date=date(2026, 1, 15))
        assert frame.columns[0] == "date"
        assert frame["date"].iloc[0] == pd.Timestamp("2026-02-01")
        assert frame["date"].iloc[12] == pd.Timestamp("2027-02-01")


class TestCompareSchedules:
    def test_extra_payment_is_worthwhile(self):
        alternative = generate_amortization_schedule(STANDARD, [_extra(12, 10_000)]).unwrap()
        comparison = compare_schedules(BASE_SCHEDULE, alternative)
        assert comparison.interest_savings > 0
        assert comparison.term_reduction > 0
        assert comparison.additional_extra_payments == 10_000
        assert comparison.return_on_investment == pytest.approx(
            comparison.interest_savings / 10_000 * 100, abs=0.01
        )
        assert comparison.is_worthwhile

    def test_identical_schedules(self):
        comparison = compare_schedules(BASE_SCHEDULE, BASE_SCHEDULE)
        assert comparison.interest_savings == 0
        assert comparison.return_on_investment == 0
        assert not comparison.is_worthwhile


class TestLoanStatus:
    START = date(2020, 1, 1)

    def test_mid_schedule(self):
        status = calculate_loan_status(STANDARD, self.START, as_of=date(2025, 1, 1)).unwrap()
        assert status.months_elapsed == 60
        assert status.current_balance == get_remaining_balance(BASE_SCHEDULE, 60)
        assert 0 < status.remaining_months <= 240
        assert status.payoff_date == add_months(date(2025, 1, 1), status.remaining_months)
        assert status.remaining_interest > 0
        assert status.future_schedule is None
        assert not status.is_paid_off

    def test_future_schedule(self):
        status = calculate_loan_status(
            STANDARD, self.START, as_of=date(2025, 1, 1), include_schedule=True
        ).unwrap()
        assert status.future_schedule == BASE_SCHEDULE.entries[60:]

    def test_before_start(self):
        status = calculate_loan_status(STANDARD, self.START, as_of=date(2019, 6, 1)).unwrap()
        assert status.months_elapsed == 0
        assert status.current_balance == 300_000
        assert status.remaining_months <= 300

    def test_after_term(self):
        status = calculate_loan_status(STANDARD, self.START, as_of=date(2050, 1, 1)).unwrap()
        assert status.months_elapsed == 300
        assert status.is_paid_off
        assert status.remaining_months == 0
        assert status.remaining_interest == 0

    def test_extra_payments_reduce_remaining_months(self):
        as_of = date(2025, 1, 1)
        plain = calculate_loan_status(STANDARD, self.START, as_of=as_of).unwrap()
        with_extra = calculate_loan_status(
            STANDARD, self.START, as_of=as_of, extra_payments=[_extra(24, 30_000)]
        ).unwrap()
        assert with_extra.current_balance < plain.current_balance
        assert with_extra.remaining_months < plain.remaining_months

    def test_early_payoff_caps_elapsed_months(self):
        """A loan repaid in month 2 has only two elapsed months a year later."""
        with pytest.warns(MortgageLabWarning, match="truncated"):
            status = calculate_loan_status(
                STANDARD, self.START, as_of=date(2021, 1, 1), extra_payments=[_extra(2, 300_000)]
            ).unwrap()
        assert status.months_elapsed == 2
        assert status.current_balance == 0
        assert status.remaining_months == 0
        assert status.is_paid_off

    def test_remaining_months_for_balance(self):
        assert remaining_months_for_balance(0, 100, 0.01) == 0
        assert remaining_months_for_balance(1_000, 100, 0) == 10
        assert remaining_months_for_balance(100_000, 500, 0.005) is None
