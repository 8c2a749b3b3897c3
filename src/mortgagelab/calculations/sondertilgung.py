"""
Sondertilgung rule engine.

Validates extra payments against a bank's ``GermanSondertilgungRules``,
prices them, and derives strategy recommendations and their effect on the
amortization schedule.

The yearly cap of a bank is always the largest entry of its percentage menu,
applied to the original loan amount per loan year (months 1-12, 13-24, ...).
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, Mapping

from mortgagelab.core.result import Result
from mortgagelab.core.utils import add_months
from mortgagelab.types.extra_payment import ExtraPayment
from mortgagelab.types.fixed_rate_period import FixedRatePeriod
from mortgagelab.types.loan_configuration import LoanConfiguration
from mortgagelab.types.sondertilgung_rules import (
    ExcessOnlyFee,
    FeeStructure,
    FixedFee,
    GermanSondertilgungRules,
    NoFee,
    PaymentDateRestriction,
    PercentageFee,
    SondertilgungRuleError,
    TieredFee,
)
from mortgagelab.values.domain import TYPICAL_CURRENT_RATE, LoanAmount
from mortgagelab.values.scalars import Money, create_money

from .amortization import generate_amortization_schedule

logger = logging.getLogger(__name__)

LOW_RISK_MAX_PCT = 10
MEDIUM_RISK_MAX_PCT = 20
BEFORE_EXPIRY_THRESHOLD_YEARS = 5.0
RECOMMENDATION_HORIZON_YEARS = 10.0
QUARTER_END_MONTHS = (3, 6, 9, 12)


class RiskLevel(str, Enum):
    LOW = "Niedrig"
    MEDIUM = "Mittel"
    HIGH = "Hoch"


class PaymentTiming(str, Enum):
    IMMEDIATELY = "Sofort"
    BEFORE_PERIOD_END = "Vor Zinsbindungsende"
    DURING_FIXED_PERIOD = "Während der Zinsbindung"


def _same_year_total(payment: ExtraPayment, existing: Iterable[ExtraPayment]) -> float:
    year = payment.payment_year
    return payment.amount.euros + sum(p.amount.euros for p in existing if p.payment_year == year)


def _is_last_day_of_month(day: date) -> bool:
    return day.day == calendar.monthrange(day.year, day.month)[1]


def _date_allowed(restriction: PaymentDateRestriction, payment_date: date) -> bool:
    if restriction is PaymentDateRestriction.ANY_TIME:
        return True
    if not _is_last_day_of_month(payment_date):
        return False
    if restriction is PaymentDateRestriction.MONTH_END:
        return True
    if restriction is PaymentDateRestriction.QUARTER_END:
        return payment_date.month in QUARTER_END_MONTHS
    return payment_date.month == 12


def validate_payment_timing(
    rules: GermanSondertilgungRules, payment: ExtraPayment, payment_date: date | None = None
) -> Result[None]:
    """
    Check blackout periods and, when a calendar date is given, the bank's
    payment-date policy (month, quarter or year end).
    """
    month = payment.month.value
    if any(period.contains(month) for period in rules.timing.blackout_periods):
        return Result.fail(SondertilgungRuleError.DURING_BLACKOUT_PERIOD)
    if payment_date is not None and not _date_allowed(
        rules.timing.allowed_payment_dates, payment_date
    ):
        return Result.fail(SondertilgungRuleError.INVALID_PAYMENT_DATE)
    return Result.ok()


def validate_notice_period(
    rules: GermanSondertilgungRules, notice_date: date, payment_date: date
) -> Result[None]:
    """Fail with InsufficientNotice unless the bank was told early enough."""
    if (payment_date - notice_date).days < rules.timing.notice_required_days:
        return Result.fail(SondertilgungRuleError.INSUFFICIENT_NOTICE)
    return Result.ok()


def validate_sondertilgung_payment(
    rules: GermanSondertilgungRules,
    payment: ExtraPayment,
    loan_amount: LoanAmount,
    existing_payments: Iterable[ExtraPayment] = (),
    fixed_rate_period: FixedRatePeriod | None = None,
    evaluation_date: date | None = None,
    *,
    payment_date: date | None = None,
) -> Result[None]:
    """
    Decide whether ``payment`` is admissible under ``rules``.

    Checks run in a fixed order and stop at the first failure:

    1. minimum and (optional) maximum amount
    2. the payment plus every existing payment of the same loan year against
       ``loan_amount × max(allowed_percentages) / 100``
    3. the grace period after the fixed-rate period started, when both
       ``fixed_rate_period`` and ``evaluation_date`` are given
    4. blackout periods and, with ``payment_date``, the payment-date policy

    Args:
        rules: Bank rule set
        payment: Candidate extra payment
        loan_amount: Original loan amount the percentages refer to
        existing_payments: Payments already planned
        fixed_rate_period: Period whose start opens the grace period
        evaluation_date: Date the payment would be made on
        payment_date: Calendar date checked against the payment-date policy

    Returns:
        Empty successful Result, or the SondertilgungRuleError that failed
    """
    amount = payment.amount.euros
    if amount < rules.minimum_amount.euros:
        return Result.fail(SondertilgungRuleError.BELOW_MINIMUM_AMOUNT)
    if rules.maximum_amount is not None and amount > rules.maximum_amount.euros:
        return Result.fail(SondertilgungRuleError.ABOVE_MAXIMUM_AMOUNT)

    yearly_total = _same_year_total(payment, existing_payments)
    if yearly_total > rules.yearly_cap(loan_amount.euros) + 1e-9:
        logger.debug(
            "Rejected %.2f in loan year %d: yearly total %.2f exceeds %d%% cap",
            amount,
            payment.payment_year,
            yearly_total,
            rules.max_allowed_percentage,
        )
        return Result.fail(SondertilgungRuleError.EXCEEDS_ALLOWED_PERCENTAGE)

    if fixed_rate_period is not None and evaluation_date is not None:
        grace_end = add_months(fixed_rate_period.start_date, rules.timing.grace_period_months)
        if evaluation_date < grace_end:
            return Result.fail(SondertilgungRuleError.WITHIN_GRACE_PERIOD)

    return validate_payment_timing(rules, payment, payment_date)


def _raw_fee(fee: FeeStructure, amount: float, excess: float) -> float:
    if isinstance(fee, NoFee):
        return 0.0
    if isinstance(fee, FixedFee):
        return fee.amount.euros
    if isinstance(fee, PercentageFee):
        return amount * fee.rate.value / 100
    if isinstance(fee, TieredFee):
        return amount * fee.base_rate.value / 100 + excess * fee.excess_rate.value / 100
    if isinstance(fee, ExcessOnlyFee):
        return excess * fee.excess_rate.value / 100
    raise TypeError(f"unknown fee structure {type(fee).__name__}")


def calculate_sondertilgung_fees(
    rules: GermanSondertilgungRules,
    payment: ExtraPayment,
    loan_amount: LoanAmount,
    existing_payments: Iterable[ExtraPayment] = (),
) -> Result[Money]:
    """
    Fee the bank charges for ``payment``.

    Tiered and excess-only fees charge their excess rate on the part of the
    loan year's total above the cap, never on more than the payment itself.
    Optional minimum / maximum fee caps apply last. A fee larger than the
    payment fails with ExcessiveFeeAmount.

    **Example:**
        ```python
        # Bausparkasse, 300,000 EUR loan, 20,000 EUR payment, 5 % cap
        # 0.5 % × 20,000 + 2 % × (20,000 − 15,000) = 200 EUR
        ```
    """
    amount = payment.amount.euros
    cap = rules.yearly_cap(loan_amount.euros)
    excess = min(amount, max(0.0, _same_year_total(payment, existing_payments) - cap))

    structure = rules.fee_structure
    fee = _raw_fee(structure, amount, excess)
    if structure.minimum_fee is not None and fee > 0:
        fee = max(fee, structure.minimum_fee.euros)
    if structure.maximum_fee is not None:
        fee = min(fee, structure.maximum_fee.euros)

    if fee > amount:
        return Result.fail(SondertilgungRuleError.EXCESSIVE_FEE_AMOUNT)
    return create_money(round(fee, 2)).map_error(SondertilgungRuleError.EXCESSIVE_FEE_AMOUNT)


@dataclass(frozen=True)
class YearlyCapacity:
    """Sondertilgung room of one loan year."""

    year: int
    maximum_amount: float
    used_amount: float
    remaining_amount: float

    @property
    def utilization_percentage(self) -> float:
        if self.maximum_amount == 0:
            return 0.0
        return round(self.used_amount / self.maximum_amount * 100, 2)


def calculate_yearly_sondertilgung_capacity(
    rules: GermanSondertilgungRules,
    loan_amount: LoanAmount,
    year: int,
    existing_payments: Iterable[ExtraPayment] = (),
) -> YearlyCapacity:
    maximum = round(rules.yearly_cap(loan_amount.euros), 2)
    used = round(sum(p.amount.euros for p in existing_payments if p.payment_year == year), 2)
    return YearlyCapacity(year, maximum, used, round(max(0.0, maximum - used), 2))


# --- Recommendations --------------------------------------------------------


@dataclass(frozen=True)
class SondertilgungRecommendation:
    """
    Suggested yearly extra payment.

    Attributes:
        recommended_percentage: Largest affordable tier of the bank's menu,
            or None when even the smallest tier exceeds the available funds
        recommended_amount: Euro value of that tier
        risk_level: Qualitative liquidity risk of committing that share
        timing: When to pay
        expected_savings: Rough interest saved over the horizon
    """

    recommended_percentage: int | None
    recommended_amount: float
    risk_level: RiskLevel
    timing: PaymentTiming
    expected_savings: float


def _risk_level(percentage: int) -> RiskLevel:
    if percentage <= LOW_RISK_MAX_PCT:
        return RiskLevel.LOW
    if percentage <= MEDIUM_RISK_MAX_PCT:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def _timing(period: FixedRatePeriod | None, as_of: date) -> PaymentTiming:
    if period is None or not period.is_currently_active(as_of):
        return PaymentTiming.IMMEDIATELY
    if period.remaining_years(as_of) <= BEFORE_EXPIRY_THRESHOLD_YEARS:
        return PaymentTiming.BEFORE_PERIOD_END
    return PaymentTiming.DURING_FIXED_PERIOD


def get_recommended_strategy(
    rules: GermanSondertilgungRules,
    loan_amount: LoanAmount,
    available_funds: float,
    fixed_rate_period: FixedRatePeriod | None = None,
    as_of: date | None = None,
) -> SondertilgungRecommendation:
    """
    Pick the largest allowed percentage whose euro value fits ``available_funds``.

    Expected savings are ``amount × rate × years`` with the locked rate and the
    years left in the fixed-rate period, or the typical current rate over ten
    years when no period is active.
    """
    as_of = as_of or date.today()
    affordable = [
        pct for pct in rules.allowed_percentages if loan_amount.euros * pct / 100 <= available_funds
    ]
    timing = _timing(fixed_rate_period, as_of)
    if not affordable:
        return SondertilgungRecommendation(None, 0.0, RiskLevel.LOW, timing, 0.0)

    percentage = max(affordable)
    amount = round(loan_amount.euros * percentage / 100, 2)
    if fixed_rate_period is not None and fixed_rate_period.is_currently_active(as_of):
        rate = fixed_rate_period.initial_rate.value
        years = fixed_rate_period.remaining_years(as_of)
    else:
        rate = TYPICAL_CURRENT_RATE.value
        years = RECOMMENDATION_HORIZON_YEARS
    return SondertilgungRecommendation(
        recommended_percentage=percentage,
        recommended_amount=amount,
        risk_level=_risk_level(percentage),
        timing=timing,
        expected_savings=round(amount * rate / 100 * years, 2),
    )


# --- Impact on the schedule -------------------------------------------------


@dataclass(frozen=True)
class SondertilgungImpact:
    """Effect of a set of extra payments on a loan."""

    original_total_interest: float
    new_total_interest: float
    interest_saved: float
    original_term: int
    new_term: int
    term_reduction: int
    total_extra_payments: float

    @property
    def effective_return(self) -> float:
        """Interest saved per extra EUR, in percent."""
        if self.total_extra_payments == 0:
            return 0.0
        return round(self.interest_saved / self.total_extra_payments * 100, 2)


def calculate_sondertilgung_impact(
    config: LoanConfiguration, extra_payments: Iterable[ExtraPayment]
) -> Result[SondertilgungImpact]:
    schedule = generate_amortization_schedule(config, extra_payments)
    if not schedule:
        return schedule
    metrics = schedule.data.metrics
    original_interest = round(metrics.total_interest + metrics.interest_saved, 2)
    return Result.ok(
        SondertilgungImpact(
            original_total_interest=original_interest,
            new_total_interest=metrics.total_interest,
            interest_saved=metrics.interest_saved,
            original_term=metrics.actual_term + metrics.term_reduction,
            new_term=metrics.actual_term,
            term_reduction=metrics.term_reduction,
            total_extra_payments=metrics.total_extra_payments,
        )
    )


@dataclass(frozen=True)
class StrategyResult:
    name: str
    impact: SondertilgungImpact


def compare_sondertilgung_strategies(
    config: LoanConfiguration, strategies: Mapping[str, Iterable[ExtraPayment]]
) -> Result[list[StrategyResult]]:
    """Impact of each named strategy, best interest savings first."""
    results = []
    for name, payments in strategies.items():
        impact = calculate_sondertilgung_impact(config, payments)
        if not impact:
            return impact
        results.append(StrategyResult(name, impact.data))
    results.sort(key=lambda r: r.impact.interest_saved, reverse=True)
    return Result.ok(results)
