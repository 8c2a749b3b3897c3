"""
Closed-form annuity calculations on loan configurations.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from mortgagelab.core.result import Result
from mortgagelab.core.utils import is_finite_number
from mortgagelab.types.loan_configuration import (
    LoanConfiguration,
    calculate_annuity_payment,
    loan_configuration_from_input,
)
from mortgagelab.types.monthly_payment import MonthlyPayment, create_monthly_payment
from mortgagelab.values.domain import (
    InterestRate,
    LoanAmount,
    MonthCount,
    create_interest_rate,
    create_month_count,
)
from mortgagelab.values.scalars import ZERO_MONEY, Money, create_money

logger = logging.getLogger(__name__)

RATE_SEARCH_LOWER = 0.0001  # 0.01 % p.a. as a fraction
RATE_SEARCH_UPPER = 0.30  # 30 % p.a. as a fraction
RATE_SEARCH_TOLERANCE = 0.01  # EUR on the payment
RATE_SEARCH_MAX_ITERATIONS = 100


class LoanCalculationError(str, Enum):
    INVALID_PARAMETERS = "InvalidParameters"
    INSUFFICIENT_PAYMENT = "InsufficientPayment"
    MATHEMATICAL_ERROR = "MathematicalError"


def calculate_monthly_payment(config: LoanConfiguration) -> Result[MonthlyPayment]:
    """
    First month's payment split into principal and interest.

    Uses ``P = L·c(1+c)^n / ((1+c)^n − 1)``; a zero rate pays ``L / n`` principal
    and no interest.
    """
    amount = config.amount.euros
    n = config.term_in_months.value
    c = config.monthly_rate
    payment = round(calculate_annuity_payment(amount, config.annual_rate.value, n), 2)
    interest = round(amount * c, 2)
    result = create_monthly_payment(round(payment - interest, 2), interest)
    return result.map_error(LoanCalculationError.MATHEMATICAL_ERROR)


def calculate_loan_term(
    amount: LoanAmount, annual_rate: float, monthly_payment: Money
) -> Result[MonthCount]:
    """
    Number of payments needed to repay ``amount``.

    ``n = ceil(−ln(1 − L·c/P) / ln(1 + c))``. Fails with InsufficientPayment
    when the payment does not exceed the first month's interest.
    """
    loan = amount.euros
    payment = monthly_payment.euros
    if payment <= 0 or not is_finite_number(annual_rate) or annual_rate < 0:
        return Result.fail(LoanCalculationError.INVALID_PARAMETERS)

    c = annual_rate / 100 / 12
    if c == 0:
        months = math.ceil(loan / payment)
    else:
        if payment <= loan * c:
            return Result.fail(LoanCalculationError.INSUFFICIENT_PAYMENT)
        months = math.ceil(-math.log(1 - loan * c / payment) / math.log(1 + c))

    return create_month_count(months).map_error(LoanCalculationError.INVALID_PARAMETERS)


def _payment_for_fraction(amount: float, annual_fraction: float, months: int) -> float:
    return calculate_annuity_payment(amount, annual_fraction * 100, months)


def calculate_interest_rate(
    amount: LoanAmount, monthly_payment: Money, term_in_months: MonthCount
) -> Result[InterestRate]:
    """
    Annual rate implied by a payment, found by bisection to within 0.01 EUR.
    """
    loan = amount.euros
    payment = monthly_payment.euros
    months = term_in_months.value
    if payment <= 0:
        return Result.fail(LoanCalculationError.INVALID_PARAMETERS)

    straight_line = loan / months
    if abs(payment - straight_line) < RATE_SEARCH_TOLERANCE:
        # A zero rate is not a valid InterestRate
        return Result.fail(LoanCalculationError.INVALID_PARAMETERS)
    if payment < straight_line:
        return Result.fail(LoanCalculationError.INSUFFICIENT_PAYMENT)

    lower, upper = RATE_SEARCH_LOWER, RATE_SEARCH_UPPER
    if not (
        _payment_for_fraction(loan, lower, months)
        <= payment
        <= _payment_for_fraction(loan, upper, months)
    ):
        return Result.fail(LoanCalculationError.MATHEMATICAL_ERROR)

    for iteration in range(RATE_SEARCH_MAX_ITERATIONS):
        mid = (lower + upper) / 2
        error = _payment_for_fraction(loan, mid, months) - payment
        if abs(error) < RATE_SEARCH_TOLERANCE:
            logger.debug("Implied rate %.4f%% found after %d iterations", mid * 100, iteration + 1)
            return create_interest_rate(round(mid * 100, 4)).map_error(
                LoanCalculationError.INVALID_PARAMETERS
            )
        if error > 0:
            upper = mid
        else:
            lower = mid

    return Result.fail(LoanCalculationError.MATHEMATICAL_ERROR)


def calculate_total_interest(config: LoanConfiguration) -> Result[Money]:
    """Interest over the full term at the configured payment."""
    return create_money(config.total_interest).map_error(LoanCalculationError.MATHEMATICAL_ERROR)


def calculate_remaining_balance(config: LoanConfiguration, payments_made: int) -> Result[Money]:
    """
    Outstanding principal after ``payments_made`` regular payments.

    ``L·((1+c)^n − (1+c)^k) / ((1+c)^n − 1)``; straight-line for zero-rate loans.
    """
    if payments_made < 0:
        return Result.fail(LoanCalculationError.INVALID_PARAMETERS)

    n = config.term_in_months.value
    if payments_made >= n:
        return Result.ok(ZERO_MONEY)

    loan = config.amount.euros
    c = config.monthly_rate
    if c == 0:
        balance = loan - loan / n * payments_made
    else:
        growth_n = (1 + c) ** n
        balance = loan * (growth_n - (1 + c) ** payments_made) / (growth_n - 1)
    return create_money(max(0.0, balance)).map_error(LoanCalculationError.MATHEMATICAL_ERROR)


def calculate_break_even_months(
    current: LoanConfiguration, refinanced: LoanConfiguration, refinancing_costs: Money
) -> Result[MonthCount]:
    """
    Months until refinancing costs are recovered by the lower payment.

    Fails with InsufficientPayment when the new payment is not lower.
    """
    monthly_savings = current.monthly_payment.euros - refinanced.monthly_payment.euros
    if monthly_savings <= 0:
        return Result.fail(LoanCalculationError.INSUFFICIENT_PAYMENT)
    months = max(1, math.ceil(refinancing_costs.euros / monthly_savings))
    return create_month_count(months).map_error(LoanCalculationError.INVALID_PARAMETERS)


@dataclass(frozen=True)
class PaymentScenario:
    """
    What-if adjustment of a loan.

    Attributes:
        amount_multiplier: Factor applied to the loan amount
        rate_adjustment: Percentage points added to the rate
        term_adjustment: Months added to the term
    """

    amount_multiplier: float = 1.0
    rate_adjustment: float = 0.0
    term_adjustment: int = 0


def generate_payment_scenarios(
    base: LoanConfiguration, scenarios: list[PaymentScenario]
) -> Result[list[MonthlyPayment]]:
    """First-month payment of ``base`` under each scenario, in input order."""
    results = []
    for scenario in scenarios:
        adjusted = loan_configuration_from_input(
            base.amount.euros * scenario.amount_multiplier,
            round(base.annual_rate.value + scenario.rate_adjustment, 10),
            term_in_months=base.term_in_months.value + scenario.term_adjustment,
        )
        if not adjusted:
            return adjusted.map_error(LoanCalculationError.INVALID_PARAMETERS)
        payment = calculate_monthly_payment(adjusted.data)
        if not payment:
            return payment
        results.append(payment.data)
    return Result.ok(results)
