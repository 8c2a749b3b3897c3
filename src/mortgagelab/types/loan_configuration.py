"""
Loan configuration: amount, rate, term and the monthly payment that ties them together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from mortgagelab.core.result import Result
from mortgagelab.core.settings import EngineSettings, resolve_settings
from mortgagelab.core.utils import is_finite_number
from mortgagelab.values.domain import (
    LoanAmount,
    MonthCount,
    create_interest_rate,
    create_loan_amount,
    create_month_count,
    format_loan_amount,
    format_month_count,
)
from mortgagelab.values.scalars import (
    Money,
    Percentage,
    create_money,
    create_percentage,
    format_money,
    format_percentage,
)

logger = logging.getLogger(__name__)


class LoanConfigurationError(str, Enum):
    INVALID_LOAN_AMOUNT = "InvalidLoanAmount"
    INVALID_INTEREST_RATE = "InvalidInterestRate"
    INVALID_TERM = "InvalidTerm"
    INVALID_MONTHLY_PAYMENT = "InvalidMonthlyPayment"
    INCONSISTENT_PARAMETERS = "InconsistentParameters"


def calculate_annuity_payment(amount: float, annual_rate: float, term_in_months: int) -> float:
    """
    Constant monthly payment that repays ``amount`` in ``term_in_months``.

    Args:
        amount: Principal in EUR
        annual_rate: Nominal annual rate in percent (3.5 for 3.5 %)
        term_in_months: Number of monthly payments

    Returns:
        ``amount·c(1+c)^n / ((1+c)^n − 1)`` with ``c = annual_rate/100/12``,
        or the straight-line ``amount / n`` when the rate is zero
    """
    c = annual_rate / 100 / 12
    if c == 0:
        return amount / term_in_months
    growth = (1 + c) ** term_in_months
    return amount * c * growth / (growth - 1)


@dataclass(frozen=True)
class LoanConfiguration:
    """
    Validated loan parameters.

    The four fields always satisfy the annuity relation (within
    ``EngineSettings.annuity_tolerance``) or, for zero-rate loans, the
    straight-line relation (within ``zero_rate_tolerance``). Build through
    ``create_loan_configuration``; derived configurations keep the one they
    were derived from in ``original``.

    Attributes:
        amount: Loan principal
        annual_rate: Nominal annual rate; 0 or within the InterestRate range
        term_in_months: Contractual number of monthly payments
        monthly_payment: Regular payment (interest + principal)
        original: Configuration this one was recalculated from, if any
    """

    amount: LoanAmount
    annual_rate: Percentage
    term_in_months: MonthCount
    monthly_payment: Money
    original: LoanConfiguration | None = field(default=None, compare=False, repr=False)

    @property
    def monthly_rate(self) -> float:
        return self.annual_rate.value / 100 / 12

    @property
    def is_zero_rate(self) -> bool:
        return self.annual_rate.value == 0

    @property
    def total_payments(self) -> float:
        return self.monthly_payment.euros * self.term_in_months.value

    @property
    def total_interest(self) -> float:
        """Interest paid over the full term without extra payments."""
        return max(0.0, self.total_payments - self.amount.euros)

    def get_loan_parameters(self) -> dict:
        """Plain numbers for collaborators that do not know the value types."""
        return {
            "amount": self.amount.euros,
            "annual_rate": self.annual_rate.value,
            "term_in_months": self.term_in_months.value,
            "monthly_payment": self.monthly_payment.euros,
        }

    def __str__(self) -> str:
        return format_loan_configuration(self)


def _validate_rate(annual_rate: float) -> Result[Percentage]:
    percentage = create_percentage(annual_rate)
    if not percentage:
        return percentage.map_error(LoanConfigurationError.INVALID_INTEREST_RATE)
    if percentage.data.value == 0:
        return percentage
    rate = create_interest_rate(annual_rate)
    if not rate:
        return rate.map_error(LoanConfigurationError.INVALID_INTEREST_RATE)
    return percentage


def is_consistent(
    amount: float,
    annual_rate: float,
    term_in_months: int,
    monthly_payment: float,
    *,
    settings: EngineSettings | None = None,
) -> bool:
    """Check the payment against the annuity (or straight-line) relation."""
    settings = resolve_settings(settings)
    expected = calculate_annuity_payment(amount, annual_rate, term_in_months)
    tolerance = settings.zero_rate_tolerance if annual_rate == 0 else settings.annuity_tolerance
    return abs(expected - monthly_payment) <= tolerance


def create_loan_configuration(
    amount: float,
    annual_rate: float,
    term_in_months: int,
    monthly_payment: float,
    *,
    settings: EngineSettings | None = None,
) -> Result[LoanConfiguration]:
    """
    Smart constructor for LoanConfiguration.

    Validation short-circuits in field order: amount, rate, term, payment,
    then the consistency of all four.
    """
    loan_amount = create_loan_amount(amount)
    if not loan_amount:
        return loan_amount.map_error(LoanConfigurationError.INVALID_LOAN_AMOUNT)

    rate = _validate_rate(annual_rate)
    if not rate:
        return rate

    term = create_month_count(term_in_months)
    if not term:
        return term.map_error(LoanConfigurationError.INVALID_TERM)

    payment = create_money(monthly_payment)
    if not payment or payment.data.cents == 0:
        return Result.fail(LoanConfigurationError.INVALID_MONTHLY_PAYMENT)

    if not is_consistent(
        loan_amount.data.euros,
        rate.data.value,
        term.data.value,
        payment.data.euros,
        settings=settings,
    ):
        logger.debug(
            "Inconsistent loan parameters: amount=%s rate=%s term=%s payment=%s",
            amount,
            annual_rate,
            term_in_months,
            monthly_payment,
        )
        return Result.fail(LoanConfigurationError.INCONSISTENT_PARAMETERS)

    return Result.ok(
        LoanConfiguration(
            amount=loan_amount.data,
            annual_rate=rate.data,
            term_in_months=term.data,
            monthly_payment=payment.data,
        )
    )


def loan_configuration_from_input(
    amount: float,
    annual_rate: float,
    term_in_months: int | None = None,
    term_in_years: float | None = None,
    monthly_payment: float | None = None,
    *,
    settings: EngineSettings | None = None,
) -> Result[LoanConfiguration]:
    """
    Build a configuration from raw form input.

    ``term_in_months`` wins over ``term_in_years``. When ``monthly_payment`` is
    omitted it is derived from the annuity formula and rounded to cents.
    """
    if term_in_months is None:
        if term_in_years is None or not is_finite_number(term_in_years):
            return Result.fail(LoanConfigurationError.INVALID_TERM)
        term = MonthCount.from_years(term_in_years)
        if not term:
            return term.map_error(LoanConfigurationError.INVALID_TERM)
        term_in_months = term.data.value

    if monthly_payment is None:
        if not is_finite_number(amount):
            return Result.fail(LoanConfigurationError.INVALID_LOAN_AMOUNT)
        if not is_finite_number(annual_rate):
            return Result.fail(LoanConfigurationError.INVALID_INTEREST_RATE)
        if not is_finite_number(term_in_months) or term_in_months <= 0:
            return Result.fail(LoanConfigurationError.INVALID_TERM)
        monthly_payment = round(calculate_annuity_payment(amount, annual_rate, term_in_months), 2)

    return create_loan_configuration(
        amount, annual_rate, term_in_months, monthly_payment, settings=settings
    )


def _recalculate(
    config: LoanConfiguration, annual_rate: float, term_in_months: int
) -> Result[LoanConfiguration]:
    derived = loan_configuration_from_input(
        config.amount.euros, annual_rate, term_in_months=term_in_months
    )
    if not derived:
        return derived
    return Result.ok(
        LoanConfiguration(
            amount=derived.data.amount,
            annual_rate=derived.data.annual_rate,
            term_in_months=derived.data.term_in_months,
            monthly_payment=derived.data.monthly_payment,
            original=config,
        )
    )


def recalculate_with_rate(config: LoanConfiguration, annual_rate: float) -> Result[LoanConfiguration]:
    """New configuration at ``annual_rate`` (e.g. after refinancing)."""
    return _recalculate(config, annual_rate, config.term_in_months.value)


def recalculate_with_term(config: LoanConfiguration, term_in_months: int) -> Result[LoanConfiguration]:
    """New configuration over ``term_in_months``."""
    return _recalculate(config, config.annual_rate.value, term_in_months)


@dataclass(frozen=True)
class LoanConfigurationComparison:
    """Differences ``other - base`` between two configurations."""

    amount_difference: float
    rate_difference: float
    term_difference: int
    payment_difference: float
    total_interest_difference: float


def compare_loan_configurations(
    base: LoanConfiguration, other: LoanConfiguration
) -> LoanConfigurationComparison:
    return LoanConfigurationComparison(
        amount_difference=other.amount.euros - base.amount.euros,
        rate_difference=round(other.annual_rate.value - base.annual_rate.value, 10),
        term_difference=other.term_in_months.value - base.term_in_months.value,
        payment_difference=round(other.monthly_payment.euros - base.monthly_payment.euros, 2),
        total_interest_difference=round(other.total_interest - base.total_interest, 2),
    )


def format_loan_configuration(config: LoanConfiguration) -> str:
    """E.g. ``"Darlehen: 300.000,00 €, Zinssatz: 3,50 %, Laufzeit: 25 Jahre, Monatliche Rate: 1.501,87 €"``."""
    return (
        f"Darlehen: {format_loan_amount(config.amount)}, "
        f"Zinssatz: {format_percentage(config.annual_rate)}, "
        f"Laufzeit: {format_month_count(config.term_in_months)}, "
        f"Monatliche Rate: {format_money(config.monthly_payment)}"
    )


@dataclass(frozen=True)
class LoanScenario:
    """Named, ready-made configuration."""

    name: str
    description: str
    configuration: LoanConfiguration


def _preset(name: str, description: str, amount: float, rate: float, years: int) -> LoanScenario:
    config = loan_configuration_from_input(amount, rate, term_in_years=years).unwrap()
    return LoanScenario(name=name, description=description, configuration=config)


LOAN_PRESETS = MappingProxyType(
    {
        "first_home": _preset("Erstes Eigenheim", "Typische Erstfinanzierung", 300_000, 3.5, 25),
        "luxury_home": _preset("Luxusimmobilie", "Hohe Finanzierungssumme", 800_000, 3.8, 30),
        "investment": _preset("Kapitalanlage", "Vermietete Immobilie", 500_000, 4.2, 20),
    }
)
