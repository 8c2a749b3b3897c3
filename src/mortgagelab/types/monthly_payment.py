"""
Monthly payment split into principal and interest.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from mortgagelab.core.result import Result
from mortgagelab.core.settings import EngineSettings, resolve_settings
from mortgagelab.values.scalars import Money, create_money, format_money

HEAVY_SHARE_PCT = 60.0


class MonthlyPaymentError(str, Enum):
    INVALID_PRINCIPAL = "InvalidPrincipal"
    INVALID_INTEREST = "InvalidInterest"
    INVALID_TOTAL = "InvalidTotal"
    INCONSISTENT_AMOUNTS = "InconsistentAmounts"


@dataclass(frozen=True)
class MonthlyPayment:
    """
    One month's payment where ``principal + interest == total``.

    Attributes:
        principal: Repayment share
        interest: Interest share
        total: Amount paid
    """

    principal: Money
    interest: Money
    total: Money

    @property
    def principal_ratio(self) -> float:
        return self.principal.cents / self.total.cents if self.total.cents else 0.0

    @property
    def interest_ratio(self) -> float:
        return self.interest.cents / self.total.cents if self.total.cents else 0.0

    @property
    def principal_percentage(self) -> float:
        return round(self.principal_ratio * 100, 2)

    @property
    def interest_percentage(self) -> float:
        return round(self.interest_ratio * 100, 2)

    def is_principal_heavy(self) -> bool:
        return self.principal_percentage > HEAVY_SHARE_PCT

    def is_interest_heavy(self) -> bool:
        return self.interest_percentage > HEAVY_SHARE_PCT

    def __str__(self) -> str:
        return format_monthly_payment(self)


def create_monthly_payment(principal: float, interest: float) -> Result[MonthlyPayment]:
    """Build a payment whose total is ``principal + interest``."""
    principal_money = create_money(principal)
    if not principal_money:
        return principal_money.map_error(MonthlyPaymentError.INVALID_PRINCIPAL)
    interest_money = create_money(interest)
    if not interest_money:
        return interest_money.map_error(MonthlyPaymentError.INVALID_INTEREST)
    total = principal_money.data.add(interest_money.data)
    if not total:
        return total.map_error(MonthlyPaymentError.INVALID_TOTAL)
    return Result.ok(MonthlyPayment(principal_money.data, interest_money.data, total.data))


def create_monthly_payment_with_total(
    principal: float,
    interest: float,
    total: float,
    *,
    settings: EngineSettings | None = None,
) -> Result[MonthlyPayment]:
    """Build a payment from all three parts, checking they add up within 0.01 EUR."""
    settings = resolve_settings(settings)
    payment = create_monthly_payment(principal, interest)
    if not payment:
        return payment
    total_money = create_money(total)
    if not total_money:
        return total_money.map_error(MonthlyPaymentError.INVALID_TOTAL)
    deviation = abs(payment.data.total.euros - total_money.data.euros)
    if deviation > settings.monthly_payment_tolerance + 1e-9:
        return Result.fail(MonthlyPaymentError.INCONSISTENT_AMOUNTS)
    return Result.ok(MonthlyPayment(payment.data.principal, payment.data.interest, total_money.data))


def format_monthly_payment(payment: MonthlyPayment) -> str:
    """E.g. ``"Monatliche Rate: 1.501,87 € (Tilgung: 626,87 €, Zinsen: 875,00 €)"``."""
    return (
        f"Monatliche Rate: {format_money(payment.total)} "
        f"(Tilgung: {format_money(payment.principal)}, Zinsen: {format_money(payment.interest)})"
    )
