"""
Bank-specific Sondertilgung rules of the German mortgage market.

The seven rule sets below are static data. ``BANK_RULES`` is a read-only
mapping built once at import time; callers derive variants through
``create_german_sondertilgung_rules(bank_type, **overrides)`` which returns a
new object and leaves the table untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import ClassVar

from mortgagelab.core.result import Result
from mortgagelab.values.scalars import Money, Percentage, create_money, create_percentage

DEFAULT_MINIMUM_AMOUNT = 1_000.0
UNLIMITED_PERCENTAGE = 100


class BankType(str, Enum):
    SPARKASSE = "Sparkasse"
    VOLKSBANK = "Volksbank"
    PRIVATBANK = "Privatbank"
    BAUSPARKASSE = "Bausparkasse"
    HYPOTHEKENBANK = "Hypothekenbank"
    ONLINE_BANK = "OnlineBank"
    GENOSSENSCHAFTSBANK = "Genossenschaftsbank"


BANK_TYPE_LABELS = {
    BankType.SPARKASSE: "Sparkasse",
    BankType.VOLKSBANK: "Volksbank/Raiffeisenbank",
    BankType.PRIVATBANK: "Private Geschäftsbank",
    BankType.BAUSPARKASSE: "Bausparkasse",
    BankType.HYPOTHEKENBANK: "Hypothekenbank",
    BankType.ONLINE_BANK: "Online-Bank",
    BankType.GENOSSENSCHAFTSBANK: "Genossenschaftsbank",
}


class PaymentDateRestriction(str, Enum):
    ANY_TIME = "AnyTime"
    MONTH_END = "MonthEnd"
    QUARTER_END = "QuarterEnd"
    YEAR_END = "YearEnd"


class FeeType(str, Enum):
    NONE = "None"
    FIXED = "Fixed"
    PERCENTAGE = "Percentage"
    TIERED = "Tiered"
    EXCESS_ONLY = "ExcessOnly"


class SondertilgungRuleError(str, Enum):
    EXCEEDS_ALLOWED_PERCENTAGE = "ExceedsAllowedPercentage"
    BELOW_MINIMUM_AMOUNT = "BelowMinimumAmount"
    ABOVE_MAXIMUM_AMOUNT = "AboveMaximumAmount"
    WITHIN_GRACE_PERIOD = "WithinGracePeriod"
    INSUFFICIENT_NOTICE = "InsufficientNotice"
    INVALID_PAYMENT_DATE = "InvalidPaymentDate"
    DURING_BLACKOUT_PERIOD = "DuringBlackoutPeriod"
    EXCESSIVE_FEE_AMOUNT = "ExcessiveFeeAmount"
    NOT_ALLOWED_FOR_BANK_TYPE = "NotAllowedForBankType"


@dataclass(frozen=True)
class BlackoutPeriod:
    """Schedule months (inclusive) in which no Sondertilgung is accepted."""

    start_month: int
    end_month: int
    reason: str = ""

    def contains(self, month: int) -> bool:
        return self.start_month <= month <= self.end_month


@dataclass(frozen=True)
class TimingRestrictions:
    grace_period_months: int
    notice_required_days: int
    allowed_payment_dates: PaymentDateRestriction
    blackout_periods: tuple[BlackoutPeriod, ...] = ()


@dataclass(frozen=True)
class SpecialConditions:
    hardship_waiver: bool = True
    inheritance_exception: bool = True
    bonus_payment_allowance: bool = True
    refinancing_grace_period: bool = False
    first_time_home_buyer_benefits: bool = False


# --- Fee structures ---------------------------------------------------------


@dataclass(frozen=True)
class FeeStructure:
    """
    Base of the fee variants.

    Every variant accepts optional ``minimum_fee`` / ``maximum_fee`` caps that
    are applied after the variant's own formula.
    """

    fee_type: ClassVar[FeeType]
    minimum_fee: Money | None = field(default=None, kw_only=True)
    maximum_fee: Money | None = field(default=None, kw_only=True)


@dataclass(frozen=True)
class NoFee(FeeStructure):
    fee_type: ClassVar[FeeType] = FeeType.NONE


@dataclass(frozen=True)
class FixedFee(FeeStructure):
    """Flat fee per extra payment."""

    fee_type: ClassVar[FeeType] = FeeType.FIXED
    amount: Money


@dataclass(frozen=True)
class PercentageFee(FeeStructure):
    """Share of the extra payment."""

    fee_type: ClassVar[FeeType] = FeeType.PERCENTAGE
    rate: Percentage


@dataclass(frozen=True)
class TieredFee(FeeStructure):
    """Base rate on the whole payment plus ``excess_rate`` on the part above the yearly cap."""

    fee_type: ClassVar[FeeType] = FeeType.TIERED
    base_rate: Percentage
    excess_rate: Percentage


@dataclass(frozen=True)
class ExcessOnlyFee(FeeStructure):
    """Only the part above the yearly cap is charged."""

    fee_type: ClassVar[FeeType] = FeeType.EXCESS_ONLY
    excess_rate: Percentage


# --- Rule sets --------------------------------------------------------------


@dataclass(frozen=True)
class GermanSondertilgungRules:
    """
    Extra-repayment terms of one bank type.

    Attributes:
        bank_type: Bank category the terms belong to
        allowed_percentages: Ascending menu of yearly limits, in percent of
            the original loan amount; the largest entry is the cap
        minimum_amount: Smallest accepted extra payment
        maximum_amount: Largest accepted single extra payment, if any
        timing: Grace period, notice, payment dates and blackout periods
        fee_structure: How extra payments are priced
        special_conditions: Exceptions the bank grants
    """

    bank_type: BankType
    allowed_percentages: tuple[int, ...]
    minimum_amount: Money
    timing: TimingRestrictions
    fee_structure: FeeStructure
    maximum_amount: Money | None = None
    special_conditions: SpecialConditions = SpecialConditions()

    @property
    def max_allowed_percentage(self) -> int:
        return max(self.allowed_percentages)

    def yearly_cap(self, loan_amount: float) -> float:
        """Largest total payable per loan year for a loan of ``loan_amount`` EUR."""
        return loan_amount * self.max_allowed_percentage / 100

    def supports_unlimited(self) -> bool:
        return UNLIMITED_PERCENTAGE in self.allowed_percentages

    @property
    def label(self) -> str:
        return format_bank_type(self.bank_type)


def _pct(value: float) -> Percentage:
    return create_percentage(value).unwrap()


def _eur(value: float) -> Money:
    return create_money(value).unwrap()


def _rules(
    bank_type: BankType,
    percentages: tuple[int, ...],
    grace: int,
    notice: int,
    dates: PaymentDateRestriction,
    fee: FeeStructure,
) -> GermanSondertilgungRules:
    return GermanSondertilgungRules(
        bank_type=bank_type,
        allowed_percentages=percentages,
        minimum_amount=_eur(DEFAULT_MINIMUM_AMOUNT),
        timing=TimingRestrictions(grace, notice, dates),
        fee_structure=fee,
    )


_P = PaymentDateRestriction

BANK_RULES = MappingProxyType(
    {
        BankType.SPARKASSE: _rules(
            BankType.SPARKASSE, (5, 10), 12, 30, _P.MONTH_END, PercentageFee(rate=_pct(1.0))
        ),
        BankType.PRIVATBANK: _rules(
            BankType.PRIVATBANK, (5, 10, 20), 6, 14, _P.ANY_TIME, FixedFee(amount=_eur(250))
        ),
        BankType.ONLINE_BANK: _rules(BankType.ONLINE_BANK, (10, 20, 50), 3, 7, _P.ANY_TIME, NoFee()),
        BankType.BAUSPARKASSE: _rules(
            BankType.BAUSPARKASSE,
            (5,),
            24,
            60,
            _P.YEAR_END,
            TieredFee(base_rate=_pct(0.5), excess_rate=_pct(2.0)),
        ),
        BankType.VOLKSBANK: _rules(
            BankType.VOLKSBANK, (5, 10), 12, 30, _P.MONTH_END, PercentageFee(rate=_pct(1.0))
        ),
        BankType.HYPOTHEKENBANK: _rules(
            BankType.HYPOTHEKENBANK, (10, 20), 6, 30, _P.QUARTER_END, FixedFee(amount=_eur(500))
        ),
        BankType.GENOSSENSCHAFTSBANK: _rules(
            BankType.GENOSSENSCHAFTSBANK,
            (5, 10),
            12,
            30,
            _P.MONTH_END,
            PercentageFee(rate=_pct(0.75)),
        ),
    }
)


def create_german_sondertilgung_rules(
    bank_type: BankType | str, **overrides
) -> Result[GermanSondertilgungRules]:
    """
    Rule set for ``bank_type``, optionally with fields replaced.

    Args:
        bank_type: ``BankType`` member or its value
        **overrides: Field replacements, e.g. ``maximum_amount=...`` or a
            custom ``timing=TimingRestrictions(...)``

    Returns:
        Result with the rules, or NotAllowedForBankType for an unknown bank
        type or an unusable percentage menu
    """
    try:
        bank_type = BankType(bank_type)
    except ValueError:
        return Result.fail(SondertilgungRuleError.NOT_ALLOWED_FOR_BANK_TYPE)

    rules = BANK_RULES[bank_type]
    if not overrides:
        return Result.ok(rules)

    if "allowed_percentages" in overrides:
        menu = tuple(sorted(overrides["allowed_percentages"]))
        if not menu or any(not 0 < p <= UNLIMITED_PERCENTAGE for p in menu):
            return Result.fail(SondertilgungRuleError.NOT_ALLOWED_FOR_BANK_TYPE)
        overrides["allowed_percentages"] = menu
    return Result.ok(replace(rules, **overrides))


def get_available_bank_types() -> list[BankType]:
    return list(BANK_RULES)


def format_bank_type(bank_type: BankType) -> str:
    return BANK_TYPE_LABELS[bank_type]
