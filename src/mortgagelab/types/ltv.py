"""
Loan-to-value ratio and the risk classification derived from it.

German lenders price and approve mortgages by LTV:

- 80 % is the standard ceiling for residential property
- premium locations may go up to 90 %
- investment property (Mehrfamilienhaus, Gewerbeimmobilie) stops at 70 %
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from mortgagelab.core.formatting import format_percent
from mortgagelab.core.result import Result
from mortgagelab.core.settings import DEFAULT_SETTINGS, EngineSettings, resolve_settings
from mortgagelab.values.domain import LoanAmount
from mortgagelab.values.scalars import Percentage, create_percentage

from .property_valuation import LocationQuality, PropertyValuation

MAX_STANDARD_LTV = 80.0
MAX_PREMIUM_LOCATION_LTV = 90.0
MAX_INVESTMENT_PROPERTY_LTV = 70.0
DEFAULT_BORROWING_TARGET_LTV = 80.0


class LTVRiskCategory(str, Enum):
    VERY_LOW = "VeryLow"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "VeryHigh"


# (upper bound inclusive, category, rate premium in percentage points, label)
_RISK_BANDS = (
    (60.0, LTVRiskCategory.VERY_LOW, 0.0, "Sehr niedrig"),
    (70.0, LTVRiskCategory.LOW, 0.10, "Niedrig"),
    (80.0, LTVRiskCategory.MEDIUM, 0.25, "Mittel"),
    (90.0, LTVRiskCategory.HIGH, 0.50, "Hoch"),
)
_VERY_HIGH_PREMIUM = 1.0

RISK_CATEGORY_LABELS = {category: label for _, category, _, label in _RISK_BANDS}
RISK_CATEGORY_LABELS[LTVRiskCategory.VERY_HIGH] = "Sehr hoch"

INTEREST_RATE_PREMIUMS = {category: premium for _, category, premium, _ in _RISK_BANDS}
INTEREST_RATE_PREMIUMS[LTVRiskCategory.VERY_HIGH] = _VERY_HIGH_PREMIUM

RISK_CATEGORY_DESCRIPTIONS = {
    LTVRiskCategory.VERY_LOW: "Sehr niedrig (≤60%) - Beste Konditionen",
    LTVRiskCategory.LOW: "Niedrig (60-70%) - Gute Konditionen",
    LTVRiskCategory.MEDIUM: "Mittel (70-80%) - Standard Konditionen",
    LTVRiskCategory.HIGH: "Hoch (80-90%) - Erhöhte Zinsen",
    LTVRiskCategory.VERY_HIGH: "Sehr hoch (>90%) - Hohe Zinsen, schwierige Finanzierung",
}


class LoanToValueError(str, Enum):
    INVALID_LOAN_AMOUNT = "InvalidLoanAmount"
    PROPERTY_VALUATION_NOT_ACCEPTABLE = "PropertyValuationNotAcceptable"
    PROPERTY_VALUE_TOO_LOW = "PropertyValueTooLow"
    LTV_TOO_HIGH = "LTVTooHigh"


def determine_risk_category(ltv_percent: float) -> LTVRiskCategory:
    """Band an LTV: ≤60 VeryLow, ≤70 Low, ≤80 Medium, ≤90 High, else VeryHigh."""
    for upper, category, _, _ in _RISK_BANDS:
        if ltv_percent <= upper:
            return category
    return LTVRiskCategory.VERY_HIGH


def max_allowed_ltv(valuation: PropertyValuation) -> float:
    """Approval ceiling for the property's type and location."""
    if valuation.property_type.is_investment:
        return MAX_INVESTMENT_PROPERTY_LTV
    if valuation.location.location_quality is LocationQuality.PREMIUM:
        return MAX_PREMIUM_LOCATION_LTV
    return MAX_STANDARD_LTV


@dataclass(frozen=True)
class LoanToValueRatio:
    """
    LTV of a loan against a property valuation.

    Attributes:
        current_ltv: ``loan_amount / current value × 100``
        original_ltv: Same ratio for the original loan amount
        loan_amount: Outstanding loan the ratio refers to
        property_valuation: Collateral valuation
        risk_category: Band of ``current_ltv``
        calculation_date: When the ratio was computed
        settings: Thresholds for insurance, refinancing and best-rate checks
        original: Ratio this one was updated from, if any
    """

    current_ltv: Percentage
    original_ltv: Percentage
    loan_amount: LoanAmount
    property_valuation: PropertyValuation
    risk_category: LTVRiskCategory
    calculation_date: date
    settings: EngineSettings = field(default=DEFAULT_SETTINGS, compare=False, repr=False)
    original: LoanToValueRatio | None = field(default=None, compare=False, repr=False)

    @property
    def property_value(self) -> float:
        return self.property_valuation.current_value.euros

    @property
    def max_allowed_ltv(self) -> float:
        return max_allowed_ltv(self.property_valuation)

    @property
    def interest_rate_premium(self) -> float:
        """Surcharge on the interest rate in percentage points."""
        return INTEREST_RATE_PREMIUMS[self.risk_category]

    @property
    def ltv_improvement(self) -> float:
        """Original minus current LTV; positive once the loan has been paid down."""
        return self.original_ltv.value - self.current_ltv.value

    def has_improved(self) -> bool:
        return self.ltv_improvement > 0

    def is_acceptable_for_mortgage(self) -> bool:
        return self.current_ltv.value <= self.max_allowed_ltv

    def requires_mortgage_insurance(self) -> bool:
        return self.current_ltv.value > self.settings.mortgage_insurance_ltv

    def is_safe_for_refinancing(self) -> bool:
        return self.current_ltv.value <= self.settings.refinancing_safe_ltv

    def qualifies_for_best_rates(self) -> bool:
        return self.current_ltv.value <= self.settings.best_rate_ltv

    @property
    def equity_amount(self) -> float:
        return max(0.0, round(self.property_value - self.loan_amount.euros, 2))

    @property
    def equity_percentage(self) -> float:
        return 100 - self.current_ltv.value

    def amount_to_reach_target_ltv(self, target_ltv: float) -> float:
        """Repayment needed so that ``balance == property value × target / 100``."""
        target_balance = self.property_value * target_ltv / 100
        return max(0.0, round(self.loan_amount.euros - target_balance, 2))

    def max_additional_borrowing(self, target_ltv: float = DEFAULT_BORROWING_TARGET_LTV) -> float:
        """Extra loan possible before reaching ``target_ltv``."""
        target_balance = self.property_value * target_ltv / 100
        return max(0.0, round(target_balance - self.loan_amount.euros, 2))

    def __str__(self) -> str:
        return format_loan_to_value_ratio(self)


def create_loan_to_value_ratio(
    loan_amount: LoanAmount,
    property_valuation: PropertyValuation,
    original_loan_amount: LoanAmount | None = None,
    calculation_date: date | None = None,
    *,
    settings: EngineSettings | None = None,
) -> Result[LoanToValueRatio]:
    """
    Smart constructor for LoanToValueRatio.

    Fails with PropertyValuationNotAcceptable for valuation methods a lender
    does not accept, PropertyValueTooLow below 50,000 EUR, and LTVTooHigh when
    the ratio exceeds the property's ceiling plus the approval buffer.
    """
    settings = resolve_settings(settings)
    if not property_valuation.is_acceptable_for_mortgage():
        return Result.fail(LoanToValueError.PROPERTY_VALUATION_NOT_ACCEPTABLE)

    property_value = property_valuation.current_value.euros
    if property_value < settings.min_property_value_for_ltv:
        return Result.fail(LoanToValueError.PROPERTY_VALUE_TOO_LOW)

    current_percent = loan_amount.euros * 100 / property_value
    original = original_loan_amount or loan_amount
    original_percent = original.euros * 100 / property_value

    if current_percent > max_allowed_ltv(property_valuation) + settings.ltv_approval_buffer:
        return Result.fail(LoanToValueError.LTV_TOO_HIGH)

    current_ltv = create_percentage(current_percent)
    original_ltv = create_percentage(original_percent)
    if not current_ltv or not original_ltv:
        return Result.fail(LoanToValueError.INVALID_LOAN_AMOUNT)

    return Result.ok(
        LoanToValueRatio(
            current_ltv=current_ltv.data,
            original_ltv=original_ltv.data,
            loan_amount=loan_amount,
            property_valuation=property_valuation,
            risk_category=determine_risk_category(current_percent),
            calculation_date=calculation_date or date.today(),
            settings=settings,
        )
    )


def _updated(ltv: LoanToValueRatio, result: Result[LoanToValueRatio]) -> Result[LoanToValueRatio]:
    if not result:
        return result
    data = result.data
    return Result.ok(
        LoanToValueRatio(
            current_ltv=data.current_ltv,
            original_ltv=data.original_ltv,
            loan_amount=data.loan_amount,
            property_valuation=data.property_valuation,
            risk_category=data.risk_category,
            calculation_date=data.calculation_date,
            settings=data.settings,
            original=ltv,
        )
    )


def update_with_new_loan_amount(
    ltv: LoanToValueRatio, new_loan_amount: LoanAmount, calculation_date: date | None = None
) -> Result[LoanToValueRatio]:
    """Ratio for a new balance; the previous balance becomes the original."""
    created = create_loan_to_value_ratio(
        new_loan_amount,
        ltv.property_valuation,
        ltv.loan_amount,
        calculation_date,
        settings=ltv.settings,
    )
    return _updated(ltv, created)


def update_with_new_property_valuation(
    ltv: LoanToValueRatio, new_valuation: PropertyValuation, calculation_date: date | None = None
) -> Result[LoanToValueRatio]:
    """Ratio against a fresh valuation of the same loan."""
    created = create_loan_to_value_ratio(
        ltv.loan_amount,
        new_valuation,
        ltv.loan_amount,
        calculation_date,
        settings=ltv.settings,
    )
    return _updated(ltv, created)


def risk_category_label(category: LTVRiskCategory) -> str:
    return RISK_CATEGORY_LABELS[category]


def format_loan_to_value_ratio(ltv: LoanToValueRatio) -> str:
    """E.g. ``"LTV: 80,00 % (Risiko: Mittel)"``."""
    return f"LTV: {format_percent(ltv.current_ltv.value)} (Risiko: {risk_category_label(ltv.risk_category)})"
