"""
Property valuation used as collateral for a mortgage.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum

from mortgagelab.core.result import Result
from mortgagelab.core.settings import EngineSettings, resolve_settings
from mortgagelab.core.utils import add_months, months_between
from mortgagelab.values.scalars import Money, create_money, format_money

MIN_PROPERTY_VALUE = 10_000.0
MAX_PROPERTY_VALUE = 50_000_000.0
CONSERVATIVE_DISCOUNT_PCT = 10.0

_POSTAL_CODE = re.compile(r"^\d{5}$")


class ValuationMethod(str, Enum):
    BANK_APPRAISAL = "BankAppraisal"
    INDEPENDENT_APPRAISAL = "IndependentAppraisal"
    ONLINE_ESTIMATE = "OnlineEstimate"
    COMPARATIVE_MARKET_ANALYSIS = "ComparativeMarketAnalysis"
    SELF_ASSESSMENT = "SelfAssessment"
    INSURANCE_VALUATION = "InsuranceValuation"


class PropertyType(str, Enum):
    EIGENHEIM = "Eigenheim"
    EIGENTUMSWOHNUNG = "Eigentumswohnung"
    REIHENHAUS = "Reihenhaus"
    DOPPELHAUSHAELFTE = "Doppelhaushälfte"
    MEHRFAMILIENHAUS = "Mehrfamilienhaus"
    BAUGRUNDSTUECK = "Baugrundstück"
    GEWERBEIMMOBILIE = "Gewerbeimmobilie"

    @property
    def is_investment(self) -> bool:
        return self in (PropertyType.MEHRFAMILIENHAUS, PropertyType.GEWERBEIMMOBILIE)


class LocationQuality(str, Enum):
    PREMIUM = "Premium"
    GOOD = "Good"
    AVERAGE = "Average"
    BELOW_AVERAGE = "Below Average"
    RURAL = "Rural"


# Confidence (0-100) a lender places in each valuation method
RELIABILITY_SCORES = {
    ValuationMethod.BANK_APPRAISAL: 95,
    ValuationMethod.INDEPENDENT_APPRAISAL: 90,
    ValuationMethod.INSURANCE_VALUATION: 80,
    ValuationMethod.COMPARATIVE_MARKET_ANALYSIS: 70,
    ValuationMethod.ONLINE_ESTIMATE: 60,
    ValuationMethod.SELF_ASSESSMENT: 40,
}

MORTGAGE_ACCEPTABLE_METHODS = frozenset(
    {
        ValuationMethod.BANK_APPRAISAL,
        ValuationMethod.INDEPENDENT_APPRAISAL,
        ValuationMethod.INSURANCE_VALUATION,
    }
)

LOCATION_DESCRIPTIONS = {
    LocationQuality.PREMIUM: "Premiumlage - Beste Wohnlage mit hoher Nachfrage",
    LocationQuality.GOOD: "Gute Lage - Gefragte Wohngegend",
    LocationQuality.AVERAGE: "Durchschnittliche Lage",
    LocationQuality.BELOW_AVERAGE: "Unterdurchschnittliche Lage",
    LocationQuality.RURAL: "Ländliche Lage - Geringere Nachfrage",
}


class PropertyValuationError(str, Enum):
    INVALID_CURRENT_VALUE = "InvalidCurrentValue"
    INVALID_PURCHASE_PRICE = "InvalidPurchasePrice"
    INVALID_VALUATION_METHOD = "InvalidValuationMethod"
    INVALID_PROPERTY_TYPE = "InvalidPropertyType"
    FUTURE_VALUATION_DATE = "FutureValuationDate"
    VALUATION_TOO_OLD = "ValuationTooOld"
    VALUE_DECREASE_TOO_SEVERE = "ValueDecreaseTooSevere"
    INVALID_LOCATION = "InvalidLocation"


@dataclass(frozen=True)
class PropertyLocation:
    """Address data relevant for risk pricing."""

    city: str
    postal_code: str
    state: str
    location_quality: LocationQuality = LocationQuality.AVERAGE

    @property
    def description(self) -> str:
        return LOCATION_DESCRIPTIONS[self.location_quality]


@dataclass(frozen=True)
class PropertyValuation:
    """
    Valuation of a property at a point in time.

    Attributes:
        current_value: Appraised market value
        purchase_price: Original purchase price
        valuation_date: Date of the appraisal
        method: How the value was determined
        property_type: Kind of property
        location: Where the property is
    """

    current_value: Money
    purchase_price: Money
    valuation_date: date
    method: ValuationMethod
    property_type: PropertyType
    location: PropertyLocation

    @property
    def reliability_score(self) -> int:
        return RELIABILITY_SCORES[self.method]

    def is_acceptable_for_mortgage(self) -> bool:
        return self.method in MORTGAGE_ACCEPTABLE_METHODS

    @property
    def value_change(self) -> float:
        """Current value minus purchase price, in EUR."""
        return round(self.current_value.euros - self.purchase_price.euros, 2)

    @property
    def value_change_percentage(self) -> float:
        return round(self.value_change / self.purchase_price.euros * 100, 2)

    def conservative_value(self) -> float:
        """Lower of purchase price and a 10 % haircut on the current value."""
        discounted = self.current_value.euros * (1 - CONSERVATIVE_DISCOUNT_PCT / 100)
        return round(min(discounted, self.purchase_price.euros), 2)

    def age_in_months(self, on: date) -> int:
        return months_between(self.valuation_date, on)

    def __str__(self) -> str:
        return format_property_valuation(self)


def _validate_location(location: PropertyLocation) -> bool:
    return (
        bool(location.city.strip())
        and bool(location.state.strip())
        and _POSTAL_CODE.match(location.postal_code) is not None
        and isinstance(location.location_quality, LocationQuality)
    )


def create_property_valuation(
    current_value: float,
    purchase_price: float,
    valuation_date: date,
    method: ValuationMethod | str,
    property_type: PropertyType | str,
    location: PropertyLocation,
    *,
    evaluation_date: date | None = None,
    settings: EngineSettings | None = None,
) -> Result[PropertyValuation]:
    """
    Smart constructor for PropertyValuation.

    Args:
        current_value: Appraised value in EUR, within [10,000; 50,000,000]
        purchase_price: Purchase price in EUR, same range
        valuation_date: Date of the appraisal; may not lie after ``evaluation_date``
        method: Valuation method (closed enumeration)
        property_type: Property type (closed enumeration)
        location: Location; postal code must have five digits
        evaluation_date: Date the valuation is judged at (defaults to today)
        settings: Overrides for the age and value-decrease limits

    Returns:
        Result with PropertyValuation or the first failing PropertyValuationError
    """
    settings = resolve_settings(settings)
    evaluation_date = evaluation_date or date.today()

    current = create_money(current_value)
    if not current or not MIN_PROPERTY_VALUE <= current.data.euros <= MAX_PROPERTY_VALUE:
        return Result.fail(PropertyValuationError.INVALID_CURRENT_VALUE)

    purchase = create_money(purchase_price)
    if not purchase or not MIN_PROPERTY_VALUE <= purchase.data.euros <= MAX_PROPERTY_VALUE:
        return Result.fail(PropertyValuationError.INVALID_PURCHASE_PRICE)

    try:
        method = ValuationMethod(method)
    except ValueError:
        return Result.fail(PropertyValuationError.INVALID_VALUATION_METHOD)
    try:
        property_type = PropertyType(property_type)
    except ValueError:
        return Result.fail(PropertyValuationError.INVALID_PROPERTY_TYPE)

    if valuation_date > evaluation_date:
        return Result.fail(PropertyValuationError.FUTURE_VALUATION_DATE)
    if valuation_date < add_months(evaluation_date, -settings.max_valuation_age_months):
        return Result.fail(PropertyValuationError.VALUATION_TOO_OLD)

    decrease_pct = (purchase.data.euros - current.data.euros) / purchase.data.euros * 100
    if decrease_pct > settings.max_value_decrease_pct:
        return Result.fail(PropertyValuationError.VALUE_DECREASE_TOO_SEVERE)

    if not _validate_location(location):
        return Result.fail(PropertyValuationError.INVALID_LOCATION)

    return Result.ok(
        PropertyValuation(
            current_value=current.data,
            purchase_price=purchase.data,
            valuation_date=valuation_date,
            method=method,
            property_type=property_type,
            location=location,
        )
    )


def format_property_valuation(valuation: PropertyValuation) -> str:
    """E.g. ``"Eigenheim in München: 500.000,00 € (BankAppraisal, 12.03.2026)"``."""
    return (
        f"{valuation.property_type.value} in {valuation.location.city}: "
        f"{format_money(valuation.current_value)} "
        f"({valuation.method.value}, {valuation.valuation_date:%d.%m.%Y})"
    )
