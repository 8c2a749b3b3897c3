"""
Composite mortgage types built from the validated value types.
"""

from .extra_payment import ExtraPayment, ExtraPaymentPlan, create_extra_payment, create_extra_payment_plan
from .fixed_rate_period import FixedRatePeriod, FixedRateType, create_fixed_rate_period
from .loan_configuration import (
    LOAN_PRESETS,
    LoanConfiguration,
    create_loan_configuration,
    loan_configuration_from_input,
)
from .ltv import LoanToValueRatio, LTVRiskCategory, create_loan_to_value_ratio
from .monthly_payment import MonthlyPayment, create_monthly_payment
from .payment_history import (
    PaymentHistory,
    PaymentMethod,
    PaymentRecord,
    PaymentStatus,
    create_payment_history,
    create_payment_record,
)
from .property_valuation import (
    LocationQuality,
    PropertyLocation,
    PropertyType,
    PropertyValuation,
    ValuationMethod,
    create_property_valuation,
)
from .sondertilgung_rules import (
    BANK_RULES,
    BankType,
    GermanSondertilgungRules,
    create_german_sondertilgung_rules,
)

__all__ = [
    "ExtraPayment",
    "ExtraPaymentPlan",
    "create_extra_payment",
    "create_extra_payment_plan",
    "FixedRatePeriod",
    "FixedRateType",
    "create_fixed_rate_period",
    "LOAN_PRESETS",
    "LoanConfiguration",
    "create_loan_configuration",
    "loan_configuration_from_input",
    "LoanToValueRatio",
    "LTVRiskCategory",
    "create_loan_to_value_ratio",
    "MonthlyPayment",
    "create_monthly_payment",
    "PaymentHistory",
    "PaymentMethod",
    "PaymentRecord",
    "PaymentStatus",
    "create_payment_history",
    "create_payment_record",
    "LocationQuality",
    "PropertyLocation",
    "PropertyType",
    "PropertyValuation",
    "ValuationMethod",
    "create_property_valuation",
    "BANK_RULES",
    "BankType",
    "GermanSondertilgungRules",
    "create_german_sondertilgung_rules",
]
