"""
Validated value types.
"""

from .domain import (
    InterestRate,
    LoanAmount,
    MonthCount,
    PaymentMonth,
    YearCount,
    create_interest_rate,
    create_loan_amount,
    create_month_count,
    create_payment_month,
    create_year_count,
)
from .scalars import (
    Money,
    Percentage,
    PositiveDecimal,
    PositiveInteger,
    create_money,
    create_percentage,
    create_positive_decimal,
    create_positive_integer,
    format_money,
    format_percentage,
)

__all__ = [
    "InterestRate",
    "LoanAmount",
    "MonthCount",
    "PaymentMonth",
    "YearCount",
    "create_interest_rate",
    "create_loan_amount",
    "create_month_count",
    "create_payment_month",
    "create_year_count",
    "Money",
    "Percentage",
    "PositiveDecimal",
    "PositiveInteger",
    "create_money",
    "create_percentage",
    "create_positive_decimal",
    "create_positive_integer",
    "format_money",
    "format_percentage",
]
