"""
Loan, amortization and Sondertilgung calculations.
"""

from .amortization import (
    AmortizationError,
    AmortizationSchedule,
    LoanStatus,
    PaymentDetail,
    calculate_loan_status,
    compare_schedules,
    generate_amortization_schedule,
)
from .loan import (
    LoanCalculationError,
    calculate_interest_rate,
    calculate_loan_term,
    calculate_monthly_payment,
    calculate_remaining_balance,
)
from .sondertilgung import (
    calculate_sondertilgung_fees,
    calculate_sondertilgung_impact,
    get_recommended_strategy,
    validate_sondertilgung_payment,
)

__all__ = [
    "AmortizationError",
    "AmortizationSchedule",
    "LoanStatus",
    "PaymentDetail",
    "calculate_loan_status",
    "compare_schedules",
    "generate_amortization_schedule",
    "LoanCalculationError",
    "calculate_interest_rate",
    "calculate_loan_term",
    "calculate_monthly_payment",
    "calculate_remaining_balance",
    "calculate_sondertilgung_fees",
    "calculate_sondertilgung_impact",
    "get_recommended_strategy",
    "validate_sondertilgung_payment",
]
