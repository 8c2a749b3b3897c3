"""
MortgageLab - German Mortgage Calculation Engine

MortgageLab models German residential mortgages as validated, immutable values:
loan amounts, interest rates and terms are built through smart constructors that
return a ``Result`` instead of raising, so invalid input is reported as a named
error kind and never produces a half-built object.

Key Features:
- **Validated Value Types**: Money, Percentage, LoanAmount, InterestRate, MonthCount, ...
- **Amortization Engine**: Month-by-month schedules with extra payments (Sondertilgungen)
- **Sondertilgung Rules**: Yearly caps, grace periods and fees of seven German bank types
- **LTV Classification**: Loan-to-value risk bands, rate premiums and equity figures
- **Portfolio Aggregation**: Summaries, optimization hints and cash-flow projections
- **German Formatting**: ``1.234,56 €`` and ``3,50 %`` output, bit-exact

Architecture Overview:
- **core**: Result type, exceptions, settings, currency and formatting helpers
- **values**: Scalar and domain-specific value types
- **types**: Composite types (loan configuration, extra payments, valuations, rules)
- **calculations**: Loan formulas, amortization and the Sondertilgung engine
- **portfolio**: Aggregation across several mortgages

Quick Start:
    ```python
    from mortgagelab import (
        BankType,
        create_extra_payment,
        create_german_sondertilgung_rules,
        generate_amortization_schedule,
        loan_configuration_from_input,
        validate_sondertilgung_payment,
    )

    config = loan_configuration_from_input(300_000, 3.5, term_in_years=25).unwrap()
    rules = create_german_sondertilgung_rules(BankType.SPARKASSE).unwrap()

    extra = create_extra_payment(12, 15_000).unwrap()
    if validate_sondertilgung_payment(rules, extra, config.amount):
        schedule = generate_amortization_schedule(config, [extra]).unwrap()
        print(schedule.metrics.interest_saved, schedule.metrics.term_reduction)
    ```
"""

from __future__ import annotations

from .calculations import (
    AmortizationSchedule,
    PaymentDetail,
    calculate_loan_status,
    calculate_monthly_payment,
    calculate_sondertilgung_fees,
    calculate_sondertilgung_impact,
    compare_schedules,
    generate_amortization_schedule,
    get_recommended_strategy,
    validate_sondertilgung_payment,
)
from .core import (
    DEFAULT_SETTINGS,
    ConfigError,
    EngineSettings,
    InvariantViolation,
    MortgageLabError,
    Result,
)
from .core.utils import MortgageLabWarning
from .portfolio import (
    MortgageEntry,
    MortgagePortfolio,
    calculate_portfolio_summary,
    create_portfolio,
)
from .types import (
    BankType,
    ExtraPayment,
    LoanConfiguration,
    LoanToValueRatio,
    create_extra_payment,
    create_german_sondertilgung_rules,
    create_loan_configuration,
    create_loan_to_value_ratio,
    create_property_valuation,
    loan_configuration_from_input,
)
from .values import (
    Money,
    Percentage,
    create_interest_rate,
    create_loan_amount,
    create_money,
    create_percentage,
    format_money,
    format_percentage,
)

__version__ = "0.1.0"

__all__ = [
    "AmortizationSchedule",
    "PaymentDetail",
    "calculate_loan_status",
    "calculate_monthly_payment",
    "calculate_sondertilgung_fees",
    "calculate_sondertilgung_impact",
    "compare_schedules",
    "generate_amortization_schedule",
    "get_recommended_strategy",
    "validate_sondertilgung_payment",
    "DEFAULT_SETTINGS",
    "ConfigError",
    "EngineSettings",
    "InvariantViolation",
    "MortgageLabError",
    "MortgageLabWarning",
    "Result",
    "MortgageEntry",
    "MortgagePortfolio",
    "calculate_portfolio_summary",
    "create_portfolio",
    "BankType",
    "ExtraPayment",
    "LoanConfiguration",
    "LoanToValueRatio",
    "create_extra_payment",
    "create_german_sondertilgung_rules",
    "create_loan_configuration",
    "create_loan_to_value_ratio",
    "create_property_valuation",
    "loan_configuration_from_input",
    "Money",
    "Percentage",
    "create_interest_rate",
    "create_loan_amount",
    "create_money",
    "create_percentage",
    "format_money",
    "format_percentage",
    "__version__",
]
