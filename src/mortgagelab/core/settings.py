"""
Engine-wide tolerances and thresholds.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ConfigError


@dataclass(frozen=True)
class EngineSettings:
    """
    Named, overridable constants used by the consistency and risk checks.

    The defaults are the values the engine has always shipped with. Pass a
    customised instance through the ``settings=`` keyword of the functions
    that accept it.

    Attributes:
        annuity_tolerance: Max deviation (EUR) between a configuration's payment
            and the annuity formula
        zero_rate_tolerance: Max deviation (EUR) for the straight-line
            relation of zero-rate loans
        monthly_payment_tolerance: Max deviation (EUR) between principal +
            interest and the total of a MonthlyPayment
        ltv_approval_buffer: Percentage points above the max allowed LTV that
            are still accepted when creating a LoanToValueRatio
        refinancing_safe_ltv: LTV at or below which refinancing is considered safe
        mortgage_insurance_ltv: LTV above which mortgage insurance is required
        best_rate_ltv: LTV at or below which the best rates apply
        max_valuation_age_months: Oldest accepted property valuation
        max_value_decrease_pct: Largest accepted drop from purchase price
        min_property_value_for_ltv: Smallest property value an LTV is computed for
        fixed_period_expiry_warning_months: Horizon for ``is_expiring_soon``
    """

    annuity_tolerance: float = 1.0
    zero_rate_tolerance: float = 0.01
    monthly_payment_tolerance: float = 0.01
    ltv_approval_buffer: float = 10.0
    refinancing_safe_ltv: float = 75.0
    mortgage_insurance_ltv: float = 80.0
    best_rate_ltv: float = 60.0
    max_valuation_age_months: int = 24
    max_value_decrease_pct: float = 50.0
    min_property_value_for_ltv: float = 50_000.0
    fixed_period_expiry_warning_months: int = 12

    def __post_init__(self):
        for name in (
            "annuity_tolerance",
            "zero_rate_tolerance",
            "monthly_payment_tolerance",
            "ltv_approval_buffer",
            "min_property_value_for_ltv",
        ):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be non-negative, got {getattr(self, name)}")

        for name in (
            "refinancing_safe_ltv",
            "mortgage_insurance_ltv",
            "best_rate_ltv",
            "max_value_decrease_pct",
        ):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ConfigError(f"{name} must be within [0, 100], got {value}")

        for name in ("max_valuation_age_months", "fixed_period_expiry_warning_months"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)}")


DEFAULT_SETTINGS = EngineSettings()


def resolve_settings(settings: EngineSettings | None) -> EngineSettings:
    """Return ``settings`` or the package defaults when None."""
    return DEFAULT_SETTINGS if settings is None else settings
