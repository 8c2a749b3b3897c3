"""
Exception classes for MortgageLab.

Business-rule violations are never raised: they travel as failed ``Result``
values. The exceptions below signal programming defects only.
"""


class MortgageLabError(Exception):
    """Base class for all MortgageLab exceptions."""


class InvariantViolation(MortgageLabError):
    """
    A value that must always be valid failed validation.

    This exception is raised when a failed ``Result`` is unwrapped, for example
    while building module-level constants such as ``TYPICAL_CURRENT_RATE`` from
    literal numbers. Seeing it at runtime means the code, not the data, is wrong.

    **Example Usage:**
        ```python
        from mortgagelab.values.domain import create_interest_rate

        # Safe: 3.5 is inside [0.1, 25.0]
        rate = create_interest_rate(3.5).unwrap()

        # Raises InvariantViolation: the literal is out of range
        broken = create_interest_rate(99.0).unwrap()
        ```
    """


class ConfigError(MortgageLabError):
    """
    Invalid engine configuration.

    Raised when ``EngineSettings`` is built with values that make no sense,
    such as a negative tolerance or an LTV threshold outside [0, 100].

    **Common Causes:**
    - Negative annuity or zero-rate tolerances
    - Percentage thresholds outside 0..100
    - Non-positive month counts for valuation age or expiry warnings
    """
