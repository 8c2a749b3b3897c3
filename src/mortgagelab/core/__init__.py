"""
Core building blocks: results, errors, currency, formatting, settings and utilities.
"""

from .currency import EUR, Currency, RoundingPolicy
from .errors import ConfigError, InvariantViolation, MortgageLabError
from .result import Result
from .settings import DEFAULT_SETTINGS, EngineSettings

__all__ = [
    "EUR",
    "Currency",
    "RoundingPolicy",
    "ConfigError",
    "InvariantViolation",
    "MortgageLabError",
    "Result",
    "DEFAULT_SETTINGS",
    "EngineSettings",
]
