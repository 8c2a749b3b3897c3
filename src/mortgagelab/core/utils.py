"""
Utility functions for MortgageLab.
"""

from __future__ import annotations

import calendar
import math
import numbers
import warnings
from datetime import date
from decimal import Decimal

import numpy as np


class MortgageLabWarning(UserWarning):
    """Warning for suspicious but non-fatal mortgage input."""


# Global set to track warnings per scope to avoid spam
_warned: set[tuple[str, str]] = set()


def warn_once(code: str, scope: str, msg: str, *, category=MortgageLabWarning):
    """Warn once per (scope, code) to avoid spam."""
    key = (scope, code)
    if key not in _warned:
        _warned.add(key)
        warnings.warn(msg, category, stacklevel=3)


def reset_warnings() -> None:
    """Forget which warnings were already emitted (used by tests)."""
    _warned.clear()


def is_finite_number(value) -> bool:
    """
    Check that ``value`` is a finite real number.

    Raises:
        TypeError: If ``value`` is not a number at all (a call-site bug)
    """
    if isinstance(value, bool) or not isinstance(value, (numbers.Real, Decimal)):
        raise TypeError(f"expected a real number, got {type(value).__name__}")
    return math.isfinite(value)


def months_between(start: date, end: date) -> int:
    """
    Whole calendar months from ``start`` to ``end``, never negative.

    Days are ignored: 2024-01-31 -> 2024-02-01 counts as one month.
    """
    return max(0, (end.year - start.year) * 12 + (end.month - start.month))


def add_months(start: date, months: int) -> date:
    """
    Shift ``start`` by ``months`` calendar months, clamping the day.

    **Example:**
        ```python
        add_months(date(2024, 1, 31), 1)  # date(2024, 2, 29)
        ```
    """
    total = start.year * 12 + (start.month - 1) + months
    year, month = divmod(total, 12)
    month += 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def add_years(start: date, years: int) -> date:
    """Shift ``start`` by whole years (Feb 29 falls back to Feb 28)."""
    return add_months(start, years * 12)


def month_range(start: date, months: int) -> np.ndarray:
    """
    Generate a range of monthly dates starting from a given date.

    **Args:**
        start: The starting date for the range
        months: Number of months to generate

    **Returns:**
        A numpy array of datetime64[M] values, one per schedule month

    **Example:**
        ```python
        from datetime import date
        from mortgagelab.core.utils import month_range

        dates = month_range(date(2026, 1, 1), 12)
        # ['2026-01' '2026-02' ... '2026-12']
        ```
    """
    s = np.datetime64(start, "M")
    return s + np.arange(months).astype("timedelta64[M]")
