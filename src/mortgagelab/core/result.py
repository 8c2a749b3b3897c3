"""
Success/failure result type used by every fallible operation in MortgageLab.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from .errors import InvariantViolation

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a validated construction or calculation.

    Business-rule violations are reported through a failed Result instead of an
    exception. Callers inspect ``success`` (or the truthiness of the result)
    before touching ``data``.

    Attributes:
        success: Whether the operation succeeded
        data: The produced value on success, None on failure
        error: Error kind on failure (a ``str`` enum member), None on success

    Example:
        ```python
        from mortgagelab.values.scalars import create_money

        result = create_money(1234.56)
        if result:
            print(result.data.cents)  # 123456
        else:
            print(result.error)
        ```
    """

    success: bool
    data: T | None = None
    error: Any = None

    @classmethod
    def ok(cls, data: T = None) -> Result[T]:
        """Create a successful result."""
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: Any) -> Result[T]:
        """Create a failed result carrying an error kind."""
        return cls(success=False, error=error)

    def __bool__(self) -> bool:
        return self.success

    def unwrap(self) -> T:
        """
        Return the data of a successful result.

        Only meant for paths where failure is impossible, such as building
        module-level constants from literal values.

        Raises:
            InvariantViolation: If the result is a failure
        """
        if not self.success:
            raise InvariantViolation(f"unwrap() called on failed result: {self.error}")
        return self.data

    def unwrap_or(self, default: T) -> T:
        """Return the data, or ``default`` when the result is a failure."""
        return self.data if self.success else default

    def map(self, fn: Callable[[T], U]) -> Result[U]:
        """Apply ``fn`` to the data of a successful result."""
        if not self.success:
            return Result.fail(self.error)
        return Result.ok(fn(self.data))

    def map_error(self, error: Any) -> Result[T]:
        """Replace the error kind of a failed result, keep successes as-is."""
        if self.success:
            return self
        return Result.fail(error)
