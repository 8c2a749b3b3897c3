"""
Tests for the scalar value types.
"""

import math

import pytest
from hypothesis import assume, given
from hypothesis import strategies as st

from mortgagelab.values.scalars import (
    HUNDRED_PERCENT,
    MAX_MONEY_CENTS,
    ONE,
    TWELVE,
    ZERO_MONEY,
    ZERO_PERCENT,
    MoneyError,
    PercentageError,
    PositiveDecimalError,
    PositiveIntegerError,
    add_money,
    compare_money,
    create_money,
    create_percentage,
    create_positive_decimal,
    create_positive_integer,
    format_money,
    format_percentage,
    format_positive_decimal,
    format_positive_integer,
    from_decimal,
    is_equal_percentage,
    is_equal_positive_decimal,
    money_from_cents,
    multiply_money,
    round_positive_decimal,
    subtract_money,
)

cents_strategy = st.integers(min_value=0, max_value=MAX_MONEY_CENTS // 4)
percent_strategy = st.floats(min_value=0, max_value=33, allow_nan=False, allow_infinity=False)


class TestMoneyConstruction:
    """create_money checks finite, sign, precision and maximum in that order."""

    def test_rounds_half_up_to_cents(self):
        assert create_money(1234.565).data.cents == 123457
        assert create_money(0.1 + 0.2).data.cents == 30

    @pytest.mark.parametrize(
        "value, error",
        [
            (float("nan"), MoneyError.INVALID_AMOUNT),
            (float("inf"), MoneyError.INVALID_AMOUNT),
            (-0.01, MoneyError.NEGATIVE_AMOUNT),
            (1_000_000_000, MoneyError.EXCEEDS_MAXIMUM),
        ],
    )
    def test_invalid_amounts(self, value, error):
        result = create_money(value)
        assert not result
        assert result.error == error

    def test_upper_bound_is_inclusive(self):
        assert create_money(999_999_999.00).data.cents == MAX_MONEY_CENTS

    def test_strict_mode_rejects_extra_decimals(self):
        assert create_money(10.005, strict=True).error == MoneyError.TOO_MANY_DECIMALS
        assert create_money(10.05, strict=True)

    def test_negative_reported_before_precision(self):
        assert create_money(-10.005, strict=True).error == MoneyError.NEGATIVE_AMOUNT

    def test_from_cents(self):
        assert money_from_cents(150).data.euros == 1.5
        assert money_from_cents(-1).error == MoneyError.NEGATIVE_AMOUNT
        assert money_from_cents(1.5).error == MoneyError.INVALID_AMOUNT


class TestMoneyArithmetic:
    def test_subtract_below_zero_fails(self):
        a = create_money(10).unwrap()
        b = create_money(10.01).unwrap()
        assert subtract_money(a, b).error == MoneyError.NEGATIVE_AMOUNT

    def test_add_past_maximum_fails(self):
        big = money_from_cents(MAX_MONEY_CENTS).unwrap()
        assert add_money(big, create_money(0.01).unwrap()).error == MoneyError.EXCEEDS_MAXIMUM

    def test_multiply(self):
        money = create_money(100).unwrap()
        assert multiply_money(money, 0.035).data.cents == 350
        assert multiply_money(money, -1).error == MoneyError.INVALID_AMOUNT
        assert multiply_money(money, float("nan")).error == MoneyError.INVALID_AMOUNT

    def test_compare(self):
        a = create_money(5).unwrap()
        b = create_money(7).unwrap()
        assert compare_money(a, b) < 0
        assert a < b

    def test_format(self):
        assert format_money(create_money(1234.56).unwrap()) == "1.234,56\u00a0€"
        assert str(ZERO_MONEY) == "0,00\u00a0€"

    @given(a=cents_strategy, b=cents_strategy)
    def test_addition_commutes(self, a, b):
        x, y = money_from_cents(a).unwrap(), money_from_cents(b).unwrap()
        assert x.add(y) == y.add(x)

    @given(a=cents_strategy, b=cents_strategy, c=cents_strategy)
    def test_addition_associates(self, a, b, c):
        x, y, z = (money_from_cents(v).unwrap() for v in (a, b, c))
        assert x.add(y).unwrap().add(z) == x.add(y.add(z).unwrap())

    @given(a=cents_strategy, b=cents_strategy)
    def test_add_then_subtract_restores(self, a, b):
        x, y = money_from_cents(a).unwrap(), money_from_cents(b).unwrap()
        assert x.add(y).unwrap().subtract(y).unwrap() == x

    @given(a=cents_strategy)
    def test_identities(self, a):
        x = money_from_cents(a).unwrap()
        assert x.add(ZERO_MONEY).unwrap() == x
        assert x.multiply(1).unwrap() == x


class TestPercentage:
    @pytest.mark.parametrize(
        "value, error",
        [
            (float("nan"), PercentageError.INVALID_VALUE),
            (-0.1, PercentageError.OUT_OF_RANGE),
            (100.01, PercentageError.OUT_OF_RANGE),
        ],
    )
    def test_invalid_values(self, value, error):
        assert create_percentage(value).error == error

    def test_bounds_inclusive(self):
        assert create_percentage(0).data == ZERO_PERCENT
        assert create_percentage(100).data == HUNDRED_PERCENT

    def test_decimal_conversion(self):
        p = create_percentage(3.5).unwrap()
        assert p.to_decimal() == pytest.approx(0.035)
        assert from_decimal(0.035).data.value == 3.5

    def test_arithmetic_results(self):
        a = create_percentage(60).unwrap()
        b = create_percentage(50).unwrap()
        assert a.add(b).error == PercentageError.OUT_OF_RANGE
        assert b.subtract(a).error == PercentageError.OUT_OF_RANGE
        assert a.multiply(0.5).data.value == 30

    def test_equality_tolerance(self):
        a = create_percentage(3.5).unwrap()
        b = create_percentage(3.5005).unwrap()
        assert is_equal_percentage(a, b)

    def test_format(self):
        p = create_percentage(3.5).unwrap()
        assert format_percentage(p) == "3,50\u00a0%"
        assert format_percentage(p, 1) == "3,5\u00a0%"

    @given(a=percent_strategy, b=percent_strategy)
    def test_addition_commutes(self, a, b):
        x, y = create_percentage(a).unwrap(), create_percentage(b).unwrap()
        assert x.add(y) == y.add(x)

    @given(a=percent_strategy, b=percent_strategy, c=percent_strategy)
    def test_addition_associates_within_tolerance(self, a, b, c):
        x, y, z = (create_percentage(v).unwrap() for v in (a, b, c))
        left = x.add(y).unwrap().add(z).unwrap()
        right = x.add(y.add(z).unwrap()).unwrap()
        assert is_equal_percentage(left, right)

    @given(a=percent_strategy)
    def test_identities(self, a):
        x = create_percentage(a).unwrap()
        assert x.add(ZERO_PERCENT).unwrap() == x
        assert x.multiply(1).unwrap() == x


class TestPositiveInteger:
    @pytest.mark.parametrize(
        "value, error",
        [
            (float("inf"), PositiveIntegerError.INVALID_VALUE),
            (0, PositiveIntegerError.NOT_POSITIVE),
            (-2.5, PositiveIntegerError.NOT_POSITIVE),
            (2.5, PositiveIntegerError.NOT_INTEGER),
        ],
    )
    def test_validation_order(self, value, error):
        """Sign is checked before integrality."""
        assert create_positive_integer(value).error == error

    def test_accepts_integral_floats(self):
        assert create_positive_integer(12.0).data == TWELVE

    def test_arithmetic(self):
        assert ONE.add(TWELVE).value == 13
        assert TWELVE.multiply(TWELVE).value == 144
        assert ONE.subtract(TWELVE).error == PositiveIntegerError.NOT_POSITIVE
        assert TWELVE.divide(create_positive_integer(5).unwrap()).data.value == 2
        assert ONE.divide(TWELVE).error == PositiveIntegerError.NOT_POSITIVE

    def test_format(self):
        assert format_positive_integer(create_positive_integer(12345).unwrap()) == "12.345"


class TestPositiveDecimal:
    def test_validation(self):
        assert create_positive_decimal(float("nan")).error == PositiveDecimalError.INVALID_VALUE
        assert create_positive_decimal(0).error == PositiveDecimalError.NOT_POSITIVE

    def test_arithmetic(self):
        a = create_positive_decimal(1.5).unwrap()
        b = create_positive_decimal(0.5).unwrap()
        assert a.add(b).value == 2.0
        assert a.divide(b).value == 3.0
        assert b.subtract(a).error == PositiveDecimalError.NOT_POSITIVE
        assert a.multiply_by_factor(0).error == PositiveDecimalError.INVALID_VALUE

    def test_equality_and_rounding(self):
        a = create_positive_decimal(0.1 + 0.2).unwrap()
        b = create_positive_decimal(0.3).unwrap()
        assert is_equal_positive_decimal(a, b)
        assert round_positive_decimal(create_positive_decimal(2.345).unwrap(), 2).data.value == 2.35
        assert not round_positive_decimal(create_positive_decimal(0.004).unwrap(), 2)

    def test_format(self):
        assert format_positive_decimal(create_positive_decimal(1234.5).unwrap()) == "1.234,50"

    @given(
        a=st.floats(min_value=0.001, max_value=1e6, allow_nan=False, allow_infinity=False),
        b=st.floats(min_value=0.001, max_value=1e6, allow_nan=False, allow_infinity=False),
    )
    def test_subtract_restores_sum(self, a, b):
        x = create_positive_decimal(a).unwrap()
        y = create_positive_decimal(b).unwrap()
        restored = x.add(y).subtract(y)
        assume(restored.success)
        assert math.isclose(restored.data.value, a, rel_tol=1e-9, abs_tol=1e-9)
