"""
Tests for German number, currency and percent formatting.
"""

from decimal import Decimal

import pytest

from mortgagelab.core.currency import EUR, Currency, RoundingPolicy
from mortgagelab.core.formatting import NBSP, format_currency, format_number, format_percent


class TestFormatNumber:
    """German separators and half-up rounding."""

    @pytest.mark.parametrize(
        "value, decimals, expected",
        [
            (0, 0, "0"),
            (999, 0, "999"),
            (1000, 0, "1.000"),
            (1234567.891, 2, "1.234.567,89"),
            (2.5, 0, "3"),
            (0.125, 2, "0,13"),
            (-1234.5, 1, "-1.234,5"),
            (Decimal("300000"), 2, "300.000,00"),
        ],
    )
    def test_format_number(self, value, decimals, expected):
        assert format_number(value, decimals) == expected


class TestFormatCurrency:
    """Currency output is byte-exact, including the no-break space."""

    def test_euro_amount(self):
        assert format_currency(1234.56) == f"1.234,56{NBSP}€"

    def test_uses_no_break_space(self):
        assert format_currency(1) == "1,00\u00a0€"

    def test_large_amount(self):
        assert format_currency(Decimal("999999999.00")) == f"999.999.999,00{NBSP}€"


class TestFormatPercent:
    def test_default_two_decimals(self):
        assert format_percent(3.5) == f"3,50{NBSP}%"

    def test_custom_precision(self):
        assert format_percent(12.3456, 1) == f"12,3{NBSP}%"
        assert format_percent(5, 0) == f"5{NBSP}%"


class TestCurrency:
    """Quantization follows the currency's rounding policy."""

    def test_eur_rounds_half_up(self):
        assert EUR.quantize(Decimal("1.225")) == Decimal("1.23")
        assert EUR.quantize(Decimal("1.235")) == Decimal("1.24")

    def test_bankers_rounding(self):
        eur = Currency("EUR", "€", decimals=2, rounding=RoundingPolicy.BANKERS)
        assert eur.quantize(Decimal("1.225")) == Decimal("1.22")

    def test_minor_units_round_trip(self):
        assert EUR.to_minor_units(1234.56) == 123456
        assert EUR.from_minor_units(123456) == Decimal("1234.56")

    def test_excess_precision(self):
        assert EUR.has_excess_precision(1.005)
        assert not EUR.has_excess_precision(1.5)
