"""
Shared fixtures for the MortgageLab test suite.
"""

from datetime import date

import pytest

from mortgagelab.core.utils import reset_warnings
from mortgagelab.types.loan_configuration import loan_configuration_from_input
from mortgagelab.types.property_valuation import (
    LocationQuality,
    PropertyLocation,
    PropertyType,
    ValuationMethod,
    create_property_valuation,
)
from mortgagelab.values.domain import create_loan_amount

EVALUATION_DATE = date(2026, 6, 30)


@pytest.fixture(autouse=True)
def _fresh_warnings():
    """warn_once state is global; start every test with a clean slate."""
    reset_warnings()
    yield
    reset_warnings()


@pytest.fixture
def standard_config():
    """300,000 EUR at 3.5 % over 25 years."""
    return loan_configuration_from_input(300_000, 3.5, term_in_months=300).unwrap()


@pytest.fixture
def loan_amount():
    return create_loan_amount(300_000).unwrap()


@pytest.fixture
def munich():
    return PropertyLocation("München", "80331", "Bayern", LocationQuality.GOOD)


@pytest.fixture
def make_valuation(munich):
    """Factory for valuations judged at EVALUATION_DATE."""

    def _make(
        current_value=500_000,
        purchase_price=500_000,
        method=ValuationMethod.BANK_APPRAISAL,
        property_type=PropertyType.EIGENHEIM,
        location=munich,
        valuation_date=date(2026, 1, 15),
    ):
        return create_property_valuation(
            current_value,
            purchase_price,
            valuation_date,
            method,
            property_type,
            location,
            evaluation_date=EVALUATION_DATE,
        )

    return _make
