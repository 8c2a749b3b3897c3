"""
Smoke tests to verify basic imports and functionality.
"""

import pytest


def test_import_mortgagelab():
    """Test that we can import the main package."""
    import mortgagelab

    assert hasattr(mortgagelab, "__version__")
    assert mortgagelab.__version__ == "0.1.0"


def test_public_names_resolve():
    """Every name in __all__ is importable from the package root."""
    import mortgagelab

    missing = [name for name in mortgagelab.__all__ if not hasattr(mortgagelab, name)]
    assert missing == []


@pytest.mark.parametrize(
    "module",
    [
        "mortgagelab.core",
        "mortgagelab.core.interfaces",
        "mortgagelab.values",
        "mortgagelab.types",
        "mortgagelab.calculations",
        "mortgagelab.portfolio",
    ],
)
def test_import_subpackages(module):
    import importlib

    assert importlib.import_module(module) is not None


def test_quick_start_flow():
    """The README quick start runs end to end."""
    from mortgagelab import (
        BankType,
        create_extra_payment,
        create_german_sondertilgung_rules,
        format_money,
        generate_amortization_schedule,
        loan_configuration_from_input,
        validate_sondertilgung_payment,
    )

    config = loan_configuration_from_input(300_000, 3.5, term_in_years=25).unwrap()
    assert format_money(config.monthly_payment) == "1.501,87\u00a0€"

    rules = create_german_sondertilgung_rules(BankType.SPARKASSE).unwrap()
    extra = create_extra_payment(12, 15_000).unwrap()
    assert validate_sondertilgung_payment(rules, extra, config.amount)

    schedule = generate_amortization_schedule(config, [extra]).unwrap()
    assert schedule.metrics.interest_saved > 0
    assert schedule.metrics.term_reduction > 0
