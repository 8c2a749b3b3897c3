"""
Tests for the bank-specific Sondertilgung rule tables.
"""

import pytest

from mortgagelab.types.sondertilgung_rules import (
    BANK_RULES,
    BankType,
    FeeType,
    PaymentDateRestriction,
    SondertilgungRuleError,
    TimingRestrictions,
    create_german_sondertilgung_rules,
    format_bank_type,
    get_available_bank_types,
)
from mortgagelab.values.scalars import create_money


class TestBankRuleTable:
    """The seven rule sets are static, read-only data."""

    def test_all_bank_types_present(self):
        assert set(get_available_bank_types()) == set(BankType)
        assert len(BANK_RULES) == 7

    @pytest.mark.parametrize(
        "bank_type, cap, fee_type, grace, dates",
        [
            (BankType.SPARKASSE, 10, FeeType.PERCENTAGE, 12, PaymentDateRestriction.MONTH_END),
            (BankType.VOLKSBANK, 10, FeeType.PERCENTAGE, 12, PaymentDateRestriction.MONTH_END),
            (BankType.PRIVATBANK, 20, FeeType.FIXED, 6, PaymentDateRestriction.ANY_TIME),
            (BankType.BAUSPARKASSE, 5, FeeType.TIERED, 24, PaymentDateRestriction.YEAR_END),
            (BankType.HYPOTHEKENBANK, 20, FeeType.FIXED, 6, PaymentDateRestriction.QUARTER_END),
            (BankType.ONLINE_BANK, 50, FeeType.NONE, 3, PaymentDateRestriction.ANY_TIME),
            (
                BankType.GENOSSENSCHAFTSBANK,
                10,
                FeeType.PERCENTAGE,
                12,
                PaymentDateRestriction.MONTH_END,
            ),
        ],
    )
    def test_rule_values(self, bank_type, cap, fee_type, grace, dates):
        rules = create_german_sondertilgung_rules(bank_type).unwrap()
        assert rules.max_allowed_percentage == cap
        assert rules.fee_structure.fee_type is fee_type
        assert rules.timing.grace_period_months == grace
        assert rules.timing.allowed_payment_dates is dates
        assert rules.minimum_amount.euros == 1_000

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            BANK_RULES[BankType.SPARKASSE] = BANK_RULES[BankType.ONLINE_BANK]

    def test_yearly_cap(self):
        rules = BANK_RULES[BankType.ONLINE_BANK]
        assert rules.yearly_cap(300_000) == 150_000
        assert not rules.supports_unlimited()

    def test_labels(self):
        assert format_bank_type(BankType.VOLKSBANK) == "Volksbank/Raiffeisenbank"
        assert BANK_RULES[BankType.ONLINE_BANK].label == "Online-Bank"


class TestCreateRules:
    def test_lookup_by_value(self):
        assert create_german_sondertilgung_rules("Sparkasse").data is BANK_RULES[BankType.SPARKASSE]

    def test_unknown_bank_type(self):
        result = create_german_sondertilgung_rules("Sparbuch")
        assert result.error == SondertilgungRuleError.NOT_ALLOWED_FOR_BANK_TYPE

    def test_overrides_leave_table_untouched(self):
        """Overrides produce a new rule set, never a mutated table entry."""
        cap = create_money(20_000).unwrap()
        custom = create_german_sondertilgung_rules(
            BankType.SPARKASSE,
            maximum_amount=cap,
            timing=TimingRestrictions(0, 0, PaymentDateRestriction.ANY_TIME),
        ).unwrap()
        assert custom.maximum_amount == cap
        assert custom.timing.grace_period_months == 0
        assert BANK_RULES[BankType.SPARKASSE].maximum_amount is None
        assert BANK_RULES[BankType.SPARKASSE].timing.grace_period_months == 12

    def test_percentage_menu_override(self):
        custom = create_german_sondertilgung_rules(
            BankType.PRIVATBANK, allowed_percentages=[100, 5]
        ).unwrap()
        assert custom.allowed_percentages == (5, 100)
        assert custom.supports_unlimited()

    @pytest.mark.parametrize("menu", [[], [0, 5], [5, 101]])
    def test_invalid_percentage_menu(self, menu):
        result = create_german_sondertilgung_rules(BankType.PRIVATBANK, allowed_percentages=menu)
        assert result.error == SondertilgungRuleError.NOT_ALLOWED_FOR_BANK_TYPE
