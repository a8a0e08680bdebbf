"""
Tests for custom validators.
"""

from decimal import Decimal

import pytest

from finance_tracker.utils.constants import TransactionType
from finance_tracker.utils.validators import (
    parse_amount,
    validate_category,
    validate_currency_code,
    validate_positive_amount,
)


@pytest.mark.unit
class TestParseAmount:
    """Amount text parsing."""

    @pytest.mark.parametrize("raw,expected", [
        ("25.50", Decimal("25.50")),
        ("  100 ", Decimal("100")),
        ("1,234.56", Decimal("1234.56")),
        ("0.01", Decimal("0.01")),
        ("-5", Decimal("-5")),
        ("0", Decimal("0")),
    ])
    def test_parses_numbers(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "abc", "12abc", "1.2.3", None])
    def test_rejects_non_numbers(self, raw):
        with pytest.raises(ValueError, match="not a number"):
            parse_amount(raw)

    @pytest.mark.parametrize("raw", ["NaN", "Infinity", "-inf"])
    def test_rejects_non_finite(self, raw):
        with pytest.raises(ValueError, match="not a finite number"):
            parse_amount(raw)


@pytest.mark.unit
class TestValidators:
    """Test custom validators."""

    def test_validate_positive_amount(self):
        assert validate_positive_amount(Decimal("0.01")) == Decimal("0.01")

        for amount in (Decimal("0"), Decimal("-1")):
            with pytest.raises(ValueError, match="greater than 0"):
                validate_positive_amount(amount)

    def test_validate_category_membership(self):
        assert validate_category(TransactionType.EXPENSE, "Food & Dining") == "Food & Dining"
        assert validate_category("income", "Salary") == "Salary"

    @pytest.mark.parametrize("transaction_type,category", [
        (TransactionType.EXPENSE, "Salary"),
        (TransactionType.INCOME, "Food & Dining"),
        (TransactionType.EXPENSE, ""),
        (TransactionType.EXPENSE, "food & dining"),
    ])
    def test_validate_category_rejects_other_sets(self, transaction_type, category):
        with pytest.raises(ValueError):
            validate_category(transaction_type, category)

    def test_validate_currency_code(self):
        assert validate_currency_code(" eur ") == "EUR"

        for code in ("EURO", "E1R", "", "us"):
            with pytest.raises(ValueError, match="3 letters"):
                validate_currency_code(code)
