"""Tests for the two-stage transaction validator."""

from decimal import Decimal

import pytest

from pocket_ledger.models.transaction import ExpenseCategory, TransactionKind
from pocket_ledger.validation import TransactionValidator, ValidationError


@pytest.fixture
def validator():
    return TransactionValidator(large_amount_warning=Decimal("10000"))


def _issue_types(result):
    return {(issue.field, issue.issue_type) for issue in result.issues}


class TestSchemaStage:
    """Stage 1: kind, amount and expense category."""

    def test_valid_expense_is_normalized(self, validator):
        result = validator.validate("expense", "50.00", "food")
        assert result.is_valid is True
        assert result.kind == TransactionKind.EXPENSE
        assert result.amount == Decimal("50.00")
        assert result.category == ExpenseCategory.FOOD

    def test_valid_income(self, validator):
        result = validator.validate(TransactionKind.INCOME, 1000)
        assert result.is_valid is True
        assert result.amount == Decimal("1000")
        assert result.category is None

    def test_float_amount_is_exact(self, validator):
        result = validator.validate("income", 0.1)
        assert result.amount == Decimal("0.1")

    def test_unknown_kind(self, validator):
        result = validator.validate("transfer", "10")
        assert result.is_valid is False
        assert ("kind", "invalid_value") in _issue_types(result)

    @pytest.mark.parametrize("amount, issue_type", [
        ("0", "non_positive"),
        ("-3.50", "non_positive"),
        (0, "non_positive"),
        ("abc", "not_numeric"),
        ("", "not_numeric"),
        (None, "not_numeric"),
        (True, "not_numeric"),
        ("NaN", "not_finite"),
        (float("inf"), "not_finite"),
    ])
    def test_bad_amounts(self, validator, amount, issue_type):
        result = validator.validate("income", amount)
        assert result.is_valid is False
        assert ("amount", issue_type) in _issue_types(result)

    def test_expense_without_category(self, validator):
        result = validator.validate("expense", "10")
        assert result.is_valid is False
        assert ("category", "missing") in _issue_types(result)

    def test_expense_with_unknown_category(self, validator):
        result = validator.validate("expense", "10", "Travel")
        assert result.is_valid is False
        assert ("category", "invalid_value") in _issue_types(result)

    def test_semantic_stage_skipped_when_schema_fails(self, validator):
        """Test an income with a bad amount reports only the schema issue."""
        result = validator.validate("income", "-1", "Food")
        assert result.schema_valid is False
        assert result.semantic_valid is False
        assert ("category", "not_allowed") not in _issue_types(result)


class TestSemanticStage:
    """Stage 2: income/category pairing and sanity checks."""

    def test_income_with_category_rejected(self, validator):
        """Test income categories are rejected, not silently dropped."""
        result = validator.validate("income", "100", "Gift")
        assert result.schema_valid is True
        assert result.semantic_valid is False
        assert result.is_valid is False
        assert ("category", "not_allowed") in _issue_types(result)

    def test_income_with_blank_category_allowed(self, validator):
        result = validator.validate("income", "100", "  ")
        assert result.is_valid is True
        assert result.category is None

    def test_large_amount_is_warning_only(self, validator):
        result = validator.validate("income", "50000")
        assert result.is_valid is True
        assert result.has_errors is False
        assert ("amount", "suspicious_value") in _issue_types(result)

    def test_no_large_amount_check_without_threshold(self):
        result = TransactionValidator().validate("income", "99999999")
        assert result.issues == []


class TestValidateOrRaise:
    """Tests for the raising entry point."""

    def test_raises_with_issues(self, validator):
        with pytest.raises(ValidationError) as exc_info:
            validator.validate_or_raise("expense", "-5", "Food")
        assert exc_info.value.issues
        assert "greater than zero" in str(exc_info.value)
        assert exc_info.value.issues_as_dicts()[0]["field"] == "amount"

    def test_returns_result_when_valid(self, validator):
        result = validator.validate_or_raise("expense", "5", ExpenseCategory.PET)
        assert result.category == ExpenseCategory.PET


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
