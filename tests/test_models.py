"""
Tests for Pocket Ledger models

Test strategy:
1. Unit tests for individual components (models, validator, aggregator)
2. Integration tests for flows on in-memory storage
3. No real user data directories in tests (tmp_path only)
"""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from pocket_ledger.models.transaction import (
    ExpenseCategory,
    MonthlySummary,
    MonthSnapshot,
    Transaction,
    TransactionKind,
    ValidationIssue,
    ValidationResult,
    month_key_for,
)
from pocket_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

from tests.helpers import local_time


class TestTransactionModel:
    """Tests for the Transaction model."""

    def test_expense_creation(self):
        """Test a well-formed expense."""
        tx = Transaction(
            kind=TransactionKind.EXPENSE,
            amount=Decimal("50.00"),
            category=ExpenseCategory.FOOD,
        )
        assert tx.kind == TransactionKind.EXPENSE
        assert tx.category == ExpenseCategory.FOOD
        assert tx.archived is False
        assert tx.id

    def test_ids_are_unique(self):
        """Test each transaction gets its own id."""
        ids = {
            Transaction(kind=TransactionKind.INCOME, amount=Decimal("1")).id
            for _ in range(50)
        }
        assert len(ids) == 50

    def test_expense_requires_category(self):
        """Test that an expense without a category is rejected."""
        with pytest.raises(ValueError, match="require a category"):
            Transaction(kind=TransactionKind.EXPENSE, amount=Decimal("10"))

    def test_income_rejects_category(self):
        """Test that income cannot carry a category."""
        with pytest.raises(ValueError, match="cannot have a category"):
            Transaction(
                kind=TransactionKind.INCOME,
                amount=Decimal("10"),
                category=ExpenseCategory.GIFT,
            )

    def test_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        for amount in (Decimal("0"), Decimal("-5")):
            with pytest.raises(ValueError):
                Transaction(kind=TransactionKind.INCOME, amount=amount)

    def test_rejects_boolean_amount(self):
        with pytest.raises(ValueError):
            Transaction(kind=TransactionKind.INCOME, amount=True)

    def test_float_amount_keeps_decimal_value(self):
        """Test that 0.1 becomes Decimal('0.1'), not its binary expansion."""
        tx = Transaction(kind=TransactionKind.INCOME, amount=0.1)
        assert tx.amount == Decimal("0.1")

    def test_is_frozen(self):
        """Test that fields cannot be reassigned."""
        tx = Transaction(kind=TransactionKind.INCOME, amount=Decimal("1"))
        with pytest.raises(PydanticValidationError):
            tx.archived = True

    def test_as_archived_returns_copy(self):
        """Test archiving produces a new record and leaves the original alone."""
        tx = Transaction(kind=TransactionKind.INCOME, amount=Decimal("1"))
        archived = tx.as_archived()
        assert archived.archived is True
        assert tx.archived is False
        assert archived.id == tx.id
        assert archived.as_archived() is archived

    def test_serializes_with_stored_field_names(self):
        """Test the JSON layout uses type/date and omits income categories."""
        tx = Transaction(
            kind=TransactionKind.INCOME,
            amount=Decimal("1000.00"),
            timestamp=datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc),
        )
        data = json.loads(tx.model_dump_json(by_alias=True, exclude_none=True))
        assert data["type"] == "income"
        assert data["amount"] == "1000.00"
        assert data["date"].startswith("2024-03-05T10:00:00")
        assert "category" not in data

    def test_parses_legacy_record(self):
        """Test a record in the original browser format loads."""
        tx = Transaction.model_validate({
            "id": "1709632800000",
            "type": "expense",
            "amount": 12.5,
            "category": "Pet",
            "date": "2024-03-05T10:00:00.000Z",
        })
        assert tx.id == "1709632800000"
        assert tx.amount == Decimal("12.5")
        assert tx.category == ExpenseCategory.PET
        assert tx.archived is False


class TestMonthKey:
    """Tests for month key derivation."""

    def test_naive_datetime(self):
        assert month_key_for(datetime(2024, 3, 5)) == "2024-03"

    def test_zero_padded_month(self):
        assert month_key_for(datetime(2023, 11, 30)) == "2023-11"
        assert month_key_for(datetime(2024, 1, 1)) == "2024-01"

    def test_aware_datetime_mid_month(self):
        """Mid-month UTC noon is the same month in every zone."""
        assert month_key_for(datetime(2024, 3, 15, 12, tzinfo=timezone.utc)) == "2024-03"

    def test_local_aware_datetime(self):
        assert month_key_for(local_time(2024, 12, 31, 23)) == "2024-12"


class TestMonthlySummary:
    """Tests for history records."""

    def test_parses_legacy_record(self):
        """Test a history record in the original format loads."""
        summary = MonthlySummary.model_validate({
            "month": "2024-03",
            "income": 200,
            "expense": 75.5,
            "balance": 124.5,
            "date": "2024-03-31T10:00:00.000Z",
        })
        assert summary.month_key == "2024-03"
        assert summary.expense == Decimal("75.5")
        assert summary.balance == Decimal("124.5")

    def test_negative_balance_allowed(self):
        summary = MonthlySummary(
            month_key="2024-03",
            income=Decimal("10"),
            expense=Decimal("30"),
            balance=Decimal("-20"),
        )
        assert summary.balance == Decimal("-20")

    def test_month_key_format_enforced(self):
        with pytest.raises(ValueError):
            MonthlySummary(
                month_key="March",
                income=Decimal("0"),
                expense=Decimal("0"),
                balance=Decimal("0"),
            )

    def test_is_frozen(self):
        summary = MonthlySummary(
            month_key="2024-03",
            income=Decimal("1"),
            expense=Decimal("0"),
            balance=Decimal("1"),
        )
        with pytest.raises(PydanticValidationError):
            summary.income = Decimal("2")


class TestMonthSnapshot:
    """Tests for MonthSnapshot presentation helpers."""

    def test_rounded_quantizes_half_up(self):
        """Test rounding to 2 digits happens only on request."""
        snapshot = MonthSnapshot(
            month_key="2024-03",
            income=Decimal("10.005"),
            expense=Decimal("3.333"),
            balance=Decimal("6.672"),
            by_category={ExpenseCategory.FOOD: Decimal("3.333")},
            transaction_count=2,
        )
        rounded = snapshot.rounded()
        assert rounded.income == Decimal("10.01")
        assert rounded.expense == Decimal("3.33")
        assert rounded.balance == Decimal("6.67")
        assert rounded.by_category[ExpenseCategory.FOOD] == Decimal("3.33")
        # Original untouched
        assert snapshot.income == Decimal("10.005")

    def test_rounded_handles_more_digits_than_context(self):
        """Test totals wider than the default 28-digit context still round."""
        snapshot = MonthSnapshot(
            month_key="2024-03",
            income=Decimal("123456789012345678901234567890.125"),
            balance=Decimal("-5E+40"),
        )
        rounded = snapshot.rounded()
        assert rounded.income == Decimal("123456789012345678901234567890.13")
        assert rounded.balance == Decimal("-5E+40")

    def test_to_summary(self):
        closed_at = local_time(2024, 3, 31)
        snapshot = MonthSnapshot(
            month_key="2024-03",
            income=Decimal("200"),
            expense=Decimal("75"),
            balance=Decimal("125"),
        )
        summary = snapshot.to_summary(closed_at)
        assert summary.month_key == "2024-03"
        assert summary.balance == Decimal("125")
        assert summary.closed_at == closed_at

    def test_is_empty(self):
        assert MonthSnapshot(month_key="2024-03").is_empty is True


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_has_errors(self):
        result = ValidationResult(
            schema_valid=False,
            semantic_valid=False,
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="non_positive",
                    message="Amount must be greater than zero",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1

    def test_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            schema_valid=True,
            semantic_valid=True,
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="suspicious_value",
                    message="Large",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert len(result.warnings) == 1


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Added",
        )
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        event = AuditEvent(
            event_type=AuditEventType.MONTH_CLOSED,
            description="Closed",
            entity_id="2024-03",
            details={"balance": "125"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "month_closed"
        assert log_dict["entity_id"] == "2024-03"
        assert log_dict["details"]["balance"] == "125"

    def test_builder_persistence_failed_is_warning(self):
        event = AuditEventBuilder.persistence_failed(
            key="transactions",
            error_message="disk full",
        )
        assert event.event_type == AuditEventType.PERSISTENCE_FAILED
        assert event.severity == AuditSeverity.WARNING
        assert event.entity_id == "transactions"

    def test_builder_transaction_added_is_user_action(self):
        event = AuditEventBuilder.transaction_added(
            transaction_id="abc",
            kind="expense",
            amount=Decimal("5"),
            category="Food",
            correlation_id=None,
        )
        assert event.is_user_action is True
        assert event.details["amount"] == "5"


class TestExpenseCategories:
    """Tests for the expense category enum."""

    def test_declaration_order(self):
        """Test that categories keep their fixed order."""
        assert [c.value for c in ExpenseCategory] == [
            "Food", "Clothing", "Education", "Health",
            "Shopping", "Pet", "Furniture", "Gift",
        ]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
