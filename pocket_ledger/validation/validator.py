"""
Two-Stage Transaction Validation

STAGE 1 - SCHEMA VALIDATION:
- Known transaction kind
- Amount is a finite, positive number
- Category present for expenses, from the fixed set

STAGE 2 - SEMANTIC VALIDATION:
- Income must not carry a category
- Suspiciously large amounts (warning only)

Stage 2 only runs when stage 1 passes, because it needs a parsed kind and
amount to reason about.

IMPORTANT: Validation NEVER silently fixes issues. An income submitted with a
category is rejected, not stripped.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pocket_ledger.models.transaction import (
    ExpenseCategory,
    TransactionKind,
    ValidationIssue,
    ValidationResult,
)


class ValidationError(Exception):
    """Transaction input was rejected. No transaction was created."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        errors = [issue.message for issue in issues if issue.severity == "error"]
        super().__init__("; ".join(errors) or "Invalid transaction")

    def issues_as_dicts(self) -> list[dict]:
        return [
            {"field": i.field, "type": i.issue_type, "message": i.message}
            for i in self.issues
        ]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_kind(value: Any) -> Optional[TransactionKind]:
    if isinstance(value, TransactionKind):
        return value
    if isinstance(value, str):
        try:
            return TransactionKind(value.strip().lower())
        except ValueError:
            return None
    return None


def _parse_category(value: Any) -> Optional[ExpenseCategory]:
    if isinstance(value, ExpenseCategory):
        return value
    if isinstance(value, str):
        wanted = value.strip().lower()
        for category in ExpenseCategory:
            if category.value.lower() == wanted:
                return category
    return None


class TransactionValidator:
    """
    Validates raw transaction input through a two-stage pipeline.

    Accepts the loose types a form would hand over: kind as a string or
    TransactionKind, amount as str/int/float/Decimal, category as a string
    (case-insensitive) or ExpenseCategory.
    """

    def __init__(self, large_amount_warning: Optional[Decimal] = None):
        self._large_amount_warning = large_amount_warning

    def _parse_amount(
        self,
        value: Any,
        issues: list[ValidationIssue],
    ) -> Optional[Decimal]:
        if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="not_numeric",
                message="Amount must be a number",
                severity="error",
            ))
            return None

        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="not_numeric",
                message=f"Amount is not a number: {value!r}",
                severity="error",
                suggested_fix="Enter the amount using digits, e.g. 12.50",
            ))
            return None

        if not amount.is_finite():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="not_finite",
                message="Amount must be a finite number",
                severity="error",
            ))
            return None

        if amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="non_positive",
                message="Amount must be greater than zero",
                severity="error",
            ))
            return None

        return amount

    def _validate_schema(
        self,
        kind: Any,
        amount: Any,
        category: Any,
    ) -> tuple[bool, list[ValidationIssue], dict]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues, parsed_values)
        """
        issues: list[ValidationIssue] = []
        parsed: dict = {}

        parsed_kind = _parse_kind(kind)
        if parsed_kind is None:
            issues.append(ValidationIssue(
                field="kind",
                issue_type="invalid_value",
                message=f"Unknown transaction kind: {kind!r}",
                severity="error",
                suggested_fix="Use 'income' or 'expense'",
            ))
        parsed["kind"] = parsed_kind

        parsed["amount"] = self._parse_amount(amount, issues)

        parsed_category = None
        if parsed_kind is TransactionKind.EXPENSE:
            if _is_blank(category):
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="missing",
                    message="Expenses require a category",
                    severity="error",
                    suggested_fix="Pick one of: " + ", ".join(c.value for c in ExpenseCategory),
                ))
            else:
                parsed_category = _parse_category(category)
                if parsed_category is None:
                    issues.append(ValidationIssue(
                        field="category",
                        issue_type="invalid_value",
                        message=f"Unknown expense category: {category!r}",
                        severity="error",
                        suggested_fix="Pick one of: " + ", ".join(c.value for c in ExpenseCategory),
                    ))
        parsed["category"] = parsed_category

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues, parsed

    def _validate_semantic(
        self,
        kind: TransactionKind,
        amount: Decimal,
        category: Any,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues: list[ValidationIssue] = []

        if kind is TransactionKind.INCOME and not _is_blank(category):
            issues.append(ValidationIssue(
                field="category",
                issue_type="not_allowed",
                message="Income transactions cannot have a category",
                severity="error",
                suggested_fix="Remove the category or record this as an expense",
            ))

        if self._large_amount_warning is not None and amount > self._large_amount_warning:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount {amount} is unusually large",
                severity="warning",
                suggested_fix="Double-check the number of digits",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(
        self,
        kind: Any,
        amount: Any,
        category: Any = None,
    ) -> ValidationResult:
        """
        Run both validation stages.

        Stage 2 is skipped when stage 1 fails.
        """
        schema_valid, issues, parsed = self._validate_schema(kind, amount, category)

        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(
                parsed["kind"], parsed["amount"], category
            )
            issues.extend(semantic_issues)

        is_valid = schema_valid and semantic_valid
        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=is_valid,
            kind=parsed["kind"] if is_valid else None,
            amount=parsed["amount"] if is_valid else None,
            category=parsed["category"] if is_valid else None,
            issues=issues,
        )

    def validate_or_raise(
        self,
        kind: Any,
        amount: Any,
        category: Any = None,
    ) -> ValidationResult:
        """Like validate(), but raises ValidationError on any error issue."""
        result = self.validate(kind, amount, category)
        if not result.is_valid:
            raise ValidationError(result.issues)
        return result
