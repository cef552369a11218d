"""
Core Data Models for Pocket Ledger

These models define the strict schemas for the ledger data. They are
designed to:
1. Enforce the kind/category pairing at runtime
2. Keep amounts as Decimal end to end
3. Serialize with the field names already used by stored data
4. Stay immutable once created

DESIGN DECISION: All records are frozen. Archiving a transaction produces a
new Transaction via model_copy; history records are never touched again.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, localcontext
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


TWO_PLACES = Decimal("0.01")


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    Declaration order is significant: per-category breakdowns are always
    reported in this order.
    """
    FOOD = "Food"
    CLOTHING = "Clothing"
    EDUCATION = "Education"
    HEALTH = "Health"
    SHOPPING = "Shopping"
    PET = "Pet"
    FURNITURE = "Furniture"
    GIFT = "Gift"


# =============================================================================
# HELPERS
# =============================================================================

def local_now() -> datetime:
    """Current time as an aware datetime in the local zone."""
    return datetime.now().astimezone()


def new_transaction_id() -> str:
    return str(uuid4())


def month_key_for(moment: datetime) -> str:
    """
    Derive the ``YYYY-MM`` month key for a point in time.

    Aware datetimes are converted to the local zone first, so a transaction
    recorded as UTC lands in the month the user saw on their calendar.
    Naive datetimes are taken as local time already.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return f"{moment.year}-{moment.month:02d}"


def quantize_amount(value: Decimal) -> Decimal:
    """Round to 2 fractional digits for presentation."""
    with localcontext() as ctx:
        # Room for every integer digit plus the two fractional ones
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _coerce_decimal_input(value: Any) -> Any:
    # bool is an int subclass; True must not become Decimal("1")
    if isinstance(value, bool):
        raise ValueError("Amount must be a number, not a boolean")
    if isinstance(value, float):
        return str(value)
    return value


# =============================================================================
# CORE LEDGER MODELS
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense record.

    Field aliases (``type``, ``date``) match the stored JSON layout; Python
    code uses ``kind`` and ``timestamp``.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(
        default_factory=new_transaction_id,
        min_length=1,
        description="Opaque unique identifier"
    )
    kind: TransactionKind = Field(
        ...,
        alias="type",
        description="Income or expense"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Positive amount"
    )
    category: Optional[ExpenseCategory] = Field(
        default=None,
        description="Expense category (expenses only)"
    )
    timestamp: datetime = Field(
        default_factory=local_now,
        alias="date",
        description="When the transaction was recorded"
    )
    archived: bool = Field(
        default=False,
        description="Set by month close; never reverts"
    )

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Any:
        """Route floats through str so 0.1 stays Decimal('0.1')."""
        return _coerce_decimal_input(v)

    @model_validator(mode="after")
    def validate_category_pairing(self) -> "Transaction":
        """Expenses need a category, income must not have one."""
        if self.kind is TransactionKind.EXPENSE and self.category is None:
            raise ValueError("Expense transactions require a category")
        if self.kind is TransactionKind.INCOME and self.category is not None:
            raise ValueError("Income transactions cannot have a category")
        return self

    @property
    def month_key(self) -> str:
        return month_key_for(self.timestamp)

    def as_archived(self) -> "Transaction":
        """Return an archived copy (or self if already archived)."""
        if self.archived:
            return self
        return self.model_copy(update={"archived": True})


class MonthlySummary(BaseModel):
    """
    A closed month in the rolling history.

    Created exactly once per month close and never modified.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    month_key: str = Field(
        ...,
        alias="month",
        pattern=r"^\d{4}-\d{2}$",
        description="The YYYY-MM month this record closes out"
    )
    income: Decimal = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Total income at close"
    )
    expense: Decimal = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Total expense at close"
    )
    balance: Decimal = Field(
        ...,
        allow_inf_nan=False,
        description="income - expense (may be negative)"
    )
    closed_at: datetime = Field(
        default_factory=local_now,
        alias="date",
        description="When the month was closed"
    )

    @field_validator("income", "expense", "balance", mode="before")
    @classmethod
    def coerce_totals(cls, v: Any) -> Any:
        return _coerce_decimal_input(v)


class MonthSnapshot(BaseModel):
    """
    Aggregation of one calendar month at a point in time.

    Totals keep full precision. Use rounded() for display.
    """
    model_config = ConfigDict(frozen=True)

    month_key: str
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    by_category: dict[ExpenseCategory, Decimal] = Field(default_factory=dict)
    transaction_count: int = Field(default=0, ge=0)

    @property
    def is_empty(self) -> bool:
        return self.transaction_count == 0

    def rounded(self) -> "MonthSnapshot":
        """Copy with every amount quantized to 2 fractional digits."""
        return self.model_copy(update={
            "income": quantize_amount(self.income),
            "expense": quantize_amount(self.expense),
            "balance": quantize_amount(self.balance),
            "by_category": {
                category: quantize_amount(amount)
                for category, amount in self.by_category.items()
            },
        })

    def to_summary(self, closed_at: datetime) -> MonthlySummary:
        """Freeze this snapshot into a history record."""
        return MonthlySummary(
            month_key=self.month_key,
            income=self.income,
            expense=self.expense,
            balance=self.balance,
            closed_at=closed_at,
        )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'non_positive', 'not_allowed')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of validating transaction input.

    When valid, the normalized kind/amount/category are filled in and can be
    used to build the Transaction directly.
    """

    schema_valid: bool
    semantic_valid: bool
    is_valid: bool

    kind: Optional[TransactionKind] = None
    amount: Optional[Decimal] = None
    category: Optional[ExpenseCategory] = None

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]
