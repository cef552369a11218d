"""
Data Models Package

This package contains all Pydantic models used in Pocket Ledger.
All data flowing through the system must conform to these schemas.
"""

from pocket_ledger.models.transaction import (
    ExpenseCategory,
    MonthlySummary,
    MonthSnapshot,
    Transaction,
    TransactionKind,
    ValidationIssue,
    ValidationResult,
    local_now,
    month_key_for,
    quantize_amount,
)
from pocket_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "ExpenseCategory",
    "MonthlySummary",
    "MonthSnapshot",
    "Transaction",
    "TransactionKind",
    "ValidationIssue",
    "ValidationResult",
    "local_now",
    "month_key_for",
    "quantize_amount",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
