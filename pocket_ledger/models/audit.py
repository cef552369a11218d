"""
Audit Models for Pocket Ledger

Every significant ledger action is logged for audit purposes.
This provides:
1. Traceability of every add and month close
2. Debugging information when storage misbehaves
3. A record of data that was discarded on load

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_REJECTED = "transaction_rejected"
    TRANSACTIONS_ARCHIVED = "transactions_archived"

    # Month close
    MONTH_CLOSED = "month_closed"
    EMPTY_MONTH_CLOSED = "empty_month_closed"

    # Storage
    PERSISTENCE_FAILED = "persistence_failed"
    STORED_DATA_MALFORMED = "stored_data_malformed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'month', 'storage_key')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one month close)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_log_dict(), default=str)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(transaction, correlation_id)
        event = AuditEventBuilder.month_closed("2024-03", ..., correlation_id)
    """

    @staticmethod
    def transaction_added(
        transaction_id: str,
        kind: str,
        amount: Decimal,
        category: Optional[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction added: {kind} {amount}",
            details={
                "kind": kind,
                "amount": str(amount),
                "category": category,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_rejected(
        issues: list[dict],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            correlation_id=correlation_id,
            description=f"Transaction rejected with {len(issues)} issues",
            details={
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def transactions_archived(
        archived_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_ARCHIVED,
            entity_type="transaction",
            correlation_id=correlation_id,
            description=f"Archived {archived_count} transactions",
            details={
                "archived_count": archived_count,
            },
        )

    @staticmethod
    def month_closed(
        month_key: str,
        income: Decimal,
        expense: Decimal,
        balance: Decimal,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MONTH_CLOSED,
            entity_type="month",
            entity_id=month_key,
            correlation_id=correlation_id,
            description=f"Month closed: {month_key} balance {balance}",
            details={
                "income": str(income),
                "expense": str(expense),
                "balance": str(balance),
            },
            is_user_action=True,
        )

    @staticmethod
    def empty_month_closed(
        month_key: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EMPTY_MONTH_CLOSED,
            severity=AuditSeverity.WARNING,
            entity_type="month",
            entity_id=month_key,
            correlation_id=correlation_id,
            description=f"Month {month_key} closed with no active transactions",
            is_user_action=True,
        )

    @staticmethod
    def persistence_failed(
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSISTENCE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="storage_key",
            entity_id=key,
            correlation_id=correlation_id,
            description=f"Could not persist '{key}'; will retry on next change",
            error_message=error_message,
        )

    @staticmethod
    def stored_data_malformed(
        key: str,
        error_message: str,
        backup_key: Optional[str] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORED_DATA_MALFORMED,
            severity=AuditSeverity.ERROR,
            entity_type="storage_key",
            entity_id=key,
            description=f"Stored data for '{key}' is malformed; starting empty",
            error_message=error_message,
            details={"backup_key": backup_key},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
