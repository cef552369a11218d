"""
Audit Logger

DESIGN DECISION: Every significant ledger action is logged.
This provides:
1. Complete traceability of adds and month closes
2. Debugging capability when storage fails
3. A visible record of data discarded on load

The audit logger:
- Gracefully handles failures (doesn't break the ledger if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from pocket_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from pocket_ledger.services.storage import AuditStorageInterface, StorageError


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Set the stdlib level that structlog's filter_by_level consults."""
    logging.basicConfig(format="%(message)s", level=level.upper())
    logging.getLogger().setLevel(level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("pocket_ledger.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity is AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_transaction_added(
        self,
        transaction_id: str,
        kind: str,
        amount: Decimal,
        category: Optional[str],
        correlation_id: UUID,
    ) -> None:
        """Log a successful add."""
        event = AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            kind=kind,
            amount=amount,
            category=category,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_transaction_rejected(
        self,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        """Log input that failed validation."""
        event = AuditEventBuilder.transaction_rejected(
            issues=issues,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_transactions_archived(
        self,
        archived_count: int,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.transactions_archived(
            archived_count=archived_count,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_month_closed(
        self,
        month_key: str,
        income: Decimal,
        expense: Decimal,
        balance: Decimal,
        correlation_id: UUID,
    ) -> None:
        """Log a month close."""
        event = AuditEventBuilder.month_closed(
            month_key=month_key,
            income=income,
            expense=expense,
            balance=balance,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_empty_month_closed(
        self,
        month_key: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.empty_month_closed(
            month_key=month_key,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_persistence_failed(
        self,
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a write that did not reach the backing store."""
        event = AuditEventBuilder.persistence_failed(
            key=key,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_stored_data_malformed(
        self,
        key: str,
        error_message: str,
        backup_key: Optional[str] = None,
    ) -> None:
        """Log a collection that was discarded on load."""
        event = AuditEventBuilder.stored_data_malformed(
            key=key,
            error_message=error_message,
            backup_key=backup_key,
        )
        self.log(event)

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a month close).
    Pass it through all subsequent operations.
    """
    return uuid4()
