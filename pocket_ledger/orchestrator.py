"""
Main Orchestrator for Pocket Ledger

This module ties together all the components and defines the user-facing
flows:
1. Transactions (add -> validate -> store -> audit; list; current snapshot)
2. Month close (snapshot -> history record -> archive -> persist)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Rejected input never reaches the store
- A month close records its summary before anything is archived
- Storage failures are reported, never fatal
- Every step is audited
"""

import threading
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

import structlog

from pocket_ledger.audit import AuditLogger, configure_logging, create_correlation_id
from pocket_ledger.config import Settings, get_settings
from pocket_ledger.ledger import MonthlyHistory, TransactionStore
from pocket_ledger.models.transaction import (
    MonthlySummary,
    MonthSnapshot,
    Transaction,
    local_now,
    month_key_for,
)
from pocket_ledger.queries import aggregate
from pocket_ledger.services.storage import (
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueAuditStorage,
    KeyValueStorageInterface,
    LedgerRepository,
)
from pocket_ledger.validation import TransactionValidator, ValidationError


logger = structlog.get_logger(__name__)


class ResetInProgressError(Exception):
    """A month close was requested while another one is still running."""
    pass


class ArchivalState(str, Enum):
    """Month-close state machine states."""
    OPEN = "open"
    CLOSING = "closing"


class TransactionFlow:
    """
    Orchestrates recording and reading transactions.

    The current-month snapshot is computed on demand from the active
    transactions and cached until the store changes or the month rolls over.
    """

    def __init__(
        self,
        store: TransactionStore,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], datetime] = local_now,
    ):
        self._store = store
        self._audit_logger = audit_logger
        self._clock = clock
        self._snapshot_cache: Optional[tuple[tuple[int, str], MonthSnapshot]] = None

    @property
    def store(self) -> TransactionStore:
        return self._store

    def add_transaction(
        self,
        kind: Any,
        amount: Any,
        category: Any = None,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Validate and record a transaction.

        Raises:
            ValidationError: If the input is rejected (after auditing it)
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            transaction = self._store.add(
                kind, amount, category, correlation_id=correlation_id
            )
        except ValidationError as e:
            if self._audit_logger:
                self._audit_logger.log_transaction_rejected(
                    issues=e.issues_as_dicts(),
                    correlation_id=correlation_id,
                )
            raise
        except Exception as e:
            if self._audit_logger:
                self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"operation": "add_transaction"},
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            self._audit_logger.log_transaction_added(
                transaction_id=transaction.id,
                kind=transaction.kind.value,
                amount=transaction.amount,
                category=transaction.category.value if transaction.category else None,
                correlation_id=correlation_id,
            )

        return transaction

    def list_active(self) -> list[Transaction]:
        return self._store.list_active()

    def current_snapshot(
        self,
        reference_time: Optional[datetime] = None,
    ) -> MonthSnapshot:
        """
        Aggregate the active transactions for the month of ``reference_time``
        (default: now).
        """
        reference_time = reference_time or self._clock()
        cache_key = (self._store.version, month_key_for(reference_time))

        if self._snapshot_cache and self._snapshot_cache[0] == cache_key:
            return self._snapshot_cache[1]

        snapshot = aggregate(self._store.list_active(), reference_time)
        self._snapshot_cache = (cache_key, snapshot)
        return snapshot


class MonthCloseFlow:
    """
    Orchestrates closing the current month.

    States: OPEN -> CLOSING -> OPEN.

    Flow:
    1. Snapshot the active transactions for the current month
    2. Append the snapshot to the monthly history
    3. Archive every transaction (not only the current month's)
    4. Both collections are written through as part of steps 2 and 3

    Steps 1-2 always finish before step 3 begins. A failed write leaves the
    in-memory state advanced; it is reported and retried on the next change.
    """

    def __init__(
        self,
        store: TransactionStore,
        history: MonthlyHistory,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], datetime] = local_now,
        lock: Optional[threading.RLock] = None,
        warn_on_empty_reset: bool = True,
    ):
        self._store = store
        self._history = history
        self._audit_logger = audit_logger
        self._clock = clock
        self._lock = lock or store.lock
        self._warn_on_empty_reset = warn_on_empty_reset
        self._state = ArchivalState.OPEN

    @property
    def state(self) -> ArchivalState:
        return self._state

    @property
    def history(self) -> MonthlyHistory:
        return self._history

    def history_records(self) -> list[MonthlySummary]:
        return self._history.records()

    def reset(self, correlation_id: Optional[UUID] = None) -> MonthlySummary:
        """
        Close the current month.

        Returns:
            The MonthlySummary appended to the history

        Raises:
            ResetInProgressError: If called while a close is running
        """
        correlation_id = correlation_id or create_correlation_id()

        with self._lock:
            if self._state is ArchivalState.CLOSING:
                raise ResetInProgressError("A month close is already in progress")

            self._state = ArchivalState.CLOSING
            try:
                return self._close_month(correlation_id)
            except ResetInProgressError:
                raise
            except Exception as e:
                if self._audit_logger:
                    self._audit_logger.log_error(
                        error_type=type(e).__name__,
                        error_message=str(e),
                        details={"operation": "reset"},
                        correlation_id=correlation_id,
                    )
                raise
            finally:
                self._state = ArchivalState.OPEN

    def _close_month(self, correlation_id: UUID) -> MonthlySummary:
        now = self._clock()
        active = self._store.list_active()
        snapshot = aggregate(active, now)

        if self._warn_on_empty_reset and snapshot.is_empty:
            logger.warning(
                "empty_month_closed",
                month=snapshot.month_key,
                active_count=len(active),
            )
            if self._audit_logger:
                self._audit_logger.log_empty_month_closed(
                    month_key=snapshot.month_key,
                    correlation_id=correlation_id,
                )

        summary = self._history.append(
            snapshot.to_summary(closed_at=now),
            correlation_id=correlation_id,
        )

        archived_count = self._store.archive_all(correlation_id=correlation_id)

        if self._audit_logger:
            self._audit_logger.log_transactions_archived(
                archived_count=archived_count,
                correlation_id=correlation_id,
            )
            self._audit_logger.log_month_closed(
                month_key=summary.month_key,
                income=summary.income,
                expense=summary.expense,
                balance=summary.balance,
                correlation_id=correlation_id,
            )

        logger.info(
            "month_closed",
            month=summary.month_key,
            archived_count=archived_count,
            persist_pending=self._store.persist_pending or self._history.persist_pending,
        )
        return summary


def create_storage(settings: Settings) -> KeyValueStorageInterface:
    """Build the configured key-value backend."""
    storage_settings = settings.storage
    if storage_settings.backend == "memory":
        return InMemoryKeyValueStorage()
    return JsonFileKeyValueStorage(
        data_dir=storage_settings.data_dir,
        retry_attempts=storage_settings.retry_attempts,
        retry_wait_seconds=storage_settings.retry_wait_seconds,
    )


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorageInterface] = None,
    clock: Callable[[], datetime] = local_now,
) -> tuple[TransactionFlow, MonthCloseFlow, KeyValueStorageInterface]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use (defaults to get_settings())
        storage: Backend override, e.g. an InMemoryKeyValueStorage in tests
        clock: Source of "now"

    Returns:
        (transaction_flow, month_close_flow, storage)
    """
    settings = settings or get_settings()
    app_settings = settings.app
    audit_settings = settings.audit

    configure_logging(app_settings.log_level)

    if storage is None:
        storage = create_storage(settings)
    repository = LedgerRepository(storage)

    audit_storage = None
    if audit_settings.enabled:
        audit_storage = KeyValueAuditStorage(storage, max_events=audit_settings.max_events)
    audit_logger = AuditLogger(audit_storage)

    # One lock guards both collections so a month close is atomic
    lock = threading.RLock()

    store = TransactionStore(
        repository,
        validator=TransactionValidator(
            large_amount_warning=app_settings.large_amount_warning
        ),
        clock=clock,
        lock=lock,
        audit_logger=audit_logger,
    )
    history = MonthlyHistory(repository, lock=lock, audit_logger=audit_logger)
    store.link(history)

    transaction_flow = TransactionFlow(store, audit_logger=audit_logger, clock=clock)
    month_close_flow = MonthCloseFlow(
        store,
        history,
        audit_logger=audit_logger,
        clock=clock,
        lock=lock,
        warn_on_empty_reset=app_settings.warn_on_empty_reset,
    )

    return transaction_flow, month_close_flow, storage
