"""
Transaction Store

Holds every transaction the user has recorded, most recent first, each
tagged active or archived. Every change is written through to storage as
the full collection.
"""

import threading
from collections.abc import Callable
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pocket_ledger.audit import AuditLogger
from pocket_ledger.ledger.base import PersistedCollection
from pocket_ledger.models.transaction import Transaction, local_now
from pocket_ledger.services.storage import LedgerRepository
from pocket_ledger.validation import TransactionValidator


class TransactionStore(PersistedCollection):
    """
    Durable, ordered collection of transactions.

    Reads return snapshot lists; callers may keep or modify them freely.
    """

    def __init__(
        self,
        repository: LedgerRepository,
        validator: Optional[TransactionValidator] = None,
        clock: Callable[[], datetime] = local_now,
        lock: Optional[threading.RLock] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(
            key=repository.transactions_key,
            lock=lock,
            audit_logger=audit_logger,
        )
        self._repository = repository
        self._validator = validator or TransactionValidator()
        self._clock = clock
        self._version = 0
        self._transactions: list[Transaction] = self._load_or_empty(
            repository.load_transactions
        )

    @property
    def version(self) -> int:
        """Bumped on every change; used to key cached snapshots."""
        return self._version

    def __len__(self) -> int:
        return len(self._transactions)

    def add(
        self,
        kind: Any,
        amount: Any,
        category: Any = None,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Record a new transaction.

        Raises:
            ValidationError: If the input is rejected. Nothing is stored.
        """
        result = self._validator.validate_or_raise(kind, amount, category)

        with self._lock:
            transaction = Transaction(
                kind=result.kind,
                amount=result.amount,
                category=result.category,
                timestamp=self._clock(),
            )
            self._transactions.insert(0, transaction)
            self._version += 1
            self._persist(correlation_id)

        self._logger.info(
            "transaction_added",
            transaction_id=transaction.id,
            kind=transaction.kind.value,
        )
        return transaction

    def list_active(self) -> list[Transaction]:
        """Non-archived transactions, most recent first."""
        with self._lock:
            return [t for t in self._transactions if not t.archived]

    def list_archived(self) -> list[Transaction]:
        with self._lock:
            return [t for t in self._transactions if t.archived]

    def list_all(self) -> list[Transaction]:
        with self._lock:
            return list(self._transactions)

    def archive_all(self, correlation_id: Optional[UUID] = None) -> int:
        """
        Mark every transaction archived.

        Idempotent: already-archived records are left as they are.

        Returns:
            Number of transactions that moved from active to archived
        """
        with self._lock:
            archived_count = 0
            updated: list[Transaction] = []
            for transaction in self._transactions:
                if not transaction.archived:
                    archived_count += 1
                updated.append(transaction.as_archived())
            self._transactions = updated
            if archived_count:
                self._version += 1
            self._persist(correlation_id)

        self._logger.info("transactions_archived", archived_count=archived_count)
        return archived_count

    def _persist(self, correlation_id: Optional[UUID] = None) -> bool:
        return self._persist_with(
            self._repository.save_transactions,
            list(self._transactions),
            correlation_id,
        )
