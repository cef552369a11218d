"""
Shared load/persist handling for the ledger collections.

Both collections follow the same rules:
- Load once on startup; absent, unreadable or malformed data starts empty
- Write the whole collection through on every change
- A failed write is a warning, not an error: memory stays the source of
  truth and the next change (or flush()) writes everything again
- Linked collections are retried together: a successful write of one
  also rewrites any linked collection whose last write failed
"""

import threading
from collections.abc import Callable
from typing import Optional
from uuid import UUID

import structlog

from pocket_ledger.audit import AuditLogger
from pocket_ledger.services.storage import (
    MalformedStoredDataError,
    PersistenceError,
)


class PersistedCollection:
    """Base for a list-shaped collection saved under one storage key."""

    def __init__(
        self,
        key: str,
        lock: Optional[threading.RLock] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._key = key
        self._lock = lock or threading.RLock()
        self._audit_logger = audit_logger
        self._logger = structlog.get_logger(type(self).__module__).bind(key=key)
        self.persist_pending = False
        self.last_persistence_error: Optional[PersistenceError] = None
        self._peers: list["PersistedCollection"] = []

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def link(self, *others: "PersistedCollection") -> None:
        """
        Persist this collection together with ``others``.

        Linked collections should share one lock.
        """
        for other in others:
            if other is not self and other not in self._peers:
                self._peers.append(other)
                other.link(self)

    def flush(self) -> bool:
        """Write the collection again, e.g. after an earlier failed write."""
        with self._lock:
            return self._persist()

    def _persist(self, correlation_id: Optional[UUID] = None) -> bool:
        raise NotImplementedError

    def _load_or_empty(self, loader: Callable[[], list]) -> list:
        try:
            records = loader()
        except MalformedStoredDataError as e:
            self._logger.error(
                "stored_data_malformed",
                error=str(e),
                backup_key=e.backup_key,
            )
            if self._audit_logger:
                self._audit_logger.log_stored_data_malformed(
                    key=self._key,
                    error_message=str(e),
                    backup_key=e.backup_key,
                )
            return []
        except PersistenceError as e:
            self._logger.warning("stored_data_unreadable", error=str(e))
            if self._audit_logger:
                self._audit_logger.log_persistence_failed(
                    key=self._key,
                    error_message=str(e),
                )
            return []

        self._logger.debug("collection_loaded", count=len(records))
        return records

    def _persist_with(
        self,
        saver: Callable[[list], None],
        records: list,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Write the full collection. Returns False (never raises) on failure."""
        try:
            saver(records)
        except PersistenceError as e:
            self.persist_pending = True
            self.last_persistence_error = e
            self._logger.warning("persist_failed", error=str(e), count=len(records))
            if self._audit_logger:
                self._audit_logger.log_persistence_failed(
                    key=self._key,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return False

        self.persist_pending = False
        self.last_persistence_error = None
        self._retry_pending_peers()
        return True

    def _retry_pending_peers(self) -> None:
        for peer in self._peers:
            if peer.persist_pending:
                self._logger.info("retrying_linked_collection", peer_key=peer._key)
                peer.flush()
