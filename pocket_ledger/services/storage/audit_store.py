"""
Key-Value Audit Storage

Keeps the audit trail as one bounded JSON array under the ``auditLog`` key
of the same backend the ledger uses. The list is read once and then kept in
memory; each append rewrites the whole value under a lock.
"""

import threading
from typing import Optional
from uuid import UUID

from pydantic import TypeAdapter, ValidationError

from pocket_ledger.models.audit import AuditEvent
from pocket_ledger.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStorageInterface,
)


AUDIT_LOG_KEY = "auditLog"

_events_adapter = TypeAdapter(list[AuditEvent])


class KeyValueAuditStorage(AuditStorageInterface):
    """
    Audit storage on top of a KeyValueStorageInterface.

    Once ``max_events`` is reached the oldest events are dropped.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        max_events: int = 500,
        key: str = AUDIT_LOG_KEY,
    ):
        self._storage = storage
        self._max_events = max_events
        self._key = key
        self._events: Optional[list[AuditEvent]] = None
        self._lock = threading.Lock()

    def _loaded(self) -> list[AuditEvent]:
        if self._events is None:
            raw = self._storage.read(self._key)
            try:
                self._events = _events_adapter.validate_json(raw) if raw else []
            except ValidationError:
                # An unreadable audit trail is replaced rather than blocking the ledger
                self._events = []
        return self._events

    def append_event(self, event: AuditEvent) -> bool:
        with self._lock:
            events = self._loaded()
            events.append(event)
            if len(events) > self._max_events:
                del events[: len(events) - self._max_events]
            payload = _events_adapter.dump_json(events).decode("utf-8")
            self._storage.write(self._key, payload)
        return True

    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        with self._lock:
            return [
                event for event in self._loaded()
                if event.correlation_id == correlation_id
            ]

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        with self._lock:
            return list(reversed(self._loaded()))[:limit]
