"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the JSON file backend for something else later
2. Use in-memory storage for testing
3. Keep ledger logic decoupled from the storage medium

The interface is intentionally tiny: whole-value reads and writes by key.
Every write replaces the full value, so readers never see partial updates.
"""

import re
from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from pocket_ledger.models.audit import AuditEvent


KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def validate_key(key: str) -> str:
    """Reject keys that could not be used as a plain file name."""
    if not isinstance(key, str) or not KEY_PATTERN.match(key) or key in (".", ".."):
        raise InvalidKeyError(f"Invalid storage key: {key!r}")
    return key


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for durable key-value storage.

    Any storage implementation (JSON files, browser-style local storage,
    a database table, etc.) must implement these methods.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the whole value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored text, or None if the key is absent

        Raises:
            PersistenceError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """
        Replace the whole value stored under a key.

        Args:
            key: Storage key
            value: Serialized value

        Raises:
            PersistenceError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List stored keys in sorted order."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one month close).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceError(StorageError):
    """The backing store could not be read or written."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class MalformedStoredDataError(StorageError):
    """A stored collection could not be parsed."""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        backup_key: Optional[str] = None,
    ):
        super().__init__(message)
        self.key = key
        self.backup_key = backup_key


class InvalidKeyError(StorageError):
    """Storage key outside the allowed character set."""
    pass
