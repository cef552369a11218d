"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
JSON files on disk are the default backend; an in-memory backend is used for
tests. Both sit behind the same key-value interface.
"""

from pocket_ledger.services.storage.interface import (
    AuditStorageInterface,
    InvalidKeyError,
    KeyValueStorageInterface,
    MalformedStoredDataError,
    PersistenceError,
    StorageError,
)
from pocket_ledger.services.storage.memory import InMemoryKeyValueStorage
from pocket_ledger.services.storage.json_file import JsonFileKeyValueStorage
from pocket_ledger.services.storage.repository import (
    MONTHLY_TOTALS_KEY,
    TRANSACTIONS_KEY,
    LedgerRepository,
)
from pocket_ledger.services.storage.audit_store import (
    AUDIT_LOG_KEY,
    KeyValueAuditStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "KeyValueStorageInterface",
    # Exceptions
    "InvalidKeyError",
    "MalformedStoredDataError",
    "PersistenceError",
    "StorageError",
    # Implementations
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
    "KeyValueAuditStorage",
    "LedgerRepository",
    # Keys
    "AUDIT_LOG_KEY",
    "MONTHLY_TOTALS_KEY",
    "TRANSACTIONS_KEY",
]
