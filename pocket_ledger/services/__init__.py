"""Services package."""

from pocket_ledger.services.storage import (
    AuditStorageInterface,
    InMemoryKeyValueStorage,
    InvalidKeyError,
    JsonFileKeyValueStorage,
    KeyValueAuditStorage,
    KeyValueStorageInterface,
    LedgerRepository,
    MalformedStoredDataError,
    PersistenceError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "InMemoryKeyValueStorage",
    "InvalidKeyError",
    "JsonFileKeyValueStorage",
    "KeyValueAuditStorage",
    "KeyValueStorageInterface",
    "LedgerRepository",
    "MalformedStoredDataError",
    "PersistenceError",
    "StorageError",
]
