"""In-memory key-value storage for tests and throwaway sessions."""

from typing import Optional

from pocket_ledger.services.storage.interface import (
    KeyValueStorageInterface,
    validate_key,
)


class InMemoryKeyValueStorage(KeyValueStorageInterface):
    """Dict-backed storage. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self._data[validate_key(key)] = value
        self.write_count = 0

    def read(self, key: str) -> Optional[str]:
        return self._data.get(validate_key(key))

    def write(self, key: str, value: str) -> None:
        self._data[validate_key(key)] = value
        self.write_count += 1

    def delete(self, key: str) -> bool:
        return self._data.pop(validate_key(key), None) is not None

    def keys(self) -> list[str]:
        return sorted(self._data)
