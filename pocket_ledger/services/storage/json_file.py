"""
JSON File Storage Implementation

DESIGN DECISION: One file per key under a data directory because:
1. The user can open and back up their data with any editor
2. No database setup required
3. A whole-value write maps onto a single atomic file replace

TRADEOFFS:
- Every write rewrites the whole collection (fine for personal volumes)
- No cross-key transactions (the ledger orders its writes instead)

Writes land in a temporary file in the same directory and are moved into
place with os.replace, so a reader sees either the old or the new value.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pocket_ledger.services.storage.interface import (
    KeyValueStorageInterface,
    PersistenceError,
    validate_key,
)


FILE_SUFFIX = ".json"

logger = structlog.get_logger(__name__)


class JsonFileKeyValueStorage(KeyValueStorageInterface):
    """
    Stores each key as ``<data_dir>/<key>.json``.

    Transient OSErrors on write are retried with exponential backoff.
    Once retries are exhausted the error surfaces as PersistenceError.
    """

    def __init__(
        self,
        data_dir: Path,
        retry_attempts: int = 3,
        retry_wait_seconds: float = 0.2,
    ):
        self._data_dir = Path(data_dir)
        self._retry_attempts = retry_attempts
        self._retry_wait_seconds = retry_wait_seconds

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        return self._data_dir / f"{validate_key(key)}{FILE_SUFFIX}"

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(
                multiplier=self._retry_wait_seconds,
                max=self._retry_wait_seconds * 10,
            ),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )

    def read(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Failed to read {path}: {e}", key=key) from e

    def write(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            for attempt in self._retrying():
                with attempt:
                    self._atomic_write(path, value)
        except OSError as e:
            logger.error(
                "storage_write_failed",
                key=key,
                path=str(path),
                attempts=self._retry_attempts,
                error=str(e),
            )
            raise PersistenceError(f"Failed to write {path}: {e}", key=key) from e

    def _atomic_write(self, path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.stem}.",
            suffix=".tmp",
            dir=str(path.parent),
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            # Never leave the temp file behind
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PersistenceError(f"Failed to delete {path}: {e}", key=key) from e

    def keys(self) -> list[str]:
        if not self._data_dir.is_dir():
            return []
        return sorted(
            entry.name[: -len(FILE_SUFFIX)]
            for entry in self._data_dir.iterdir()
            if entry.is_file()
            and entry.name.endswith(FILE_SUFFIX)
            and not entry.name.startswith(".")
        )
