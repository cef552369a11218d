"""Test helpers shared by fixtures and test modules."""

from datetime import datetime
from typing import Optional

from pocket_ledger.services.storage import InMemoryKeyValueStorage, PersistenceError


def local_time(year: int, month: int, day: int, hour: int = 12) -> datetime:
    """Aware datetime in the local zone, midday by default."""
    return datetime(year, month, day, hour).astimezone()


class FixedClock:
    """Callable clock the tests move by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FailingStorage(InMemoryKeyValueStorage):
    """In-memory storage whose reads or writes can be switched to fail."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        super().__init__(initial)
        self.fail_reads = False
        self.fail_writes = False

    def read(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise PersistenceError("simulated read failure", key=key)
        return super().read(key)

    def write(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise PersistenceError("simulated write failure", key=key)
        super().write(key, value)
