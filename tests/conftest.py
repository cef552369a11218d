"""Shared fixtures: in-memory storage, a storage that can be made to fail, a fixed clock."""

import pytest

from pocket_ledger.config import Settings
from pocket_ledger.orchestrator import create_app_components
from pocket_ledger.services.storage import InMemoryKeyValueStorage, LedgerRepository

from tests.helpers import FailingStorage, FixedClock, local_time


@pytest.fixture
def clock():
    return FixedClock(local_time(2024, 3, 5))


@pytest.fixture
def memory_storage():
    return InMemoryKeyValueStorage()


@pytest.fixture
def failing_storage():
    return FailingStorage()


@pytest.fixture
def repository(memory_storage):
    return LedgerRepository(memory_storage)


@pytest.fixture
def components(memory_storage, clock):
    """(transaction_flow, month_close_flow, storage) on in-memory storage."""
    return create_app_components(
        settings=Settings(),
        storage=memory_storage,
        clock=clock,
    )
