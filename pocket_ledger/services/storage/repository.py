"""
Ledger Collection Repository

Encodes and decodes the two ledger collections over any key-value backend:

- ``transactions``  -> JSON array of Transaction records
- ``monthlyTotals`` -> JSON array of MonthlySummary records

Field names follow the stored layout (``type``, ``date``, ``month``), so
data written by earlier versions of the tracker loads unchanged. Decimals are
written as strings to keep their exact value.

An unparseable value is copied to ``<key>.malformed`` before the error is
raised, so the user can still recover it by hand.

The repository only raises; deciding to fall back to an empty collection is
left to the ledger components that own the data.
"""

from typing import Optional

from pydantic import TypeAdapter, ValidationError

from pocket_ledger.models.transaction import MonthlySummary, Transaction
from pocket_ledger.services.storage.interface import (
    KeyValueStorageInterface,
    MalformedStoredDataError,
    PersistenceError,
)


TRANSACTIONS_KEY = "transactions"
MONTHLY_TOTALS_KEY = "monthlyTotals"
MALFORMED_SUFFIX = ".malformed"

_transactions_adapter = TypeAdapter(list[Transaction])
_summaries_adapter = TypeAdapter(list[MonthlySummary])


class LedgerRepository:
    """Whole-collection load/save for transactions and monthly totals."""

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        transactions_key: str = TRANSACTIONS_KEY,
        monthly_totals_key: str = MONTHLY_TOTALS_KEY,
    ):
        self._storage = storage
        self.transactions_key = transactions_key
        self.monthly_totals_key = monthly_totals_key

    @property
    def storage(self) -> KeyValueStorageInterface:
        return self._storage

    def load_transactions(self) -> list[Transaction]:
        """
        Load the stored transactions in stored order.

        Raises:
            PersistenceError: If the backend cannot be read
            MalformedStoredDataError: If the stored value does not parse
        """
        return self._load(self.transactions_key, _transactions_adapter)

    def save_transactions(self, transactions: list[Transaction]) -> None:
        """Overwrite the stored transactions. Raises PersistenceError."""
        self._save(self.transactions_key, _transactions_adapter, transactions)

    def load_monthly_totals(self) -> list[MonthlySummary]:
        """Load the closed-month history, oldest first."""
        return self._load(self.monthly_totals_key, _summaries_adapter)

    def save_monthly_totals(self, summaries: list[MonthlySummary]) -> None:
        """Overwrite the stored history. Raises PersistenceError."""
        self._save(self.monthly_totals_key, _summaries_adapter, summaries)

    def _load(self, key: str, adapter: TypeAdapter) -> list:
        raw: Optional[str] = self._storage.read(key)
        if raw is None or not raw.strip():
            return []
        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            raise MalformedStoredDataError(
                f"Stored value for '{key}' is not valid: {e.error_count()} errors",
                key=key,
                backup_key=self._preserve_malformed(key, raw),
            ) from e

    def _preserve_malformed(self, key: str, raw: str) -> Optional[str]:
        """Copy an unparseable value aside so the next save cannot destroy it."""
        backup_key = f"{key}{MALFORMED_SUFFIX}"
        try:
            self._storage.write(backup_key, raw)
        except PersistenceError:
            return None
        return backup_key

    def _save(self, key: str, adapter: TypeAdapter, records: list) -> None:
        payload = adapter.dump_json(records, by_alias=True, exclude_none=True)
        self._storage.write(key, payload.decode("utf-8"))
