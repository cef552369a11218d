"""Append-only history of closed months."""

import threading
from typing import Optional
from uuid import UUID

from pocket_ledger.audit import AuditLogger
from pocket_ledger.ledger.base import PersistedCollection
from pocket_ledger.models.transaction import MonthlySummary
from pocket_ledger.services.storage import LedgerRepository


class MonthlyHistory(PersistedCollection):
    """
    Closed-month summaries, oldest first.

    There is no update or delete: a record is final once appended.
    """

    def __init__(
        self,
        repository: LedgerRepository,
        lock: Optional[threading.RLock] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(
            key=repository.monthly_totals_key,
            lock=lock,
            audit_logger=audit_logger,
        )
        self._repository = repository
        self._summaries: list[MonthlySummary] = self._load_or_empty(
            repository.load_monthly_totals
        )

    def __len__(self) -> int:
        return len(self._summaries)

    def append(
        self,
        summary: MonthlySummary,
        correlation_id: Optional[UUID] = None,
    ) -> MonthlySummary:
        with self._lock:
            self._summaries.append(summary)
            self._persist(correlation_id)
        self._logger.info("month_summary_appended", month=summary.month_key)
        return summary

    def records(self) -> list[MonthlySummary]:
        """Snapshot of every closed month, oldest first."""
        with self._lock:
            return list(self._summaries)

    def latest(self) -> Optional[MonthlySummary]:
        with self._lock:
            return self._summaries[-1] if self._summaries else None

    def for_month(self, month_key: str) -> list[MonthlySummary]:
        """All closes recorded for a month (there can be several)."""
        with self._lock:
            return [s for s in self._summaries if s.month_key == month_key]

    def _persist(self, correlation_id: Optional[UUID] = None) -> bool:
        return self._persist_with(
            self._repository.save_monthly_totals,
            list(self._summaries),
            correlation_id,
        )
