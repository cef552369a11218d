"""Ledger collections package."""

from pocket_ledger.ledger.monthly_history import MonthlyHistory
from pocket_ledger.ledger.transaction_store import TransactionStore

__all__ = ["MonthlyHistory", "TransactionStore"]
