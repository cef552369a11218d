"""Queries package."""

from pocket_ledger.queries.aggregator import aggregate, aggregate_month, transactions_in_month

__all__ = ["aggregate", "aggregate_month", "transactions_in_month"]
