"""
Monthly Aggregation Engine

DESIGN DECISION: Aggregation is DETERMINISTIC and stateless.
Given the same transactions and reference time it always returns the same
snapshot, so callers can recompute on every read instead of keeping derived
totals in sync.

The engine does not decide which transactions count. It filters by month
only; callers pass the active subset when archived records must be left out.
"""

from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from pocket_ledger.models.transaction import (
    ExpenseCategory,
    MonthSnapshot,
    Transaction,
    TransactionKind,
    month_key_for,
)


ZERO = Decimal("0")


def transactions_in_month(
    transactions: Iterable[Transaction],
    month_key: str,
) -> list[Transaction]:
    """Keep the transactions whose timestamp falls in ``month_key``."""
    return [t for t in transactions if month_key_for(t.timestamp) == month_key]


def aggregate_month(
    transactions: Iterable[Transaction],
    month_key: str,
) -> MonthSnapshot:
    """
    Aggregate one calendar month.

    Totals are summed as Decimal with no intermediate rounding, so
    ``income - expense == balance`` holds exactly.
    """
    in_month = transactions_in_month(transactions, month_key)

    income = ZERO
    expense = ZERO
    by_category: dict[ExpenseCategory, Decimal] = {
        category: ZERO for category in ExpenseCategory
    }

    for transaction in in_month:
        if transaction.kind is TransactionKind.INCOME:
            income += transaction.amount
        elif transaction.kind is TransactionKind.EXPENSE:
            expense += transaction.amount
            if transaction.category is not None:
                by_category[transaction.category] += transaction.amount

    return MonthSnapshot(
        month_key=month_key,
        income=income,
        expense=expense,
        balance=income - expense,
        by_category=by_category,
        transaction_count=len(in_month),
    )


def aggregate(
    transactions: Iterable[Transaction],
    reference_time: datetime,
) -> MonthSnapshot:
    """
    Aggregate the month that contains ``reference_time``.

    Args:
        transactions: Transactions to consider (active, archived, or both)
        reference_time: "Now" for the purpose of picking the month

    Returns:
        MonthSnapshot with income, expense, balance and a per-category
        expense breakdown in category declaration order
    """
    return aggregate_month(transactions, month_key_for(reference_time))
