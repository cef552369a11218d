"""
Pocket Ledger - Source Package

A personal finance tracker core: records income and expense transactions,
summarizes the current month, and closes months out into a rolling history.

DESIGN PRINCIPLES:
1. Records are immutable; archival produces new records
2. Aggregation is pure and recomputed on demand
3. Storage failures never lose in-memory state
4. Every significant action is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Pocket Ledger Team"
