"""Validation package."""

from pocket_ledger.validation.validator import TransactionValidator, ValidationError

__all__ = ["TransactionValidator", "ValidationError"]
