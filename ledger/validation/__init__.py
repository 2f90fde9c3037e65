"""Input validation package."""

from ledger.validation.validator import TransactionValidator, parse_amount

__all__ = ["TransactionValidator", "parse_amount"]
