"""
Transaction Store

The single source of truth for persisted transactions.

DESIGN DECISION: The store holds no state of its own besides its
collaborators. Every read goes to the record store, so callers that
want fresh data simply call get_all() again.

Errors leave this module as LedgerErrors only:
- ValidationError: raised before any I/O
- NotFoundError: the referenced key does not exist
- StorageError: the record store failed
- UnknownError: anything else the record store raised
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import structlog

from ledger.config import LedgerSettings, get_settings
from ledger.errors import (
    LedgerError,
    NotFoundError,
    ValidationError,
    to_ledger_error,
)
from ledger.models.summary import (
    BalanceMood,
    FinancialSummary,
    balance_mood,
    calculate_balance,
    filter_by_type,
    financial_summary,
    recent_transactions,
)
from ledger.models.transaction import Transaction
from ledger.services.storage import RecordStoreInterface
from ledger.validation import TransactionValidator, parse_amount


logger = structlog.get_logger(__name__)


class TransactionStore:
    """
    CRUD over transactions plus pure aggregate helpers.

    Args:
        record_store: Record store holding Transaction records
        validator: Input validator (built from settings if omitted)
        settings: Business limits
    """

    def __init__(
        self,
        record_store: RecordStoreInterface,
        validator: Optional[TransactionValidator] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._records = record_store
        self._settings = settings or get_settings().ledger
        self._validator = validator or TransactionValidator(self._settings)

    @property
    def validator(self) -> TransactionValidator:
        return self._validator

    async def _call(self, operation: str, coro):
        """Await a record store call, converting failures to LedgerErrors."""
        try:
            return await coro
        except LedgerError:
            raise
        except Exception as e:
            error = to_ledger_error(e)
            logger.error(
                "record_store_call_failed",
                operation=operation,
                error_type=error.error_type.value,
                error=str(e),
            )
            raise error from e

    async def get_all(self) -> list[Transaction]:
        """Snapshot of all transactions in storage order."""
        records = await self._call("get_all", self._records.get_all())
        return [record.replace(id=key) for key, record in records.items()]

    async def add(
        self,
        title: Any,
        value: Any,
        is_expense: bool,
        date: Optional[datetime] = None,
    ) -> Transaction:
        """
        Validate and persist a new transaction.

        Returns:
            The stored transaction, including its assigned id

        Raises:
            ValidationError: Input rejected (no I/O attempted)
            StorageError: The record store write failed
        """
        self._validator.ensure_valid(self._validator.validate_new(title, value))

        transaction = Transaction(
            title=title.strip(),
            value=parse_amount(value),
            date=date or datetime.now(),
            is_expense=is_expense,
        )
        key = await self._call("add", self._records.add(transaction))
        logger.debug("transaction_added", id=key, is_expense=is_expense)
        return transaction.replace(id=key)

    async def update(self, transaction: Transaction) -> None:
        """
        Replace the stored record with the same id.

        Raises:
            ValidationError: No id, or values outside the configured limits
            NotFoundError: No record with that id exists
            StorageError: The record store write failed
        """
        self._validator.ensure_valid(self._validator.validate_existing(transaction))

        if not await self._call("update", self._records.contains(transaction.id)):
            raise NotFoundError(
                f"Transaction {transaction.id} not found",
                code="transaction_not_found",
            )
        await self._call(
            "update",
            self._records.put(transaction.id, transaction.replace(id=None)),
        )
        logger.debug("transaction_updated", id=transaction.id)

    async def delete(self, transaction_id: int) -> None:
        """
        Remove one transaction.

        Raises:
            ValidationError: The id is not a valid key
            NotFoundError: No record with that id exists
            StorageError: The record store write failed
        """
        self._validator.ensure_valid(self._validator.validate_key(transaction_id))

        if not await self._call("delete", self._records.contains(transaction_id)):
            raise NotFoundError(
                f"Transaction {transaction_id} not found",
                code="transaction_not_found",
            )
        await self._call("delete", self._records.delete(transaction_id))
        logger.debug("transaction_deleted", id=transaction_id)

    async def clear_all(self) -> None:
        """Remove every transaction. Succeeds on an empty store."""
        await self._call("clear_all", self._records.clear())
        logger.info("transactions_cleared")

    # ------------------------------------------------------------------
    # Pure helpers (no I/O)
    # ------------------------------------------------------------------

    @staticmethod
    def calculate_balance(transactions: list[Transaction]) -> Decimal:
        return calculate_balance(transactions)

    @staticmethod
    def get_financial_summary(transactions: list[Transaction]) -> FinancialSummary:
        return financial_summary(transactions)

    @staticmethod
    def get_balance_mood_category(balance: Decimal) -> BalanceMood:
        return balance_mood(balance)

    @staticmethod
    def get_transactions_by_type(
        transactions: list[Transaction],
        is_expense: bool,
    ) -> list[Transaction]:
        return filter_by_type(transactions, is_expense)

    def get_recent_transactions(
        self,
        transactions: list[Transaction],
        days: Optional[int] = None,
    ) -> list[Transaction]:
        """Transactions from the last `days` days (configured default: 30)."""
        days = self._settings.recent_transactions_days if days is None else days
        if days <= 0:
            raise ValidationError("Number of days must be positive")
        return recent_transactions(transactions, days=days)
