"""Shared fixtures for the ledger tests."""

import asyncio
from datetime import datetime
from decimal import Decimal

import pytest

from ledger.config import LedgerSettings
from ledger.models.transaction import Transaction
from ledger.services.storage import TRANSACTION_SCHEMA, InMemoryRecordStore
from ledger.services.transaction_service import TransactionStore


def run_async(coro):
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


class FailingRecordStore(InMemoryRecordStore):
    """
    In-memory store whose operations can be made to fail on demand.

    Put an operation name ("get_all", "add", "put", "delete", "clear")
    into `fail_on` and that call raises `error`.
    """

    def __init__(self, error: Exception = None):
        super().__init__(TRANSACTION_SCHEMA)
        self.fail_on: set[str] = set()
        self.error = error or OSError("disk full")
        self.calls: list[str] = []

    def _maybe_fail(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise self.error

    async def get_all(self):
        self._maybe_fail("get_all")
        return await super().get_all()

    async def add(self, record):
        self._maybe_fail("add")
        return await super().add(record)

    async def put(self, key, record):
        self._maybe_fail("put")
        return await super().put(key, record)

    async def delete(self, key):
        self._maybe_fail("delete")
        return await super().delete(key)

    async def clear(self):
        self._maybe_fail("clear")
        return await super().clear()


@pytest.fixture
def ledger_settings() -> LedgerSettings:
    return LedgerSettings()


@pytest.fixture
def record_store() -> FailingRecordStore:
    store = FailingRecordStore()
    run_async(store.open())
    return store


@pytest.fixture
def store(record_store, ledger_settings) -> TransactionStore:
    return TransactionStore(record_store, settings=ledger_settings)


@pytest.fixture
def groceries() -> Transaction:
    return Transaction(
        title="Groceries",
        value=Decimal("125.50"),
        date=datetime(2024, 3, 15),
        is_expense=True,
    )


@pytest.fixture
def salary() -> Transaction:
    return Transaction(
        title="Salary",
        value=Decimal("4500.00"),
        date=datetime(2024, 3, 1),
        is_expense=False,
    )


@pytest.fixture
def run():
    return run_async
