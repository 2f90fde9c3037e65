"""Tests for TransactionStore."""

import pytest
from datetime import datetime
from decimal import Decimal

from ledger.errors import NotFoundError, StorageError, UnknownError, ValidationError


class TestTransactionStoreWrites:
    """Tests for add/update/delete/clear."""

    def test_add_assigns_key(self, run, store):
        added = run(store.add("  Coffee ", 4.5, True, date=datetime(2024, 3, 2)))
        assert added.id == 0
        assert added.title == "Coffee"
        assert added.value == Decimal("4.5")

        transactions = run(store.get_all())
        assert transactions == [added]

    def test_add_validates_before_io(self, run, store, record_store):
        with pytest.raises(ValidationError):
            run(store.add("", 10, True))
        assert "add" not in record_store.calls

    def test_update_replaces_record(self, run, store):
        async def scenario():
            added = await store.add("Rent", "800", True)
            await store.update(added.replace(value=Decimal("850")))
            return await store.get_all()

        transactions = run(scenario())
        assert len(transactions) == 1
        assert transactions[0].value == Decimal("850")
        assert transactions[0].id == 0

    def test_update_without_id(self, run, store, groceries):
        with pytest.raises(ValidationError):
            run(store.update(groceries))

    def test_update_missing_id(self, run, store, groceries):
        with pytest.raises(NotFoundError) as exc_info:
            run(store.update(groceries.replace(id=7)))
        assert exc_info.value.code == "transaction_not_found"

    def test_delete(self, run, store):
        async def scenario():
            first = await store.add("Rent", "800", True)
            await store.add("Salary", "3000", False)
            await store.delete(first.id)
            return await store.get_all()

        transactions = run(scenario())
        assert [t.title for t in transactions] == ["Salary"]

    def test_delete_missing_id(self, run, store):
        with pytest.raises(NotFoundError):
            run(store.delete(42))

    def test_clear_all_on_empty_store(self, run, store):
        run(store.clear_all())
        assert run(store.get_all()) == []


class TestTransactionStoreFailures:
    """Record store failures surface as LedgerErrors."""

    def test_os_error_becomes_storage_error(self, run, store, record_store):
        record_store.fail_on.add("add")
        with pytest.raises(StorageError):
            run(store.add("Rent", "800", True))

    def test_unexpected_error_becomes_unknown(self, run, store, record_store):
        record_store.error = RuntimeError("boom")
        record_store.fail_on.add("get_all")
        with pytest.raises(UnknownError) as exc_info:
            run(store.get_all())
        assert exc_info.value.details == "RuntimeError: boom"


class TestTransactionStoreHelpers:
    """Tests for the pure helpers."""

    def test_aggregates(self, store, groceries, salary):
        transactions = [groceries, salary]
        assert store.calculate_balance(transactions) == Decimal("4374.50")
        assert store.get_financial_summary(transactions).expenses == Decimal("125.50")
        assert store.get_transactions_by_type(transactions, False) == [salary]

    def test_recent_requires_positive_days(self, store, groceries):
        with pytest.raises(ValidationError):
            store.get_recent_transactions([groceries], days=0)
