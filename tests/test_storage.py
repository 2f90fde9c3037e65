"""Tests for record schemas and record stores."""

import json

import pytest
from datetime import datetime
from decimal import Decimal

from ledger.errors import StorageError, StoreUnavailableError
from ledger.models.transaction import RecurringTransaction, Transaction
from ledger.services.storage import (
    RECURRING_TRANSACTION_SCHEMA,
    TRANSACTION_SCHEMA,
    InMemoryRecordStore,
    JsonFileRecordStore,
)
from ledger.services.storage.schema import TYPE_KEY


class TestRecordSchema:
    """Tests for tagged payload encoding."""

    def test_transaction_payload_uses_tags(self, groceries):
        payload = TRANSACTION_SCHEMA.encode(groceries)
        assert payload == {
            TYPE_KEY: 0,
            "0": "Groceries",
            "1": "125.50",
            "2": "2024-03-15T00:00:00",
            "3": True,
        }

    def test_unknown_tags_are_ignored(self):
        record = TRANSACTION_SCHEMA.decode({
            TYPE_KEY: 0,
            "0": "Rent",
            "1": "800",
            "2": "2024-03-01T00:00:00",
            "3": True,
            "9": "added by a newer version",
        })
        assert record.title == "Rent"

    def test_legacy_float_value(self):
        record = TRANSACTION_SCHEMA.decode({
            TYPE_KEY: 0,
            "0": "Groceries",
            "1": 125.5,
            "2": "2024-03-15T00:00:00",
            "3": True,
        })
        assert record.value == Decimal("125.5")

    def test_type_mismatch(self):
        with pytest.raises(StorageError):
            TRANSACTION_SCHEMA.decode({TYPE_KEY: 1, "0": "Laptop"})

    def test_corrupt_record(self):
        with pytest.raises(StorageError):
            TRANSACTION_SCHEMA.decode({TYPE_KEY: 0, "0": "Rent", "1": "-3"})

    def test_wrong_record_kind(self, groceries):
        with pytest.raises(StorageError):
            RECURRING_TRANSACTION_SCHEMA.encode(groceries)

    def test_recurring_payload(self):
        plan = RecurringTransaction(
            title="Laptop",
            value=Decimal("250"),
            total_installments=12,
            current_installment=2,
            start_date=datetime(2024, 1, 10),
            payment_day=10,
            next_occurrence_date=datetime(2024, 2, 10),
        )
        payload = RECURRING_TRANSACTION_SCHEMA.encode(plan)
        assert payload[TYPE_KEY] == 1
        assert payload["3"] == 12
        assert payload["6"] == 10
        assert RECURRING_TRANSACTION_SCHEMA.decode(payload) == plan


class TestInMemoryRecordStore:
    """Tests for the in-memory record store."""

    def test_requires_open(self, run, groceries):
        store = InMemoryRecordStore(TRANSACTION_SCHEMA)
        with pytest.raises(StoreUnavailableError):
            run(store.add(groceries))

    def test_keys_increase_from_zero(self, run, groceries, salary):
        async def scenario():
            store = InMemoryRecordStore(TRANSACTION_SCHEMA)
            await store.open()
            first = await store.add(groceries)
            second = await store.add(salary)
            await store.delete(first)
            third = await store.add(groceries)
            return first, second, third, await store.get_all()

        first, second, third, records = run(scenario())
        assert (first, second, third) == (0, 1, 2)
        assert list(records) == [1, 2]
        assert records[1].title == "Salary"

    def test_put_contains_and_clear(self, run, groceries):
        async def scenario():
            store = InMemoryRecordStore(TRANSACTION_SCHEMA)
            await store.open()
            key = await store.add(groceries)
            await store.put(key, groceries.replace(title="Market"))
            found = await store.contains(key)
            records = await store.get_all()
            await store.delete(99)
            await store.clear()
            return found, records, await store.get_all()

        found, records, cleared = run(scenario())
        assert found
        assert records[0].title == "Market"
        assert cleared == {}


class TestJsonFileRecordStore:
    """Tests for the JSON file record store."""

    def test_records_survive_reopen(self, run, tmp_path, groceries, salary):
        path = tmp_path / "transactions.json"

        async def scenario():
            store = JsonFileRecordStore(path, TRANSACTION_SCHEMA)
            await store.open()
            await store.add(groceries)
            await store.add(salary)
            await store.delete(0)
            await store.close()

            reopened = JsonFileRecordStore(path, TRANSACTION_SCHEMA)
            await reopened.open()
            key = await reopened.add(groceries)
            return key, await reopened.get_all()

        key, records = run(scenario())
        assert key == 2
        assert [r.title for r in records.values()] == ["Salary", "Groceries"]
        assert records[1].value == Decimal("4500.00")

    def test_file_layout(self, run, tmp_path, groceries):
        path = tmp_path / "data" / "transactions.json"

        async def scenario():
            store = JsonFileRecordStore(path, TRANSACTION_SCHEMA)
            await store.open()
            await store.add(groceries)

        run(scenario())
        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["format_version"] == 1
        assert document["type_id"] == 0
        assert document["next_key"] == 1
        assert document["records"]["0"]["1"] == "125.50"
        assert not path.with_name("transactions.json.tmp").exists()

    def test_rejects_file_of_other_record_type(self, run, tmp_path):
        path = tmp_path / "recurring.json"
        path.write_text(json.dumps({"type_id": 1, "records": {}}), encoding="utf-8")
        store = JsonFileRecordStore(path, TRANSACTION_SCHEMA)
        with pytest.raises(StorageError):
            run(store.open())

    def test_rejects_invalid_json(self, run, tmp_path):
        path = tmp_path / "transactions.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonFileRecordStore(path, TRANSACTION_SCHEMA)
        with pytest.raises(StorageError):
            run(store.open())

    @pytest.mark.parametrize("document", [
        [1, 2],
        "transactions",
        {"type_id": 0, "records": [1, 2]},
        {"type_id": 0, "records": {"0": [1, 2]}},
        {"type_id": 0, "records": {"zero": {}}},
        {"type_id": 0, "next_key": "many", "records": {}},
    ])
    def test_rejects_malformed_document(self, run, tmp_path, document):
        """Valid JSON of the wrong shape is a storage error, not a crash."""
        path = tmp_path / "transactions.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        store = JsonFileRecordStore(path, TRANSACTION_SCHEMA)
        with pytest.raises(StorageError):
            run(store.open())
        assert not store.is_open

    def test_failed_write_keeps_previous_contents(self, run, tmp_path, groceries, monkeypatch):
        path = tmp_path / "transactions.json"
        store = JsonFileRecordStore(path, TRANSACTION_SCHEMA)

        async def add_one():
            await store.open()
            await store.add(groceries)

        run(add_one())

        def broken_write(document):
            raise OSError("disk full")

        monkeypatch.setattr(store, "_write_file", broken_write)
        with pytest.raises(StorageError):
            run(store.add(groceries))

        records = run(store.get_all())
        assert list(records) == [0]
