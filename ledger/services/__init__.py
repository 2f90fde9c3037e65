"""Services package."""

from ledger.services.storage import (
    InMemoryRecordStore,
    JsonFileRecordStore,
    NotFoundError,
    RecordStoreInterface,
    StorageError,
    StoreUnavailableError,
)
from ledger.services.transaction_service import TransactionStore

__all__ = [
    # Storage services
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "NotFoundError",
    "RecordStoreInterface",
    "StorageError",
    "StoreUnavailableError",
    # Business logic
    "TransactionStore",
]
