"""
Storage Services Package

Provides the abstract record store interface and concrete implementations.
Ships an in-memory store and a JSON file store; designed to be swappable.
"""

from ledger.services.storage.interface import (
    NotFoundError,
    RecordStoreInterface,
    StorageError,
    StoreUnavailableError,
)
from ledger.services.storage.schema import (
    RECURRING_TRANSACTION_SCHEMA,
    TRANSACTION_SCHEMA,
    RecordSchema,
)
from ledger.services.storage.memory import InMemoryRecordStore
from ledger.services.storage.json_file import JsonFileRecordStore

__all__ = [
    # Interfaces
    "RecordStoreInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    "StoreUnavailableError",
    # Schemas
    "RECURRING_TRANSACTION_SCHEMA",
    "TRANSACTION_SCHEMA",
    "RecordSchema",
    # Implementations
    "InMemoryRecordStore",
    "JsonFileRecordStore",
]
