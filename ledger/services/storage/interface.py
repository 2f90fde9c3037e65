"""
Abstract Record Store Interface

DESIGN DECISION: The ledger never talks to a database directly.
It talks to a record store: an async key-value collection of records
keyed by integers that the store itself assigns. This allows us to:
1. Use an in-memory store for tests and demos
2. Keep records in a JSON file on disk
3. Swap in a real database later without touching business logic

The interface is intentionally small. Filtering, sorting and
aggregation happen above it, on snapshots.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel

from ledger.errors import (
    NotFoundError,
    StorageError,
    StoreUnavailableError,
)
from ledger.services.storage.schema import RecordSchema


class RecordStoreInterface(ABC):
    """
    Abstract interface for a keyed record collection.

    Any storage implementation must implement these methods.
    Each instance holds records of a single kind, described by `schema`.
    """

    schema: RecordSchema

    @abstractmethod
    async def open(self) -> None:
        """
        Prepare the store for use. Safe to call more than once.

        Raises:
            StorageError: If the backing storage can't be read
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the store. Further calls raise StoreUnavailableError."""
        pass

    @abstractmethod
    async def get_all(self) -> dict[int, BaseModel]:
        """
        Snapshot of every record.

        Returns:
            {key: record} in ascending key order (insertion order)

        Raises:
            StoreUnavailableError: If the store is not open
            StorageError: If reading fails
        """
        pass

    @abstractmethod
    async def contains(self, key: int) -> bool:
        """Check whether a record exists under `key`."""
        pass

    @abstractmethod
    async def add(self, record: BaseModel) -> int:
        """
        Store a new record.

        Returns:
            The key assigned to the record

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def put(self, key: int, record: BaseModel) -> None:
        """
        Write `record` under `key`, replacing what was there.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, key: int) -> None:
        """
        Remove the record under `key`. Missing keys are a no-op.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove every record."""
        pass


__all__ = [
    "NotFoundError",
    "RecordStoreInterface",
    "StorageError",
    "StoreUnavailableError",
]
