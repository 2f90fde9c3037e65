"""In-memory record store."""

from typing import Any

from pydantic import BaseModel

from ledger.errors import StoreUnavailableError
from ledger.services.storage.interface import RecordStoreInterface
from ledger.services.storage.schema import RecordSchema


class InMemoryRecordStore(RecordStoreInterface):
    """
    Record store kept in a dict.

    Records are held in their encoded payload form, so every read goes
    through the same schema decoding as the file-backed store.
    """

    def __init__(self, schema: RecordSchema):
        self.schema = schema
        self._records: dict[int, dict[str, Any]] = {}
        self._next_key = 0
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    def _ensure_open(self) -> None:
        if not self._is_open:
            raise StoreUnavailableError(
                f"{self.schema.name} store is not open. Call open() first."
            )

    async def open(self) -> None:
        self._is_open = True

    async def close(self) -> None:
        self._is_open = False

    async def get_all(self) -> dict[int, BaseModel]:
        self._ensure_open()
        return {
            key: self.schema.decode(payload)
            for key, payload in sorted(self._records.items())
        }

    async def contains(self, key: int) -> bool:
        self._ensure_open()
        return key in self._records

    async def add(self, record: BaseModel) -> int:
        self._ensure_open()
        payload = self.schema.encode(record)
        key = self._next_key
        self._records[key] = payload
        self._next_key += 1
        return key

    async def put(self, key: int, record: BaseModel) -> None:
        self._ensure_open()
        self._records[key] = self.schema.encode(record)
        self._next_key = max(self._next_key, key + 1)

    async def delete(self, key: int) -> None:
        self._ensure_open()
        self._records.pop(key, None)

    async def clear(self) -> None:
        self._ensure_open()
        self._records.clear()
