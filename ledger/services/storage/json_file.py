"""
JSON File Record Store

DESIGN DECISION: A single JSON document per record kind is enough for
a personal ledger (hundreds to a few thousand rows). It is readable,
diffable and trivially backed up.

TRADEOFFS:
- The whole file is rewritten on every change (fine at this size)
- No cross-process locking (one process owns the file)

Writes go to a temporary file first and are moved into place, so a
crash mid-write leaves the previous version intact. The in-memory copy
is only updated after the write succeeded.
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ledger.errors import StorageError, StoreUnavailableError
from ledger.services.storage.interface import RecordStoreInterface
from ledger.services.storage.schema import RecordSchema


FORMAT_VERSION = 1

logger = structlog.get_logger(__name__)


class JsonFileRecordStore(RecordStoreInterface):
    """
    File-backed record store.

    File layout:
        {
          "format_version": 1,
          "type_id": 0,
          "next_key": 3,
          "records": {"0": {"__type__": 0, "0": "Salary", ...}, ...}
        }
    """

    def __init__(self, path: Path, schema: RecordSchema):
        self.schema = schema
        self._path = Path(path)
        self._records: dict[int, dict[str, Any]] = {}
        self._next_key = 0
        self._is_open = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._is_open

    def _ensure_open(self) -> None:
        if not self._is_open:
            raise StoreUnavailableError(
                f"{self.schema.name} store at {self._path} is not open. Call open() first."
            )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _read_file(self) -> dict[str, Any]:
        with self._path.open("r", encoding="utf-8") as f:
            return json.load(f)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _write_file(self, document: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(document, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self._path)

    def _document(
        self,
        records: dict[int, dict[str, Any]],
        next_key: int,
    ) -> dict[str, Any]:
        return {
            "format_version": FORMAT_VERSION,
            "type_id": self.schema.type_id,
            "next_key": next_key,
            "records": {str(key): payload for key, payload in sorted(records.items())},
        }

    async def _commit(self, records: dict[int, dict[str, Any]], next_key: int) -> None:
        """Persist the new contents, then adopt them."""
        try:
            await asyncio.to_thread(self._write_file, self._document(records, next_key))
        except OSError as e:
            logger.error(
                "record_store_write_failed",
                path=str(self._path),
                record_type=self.schema.name,
                error=str(e),
            )
            raise StorageError(f"Failed to write {self._path.name}", details=str(e))
        self._records = records
        self._next_key = next_key

    async def open(self) -> None:
        if self._is_open:
            return

        if not self._path.exists():
            self._records = {}
            self._next_key = 0
            self._is_open = True
            logger.info("record_store_created", path=str(self._path), record_type=self.schema.name)
            return

        try:
            document = await asyncio.to_thread(self._read_file)
        except OSError as e:
            raise StorageError(f"Failed to read {self._path.name}", details=str(e))
        except ValueError as e:
            raise StorageError(f"{self._path.name} is not valid JSON", details=str(e))

        if not isinstance(document, dict):
            raise StorageError(
                f"{self._path.name} does not hold a record document",
                details=f"Top-level JSON value is a {type(document).__name__}",
            )

        if document.get("type_id") != self.schema.type_id:
            raise StorageError(
                f"{self._path.name} holds record type {document.get('type_id')}, "
                f"expected {self.schema.type_id} ({self.schema.name})"
            )

        raw_records = document.get("records", {})
        if not isinstance(raw_records, dict):
            raise StorageError(f"{self._path.name} has no records object")

        try:
            records = {
                int(key): payload
                for key, payload in raw_records.items()
            }
        except (TypeError, ValueError) as e:
            raise StorageError(f"{self._path.name} has malformed keys", details=str(e))

        malformed = sorted(
            key for key, payload in records.items() if not isinstance(payload, dict)
        )
        if malformed:
            raise StorageError(
                f"{self._path.name} has malformed records",
                details=f"Keys: {malformed}",
            )

        try:
            stored_next_key = int(document.get("next_key", 0))
        except (TypeError, ValueError) as e:
            raise StorageError(f"{self._path.name} has a malformed next_key", details=str(e))

        self._records = records
        self._next_key = max(stored_next_key, max(records, default=-1) + 1)
        self._is_open = True
        logger.info(
            "record_store_opened",
            path=str(self._path),
            record_type=self.schema.name,
            count=len(records),
        )

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
        key = self._next_key
        records = dict(self._records)
        records[key] = self.schema.encode(record)
        await self._commit(records, key + 1)
        return key

    async def put(self, key: int, record: BaseModel) -> None:
        self._ensure_open()
        records = dict(self._records)
        records[key] = self.schema.encode(record)
        await self._commit(records, max(self._next_key, key + 1))

    async def delete(self, key: int) -> None:
        self._ensure_open()
        if key not in self._records:
            return
        records = dict(self._records)
        del records[key]
        await self._commit(records, self._next_key)

    async def clear(self) -> None:
        self._ensure_open()
        await self._commit({}, self._next_key)
