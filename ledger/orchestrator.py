"""
Ledger Orchestrator

Wires the components together:
record store (memory | json) -> TransactionStore -> TransactionStateMachine

DESIGN DECISION: Nothing below the state machine knows which backend is
in use. The backend is picked here from StorageSettings and handed down
as a RecordStoreInterface.
"""

from typing import Optional

import structlog

from ledger.audit import AuditLogger
from ledger.config import Settings, get_settings
from ledger.services.storage import (
    TRANSACTION_SCHEMA,
    InMemoryRecordStore,
    JsonFileRecordStore,
    RecordStoreInterface,
)
from ledger.services.transaction_service import TransactionStore
from ledger.state.machine import TransactionStateMachine


logger = structlog.get_logger(__name__)


class LedgerComponents:
    """Everything create_ledger() built, so callers can close it again."""

    def __init__(
        self,
        machine: TransactionStateMachine,
        store: TransactionStore,
        record_store: RecordStoreInterface,
        audit_logger: AuditLogger,
    ):
        self.machine = machine
        self.store = store
        self.record_store = record_store
        self.audit_logger = audit_logger

    async def close(self) -> None:
        await self.machine.drain()
        await self.record_store.close()


def create_record_store(settings: Optional[Settings] = None) -> RecordStoreInterface:
    """Build the (unopened) transaction record store for the configured backend."""
    settings = settings or get_settings()
    storage = settings.storage

    if storage.backend == "json":
        return JsonFileRecordStore(storage.transactions_path, TRANSACTION_SCHEMA)
    return InMemoryRecordStore(TRANSACTION_SCHEMA)


async def create_ledger(
    settings: Optional[Settings] = None,
    record_store: Optional[RecordStoreInterface] = None,
) -> LedgerComponents:
    """
    Factory function to create and open all ledger components.

    Args:
        settings: Root settings (environment settings if omitted)
        record_store: Use this record store instead of the configured
                      backend. It is opened here.

    Returns:
        LedgerComponents with the state machine in Uninitialized.
        Dispatch Load() to read the stored transactions.
    """
    settings = settings or get_settings()
    record_store = record_store or create_record_store(settings)
    await record_store.open()

    store = TransactionStore(record_store, settings=settings.ledger)
    audit_logger = AuditLogger(max_events=settings.logging.audit_history_size)
    machine = TransactionStateMachine(
        store,
        audit_logger=audit_logger,
        settings=settings.ledger,
    )

    logger.info(
        "ledger_created",
        backend=type(record_store).__name__,
    )
    return LedgerComponents(machine, store, record_store, audit_logger)
