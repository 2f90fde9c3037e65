"""
Transaction State Machine

The single writer of application state. It accepts one event at a time,
delegates I/O to the TransactionStore and emits every new state to its
listeners.

FLOW for a write (Add/Update/Delete):
1. Validate input (raise ValidationError, emit nothing)
2. Loaded{pending_op}       -> observers disable duplicate submissions
3. Store write
4. Store re-fetch           -> never trust an in-memory append
5. OperationSucceeded       -> one-off success message
6. Loaded{all=refreshed}

On failure after step 2: Loaded{pending_op=None}, then
Error{previous_all=<data before the write>}.

CONCURRENCY: Load, Refresh and the writes hold an asyncio.Lock for the
whole handler, including awaited store calls. asyncio.Lock wakes
waiters in FIFO order, so queued events run in arrival order. Search
and filter events skip the lock and apply at once. pending_op is
advisory; nothing here rejects a second Add while one is in flight.
"""

import asyncio
from datetime import timedelta
from typing import Awaitable, Callable, Optional
from uuid import UUID

import structlog

from ledger.audit import AuditLogger, create_correlation_id
from ledger.config import LedgerSettings, get_settings
from ledger.errors import LedgerError, to_ledger_error
from ledger.models.transaction import Transaction
from ledger.models.validation import ValidationResult
from ledger.services.transaction_service import TransactionStore
from ledger.state.events import (
    Add,
    ClearAll,
    ClearFilters,
    Delete,
    FilterByDateRange,
    FilterByType,
    Load,
    LedgerEvent,
    Refresh,
    Search,
    Update,
)
from ledger.state.filters import apply_filters
from ledger.state.states import (
    DateRange,
    Error,
    LedgerState,
    Loaded,
    Loading,
    Operation,
    OperationSucceeded,
    Uninitialized,
)


EXPENSE_ADDED_MESSAGE = "Expense added successfully!"
INCOME_ADDED_MESSAGE = "Income added successfully!"
TRANSACTION_UPDATED_MESSAGE = "Transaction updated successfully!"
TRANSACTION_REMOVED_MESSAGE = "Transaction removed successfully!"
ALL_CLEARED_MESSAGE = "All transactions were removed"

Listener = Callable[[LedgerState], None]

logger = structlog.get_logger(__name__)


class TransactionStateMachine:
    """
    Event-driven controller for the ledger.

    Usage:
        machine = TransactionStateMachine(store)
        machine.subscribe(render)
        await machine.dispatch(Load())
        await machine.dispatch(Add(title="Coffee", value=4.5, is_expense=True))
    """

    def __init__(
        self,
        store: TransactionStore,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().ledger
        self._tolerance = timedelta(days=self._settings.date_filter_tolerance_days)

        self._state: LedgerState = Uninitialized()
        self._listeners: list[Listener] = []
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()

        # Serialized behind the lock; these await the store
        self._handlers = {
            Load: self._on_load,
            Refresh: self._on_refresh,
            Add: self._on_add,
            Update: self._on_update,
            Delete: self._on_delete,
            ClearAll: self._on_clear_all,
        }
        # Applied at once against the current state, even mid-write
        self._immediate_handlers = {
            Search: self._on_search,
            FilterByDateRange: self._on_filter_by_date_range,
            FilterByType: self._on_filter_by_type,
            ClearFilters: self._on_clear_filters,
        }

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def store(self) -> TransactionStore:
        return self._store

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener for every emitted state.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, state: LedgerState) -> None:
        # Equal consecutive states are not re-emitted
        if state == self._state:
            return
        self._state = state
        logger.debug("state_emitted", kind=state.kind)
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("state_listener_failed", kind=state.kind)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def dispatch(self, event: LedgerEvent) -> None:
        """
        Process one event to completion.

        Search and filter events never wait: they apply immediately to
        whatever state exists, including a Loaded with a write in flight.
        Every other event waits its turn behind the lock.

        Raises:
            ValidationError: Add/Update/Delete input was rejected.
                             State is left untouched.
            TypeError: The event type is not supported.
        """
        immediate = self._immediate_handlers.get(type(event))
        if immediate is not None:
            logger.debug("event_dispatched", kind=event.kind, state=self._state.kind)
            immediate(event)
            return

        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unsupported event: {type(event).__name__}")

        async with self._lock:
            correlation_id = create_correlation_id()
            logger.debug(
                "event_dispatched",
                kind=event.kind,
                state=self._state.kind,
                correlation_id=str(correlation_id),
            )
            await handler(event, correlation_id)

    def add(self, event: LedgerEvent) -> asyncio.Task:
        """
        Queue an event without waiting for it.

        Must be called from a running event loop. Use drain() to wait
        for everything queued so far. A queued event that fails is
        logged when it finishes; drain() only re-raises failures of
        events still queued when it is called.
        """
        task = asyncio.get_running_loop().create_task(self.dispatch(event))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(
                "queued_event_failed",
                error_type=type(error).__name__,
                error=str(error),
            )

    async def drain(self) -> None:
        """Wait for every queued event; re-raises the first failure."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def reset(self) -> None:
        """Forget all data and return to Uninitialized."""
        self._emit(Uninitialized())

    def _loaded(self, transactions) -> Loaded:
        return Loaded(
            all=transactions,
            recent_days=self._settings.recent_transactions_days,
        )

    def _ignore(self, event: LedgerEvent) -> None:
        logger.debug("event_ignored", kind=event.kind, state=self._state.kind)

    # ------------------------------------------------------------------
    # Failure helpers
    # ------------------------------------------------------------------

    def _fail(
        self,
        operation: str,
        error: LedgerError,
        previous_all,
        correlation_id: UUID,
    ) -> None:
        logger.warning(
            "operation_failed",
            operation=operation,
            error_type=error.error_type.value,
            error=error.message,
        )
        if self._audit_logger:
            self._audit_logger.log_storage_failed(
                operation=operation,
                error_type=error.error_type.value,
                error_message=error.details or error.message,
                correlation_id=correlation_id,
            )
        self._emit(Error(
            error=error.to_error_info(),
            previous_all=tuple(previous_all),
        ))

    def _check(
        self,
        operation: Operation,
        result: ValidationResult,
        correlation_id: UUID,
    ) -> None:
        """Raise ValidationError before anything is emitted."""
        if result.is_valid:
            return
        if self._audit_logger:
            self._audit_logger.log_validation_failed(
                operation=operation.value,
                issues=[issue.model_dump() for issue in result.issues],
                correlation_id=correlation_id,
            )
        self._store.validator.ensure_valid(result)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _on_load(self, event: Load, correlation_id: UUID) -> None:
        self._emit(Loading())
        try:
            transactions = await self._store.get_all()
        except Exception as e:
            self._fail("load", to_ledger_error(e), (), correlation_id)
            return

        self._emit(self._loaded(transactions))
        if self._audit_logger:
            self._audit_logger.log_transactions_loaded(len(transactions), correlation_id)

    async def _on_refresh(self, event: Refresh, correlation_id: UUID) -> None:
        previous = self._state
        if not isinstance(previous, Loaded):
            self._emit(Loading())

        try:
            transactions = await self._store.get_all()
        except Exception as e:
            previous_all = previous.all if isinstance(previous, Loaded) else ()
            self._fail("refresh", to_ledger_error(e), previous_all, correlation_id)
            return

        self._emit(self._loaded(transactions))
        if self._audit_logger:
            self._audit_logger.log_transactions_loaded(len(transactions), correlation_id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def _run_write(
        self,
        current: Loaded,
        operation: Operation,
        action: Callable[[], Awaitable],
        message: Callable[[object], str],
        correlation_id: UUID,
        refetch: bool = True,
    ):
        """
        Shared write flow: pending marker, store call, re-fetch, success.

        Returns the action's result, or None if it failed.
        """
        self._emit(current.evolve(pending_op=operation))

        try:
            result = await action()
            refreshed = await self._store.get_all() if refetch else []
        except Exception as e:
            # Filters may have changed while the write was in flight
            latest = self._state if isinstance(self._state, Loaded) else current
            self._emit(latest.evolve(pending_op=None))
            self._fail(operation.value, to_ledger_error(e), current.all, correlation_id)
            return None

        self._emit(OperationSucceeded(
            message=message(result),
            all=refreshed,
            operation=operation,
        ))
        self._emit(self._loaded(refreshed))
        return result

    async def _on_add(self, event: Add, correlation_id: UUID) -> None:
        current = self._state
        if not isinstance(current, Loaded):
            return self._ignore(event)

        self._check(
            Operation.ADD,
            self._store.validator.validate_new(event.title, event.value),
            correlation_id,
        )

        added: Optional[Transaction] = await self._run_write(
            current,
            Operation.ADD,
            lambda: self._store.add(event.title, event.value, event.is_expense),
            lambda _: EXPENSE_ADDED_MESSAGE if event.is_expense else INCOME_ADDED_MESSAGE,
            correlation_id,
        )
        if added is not None and self._audit_logger:
            self._audit_logger.log_transaction_added(
                transaction_id=added.id,
                title=added.title,
                amount=str(added.value),
                is_expense=added.is_expense,
                correlation_id=correlation_id,
            )

    async def _on_update(self, event: Update, correlation_id: UUID) -> None:
        current = self._state
        if not isinstance(current, Loaded):
            return self._ignore(event)

        transaction = event.transaction
        self._check(
            Operation.UPDATE,
            self._store.validator.validate_existing(transaction),
            correlation_id,
        )

        await self._run_write(
            current,
            Operation.UPDATE,
            lambda: self._store.update(transaction),
            lambda _: TRANSACTION_UPDATED_MESSAGE,
            correlation_id,
        )
        if isinstance(self._state, Loaded) and self._audit_logger:
            self._audit_logger.log_transaction_updated(
                transaction_id=transaction.id,
                title=transaction.title,
                amount=str(transaction.value),
                correlation_id=correlation_id,
            )

    async def _on_delete(self, event: Delete, correlation_id: UUID) -> None:
        current = self._state
        if not isinstance(current, Loaded):
            return self._ignore(event)

        self._check(
            Operation.DELETE,
            self._store.validator.validate_key(event.id),
            correlation_id,
        )

        await self._run_write(
            current,
            Operation.DELETE,
            lambda: self._store.delete(event.id),
            lambda _: TRANSACTION_REMOVED_MESSAGE,
            correlation_id,
        )
        if isinstance(self._state, Loaded) and self._audit_logger:
            self._audit_logger.log_transaction_deleted(event.id, correlation_id)

    async def _on_clear_all(self, event: ClearAll, correlation_id: UUID) -> None:
        current = self._state
        if not isinstance(current, Loaded):
            return self._ignore(event)

        await self._run_write(
            current,
            Operation.CLEAR,
            self._store.clear_all,
            lambda _: ALL_CLEARED_MESSAGE,
            correlation_id,
            refetch=False,
        )
        if isinstance(self._state, Loaded) and self._audit_logger:
            self._audit_logger.log_transactions_cleared(correlation_id)

    # ------------------------------------------------------------------
    # Filters (synchronous, no I/O)
    # ------------------------------------------------------------------

    def _refilter(self, current: Loaded, **criteria) -> Loaded:
        """Apply changed criteria and recompute `filtered` from `all`."""
        updated = current.evolve(**criteria)
        return updated.evolve(filtered=apply_filters(
            updated.all,
            search_query=updated.search_query,
            date_range=updated.date_range,
            type_filter=updated.type_filter,
            tolerance=self._tolerance,
        ))

    def _on_search(self, event: Search) -> None:
        current = self._state
        if not isinstance(current, Loaded):
            return self._ignore(event)

        query = event.query if event.query else None
        self._emit(self._refilter(current, search_query=query))

    def _on_filter_by_date_range(self, event: FilterByDateRange) -> None:
        current = self._state
        if not isinstance(current, Loaded):
            return self._ignore(event)

        date_range = DateRange(start=event.start, end=event.end)
        self._emit(self._refilter(current, date_range=date_range))

    def _on_filter_by_type(self, event: FilterByType) -> None:
        current = self._state
        if not isinstance(current, Loaded):
            return self._ignore(event)

        self._emit(self._refilter(current, type_filter=event.is_expense))

    def _on_clear_filters(self, event: ClearFilters) -> None:
        current = self._state
        if not isinstance(current, Loaded):
            return self._ignore(event)

        self._emit(current.evolve(
            filtered=(),
            search_query=None,
            date_range=None,
            type_filter=None,
        ))
