"""State machine package: states, events, filters and the controller."""

from ledger.state.events import (
    Add,
    ClearAll,
    ClearFilters,
    Delete,
    FilterByDateRange,
    FilterByType,
    LedgerEvent,
    Load,
    Refresh,
    Search,
    Update,
)
from ledger.state.filters import apply_filters, in_date_range, matches_search
from ledger.state.machine import TransactionStateMachine
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

__all__ = [
    # Events
    "Add",
    "ClearAll",
    "ClearFilters",
    "Delete",
    "FilterByDateRange",
    "FilterByType",
    "LedgerEvent",
    "Load",
    "Refresh",
    "Search",
    "Update",
    # States
    "DateRange",
    "Error",
    "LedgerState",
    "Loaded",
    "Loading",
    "Operation",
    "OperationSucceeded",
    "Uninitialized",
    # Filters
    "apply_filters",
    "in_date_range",
    "matches_search",
    # Controller
    "TransactionStateMachine",
]
