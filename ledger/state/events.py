"""
Events accepted by the state machine.

Like states, events are frozen models tagged by `kind` so that a
rendering layer can build them from plain dicts (LedgerEvent).
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ledger.models.transaction import Transaction


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)


class Load(_Event):
    """Fetch every transaction, showing Loading meanwhile."""
    kind: Literal["load"] = "load"


class Refresh(_Event):
    """Re-fetch, keeping stale data visible if some is loaded."""
    kind: Literal["refresh"] = "refresh"


class Add(_Event):
    """Create a transaction. Values are validated on dispatch, not here."""
    kind: Literal["add"] = "add"
    title: str
    value: Decimal
    is_expense: bool

    @field_validator('value', mode='before')
    @classmethod
    def coerce_value(cls, v: Any) -> Any:
        if isinstance(v, float):
            return Decimal(str(v))
        return v


class Update(_Event):
    kind: Literal["update"] = "update"
    transaction: Transaction


class Delete(_Event):
    kind: Literal["delete"] = "delete"
    id: int


class ClearAll(_Event):
    kind: Literal["clear_all"] = "clear_all"


class Search(_Event):
    """Filter by title. An empty query removes the search criterion."""
    kind: Literal["search"] = "search"
    query: str


class FilterByDateRange(_Event):
    kind: Literal["filter_by_date_range"] = "filter_by_date_range"
    start: datetime
    end: datetime

    @model_validator(mode='after')
    def validate_order(self) -> 'FilterByDateRange':
        if self.end < self.start:
            raise ValueError("Filter end date cannot be before start date")
        return self


class FilterByType(_Event):
    """True = expenses, False = income, None = remove the type filter."""
    kind: Literal["filter_by_type"] = "filter_by_type"
    is_expense: Optional[bool] = None


class ClearFilters(_Event):
    kind: Literal["clear_filters"] = "clear_filters"


LedgerEvent = Annotated[
    Union[
        Load,
        Refresh,
        Add,
        Update,
        Delete,
        ClearAll,
        Search,
        FilterByDateRange,
        FilterByType,
        ClearFilters,
    ],
    Field(discriminator="kind"),
]
