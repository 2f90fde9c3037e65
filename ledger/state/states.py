"""
Application States

DESIGN DECISION: States are a tagged union, not a class hierarchy.
Each variant is an independent frozen model carrying a literal `kind`
tag, and LedgerState is the discriminated union of all of them. A
consumer can dispatch on `state.kind` (or isinstance) and pydantic can
round-trip any state from its dict form.

States are never mutated. The state machine builds a new one for
every transition (see Loaded.evolve).
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ledger.models.error import ErrorInfo
from ledger.models.summary import (
    BalanceMood,
    FinancialSummary,
    balance_mood,
    calculate_balance,
    financial_summary,
    recent_transactions,
    total_expenses,
    total_income,
)
from ledger.models.transaction import Transaction


RECENT_WINDOW_DAYS = 30


class Operation(str, Enum):
    """Write operations. Used as the pending marker and the success tag."""
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"
    CLEAR = "clear"


class DateRange(BaseModel):
    """Inclusive date window used by the date filter."""
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode='after')
    def validate_order(self) -> 'DateRange':
        if self.end < self.start:
            raise ValueError("Date range end cannot be before start")
        return self


class Uninitialized(BaseModel):
    """Nothing has been loaded yet."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["uninitialized"] = "uninitialized"


class Loading(BaseModel):
    """A full load is in progress and there is no data to show."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["loading"] = "loading"


class Loaded(BaseModel):
    """
    Transactions are available.

    `filtered` only matters while a filter is active. Use `display_set`
    to get whichever list should be shown and aggregated.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["loaded"] = "loaded"
    all: tuple[Transaction, ...] = ()
    filtered: tuple[Transaction, ...] = ()
    pending_op: Optional[Operation] = Field(
        default=None,
        description="Write in flight; observers should block duplicate submissions"
    )
    search_query: Optional[str] = None
    date_range: Optional[DateRange] = None
    type_filter: Optional[bool] = Field(
        default=None,
        description="True = expenses only, False = income only, None = both"
    )
    recent_days: int = Field(
        default=RECENT_WINDOW_DAYS,
        ge=1,
        description="Trailing window of recent_transactions, in days"
    )

    def evolve(self, **changes: Any) -> "Loaded":
        """Return a new Loaded with the given fields replaced."""
        data = dict(self)
        data.update(changes)
        return Loaded(**data)

    @property
    def has_filters(self) -> bool:
        return (
            self.search_query is not None
            or self.date_range is not None
            or self.type_filter is not None
        )

    @property
    def display_set(self) -> tuple[Transaction, ...]:
        return self.filtered if self.has_filters else self.all

    @property
    def has_transactions(self) -> bool:
        return bool(self.all)

    @property
    def is_busy(self) -> bool:
        return self.pending_op is not None

    @property
    def current_balance(self) -> Decimal:
        return calculate_balance(self.display_set)

    @property
    def total_income(self) -> Decimal:
        return total_income(self.display_set)

    @property
    def total_expenses(self) -> Decimal:
        return total_expenses(self.display_set)

    @property
    def financial_summary(self) -> FinancialSummary:
        return financial_summary(self.display_set)

    @property
    def balance_mood(self) -> BalanceMood:
        return balance_mood(self.current_balance)

    @property
    def recent_transactions(self) -> list[Transaction]:
        """Display-set members from the last `recent_days` days, as of right now."""
        return self.recent_within(self.recent_days)

    def recent_within(
        self,
        days: int,
        now: Optional[datetime] = None,
    ) -> list[Transaction]:
        return recent_transactions(self.display_set, days=days, now=now)


class Error(BaseModel):
    """
    An operation failed.

    `previous_all` holds the last known-good transactions so the
    display can keep showing them.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["error"] = "error"
    error: ErrorInfo
    previous_all: tuple[Transaction, ...] = ()


class OperationSucceeded(BaseModel):
    """
    A write finished. Transient: always followed by Loaded.

    Observers use it to show a one-off success message.
    """
    model_config = ConfigDict(frozen=True)

    kind: Literal["operation_succeeded"] = "operation_succeeded"
    message: str
    all: tuple[Transaction, ...] = ()
    operation: Operation


LedgerState = Annotated[
    Union[Uninitialized, Loading, Loaded, Error, OperationSucceeded],
    Field(discriminator="kind"),
]
