"""
Core Data Models for the Personal Ledger

DESIGN DECISION: Records are immutable pydantic models.
An update never mutates a Transaction in place; it builds a new one
and replaces the stored record by key.

Amounts are Decimal magnitudes. Direction lives only in is_expense,
so a stored value is never negative.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


def _to_decimal(value: Any) -> Any:
    """Convert floats through their string form to avoid binary noise."""
    if isinstance(value, bool):
        return value  # Let pydantic reject it
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, int):
        return Decimal(value)
    return value


class Transaction(BaseModel):
    """
    A single income or expense entry.

    `id` is the key assigned by the record store. It is None only
    before the transaction has been persisted.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: Optional[int] = Field(
        default=None,
        ge=0,
        description="Record store key (None before first save)"
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="What the money was for"
    )
    value: Decimal = Field(
        ...,
        gt=0,
        description="Positive magnitude; sign comes from is_expense"
    )
    date: datetime = Field(
        default_factory=datetime.now,
        description="When the transaction happened"
    )
    is_expense: bool = Field(
        default=True,
        description="True = outflow, False = inflow"
    )

    @field_validator('value', mode='before')
    @classmethod
    def coerce_value(cls, v: Any) -> Any:
        return _to_decimal(v)

    @property
    def signed_value(self) -> Decimal:
        """Contribution of this transaction to the balance."""
        return -self.value if self.is_expense else self.value

    def replace(self, **changes: Any) -> "Transaction":
        """Return a validated copy with the given fields changed."""
        data = self.model_dump()
        data.update(changes)
        return Transaction.model_validate(data)


class RecurringTransaction(BaseModel):
    """
    An installment plan (e.g. "Laptop, 12x").

    Dormant entity: nothing schedules or materializes installments.
    Its only contract is correct field derivation.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=100)
    value: Decimal = Field(
        ...,
        gt=0,
        description="Amount of each installment"
    )
    is_expense: bool = True
    total_installments: int = Field(default=1, ge=1)
    current_installment: int = Field(default=1, ge=1)
    start_date: datetime = Field(default_factory=datetime.now)
    payment_day: int = Field(
        default_factory=lambda: datetime.now().day,
        ge=1,
        le=31,
        description="Day of month the installment is due"
    )
    next_occurrence_date: datetime = Field(default_factory=datetime.now)
    is_active: bool = True

    @field_validator('value', mode='before')
    @classmethod
    def coerce_value(cls, v: Any) -> Any:
        return _to_decimal(v)

    @property
    def is_completed(self) -> bool:
        """All installments have been processed."""
        return self.current_installment > self.total_installments

    @property
    def total_amount(self) -> Decimal:
        return self.value * self.total_installments

    @property
    def remaining_installments(self) -> int:
        return max(self.total_installments - self.current_installment + 1, 0)

    @property
    def remaining_amount(self) -> Decimal:
        return self.value * self.remaining_installments


class RecurringSummary(BaseModel):
    """Totals over the active, not yet completed installment plans."""

    total_committed: Decimal = Decimal("0")
    total_remaining: Decimal = Decimal("0")
    active_count: int = 0


def summarize_recurring(records: list[RecurringTransaction]) -> RecurringSummary:
    """Sum committed and remaining amounts of active plans."""
    committed = Decimal("0")
    remaining = Decimal("0")
    active = 0
    for record in records:
        if record.is_active and not record.is_completed:
            committed += record.total_amount
            remaining += record.remaining_amount
            active += 1
    return RecurringSummary(
        total_committed=committed,
        total_remaining=remaining,
        active_count=active,
    )
