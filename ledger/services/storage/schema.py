"""
Record Schemas

DESIGN DECISION: Each record kind has a fixed type id and every field
a small integer tag. Payloads are keyed by tag, never by field name,
so renaming a Python attribute never breaks data already on disk.

Rules for evolving a schema:
- Never reuse or renumber a tag
- New fields get new tags and must have defaults
- Unknown tags are ignored when reading (newer writers, older readers)
"""

from typing import Any

from pydantic import BaseModel, ValidationError as PydanticValidationError

from ledger.errors import StorageError
from ledger.models.transaction import RecurringTransaction, Transaction


TYPE_KEY = "__type__"


class RecordSchema:
    """Maps one pydantic record model to its tagged payload form."""

    def __init__(
        self,
        type_id: int,
        model: type[BaseModel],
        fields: dict[int, str],
    ):
        unknown = set(fields.values()) - set(model.model_fields)
        if unknown:
            raise ValueError(f"Fields not on {model.__name__}: {sorted(unknown)}")
        self.type_id = type_id
        self.model = model
        self.fields = dict(fields)

    @property
    def name(self) -> str:
        return self.model.__name__

    def encode(self, record: BaseModel) -> dict[str, Any]:
        """Convert a record into a JSON-safe payload keyed by field tags."""
        if not isinstance(record, self.model):
            raise StorageError(
                f"Cannot store {type(record).__name__} as {self.name}"
            )
        # JSON mode writes Decimals as strings and datetimes as ISO text
        data = record.model_dump(mode="json")
        payload: dict[str, Any] = {TYPE_KEY: self.type_id}
        for tag, field_name in self.fields.items():
            payload[str(tag)] = data[field_name]
        return payload

    def decode(self, payload: dict[str, Any]) -> BaseModel:
        """Rebuild a record from its payload."""
        type_id = payload.get(TYPE_KEY, self.type_id)
        if type_id != self.type_id:
            raise StorageError(
                f"Record type {type_id} is not {self.name} (type {self.type_id})"
            )

        data = {
            field_name: payload[str(tag)]
            for tag, field_name in self.fields.items()
            if str(tag) in payload
        }
        try:
            return self.model.model_validate(data)
        except PydanticValidationError as e:
            raise StorageError(
                f"Corrupt {self.name} record",
                details=str(e),
            )


TRANSACTION_SCHEMA = RecordSchema(
    type_id=0,
    model=Transaction,
    fields={
        0: "title",
        1: "value",
        2: "date",
        3: "is_expense",
    },
)

RECURRING_TRANSACTION_SCHEMA = RecordSchema(
    type_id=1,
    model=RecurringTransaction,
    fields={
        0: "title",
        1: "value",
        2: "is_expense",
        3: "total_installments",
        4: "current_installment",
        5: "start_date",
        6: "payment_day",
        7: "next_occurrence_date",
        8: "is_active",
    },
)
