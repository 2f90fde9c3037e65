"""
Error information carried by the Error state.

The display layer only ever sees this model, never a raw exception.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorType(str, Enum):
    """Error taxonomy shared by exceptions and states."""
    VALIDATION = "validation"
    STORAGE = "storage"
    NOT_FOUND = "not_found"
    NETWORK = "network"  # Reserved for remote sync
    UNKNOWN = "unknown"


class ErrorInfo(BaseModel):
    """Serializable description of a failed operation."""
    model_config = ConfigDict(frozen=True)

    message: str = Field(
        ...,
        description="User-facing message"
    )
    error_type: ErrorType = Field(
        default=ErrorType.UNKNOWN,
        description="Which kind of failure this was"
    )
    details: Optional[str] = Field(
        default=None,
        description="Technical details (original exception text)"
    )
    code: Optional[str] = None

    def __str__(self) -> str:
        return self.message
