"""
Ledger exception hierarchy.

DESIGN DECISION: Every failure the core can produce is one of five kinds:
validation, storage (with not-found as a special case), network and unknown.
Anything else that escapes a collaborator is wrapped into UnknownError
so the state machine only has one type to turn into an Error state.
"""

from typing import Optional

from ledger.models.error import ErrorInfo, ErrorType


class LedgerError(Exception):
    """Base exception for the ledger core."""

    error_type: ErrorType = ErrorType.UNKNOWN

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            message=self.message,
            error_type=self.error_type,
            details=self.details,
            code=self.code,
        )


class ValidationError(LedgerError):
    """
    Input rejected before any I/O was attempted.

    Carries the individual validation issues so callers can show
    them field by field.
    """

    error_type = ErrorType.VALIDATION

    def __init__(self, message: str, issues: Optional[list] = None):
        super().__init__(message, code="validation_failed")
        self.issues = issues or []


class StorageError(LedgerError):
    """The record store failed."""

    error_type = ErrorType.STORAGE


class NotFoundError(StorageError):
    """Operation referenced a record key that doesn't exist."""

    error_type = ErrorType.NOT_FOUND


class StoreUnavailableError(StorageError):
    """Record store was not opened or could not be reached."""


class NetworkError(LedgerError):
    """Remote sync failure. Unused by current operations."""

    error_type = ErrorType.NETWORK


class UnknownError(LedgerError):
    """Catch-all for errors that are none of the above."""

    error_type = ErrorType.UNKNOWN


def to_ledger_error(exc: BaseException) -> LedgerError:
    """
    Convert any exception into a LedgerError.

    LedgerErrors pass through unchanged. OS-level I/O errors are storage
    failures. Everything else becomes UnknownError with the original
    text kept as details.
    """
    if isinstance(exc, LedgerError):
        return exc
    if isinstance(exc, OSError):
        return StorageError(
            "Storage error. Please try again.",
            details=str(exc),
        )
    return UnknownError(
        "Something went wrong. Please try again.",
        details=f"{type(exc).__name__}: {exc}",
    )
