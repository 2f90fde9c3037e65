"""
Audit Models for the Personal Ledger

Every write against the ledger is logged for audit purposes.
This provides:
1. Traceability of what changed and when
2. Debugging information when the record store fails
3. A way to reconstruct how the balance got where it is

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Reads
    TRANSACTIONS_LOADED = "transactions_loaded"

    # Writes
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTIONS_CLEARED = "transactions_cleared"

    # Failures
    VALIDATION_FAILED = "validation_failed"
    STORAGE_FAILED = "storage_failed"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Which transaction this is about, if any
    transaction_id: Optional[int] = Field(
        default=None,
        description="Record store key of the affected transaction"
    )

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by all events of one dispatched event"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_type: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "transaction_id": self.transaction_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_type": self.error_type,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(transaction, correlation_id)
    """

    @staticmethod
    def transactions_loaded(
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_LOADED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Loaded {count} transactions",
            details={"count": count},
        )

    @staticmethod
    def transaction_added(
        transaction_id: Optional[int],
        title: str,
        amount: str,
        is_expense: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        kind = "Expense" if is_expense else "Income"
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            transaction_id=transaction_id,
            correlation_id=correlation_id,
            description=f"{kind} added: {title} - {amount}",
            details={
                "title": title,
                "amount": amount,
                "is_expense": is_expense,
            },
        )

    @staticmethod
    def transaction_updated(
        transaction_id: int,
        title: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            transaction_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction updated: {title} - {amount}",
            details={"title": title, "amount": amount},
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            transaction_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction {transaction_id} deleted",
        )

    @staticmethod
    def transactions_cleared(
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_CLEARED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="All transactions were removed",
        )

    @staticmethod
    def validation_failed(
        operation: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"{operation.capitalize()} rejected with {len(issues)} issues",
            details={
                "operation": operation,
                "issues": issues,
            },
            error_type="validation",
        )

    @staticmethod
    def storage_failed(
        operation: str,
        error_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_FAILED,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"{operation.capitalize()} failed in the record store",
            details={"operation": operation},
            error_type=error_type,
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_type=error_type,
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
