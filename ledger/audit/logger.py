"""
Audit Logger

DESIGN DECISION: Every write against the ledger is logged.
This provides:
1. Traceability of balance changes
2. Debugging capability when the record store misbehaves
3. A history the user could be shown later

The audit logger:
- Never raises (logging failures must not fail a ledger operation)
- Supports correlation IDs to trace the events of one dispatch
- Maps event severity to log level
"""

import logging
from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from ledger.config import LoggingSettings, get_settings
from ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Configure structlog on top of the standard library logger.

    Called once at import with the environment settings; call again
    to switch level or renderer.
    """
    settings = settings or get_settings().logging

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.json_output
        else structlog.dev.ConsoleRenderer()
    )

    logging.basicConfig(format="%(message)s")
    logging.getLogger("ledger").setLevel(settings.level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Writes every AuditEvent to the structured log and keeps the most
    recent events of this process in memory for inspection.
    """

    def __init__(
        self,
        keep_events: bool = True,
        max_events: Optional[int] = None,
    ):
        """
        Initialize audit logger.

        Args:
            keep_events: Retain logged events in `events`.
            max_events: How many events to retain (default from
                        LoggingSettings.audit_history_size).
        """
        if max_events is None:
            max_events = get_settings().logging.audit_history_size
        self._logger = structlog.get_logger("ledger.audit")
        self._keep_events = keep_events
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._keep_events:
            self._events.append(event)

    def log_transactions_loaded(
        self,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transactions_loaded(
            count=count,
            correlation_id=correlation_id,
        ))

    def log_transaction_added(
        self,
        transaction_id: Optional[int],
        title: str,
        amount: str,
        is_expense: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a new transaction."""
        self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            title=title,
            amount=amount,
            is_expense=is_expense,
            correlation_id=correlation_id,
        ))

    def log_transaction_updated(
        self,
        transaction_id: int,
        title: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transaction_updated(
            transaction_id=transaction_id,
            title=title,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_transaction_deleted(
        self,
        transaction_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            correlation_id=correlation_id,
        ))

    def log_transactions_cleared(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transactions_cleared(
            correlation_id=correlation_id,
        ))

    def log_validation_failed(
        self,
        operation: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log input rejected by validation."""
        self.log(AuditEventBuilder.validation_failed(
            operation=operation,
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_storage_failed(
        self,
        operation: str,
        error_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a record store failure."""
        self.log(AuditEventBuilder.storage_failed(
            operation=operation,
            error_type=error_type,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an unexpected error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a dispatched event and pass it through
    all subsequent operations.
    """
    return uuid4()
