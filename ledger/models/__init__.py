"""
Data Models Package

This package contains the pydantic models used across the ledger.
All data flowing through the system must conform to these schemas.
"""

from ledger.models.transaction import (
    RecurringSummary,
    RecurringTransaction,
    Transaction,
    summarize_recurring,
)
from ledger.models.summary import (
    BalanceMood,
    FinancialSummary,
    balance_mood,
    calculate_balance,
    filter_by_type,
    financial_summary,
    recent_transactions,
    total_expenses,
    total_income,
)
from ledger.models.error import ErrorInfo, ErrorType
from ledger.models.validation import ValidationIssue, ValidationResult
from ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Records
    "RecurringSummary",
    "RecurringTransaction",
    "Transaction",
    "summarize_recurring",
    # Aggregates
    "BalanceMood",
    "FinancialSummary",
    "balance_mood",
    "calculate_balance",
    "filter_by_type",
    "financial_summary",
    "recent_transactions",
    "total_expenses",
    "total_income",
    # Errors
    "ErrorInfo",
    "ErrorType",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
