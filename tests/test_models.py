"""
Tests for the Personal Ledger

Test strategy:
1. Unit tests for individual components (models, validators, filters)
2. Record store tests against memory and a temporary directory
3. State machine tests with an injectable failing record store
"""

import pytest
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from ledger.models.transaction import (
    RecurringTransaction,
    Transaction,
    summarize_recurring,
)
from ledger.models.validation import ValidationIssue, ValidationResult
from ledger.models.error import ErrorInfo, ErrorType
from ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from ledger.errors import (
    LedgerError,
    NotFoundError,
    StorageError,
    UnknownError,
    ValidationError,
    to_ledger_error,
)


class TestTransactionModel:
    """Tests for the Transaction model."""

    def test_transaction_creation(self):
        """Test Transaction model creation."""
        t = Transaction(
            title="Groceries",
            value=Decimal("125.50"),
            date=datetime(2024, 3, 15),
            is_expense=True,
        )
        assert t.id is None
        assert t.title == "Groceries"
        assert t.value == Decimal("125.50")

    def test_transaction_strips_whitespace(self):
        """Test that whitespace is stripped from the title."""
        t = Transaction(title="  Rent  ", value=Decimal("800"))
        assert t.title == "Rent"

    def test_float_value_keeps_decimal_digits(self):
        t = Transaction(title="Coffee", value=0.1)
        assert t.value == Decimal("0.1")

    def test_transaction_rejects_non_positive_value(self):
        """Direction comes from is_expense, so values must be positive."""
        with pytest.raises(ValueError):
            Transaction(title="Refund", value=Decimal("-10"))
        with pytest.raises(ValueError):
            Transaction(title="Nothing", value=Decimal("0"))

    def test_transaction_rejects_empty_title(self):
        with pytest.raises(ValueError):
            Transaction(title="   ", value=Decimal("1"))

    def test_transaction_is_immutable(self):
        t = Transaction(title="Rent", value=Decimal("800"))
        with pytest.raises(ValueError):
            t.title = "Other"

    def test_signed_value(self):
        expense = Transaction(title="Rent", value=Decimal("800"), is_expense=True)
        income = Transaction(title="Salary", value=Decimal("800"), is_expense=False)
        assert expense.signed_value == Decimal("-800")
        assert income.signed_value == Decimal("800")

    def test_replace_returns_validated_copy(self):
        t = Transaction(title="Rent", value=Decimal("800"))
        changed = t.replace(id=4, value=Decimal("850"))
        assert changed.id == 4
        assert changed.value == Decimal("850")
        assert t.id is None
        with pytest.raises(ValueError):
            t.replace(value=Decimal("0"))


class TestRecurringTransaction:
    """Tests for installment plan derivations."""

    def test_derived_fields(self):
        plan = RecurringTransaction(
            title="Laptop",
            value=Decimal("250.00"),
            total_installments=12,
            current_installment=4,
            payment_day=10,
        )
        assert plan.total_amount == Decimal("3000.00")
        assert plan.remaining_installments == 9
        assert plan.remaining_amount == Decimal("2250.00")
        assert not plan.is_completed

    def test_completed_plan(self):
        plan = RecurringTransaction(
            title="Phone",
            value=Decimal("100"),
            total_installments=3,
            current_installment=4,
            payment_day=5,
        )
        assert plan.is_completed
        assert plan.remaining_installments == 0
        assert plan.remaining_amount == Decimal("0")

    def test_payment_day_bounds(self):
        with pytest.raises(ValueError):
            RecurringTransaction(title="Gym", value=Decimal("50"), payment_day=32)

    def test_summarize_skips_inactive_and_completed(self):
        active = RecurringTransaction(
            title="Laptop", value=Decimal("100"), total_installments=10,
            current_installment=3, payment_day=1,
        )
        inactive = RecurringTransaction(
            title="Gym", value=Decimal("50"), total_installments=12,
            payment_day=1, is_active=False,
        )
        done = RecurringTransaction(
            title="Phone", value=Decimal("30"), total_installments=2,
            current_installment=3, payment_day=1,
        )
        summary = summarize_recurring([active, inactive, done])
        assert summary.active_count == 1
        assert summary.total_committed == Decimal("1000")
        assert summary.total_remaining == Decimal("800")


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Expense added",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        """Test AuditEvent conversion to log dict."""
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            transaction_id=3,
            correlation_id=correlation_id,
            description="Transaction 3 deleted",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "transaction_deleted"
        assert log_dict["transaction_id"] == 3
        assert log_dict["correlation_id"] == str(correlation_id)

    def test_audit_event_builder_transaction_added(self):
        """Test AuditEventBuilder for added transactions."""
        event = AuditEventBuilder.transaction_added(
            transaction_id=0,
            title="Salary",
            amount="4500.00",
            is_expense=False,
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.description == "Income added: Salary - 4500.00"
        assert event.details["is_expense"] is False

    def test_audit_event_builder_storage_failed(self):
        event = AuditEventBuilder.storage_failed(
            operation="delete",
            error_type="not_found",
            error_message="Transaction 9 not found",
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.error_type == "not_found"
        assert event.details == {"operation": "delete"}

    def test_cleared_is_a_warning(self):
        event = AuditEventBuilder.transactions_cleared()
        assert event.severity == AuditSeverity.WARNING


class TestValidationResult:
    """Tests for ValidationResult logic."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(issues=[
            ValidationIssue(
                field="title",
                issue_type="missing",
                message="Title cannot be empty",
                severity="error",
            ),
            ValidationIssue(
                field="value",
                issue_type="out_of_range",
                message="Value is unusually high",
                severity="warning",
            ),
        ])
        assert result.has_errors
        assert not result.is_valid
        assert result.error_count == 1
        assert result.error_messages == ["Title cannot be empty"]

    def test_validation_result_warnings_only(self):
        """Test result with only warnings."""
        result = ValidationResult(issues=[
            ValidationIssue(
                field="value",
                issue_type="out_of_range",
                message="Value is unusually high",
                severity="warning",
            ),
        ])
        assert not result.has_errors
        assert result.is_valid

    def test_issue_severity_is_restricted(self):
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


class TestErrors:
    """Tests for the exception hierarchy and its conversion."""

    def test_not_found_is_a_storage_error(self):
        error = NotFoundError("Transaction 1 not found")
        assert isinstance(error, StorageError)
        assert error.error_type == ErrorType.NOT_FOUND

    def test_to_error_info(self):
        info = StorageError("Write failed", details="disk full").to_error_info()
        assert isinstance(info, ErrorInfo)
        assert info.error_type == ErrorType.STORAGE
        assert info.details == "disk full"
        assert str(info) == "Write failed"

    def test_validation_error_carries_issues(self):
        issue = ValidationIssue(field="title", issue_type="missing", message="m")
        error = ValidationError("m", issues=[issue])
        assert error.issues == [issue]
        assert error.code == "validation_failed"

    def test_ledger_errors_pass_through(self):
        error = NotFoundError("gone")
        assert to_ledger_error(error) is error

    def test_os_error_becomes_storage_error(self):
        error = to_ledger_error(OSError("disk full"))
        assert type(error) is StorageError
        assert error.details == "disk full"

    def test_foreign_error_becomes_unknown(self):
        error = to_ledger_error(RuntimeError("boom"))
        assert isinstance(error, UnknownError)
        assert isinstance(error, LedgerError)
        assert error.details == "RuntimeError: boom"
