"""
Transaction Input Validation

DESIGN DECISION: Validation runs before any I/O.
Input that fails here never reaches the record store and never
changes state; the caller gets a ValidationError listing every issue,
not just the first one.

IMPORTANT: Validation NEVER silently fixes issues.
Trimming the title is the only normalization, and it happens
before the checks so "   " counts as empty.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ledger.config import LedgerSettings, get_settings
from ledger.errors import ValidationError
from ledger.models.transaction import Transaction
from ledger.models.validation import ValidationIssue, ValidationResult


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Convert user input into a finite Decimal.

    Returns None for anything that is not a finite number.
    Floats go through their string form so 0.1 stays 0.1.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return Decimal(str(value))
    if isinstance(value, (int, Decimal)):
        amount = Decimal(value)
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    return amount if amount.is_finite() else None


class TransactionValidator:
    """
    Validates transaction input against the configured limits.

    Each validate_* method returns a ValidationResult; ensure_valid
    turns a failing result into a ValidationError.
    """

    def __init__(self, settings: Optional[LedgerSettings] = None):
        self._settings = settings or get_settings().ledger

    def _check_title(self, title: Any, issues: list[ValidationIssue]) -> None:
        if not isinstance(title, str) or not title.strip():
            issues.append(ValidationIssue(
                field="title",
                issue_type="missing",
                message="Title cannot be empty",
                suggested_fix="Describe what the money was for",
            ))
            return

        max_length = self._settings.max_title_length
        if len(title.strip()) > max_length:
            issues.append(ValidationIssue(
                field="title",
                issue_type="too_long",
                message=f"Title cannot be longer than {max_length} characters",
            ))

    def _check_value(self, value: Any, issues: list[ValidationIssue]) -> None:
        amount = parse_amount(value)
        if amount is None:
            issues.append(ValidationIssue(
                field="value",
                issue_type="invalid_format",
                message="Value must be a valid number",
            ))
        elif amount <= 0:
            issues.append(ValidationIssue(
                field="value",
                issue_type="out_of_range",
                message="Value must be greater than zero",
                suggested_fix="Use the expense/income switch for direction, not the sign",
            ))
        elif amount > self._settings.max_transaction_value:
            issues.append(ValidationIssue(
                field="value",
                issue_type="out_of_range",
                message="Value is too high",
            ))

    def validate_new(self, title: Any, value: Any) -> ValidationResult:
        """Validate the input of a transaction that is about to be created."""
        issues: list[ValidationIssue] = []
        self._check_title(title, issues)
        self._check_value(value, issues)
        return ValidationResult(issues=issues)

    def validate_existing(self, transaction: Transaction) -> ValidationResult:
        """
        Validate a transaction that is about to replace a stored one.

        The model already guarantees a non-empty title and a positive
        value; what is left is the key and the configured limits.
        """
        issues: list[ValidationIssue] = []
        if transaction.id is None:
            issues.append(ValidationIssue(
                field="id",
                issue_type="missing",
                message="Transaction has no id and cannot be updated",
                suggested_fix="Only transactions loaded from the store can be updated",
            ))
        self._check_title(transaction.title, issues)
        self._check_value(transaction.value, issues)
        return ValidationResult(issues=issues)

    def validate_key(self, key: Any) -> ValidationResult:
        issues: list[ValidationIssue] = []
        if isinstance(key, bool) or not isinstance(key, int) or key < 0:
            issues.append(ValidationIssue(
                field="id",
                issue_type="invalid_value",
                message="Invalid transaction id",
            ))
        return ValidationResult(issues=issues)

    def validate_recurring(
        self,
        title: Any,
        value: Any,
        total_installments: int,
        payment_day: int,
    ) -> ValidationResult:
        """Validate the input of an installment plan."""
        issues: list[ValidationIssue] = []
        self._check_title(title, issues)
        self._check_value(value, issues)

        max_installments = self._settings.max_installments
        if total_installments <= 0:
            issues.append(ValidationIssue(
                field="total_installments",
                issue_type="out_of_range",
                message="Number of installments must be greater than zero",
            ))
        elif total_installments > max_installments:
            issues.append(ValidationIssue(
                field="total_installments",
                issue_type="out_of_range",
                message=f"Number of installments cannot exceed {max_installments}",
            ))

        if not 1 <= payment_day <= 31:
            issues.append(ValidationIssue(
                field="payment_day",
                issue_type="out_of_range",
                message="Payment day must be between 1 and 31",
            ))

        return ValidationResult(issues=issues)

    @staticmethod
    def ensure_valid(result: ValidationResult) -> None:
        """
        Raise ValidationError if the result has errors.

        The message lists every error, one per line.
        """
        if result.has_errors:
            raise ValidationError(
                "\n".join(result.error_messages),
                issues=result.issues,
            )
