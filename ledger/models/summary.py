"""
Financial aggregates over transaction lists.

All folds use exact Decimal arithmetic. Nothing is rounded here;
rounding to currency precision is a presentation concern.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from ledger.models.transaction import Transaction


ZERO = Decimal("0")


class BalanceMood(str, Enum):
    """How the balance should feel to the user. Zero is its own mood."""
    POSITIVE = "positive"
    ZERO = "zero"
    NEGATIVE = "negative"


class FinancialSummary(BaseModel):
    """Income, expenses and their difference over one transaction list."""
    model_config = ConfigDict(frozen=True)

    income: Decimal = ZERO
    expenses: Decimal = ZERO
    balance: Decimal = ZERO


def calculate_balance(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.signed_value for t in transactions), ZERO)


def total_income(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.value for t in transactions if not t.is_expense), ZERO)


def total_expenses(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.value for t in transactions if t.is_expense), ZERO)


def financial_summary(transactions: Iterable[Transaction]) -> FinancialSummary:
    items = list(transactions)
    income = total_income(items)
    expenses = total_expenses(items)
    return FinancialSummary(
        income=income,
        expenses=expenses,
        balance=income - expenses,
    )


def balance_mood(balance: Decimal) -> BalanceMood:
    if balance > 0:
        return BalanceMood.POSITIVE
    if balance < 0:
        return BalanceMood.NEGATIVE
    return BalanceMood.ZERO


def filter_by_type(
    transactions: Iterable[Transaction],
    is_expense: bool,
) -> list[Transaction]:
    return [t for t in transactions if t.is_expense == is_expense]


def recent_transactions(
    transactions: Iterable[Transaction],
    days: int = 30,
    now: Optional[datetime] = None,
) -> list[Transaction]:
    """
    Transactions strictly after the start of a trailing window.

    `now` defaults to the wall clock at call time, so the window
    moves with every read.
    """
    cutoff = (now or datetime.now()) - timedelta(days=days)
    return [t for t in transactions if t.date > cutoff]
