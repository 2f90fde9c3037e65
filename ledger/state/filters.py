"""
Filter pipeline.

A pure function of the full transaction list and the active criteria.
It is always re-run from `all`, never from the previous `filtered`,
so an exclusion can't outlive the criterion that caused it.
"""

from datetime import timedelta
from typing import Iterable, Optional

from ledger.models.transaction import Transaction
from ledger.state.states import DateRange


DEFAULT_TOLERANCE = timedelta(days=1)


def matches_search(transaction: Transaction, query: str) -> bool:
    return query.lower() in transaction.title.lower()


def in_date_range(
    transaction: Transaction,
    date_range: DateRange,
    tolerance: timedelta = DEFAULT_TOLERANCE,
) -> bool:
    """
    Both bounds are widened by `tolerance` and then compared strictly,
    so a transaction dated exactly on either bound is included.
    """
    return (
        date_range.start - tolerance < transaction.date < date_range.end + tolerance
    )


def apply_filters(
    transactions: Iterable[Transaction],
    search_query: Optional[str] = None,
    date_range: Optional[DateRange] = None,
    type_filter: Optional[bool] = None,
    tolerance: timedelta = DEFAULT_TOLERANCE,
) -> tuple[Transaction, ...]:
    """
    Apply search, date and type criteria in that order (logical AND).

    A missing criterion lets everything through. Input order is kept.
    """
    filtered = list(transactions)

    if search_query:
        filtered = [t for t in filtered if matches_search(t, search_query)]

    if date_range is not None:
        filtered = [t for t in filtered if in_date_range(t, date_range, tolerance)]

    if type_filter is not None:
        filtered = [t for t in filtered if t.is_expense == type_filter]

    return tuple(filtered)
