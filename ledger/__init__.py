"""
Personal Ledger - Source Package

The transaction state core of a personal finance ledger: users record
income and expense entries, see a running balance, and filter their
history.

DESIGN PRINCIPLES:
1. One writer: only the state machine produces new states
2. The record store is the source of truth (re-fetch after every write)
3. Validation happens before any I/O
4. Failures become states, never crashes
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Personal Ledger Team"
