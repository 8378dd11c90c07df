"""Mini README: Monthly diesel range ledger.

Exposes ``MonthlyLedger`` along with the outcome value and failure taxonomy
its operations report through.
"""

from .errors import (
    AverageNotSetError,
    ErrorKind,
    InvalidInputError,
    LedgerError,
    LedgerOutcome,
    LockedAverageError,
    PersistenceError,
)
from .locks import KeyedLocks
from .service import MonthlyLedger

__all__ = [
    "AverageNotSetError",
    "ErrorKind",
    "InvalidInputError",
    "KeyedLocks",
    "LedgerError",
    "LedgerOutcome",
    "LockedAverageError",
    "MonthlyLedger",
    "PersistenceError",
]
