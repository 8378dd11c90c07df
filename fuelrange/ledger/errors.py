"""Mini README: Failure taxonomy and outcome values for the ledger.

Structure:
    * ErrorKind - tag callers branch on.
    * LedgerError and subclasses - raised inside the ledger, one per kind.
    * LedgerOutcome - value returned across the ledger boundary.

Exceptions stay inside ``MonthlyLedger``; its public methods convert them to
``LedgerOutcome.failure`` so callers never need ``try`` blocks. A lookup that
finds nothing is a successful outcome whose ``record`` is ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from ..records import MonthlyRecord


class ErrorKind(str, Enum):
    """Enumerate the reasons a ledger operation can fail."""

    PERSISTENCE = "persistence"
    LOCKED_AVERAGE = "locked_average"
    AVERAGE_NOT_SET = "average_not_set"
    INVALID_INPUT = "invalid_input"


class LedgerError(Exception):
    """Base class for failures raised by ledger operations."""

    kind: ErrorKind = ErrorKind.PERSISTENCE


class PersistenceError(LedgerError):
    """The record store could not read or write a record."""

    kind = ErrorKind.PERSISTENCE


class LockedAverageError(LedgerError):
    """The average was edited after fuel had been added this month."""

    kind = ErrorKind.LOCKED_AVERAGE


class AverageNotSetError(LedgerError):
    """Fuel was logged before an average was set for the month."""

    kind = ErrorKind.AVERAGE_NOT_SET


class InvalidInputError(LedgerError):
    """An operation received an out-of-range month or quantity."""

    kind = ErrorKind.INVALID_INPUT


@dataclass(frozen=True, slots=True)
class LedgerOutcome:
    """Either a record (possibly ``None`` for lookups) or a tagged failure."""

    record: Optional[MonthlyRecord] = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def success(cls, record: Optional[MonthlyRecord]) -> "LedgerOutcome":
        return cls(record=record)

    @classmethod
    def failure(cls, error: LedgerError) -> "LedgerOutcome":
        return cls(error=error.kind, message=str(error))

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def not_found(self) -> bool:
        """True for a successful lookup that matched no record."""

        return self.ok and self.record is None

    def as_dict(self) -> Dict[str, object]:
        if self.ok:
            return {"ok": True, "record": self.record.as_dict() if self.record else None}
        return {"ok": False, "error": self.error.value, "message": self.message}
