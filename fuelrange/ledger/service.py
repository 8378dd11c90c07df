"""Mini README: Monthly range ledger.

Structure:
    * MonthlyLedger - get-or-create, average, fuel and distance operations.

Each (user, label, month, year) owns one record. A month is created lazily
with the previous month's ``remaining_range`` carried forward. Adding fuel
converts litres to range with the month's ``diesel_average`` and locks that
average for good. Driving debits range, never below zero.

Every public method returns a ``LedgerOutcome``. Mutations hold the month's
key lock for their whole read-modify-write so concurrent calls on the same
month can't lose updates; different months run in parallel.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, Optional

from .errors import (
    AverageNotSetError,
    InvalidInputError,
    LedgerError,
    LedgerOutcome,
    LockedAverageError,
    PersistenceError,
)
from .locks import KeyedLocks
from ..logging_utils import get_logger
from ..records import MonthKey, MonthlyRecord, NewMonthlyRecord
from ..storage.base import DuplicateRecordError, RecordStore, StoreError

LOGGER = get_logger(__name__)


def _make_key(user_id: str, label_id: str, month: int, year: int) -> MonthKey:
    try:
        return MonthKey(str(user_id), str(label_id), month, year)
    except ValueError as error:
        raise InvalidInputError(str(error)) from error


def _require_number(name: str, value: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    return float(value)


class MonthlyLedger:
    """Maintain per-month diesel range balances on top of a record store."""

    def __init__(self, store: RecordStore, *, locks: Optional[KeyedLocks] = None) -> None:
        self._store = store
        self._locks = locks if locks is not None else KeyedLocks()
        LOGGER.debug("Monthly ledger initialised on %s store", store.backend_name)

    @property
    def store(self) -> RecordStore:
        return self._store

    # Public operations ------------------------------------------------

    def ensure_month(self, user_id: str, label_id: str, month: int, year: int) -> LedgerOutcome:
        """Return the month's record, creating it from last month's balance if needed."""

        def operation() -> MonthlyRecord:
            key = _make_key(user_id, label_id, month, year)
            with self._locks.hold(key):
                return self._ensure(key)

        return self._run("ensure_month", operation)

    def get_month(self, user_id: str, label_id: str, month: int, year: int) -> LedgerOutcome:
        """Look a month up without creating it; ``record`` is ``None`` when absent."""

        def operation() -> Optional[MonthlyRecord]:
            return self._find(_make_key(user_id, label_id, month, year))

        return self._run("get_month", operation)

    def set_average(
        self, user_id: str, label_id: str, month: int, year: int, average: float
    ) -> LedgerOutcome:
        """Set the diesel average while the month is still unlocked."""

        def operation() -> MonthlyRecord:
            key = _make_key(user_id, label_id, month, year)
            value = _require_number("average", average)
            if value < 0:
                raise InvalidInputError(f"average must not be negative, got {value}")
            with self._locks.hold(key):
                record = self._ensure(key)
                if record.is_average_locked:
                    raise LockedAverageError(
                        f"Average for {key} is locked after diesel has been added this month"
                    )
                return self._update(record, {"diesel_average": value})

        return self._run("set_average", operation)

    def add_fuel(
        self, user_id: str, label_id: str, month: int, year: int, liters: float
    ) -> LedgerOutcome:
        """Log diesel, crediting ``liters * diesel_average`` and locking the average."""

        def operation() -> MonthlyRecord:
            key = _make_key(user_id, label_id, month, year)
            amount = _require_number("liters", liters)
            if amount <= 0:
                raise InvalidInputError(f"liters must be positive, got {amount}")
            with self._locks.hold(key):
                record = self._ensure(key)
                if record.diesel_average == 0:
                    raise AverageNotSetError(f"Set an average for {key} before adding diesel")
                added_range = amount * record.diesel_average
                return self._update(
                    record,
                    {
                        "total_diesel_added": record.total_diesel_added + amount,
                        "remaining_range": record.remaining_range + added_range,
                        "is_average_locked": True,
                    },
                )

        return self._run("add_fuel", operation)

    def add_distance(
        self, user_id: str, label_id: str, month: int, year: int, kilometers: float
    ) -> LedgerOutcome:
        """Log kilometres driven, debiting range down to a floor of zero."""

        def operation() -> MonthlyRecord:
            key = _make_key(user_id, label_id, month, year)
            distance = _require_number("kilometers", kilometers)
            if distance < 0:
                raise InvalidInputError(f"kilometers must not be negative, got {distance}")
            with self._locks.hold(key):
                record = self._ensure(key)
                return self._update(
                    record,
                    {
                        "total_km_driven": record.total_km_driven + distance,
                        "remaining_range": max(0.0, record.remaining_range - distance),
                    },
                )

        return self._run("add_distance", operation)

    # Internals --------------------------------------------------------

    def _run(self, name: str, operation: Callable[[], Optional[MonthlyRecord]]) -> LedgerOutcome:
        try:
            return LedgerOutcome.success(operation())
        except LedgerError as error:
            LOGGER.warning("%s rejected (%s): %s", name, error.kind.value, error)
            return LedgerOutcome.failure(error)

    def _find(self, key: MonthKey) -> Optional[MonthlyRecord]:
        try:
            return self._store.find_one(key)
        except StoreError as error:
            raise PersistenceError(str(error)) from error

    def _ensure(self, key: MonthKey) -> MonthlyRecord:
        existing = self._find(key)
        if existing is not None:
            return existing

        previous = self._find(key.previous())
        carried = (previous.remaining_range or 0.0) if previous else 0.0
        try:
            created = self._store.insert(NewMonthlyRecord.opening(key, carried))
        except DuplicateRecordError:
            # Another writer created the month first.
            winner = self._find(key)
            if winner is None:
                raise PersistenceError(f"Record for {key} vanished after insert conflict")
            return winner
        except StoreError as error:
            raise PersistenceError(str(error)) from error
        LOGGER.info("Opened month %s carrying %.2f range", key, carried)
        return created

    def _update(self, record: MonthlyRecord, patch: Dict[str, object]) -> MonthlyRecord:
        try:
            updated = self._store.update(record.id, patch)
        except StoreError as error:
            raise PersistenceError(str(error)) from error
        LOGGER.debug("Updated %s: %s", record.key, patch)
        return updated
