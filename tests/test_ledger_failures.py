"""Mini README: Tests for store failures and concurrent access.

Structure:
    * FlakyStore - in-memory store that raises ``StoreError`` on demand.
    * SlowStore - widens the read-modify-write window to expose races.
    * RacingStore - simulates another process inserting the same month first.
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional

import pytest

from fuelrange.ledger import ErrorKind, KeyedLocks, MonthlyLedger
from fuelrange.records import MonthKey, MonthlyRecord, NewMonthlyRecord
from fuelrange.storage import InMemoryRecordStore, StoreError


class FlakyStore(InMemoryRecordStore):
    def __init__(self) -> None:
        super().__init__()
        self.failing: set = set()

    def find_one(self, key: MonthKey) -> Optional[MonthlyRecord]:
        if "find_one" in self.failing:
            raise StoreError("connection reset")
        return super().find_one(key)

    def insert(self, record: NewMonthlyRecord) -> MonthlyRecord:
        if "insert" in self.failing:
            raise StoreError("timeout")
        return super().insert(record)

    def update(self, record_id: str, patch: Dict[str, object]) -> MonthlyRecord:
        if "update" in self.failing:
            raise StoreError("read-only replica")
        return super().update(record_id, patch)


class SlowStore(InMemoryRecordStore):
    def find_one(self, key: MonthKey) -> Optional[MonthlyRecord]:
        record = super().find_one(key)
        time.sleep(0.001)
        return record


class RacingStore(InMemoryRecordStore):
    """Lets a competing writer insert the month between our lookup and insert."""

    def __init__(self) -> None:
        super().__init__()
        self.raced = False

    def insert(self, record: NewMonthlyRecord) -> MonthlyRecord:
        if not self.raced:
            self.raced = True
            competitor = NewMonthlyRecord.opening(record.key, 99.0)
            super().insert(competitor)
        return super().insert(record)


@pytest.mark.parametrize("method", ["find_one", "insert"])
def test_store_failure_during_ensure_is_reported(method: str) -> None:
    store = FlakyStore()
    store.failing.add(method)
    ledger = MonthlyLedger(store)

    outcome = ledger.ensure_month("user", "truck", 3, 2024)

    assert outcome.error is ErrorKind.PERSISTENCE
    assert outcome.message


def test_failed_update_leaves_record_untouched() -> None:
    store = FlakyStore()
    ledger = MonthlyLedger(store)
    ledger.set_average("user", "truck", 3, 2024, 10)
    store.failing.add("update")

    outcome = ledger.add_fuel("user", "truck", 3, 2024, 5)

    assert outcome.error is ErrorKind.PERSISTENCE
    store.failing.clear()
    record = ledger.get_month("user", "truck", 3, 2024).record
    assert record.total_diesel_added == 0
    assert record.is_average_locked is False


def test_get_month_reports_store_failure_not_absence() -> None:
    store = FlakyStore()
    store.failing.add("find_one")

    outcome = MonthlyLedger(store).get_month("user", "truck", 3, 2024)

    assert not outcome.ok
    assert not outcome.not_found
    assert outcome.error is ErrorKind.PERSISTENCE


def test_insert_conflict_returns_existing_record() -> None:
    """Losing the create race yields the winner's record, not an error."""

    store = RacingStore()
    outcome = MonthlyLedger(store).ensure_month("user", "truck", 3, 2024)

    assert outcome.ok
    assert outcome.record.carried_range == 99.0
    assert len(store.list_records()) == 1


def test_concurrent_updates_on_one_month_are_not_lost() -> None:
    store = SlowStore()
    ledger = MonthlyLedger(store)
    ledger.set_average("user", "truck", 3, 2024, 10)
    ledger.add_fuel("user", "truck", 3, 2024, 100)

    def work(index: int) -> None:
        if index % 2:
            ledger.add_fuel("user", "truck", 3, 2024, 1)
        else:
            ledger.add_distance("user", "truck", 3, 2024, 5)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(work, range(40)))

    record = ledger.get_month("user", "truck", 3, 2024).record
    assert record.total_diesel_added == pytest.approx(120.0)
    assert record.total_km_driven == pytest.approx(100.0)
    assert record.remaining_range == pytest.approx(1000.0 + 200.0 - 100.0)


def test_concurrent_ensure_creates_a_single_record() -> None:
    store = SlowStore()
    ledger = MonthlyLedger(store)
    barrier = threading.Barrier(6)

    def open_month(_: int) -> str:
        barrier.wait()
        return ledger.ensure_month("user", "truck", 3, 2024).record.id

    with ThreadPoolExecutor(max_workers=6) as pool:
        ids = set(pool.map(open_month, range(6)))

    assert len(ids) == 1
    assert len(store.list_records()) == 1


def test_keyed_locks_release_entries() -> None:
    locks = KeyedLocks()
    key = MonthKey("user", "truck", 3, 2024)

    with locks.hold(key):
        assert len(locks) == 1

    assert len(locks) == 0
