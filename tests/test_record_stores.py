"""Mini README: Tests shared by the in-memory and SQLAlchemy record stores.

Both backends run the same checks through the ``backend`` fixture, plus a
few SQL specific cases such as persistence across store instances.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from fuelrange.ledger import MonthlyLedger
from fuelrange.records import MonthKey, NewMonthlyRecord
from fuelrange.storage import (
    DuplicateRecordError,
    InMemoryRecordStore,
    RecordStore,
    SqlAlchemyRecordStore,
    StoreError,
)

KEY = MonthKey("user", "truck", 3, 2024)


@pytest.fixture(params=["memory", "sqlalchemy"])
def backend(request: pytest.FixtureRequest, tmp_path: Path) -> RecordStore:
    if request.param == "memory":
        store: RecordStore = InMemoryRecordStore()
    else:
        store = SqlAlchemyRecordStore(f"sqlite:///{tmp_path / 'ledger.db'}")
    yield store
    store.close()


def test_insert_then_find(backend: RecordStore) -> None:
    inserted = backend.insert(NewMonthlyRecord.opening(KEY, 42.0))
    found = backend.find_one(KEY)

    assert found is not None
    assert found.id == inserted.id
    assert found.carried_range == 42.0
    assert found.remaining_range == 42.0
    assert found.created_at.tzinfo is not None


def test_find_missing_returns_none(backend: RecordStore) -> None:
    assert backend.find_one(KEY) is None


def test_duplicate_key_is_rejected(backend: RecordStore) -> None:
    backend.insert(NewMonthlyRecord.opening(KEY, 0.0))

    with pytest.raises(DuplicateRecordError):
        backend.insert(NewMonthlyRecord.opening(KEY, 5.0))


def test_update_applies_patch(backend: RecordStore) -> None:
    inserted = backend.insert(NewMonthlyRecord.opening(KEY, 0.0))

    updated = backend.update(inserted.id, {"diesel_average": 9.5, "is_average_locked": True})

    assert updated.diesel_average == 9.5
    assert updated.is_average_locked is True
    assert backend.find_one(KEY).diesel_average == 9.5
    assert updated.updated_at >= inserted.updated_at


def test_update_rejects_identity_fields(backend: RecordStore) -> None:
    inserted = backend.insert(NewMonthlyRecord.opening(KEY, 0.0))

    with pytest.raises(StoreError):
        backend.update(inserted.id, {"carried_range": 100.0})


def test_update_unknown_record_fails(backend: RecordStore) -> None:
    with pytest.raises(StoreError):
        backend.update("missing", {"diesel_average": 1.0})


def test_memory_store_hands_out_copies() -> None:
    store = InMemoryRecordStore()
    record = store.insert(NewMonthlyRecord.opening(KEY, 0.0))
    record.remaining_range = 1_000.0

    assert store.find_one(KEY).remaining_range == 0.0


def test_sqlalchemy_store_persists_between_instances(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'ledger.db'}"
    first = MonthlyLedger(SqlAlchemyRecordStore(url))
    first.set_average("user", "truck", 12, 2023, 10)
    first.add_fuel("user", "truck", 12, 2023, 4)
    first.store.close()

    second = MonthlyLedger(SqlAlchemyRecordStore(url))
    january = second.ensure_month("user", "truck", 1, 2024).record

    assert january.carried_range == pytest.approx(40.0)
    assert second.get_month("user", "truck", 12, 2023).record.is_average_locked is True
    second.store.close()


def test_sqlalchemy_store_wraps_bad_url() -> None:
    with pytest.raises(StoreError):
        SqlAlchemyRecordStore("sqlite:////nonexistent-dir/for/sure/ledger.db")
