"""Mini README: In-memory record store.

Structure:
    * InMemoryRecordStore - dict-backed store enforcing the month key.

Used by tests and by the ``memory`` backend for throwaway sessions. Every
record handed out is a copy so callers can't mutate stored state behind
the store's back.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional, Tuple

from .base import DuplicateRecordError, RecordStore, StoreError
from .registry import REGISTRY
from ..logging_utils import get_logger
from ..records import MonthKey, MonthlyRecord, NewMonthlyRecord, utcnow

LOGGER = get_logger(__name__)


class InMemoryRecordStore(RecordStore):
    """Keep ledger records in process memory."""

    backend_name = "memory"

    def __init__(self, records: Optional[Iterable[MonthlyRecord]] = None) -> None:
        self._records: Dict[str, MonthlyRecord] = {}
        self._index: Dict[Tuple[str, str, int, int], str] = {}
        self._sequence = 0
        self._mutex = threading.Lock()
        for record in records or []:
            self._register(record.copy())
        LOGGER.debug("In-memory store initialised with %s records", len(self._records))

    def _next_id(self) -> str:
        self._sequence += 1
        return f"rec_{self._sequence:04d}"

    def _register(self, record: MonthlyRecord) -> None:
        key = record.key.as_tuple()
        if key in self._index:
            raise DuplicateRecordError(record.key)
        if record.id in self._records:
            raise StoreError(f"Record id {record.id} already exists")
        self._records[record.id] = record
        self._index[key] = record.id

    def find_one(self, key: MonthKey) -> Optional[MonthlyRecord]:
        with self._mutex:
            record_id = self._index.get(key.as_tuple())
            if record_id is None:
                return None
            return self._records[record_id].copy()

    def insert(self, record: NewMonthlyRecord) -> MonthlyRecord:
        with self._mutex:
            stored = MonthlyRecord.from_new(self._next_id(), record)
            self._register(stored)
            LOGGER.debug("Inserted %s for %s", stored.id, stored.key)
            return stored.copy()

    def update(self, record_id: str, patch: Dict[str, object]) -> MonthlyRecord:
        with self._mutex:
            current = self._records.get(record_id)
            if current is None:
                raise StoreError(f"Record {record_id} not found")
            patch = dict(patch)
            patch.setdefault("updated_at", utcnow())
            try:
                updated = current.with_patch(patch)
            except ValueError as error:
                raise StoreError(str(error)) from error
            self._records[record_id] = updated
            return updated.copy()

    def list_records(self) -> List[MonthlyRecord]:
        """Return stored records ordered by key, oldest month first."""

        with self._mutex:
            records = [record.copy() for record in self._records.values()]
        return sorted(
            records, key=lambda record: (record.user_id, record.label_id, record.year, record.month)
        )


REGISTRY.register("memory", lambda settings: InMemoryRecordStore())
