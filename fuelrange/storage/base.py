"""Mini README: Abstract record store used by the monthly ledger.

Structure:
    * StoreError - any failure talking to the backing store.
    * DuplicateRecordError - insert hit the (user, label, month, year) key.
    * RecordStore - interface every backend implements.

Backends register a factory with ``storage.registry.REGISTRY`` so the
configured ``store_backend`` name can be resolved at start-up.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..logging_utils import get_logger
from ..records import MonthKey, MonthlyRecord, NewMonthlyRecord

LOGGER = get_logger(__name__)


class StoreError(Exception):
    """Raised when a store read or write fails."""


class DuplicateRecordError(StoreError):
    """Raised when an insert violates the composite month key."""

    def __init__(self, key: MonthKey) -> None:
        super().__init__(f"Record for {key} already exists")
        self.key = key


class RecordStore(ABC):
    """Persistence interface for monthly ledger records."""

    backend_name: str = "generic"

    @abstractmethod
    def find_one(self, key: MonthKey) -> Optional[MonthlyRecord]:
        """Return the record stored under ``key`` or ``None``."""

    @abstractmethod
    def insert(self, record: NewMonthlyRecord) -> MonthlyRecord:
        """Persist a new record and return it with id and timestamps."""

    @abstractmethod
    def update(self, record_id: str, patch: Dict[str, object]) -> MonthlyRecord:
        """Apply ``patch`` to the record with ``record_id`` and return it."""

    def close(self) -> None:
        """Release backend resources. Stores without any keep the default."""

    def metadata(self) -> Dict[str, str]:
        """Return diagnostic metadata for health endpoints."""

        return {"backend": self.backend_name}
