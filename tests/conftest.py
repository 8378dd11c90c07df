"""Mini README: Shared fixtures for the ledger tests.

Structure:
    * store - empty in-memory record store.
    * ledger - ``MonthlyLedger`` over that store.
"""

from __future__ import annotations

import pytest

from fuelrange.ledger import MonthlyLedger
from fuelrange.storage import InMemoryRecordStore


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def ledger(store: InMemoryRecordStore) -> MonthlyLedger:
    return MonthlyLedger(store)
