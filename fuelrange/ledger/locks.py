"""Mini README: Per-key mutual exclusion for ledger read-modify-write cycles.

``KeyedLocks`` hands out one ``threading.Lock`` per ``MonthKey``. Entries are
reference counted and dropped when the last holder leaves so long-running
services don't accumulate a lock for every month ever touched.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, List


class KeyedLocks:
    """Serialise work per key while letting distinct keys proceed in parallel."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, List] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        lock = entry[0]
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
