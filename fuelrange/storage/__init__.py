"""Mini README: Record store subsystem for the monthly ledger.

``base`` defines the store interface and its errors, ``registry`` resolves
backend names from configuration, and ``memory`` / ``sqlalchemy_store``
provide the built-in backends. Importing the package registers both.
"""

from .base import DuplicateRecordError, RecordStore, StoreError
from .registry import REGISTRY, StoreRegistry, build_store
from .memory import InMemoryRecordStore
from .sqlalchemy_store import SqlAlchemyRecordStore

__all__ = [
    "DuplicateRecordError",
    "InMemoryRecordStore",
    "REGISTRY",
    "RecordStore",
    "SqlAlchemyRecordStore",
    "StoreError",
    "StoreRegistry",
    "build_store",
]
