"""Mini README: Registry mapping backend names to record store factories.

Structure:
    * StoreRegistry - registration and construction of ``RecordStore`` objects.
    * REGISTRY - process-wide registry the built-in backends register with.
    * build_store - construct the backend selected in the settings.

Factories receive the ``FuelRangeSettings`` instance so a backend can read
whatever connection details it needs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, Iterable, Optional

from ..logging_utils import get_logger

if TYPE_CHECKING:
    from ..configuration import FuelRangeSettings
    from .base import RecordStore

LOGGER = get_logger(__name__)

StoreFactory = Callable[["FuelRangeSettings"], "RecordStore"]


class StoreRegistry:
    """Map backend identifiers to store factories."""

    def __init__(self) -> None:
        self._factories: Dict[str, StoreFactory] = {}

    def register(self, name: str, factory: StoreFactory) -> None:
        identifier = name.lower()
        LOGGER.debug("Registering store backend '%s'", identifier)
        self._factories[identifier] = factory

    def available_backends(self) -> Iterable[str]:
        return sorted(self._factories.keys())

    def create(self, name: str, settings: "FuelRangeSettings") -> "RecordStore":
        """Instantiate the backend registered under ``name``."""

        factory = self._factories.get(name.lower())
        if not factory:
            raise KeyError(f"Unknown store backend '{name}'")
        LOGGER.info("Creating store backend '%s'", name)
        return factory(settings)


REGISTRY = StoreRegistry()


def build_store(settings: Optional["FuelRangeSettings"] = None) -> "RecordStore":
    """Create the record store named by ``settings.store_backend``."""

    if settings is None:
        from ..configuration import get_settings

        settings = get_settings()
    return REGISTRY.create(settings.store_backend, settings)
