"""Mini README: Core package initializer for the fuelrange ledger service.

The package tracks diesel added and kilometres driven per label and month,
keeping a carried-forward range balance. Subpackages:

    * ledger - the monthly range ledger and its record/outcome types.
    * storage - record store interface plus in-memory and SQL backends.
    * interface - FastAPI router exposing ledger operations.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
