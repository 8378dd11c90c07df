"""Mini README: Small helpers shared across fuelrange.

Currently exports calendar arithmetic used when carrying range between
months.
"""

from .calendar import previous_month, validate_month, validate_year

__all__ = ["previous_month", "validate_month", "validate_year"]
