"""Mini README: Calendar month arithmetic for the monthly ledger.

Months are plain ``(month, year)`` integers rather than dates because ledger
records are keyed by calendar month, not by day.
"""

from __future__ import annotations

from typing import Tuple


def validate_month(month: int) -> int:
    """Return ``month`` unchanged or raise ``ValueError`` outside 1-12."""

    if isinstance(month, bool) or not isinstance(month, int):
        raise ValueError(f"Month must be an integer, got {month!r}")
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return month


def validate_year(year: int) -> int:
    """Return ``year`` unchanged or raise ``ValueError`` if it is not an integer."""

    if isinstance(year, bool) or not isinstance(year, int):
        raise ValueError(f"Year must be an integer, got {year!r}")
    return year


def previous_month(month: int, year: int) -> Tuple[int, int]:
    """Return the ``(month, year)`` immediately before the given month.

    January rolls back to December of the previous year.
    """

    validate_month(month)
    validate_year(year)
    if month == 1:
        return 12, year - 1
    return month - 1, year
