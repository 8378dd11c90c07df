"""Mini README: Record types persisted by the monthly range ledger.

Structure:
    * MonthKey - composite identity (user, label, month, year) of a record.
    * NewMonthlyRecord - payload handed to ``RecordStore.insert``.
    * MonthlyRecord - stored record including id and timestamps.

Records are plain dataclasses so that stores can copy and rebuild them
freely. ``MonthlyRecord.as_dict`` produces the JSON shape served by the web
interface and the CLI.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from .utils.calendar import previous_month, validate_month, validate_year

MUTABLE_FIELDS = frozenset(
    {
        "diesel_average",
        "total_diesel_added",
        "total_km_driven",
        "remaining_range",
        "is_average_locked",
        "updated_at",
    }
)


def utcnow() -> datetime:
    """Timezone-aware current time used for record timestamps."""

    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class MonthKey:
    """Identify one ledger month for one label of one user."""

    user_id: str
    label_id: str
    month: int
    year: int

    def __post_init__(self) -> None:
        validate_month(self.month)
        validate_year(self.year)

    def previous(self) -> "MonthKey":
        """Return the key of the chronologically preceding month."""

        month, year = previous_month(self.month, self.year)
        return MonthKey(self.user_id, self.label_id, month, year)

    def as_tuple(self) -> Tuple[str, str, int, int]:
        return (self.user_id, self.label_id, self.month, self.year)

    def __str__(self) -> str:
        return f"{self.user_id}/{self.label_id}/{self.year:04d}-{self.month:02d}"


@dataclass(slots=True)
class NewMonthlyRecord:
    """Initial values of a month that has not been persisted yet."""

    user_id: str
    label_id: str
    month: int
    year: int
    carried_range: float = 0.0
    diesel_average: float = 0.0
    total_diesel_added: float = 0.0
    total_km_driven: float = 0.0
    remaining_range: float = 0.0
    is_average_locked: bool = False

    @classmethod
    def opening(cls, key: MonthKey, carried_range: float) -> "NewMonthlyRecord":
        """Build a fresh month seeded with the range carried from last month."""

        return cls(
            user_id=key.user_id,
            label_id=key.label_id,
            month=key.month,
            year=key.year,
            carried_range=carried_range,
            remaining_range=carried_range,
        )

    @property
    def key(self) -> MonthKey:
        return MonthKey(self.user_id, self.label_id, self.month, self.year)


@dataclass(slots=True)
class MonthlyRecord:
    """Persisted monthly balance for a (user, label, month) tuple."""

    id: str
    user_id: str
    label_id: str
    month: int
    year: int
    diesel_average: float
    carried_range: float
    total_diesel_added: float
    total_km_driven: float
    remaining_range: float
    is_average_locked: bool
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_new(
        cls, record_id: str, new: NewMonthlyRecord, *, now: Optional[datetime] = None
    ) -> "MonthlyRecord":
        """Materialise an inserted record from its creation payload."""

        timestamp = now or utcnow()
        return cls(id=record_id, created_at=timestamp, updated_at=timestamp, **asdict(new))

    @property
    def key(self) -> MonthKey:
        return MonthKey(self.user_id, self.label_id, self.month, self.year)

    def with_patch(self, patch: Dict[str, object]) -> "MonthlyRecord":
        """Return a copy with ``patch`` applied, rejecting identity fields."""

        unknown = set(patch) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        return replace(self, **patch)

    def copy(self) -> "MonthlyRecord":
        return replace(self)

    def as_dict(self) -> Dict[str, object]:
        """Export the record with serialisable values."""

        return {
            "id": self.id,
            "user_id": self.user_id,
            "label_id": self.label_id,
            "month": self.month,
            "year": self.year,
            "diesel_average": self.diesel_average,
            "carried_range": self.carried_range,
            "total_diesel_added": self.total_diesel_added,
            "total_km_driven": self.total_km_driven,
            "remaining_range": self.remaining_range,
            "is_average_locked": self.is_average_locked,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
