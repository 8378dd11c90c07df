"""Mini README: SQLAlchemy-backed record store.

Structure:
    * Base / MonthlyFuelRow - ORM mapping of the ``monthly_fuel_data`` table.
    * SqlAlchemyRecordStore - ``RecordStore`` implementation over an engine.

The table carries a unique constraint on (user_id, label_id, month, year),
which is what keeps concurrent ``ensure_month`` calls from different
processes from creating two rows for one month. ``IntegrityError`` is
reported as ``DuplicateRecordError`` so the ledger can re-read the winner.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from .base import DuplicateRecordError, RecordStore, StoreError
from .registry import REGISTRY
from ..logging_utils import get_logger
from ..records import MUTABLE_FIELDS, MonthKey, MonthlyRecord, NewMonthlyRecord, utcnow

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    pass


class MonthlyFuelRow(Base):
    """One persisted month for a label."""

    __tablename__ = "monthly_fuel_data"
    __table_args__ = (
        UniqueConstraint("user_id", "label_id", "month", "year", name="uix_monthly_fuel_key"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    label_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    diesel_average: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    carried_range: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_diesel_added: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_km_driven: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    remaining_range: Mapped[Optional[float]] = mapped_column(Float, nullable=True, default=0.0)
    is_average_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def to_record(self) -> MonthlyRecord:
        return MonthlyRecord(
            id=self.id,
            user_id=self.user_id,
            label_id=self.label_id,
            month=self.month,
            year=self.year,
            diesel_average=self.diesel_average or 0.0,
            carried_range=self.carried_range or 0.0,
            total_diesel_added=self.total_diesel_added or 0.0,
            total_km_driven=self.total_km_driven or 0.0,
            remaining_range=self.remaining_range or 0.0,
            is_average_locked=bool(self.is_average_locked),
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
        )


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back out.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlAlchemyRecordStore(RecordStore):
    """Store ledger records in any database SQLAlchemy can reach."""

    backend_name = "sqlalchemy"

    def __init__(self, url: str = "sqlite:///:memory:", *, engine: Optional[Engine] = None) -> None:
        try:
            self._engine = engine or create_engine(url)
            Base.metadata.create_all(self._engine)
        except SQLAlchemyError as error:
            raise StoreError(f"Could not open record store at {url}: {error}") from error
        self._sessions = sessionmaker(self._engine, expire_on_commit=False)
        LOGGER.debug("SQL record store ready on %s", self._engine.url)

    def _session(self) -> Session:
        return self._sessions()

    def find_one(self, key: MonthKey) -> Optional[MonthlyRecord]:
        statement = select(MonthlyFuelRow).where(
            MonthlyFuelRow.user_id == key.user_id,
            MonthlyFuelRow.label_id == key.label_id,
            MonthlyFuelRow.month == key.month,
            MonthlyFuelRow.year == key.year,
        )
        try:
            with self._session() as session:
                row = session.execute(statement).scalar_one_or_none()
                return row.to_record() if row else None
        except SQLAlchemyError as error:
            raise StoreError(f"Lookup of {key} failed: {error}") from error

    def insert(self, record: NewMonthlyRecord) -> MonthlyRecord:
        now = utcnow()
        row = MonthlyFuelRow(
            id=uuid.uuid4().hex,
            user_id=record.user_id,
            label_id=record.label_id,
            month=record.month,
            year=record.year,
            diesel_average=record.diesel_average,
            carried_range=record.carried_range,
            total_diesel_added=record.total_diesel_added,
            total_km_driven=record.total_km_driven,
            remaining_range=record.remaining_range,
            is_average_locked=record.is_average_locked,
            created_at=now,
            updated_at=now,
        )
        try:
            with self._session() as session, session.begin():
                session.add(row)
        except IntegrityError as error:
            raise DuplicateRecordError(record.key) from error
        except SQLAlchemyError as error:
            raise StoreError(f"Insert of {record.key} failed: {error}") from error
        LOGGER.debug("Inserted %s for %s", row.id, record.key)
        return row.to_record()

    def update(self, record_id: str, patch: Dict[str, object]) -> MonthlyRecord:
        unknown = set(patch) - MUTABLE_FIELDS
        if unknown:
            raise StoreError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        values = dict(patch)
        values.setdefault("updated_at", utcnow())
        try:
            with self._session() as session, session.begin():
                row = session.get(MonthlyFuelRow, record_id)
                if row is None:
                    raise StoreError(f"Record {record_id} not found")
                for name, value in values.items():
                    setattr(row, name, value)
            return row.to_record()
        except SQLAlchemyError as error:
            raise StoreError(f"Update of {record_id} failed: {error}") from error

    def close(self) -> None:
        self._engine.dispose()

    def metadata(self) -> Dict[str, str]:
        return {"backend": self.backend_name, "url": self._engine.url.render_as_string(hide_password=True)}


REGISTRY.register(
    "sqlalchemy", lambda settings: SqlAlchemyRecordStore(settings.resolved_database_url)
)
