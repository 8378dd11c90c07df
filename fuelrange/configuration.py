"""Mini README: Centralised configuration for the fuelrange service.

Structure:
    * FuelRangeSettings - Pydantic settings model read from the environment.
    * get_settings - cached accessor shared by the CLI and web interface.

Every field can be overridden with a ``FUELRANGE_`` prefixed environment
variable or a ``.env`` file. When ``database_url`` is unset the SQL store
falls back to a SQLite file inside ``data_directory``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FuelRangeSettings(BaseSettings):
    """Runtime configuration for the ledger service."""

    model_config = SettingsConfigDict(
        env_prefix="FUELRANGE_",
        env_file=".env",
        case_sensitive=False,
    )

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    data_directory: Path = Field(
        Path("data"),
        description="Directory holding the default SQLite database.",
    )
    store_backend: str = Field(
        "sqlalchemy",
        description="Name of the record store backend registered in the store registry.",
    )
    database_url: Optional[str] = Field(
        None,
        description="SQLAlchemy URL for the record store. Defaults to SQLite in data_directory.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the HTTP service to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Port the HTTP service exposes.",
        ge=1,
        le=65535,
    )
    log_level: str = Field("INFO", description="Root logging level name.")

    @field_validator("data_directory", mode="before")
    @classmethod
    def _expand_path(cls, value: Optional[str | Path]) -> Path:
        """Expand user directories and make sure the directory exists."""

        path = Path(value).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @field_validator("store_backend")
    @classmethod
    def _normalise_backend(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def resolved_database_url(self) -> str:
        """Return the configured database URL or the SQLite default."""

        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_directory / 'fuelrange.db'}"


@lru_cache()
def get_settings() -> FuelRangeSettings:
    """Return cached settings so every module sees the same configuration."""

    return FuelRangeSettings()
