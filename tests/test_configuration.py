"""Mini README: Tests for settings, calendar helpers and the store registry."""

from __future__ import annotations

from pathlib import Path

import pytest

from fuelrange.configuration import FuelRangeSettings
from fuelrange.storage import REGISTRY, InMemoryRecordStore, SqlAlchemyRecordStore, build_store
from fuelrange.utils import previous_month, validate_month, validate_year


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("FUELRANGE_STORE_BACKEND", " Memory ")
    monkeypatch.setenv("FUELRANGE_DATA_DIRECTORY", str(tmp_path / "nested"))
    monkeypatch.setenv("FUELRANGE_INTERFACE_PORT", "9100")

    settings = FuelRangeSettings()

    assert settings.store_backend == "memory"
    assert settings.interface_port == 9100
    assert settings.data_directory.is_dir()


def test_default_database_lives_in_data_directory(tmp_path: Path) -> None:
    settings = FuelRangeSettings(data_directory=tmp_path)

    assert settings.resolved_database_url == f"sqlite:///{tmp_path.resolve() / 'fuelrange.db'}"
    explicit = FuelRangeSettings(data_directory=tmp_path, database_url="sqlite://")
    assert explicit.resolved_database_url == "sqlite://"


def test_registry_lists_builtin_backends() -> None:
    assert {"memory", "sqlalchemy"} <= set(REGISTRY.available_backends())


def test_build_store_uses_configured_backend(tmp_path: Path) -> None:
    memory = build_store(FuelRangeSettings(data_directory=tmp_path, store_backend="memory"))
    sql = build_store(FuelRangeSettings(data_directory=tmp_path, store_backend="sqlalchemy"))

    assert isinstance(memory, InMemoryRecordStore)
    assert isinstance(sql, SqlAlchemyRecordStore)
    assert (tmp_path / "fuelrange.db").exists()
    sql.close()


def test_unknown_backend_raises(tmp_path: Path) -> None:
    with pytest.raises(KeyError):
        build_store(FuelRangeSettings(data_directory=tmp_path, store_backend="redis"))


def test_previous_month_wraps_year() -> None:
    assert previous_month(1, 2024) == (12, 2023)
    assert previous_month(12, 2024) == (11, 2024)
    assert previous_month(2, 2024) == (1, 2024)


@pytest.mark.parametrize("month", [0, 13, 1.5, True])
def test_validate_month_rejects_out_of_range(month: object) -> None:
    with pytest.raises(ValueError):
        validate_month(month)


@pytest.mark.parametrize("year", ["2024", 2024.0, False])
def test_validate_year_rejects_non_integers(year: object) -> None:
    with pytest.raises(ValueError):
        validate_year(year)
