"""Mini README: Command line entry point for the fuelrange ledger.

``run`` starts the FastAPI service with uvicorn. The remaining commands call
the ledger directly against the configured store and print the resulting
record as JSON, exiting with status 1 and the error kind when an operation
is rejected.
"""

from __future__ import annotations

import json
from typing import Callable

import typer
import uvicorn

from fuelrange.configuration import get_settings
from fuelrange.ledger import LedgerOutcome, MonthlyLedger
from fuelrange.logging_utils import configure_root_logger
from fuelrange.storage import build_store

cli = typer.Typer(help="Track monthly diesel range per label.")


def _with_ledger(action: Callable[[MonthlyLedger], LedgerOutcome]) -> None:
    settings = get_settings()
    configure_root_logger(settings.log_level)
    store = build_store(settings)
    try:
        outcome = action(MonthlyLedger(store))
    finally:
        store.close()
    if not outcome.ok:
        typer.echo(f"{outcome.error.value}: {outcome.message}", err=True)
        raise typer.Exit(code=1)
    if outcome.record is None:
        typer.echo("No record for this month yet.")
        return
    typer.echo(json.dumps(outcome.record.as_dict(), indent=2))


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the HTTP service using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(settings.log_level)

    # Browsers can't open the 0.0.0.0 wildcard, so point at loopback instead.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting fuelrange on {effective_host}:{effective_port} "
        f"using the '{settings.store_backend}' store.\n"
        f"API docs at http://{browser_host}:{effective_port}/docs"
    )
    uvicorn.run(
        "fuelrange.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def show(user_id: str, label_id: str, month: int, year: int) -> None:
    """Print a month's record without creating it."""

    _with_ledger(lambda ledger: ledger.get_month(user_id, label_id, month, year))


@cli.command()
def ensure(user_id: str, label_id: str, month: int, year: int) -> None:
    """Open the month if needed and print its record."""

    _with_ledger(lambda ledger: ledger.ensure_month(user_id, label_id, month, year))


@cli.command("set-average")
def set_average(
    user_id: str,
    label_id: str,
    month: int,
    year: int,
    average: float = typer.Argument(..., help="Range units per litre."),
) -> None:
    """Set the month's diesel average."""

    _with_ledger(lambda ledger: ledger.set_average(user_id, label_id, month, year, average))


@cli.command("add-fuel")
def add_fuel(
    user_id: str,
    label_id: str,
    month: int,
    year: int,
    liters: float = typer.Argument(..., help="Litres of diesel added."),
) -> None:
    """Log diesel added and lock the month's average."""

    _with_ledger(lambda ledger: ledger.add_fuel(user_id, label_id, month, year, liters))


@cli.command("add-distance")
def add_distance(
    user_id: str,
    label_id: str,
    month: int,
    year: int,
    kilometers: float = typer.Argument(..., help="Kilometres driven."),
) -> None:
    """Log kilometres driven."""

    _with_ledger(lambda ledger: ledger.add_distance(user_id, label_id, month, year, kilometers))


if __name__ == "__main__":
    cli()
