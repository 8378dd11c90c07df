"""Mini README: FastAPI router exposing the monthly range ledger.

Structure:
    * create_application - application factory wiring routes to a ledger.
    * _respond - translate a ``LedgerOutcome`` into a JSON response.

Routes address a month as ``/months/{user_id}/{label_id}/{year}/{month}``.
Ledger routes are plain functions so Starlette runs them in its threadpool
while they wait on the per-month lock and the store.
Rule violations map to 409, bad input to 400 and store failures to 503 so
HTTP clients can branch on the status code the same way Python callers
branch on ``ErrorKind``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from fastapi import FastAPI, Form, HTTPException
from fastapi.responses import JSONResponse

from ..configuration import get_settings
from ..ledger import ErrorKind, LedgerOutcome, MonthlyLedger
from ..logging_utils import configure_root_logger, get_logger
from ..storage import build_store

LOGGER = get_logger(__name__)

STATUS_BY_ERROR: Dict[ErrorKind, int] = {
    ErrorKind.LOCKED_AVERAGE: 409,
    ErrorKind.AVERAGE_NOT_SET: 409,
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.PERSISTENCE: 503,
}


def _respond(outcome: LedgerOutcome) -> JSONResponse:
    if not outcome.ok:
        raise HTTPException(
            status_code=STATUS_BY_ERROR[outcome.error],
            detail={"error": outcome.error.value, "message": outcome.message},
        )
    if outcome.record is None:
        raise HTTPException(status_code=404, detail="Month has no record yet")
    return JSONResponse(outcome.record.as_dict())


def create_application(ledger: Optional[MonthlyLedger] = None) -> FastAPI:
    """Create the FastAPI application, building a ledger from settings if none is given."""

    if ledger is None:
        settings = get_settings()
        configure_root_logger(settings.log_level)
        ledger = MonthlyLedger(build_store(settings))

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        ledger.store.close()

    app = FastAPI(title="Fuel Range Ledger", version="0.1.0", lifespan=lifespan)
    month_path = "/months/{user_id}/{label_id}/{year}/{month}"

    @app.get("/health")
    async def health() -> JSONResponse:
        """Report the active store backend."""

        return JSONResponse({"status": "ok", "store": ledger.store.metadata()})

    @app.get(month_path)
    def get_month(user_id: str, label_id: str, year: int, month: int) -> JSONResponse:
        """Return a month's record without creating it."""

        return _respond(ledger.get_month(user_id, label_id, month, year))

    @app.post(f"{month_path}/ensure")
    def ensure_month(user_id: str, label_id: str, year: int, month: int) -> JSONResponse:
        """Return the month's record, opening it from last month's balance if needed."""

        outcome = ledger.ensure_month(user_id, label_id, month, year)
        LOGGER.debug("ensure_month %s/%s %s-%s -> ok=%s", user_id, label_id, year, month, outcome.ok)
        return _respond(outcome)

    @app.post(f"{month_path}/average")
    def set_average(
        user_id: str, label_id: str, year: int, month: int, average: float = Form(...)
    ) -> JSONResponse:
        """Set the diesel average for an unlocked month."""

        return _respond(ledger.set_average(user_id, label_id, month, year, average))

    @app.post(f"{month_path}/fuel")
    def add_fuel(
        user_id: str, label_id: str, year: int, month: int, liters: float = Form(...)
    ) -> JSONResponse:
        """Log diesel added during the month."""

        outcome = ledger.add_fuel(user_id, label_id, month, year, liters)
        if outcome.ok:
            LOGGER.info("Logged %.2f L for %s/%s %s-%s", liters, user_id, label_id, year, month)
        return _respond(outcome)

    @app.post(f"{month_path}/distance")
    def add_distance(
        user_id: str, label_id: str, year: int, month: int, kilometers: float = Form(...)
    ) -> JSONResponse:
        """Log kilometres driven during the month."""

        outcome = ledger.add_distance(user_id, label_id, month, year, kilometers)
        if outcome.ok:
            LOGGER.info("Logged %.1f km for %s/%s %s-%s", kilometers, user_id, label_id, year, month)
        return _respond(outcome)

    return app
