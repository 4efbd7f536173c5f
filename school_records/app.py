"""FastAPI application exposing the school records store."""
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, List

from fastapi import Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .config import APP_ENV, LOG_LEVEL
from .db import RecordStore
from .dependencies import get_store
from .errors import (
    ForeignKeyViolation,
    InvalidFilter,
    InvalidRecord,
    MalformedKey,
    NotFound,
    ReferentialIntegrityViolation,
    StoreUnavailable,
    UniqueConstraintViolation,
)
from .routers import records as records_router
from .schemas import GradeStreamSummary, GradeSummary, HealthStatus
from .services import RecordService, grade_overview, grade_streams

LOGGER = logging.getLogger(__name__)
logging.basicConfig(level=LOG_LEVEL)


def create_app(store: RecordStore | None = None) -> FastAPI:
    """Build the application around ``store`` (a store for ``DATABASE_URL`` by default)."""

    record_store = store or RecordStore()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        record_store.open()
        record_store.init_db()
        app.state.store = record_store
        app.state.records = RecordService(record_store)
        app.state.started_at = time.monotonic()
        try:
            yield
        finally:
            record_store.close()

    app = FastAPI(title="School Records Service", version="0.1.0", lifespan=lifespan)
    _register_error_handlers(app)
    _register_routes(app)
    app.include_router(records_router.router)
    return app


def _error(status_code: int, detail: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=jsonable_encoder({"detail": detail, **extra})
    )


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFound)
    async def not_found(request: Request, exc: NotFound) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc))

    @app.exception_handler(UniqueConstraintViolation)
    async def unique_violation(request: Request, exc: UniqueConstraintViolation) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc), field=exc.field)

    @app.exception_handler(ForeignKeyViolation)
    async def foreign_key_violation(request: Request, exc: ForeignKeyViolation) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc), field=exc.field)

    @app.exception_handler(ReferentialIntegrityViolation)
    async def referenced(request: Request, exc: ReferentialIntegrityViolation) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc), dependents=exc.dependents)

    @app.exception_handler(InvalidRecord)
    async def invalid_record(request: Request, exc: InvalidRecord) -> JSONResponse:
        return _error(422, str(exc), errors=exc.errors)

    @app.exception_handler(MalformedKey)
    @app.exception_handler(InvalidFilter)
    async def bad_request(request: Request, exc: Exception) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(StoreUnavailable)
    async def unavailable(request: Request, exc: StoreUnavailable) -> JSONResponse:
        LOGGER.error("Record store unavailable: %s", exc)
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "Record store unavailable")


def _register_routes(app: FastAPI) -> None:
    @app.get("/health", response_model=HealthStatus)
    def health_check(request: Request, store: RecordStore = Depends(get_store)):
        payload = {
            "status": "ok",
            "timestamp": datetime.now(tz=timezone.utc),
            "database": True,
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
            "environment": APP_ENV,
        }
        try:
            store.ping()
        except StoreUnavailable as exc:
            LOGGER.warning("Health check failed: %s", exc)
            payload.update(status="error", database=False, error=str(exc))
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content=jsonable_encoder(HealthStatus(**payload).model_dump()),
            )
        return HealthStatus(**payload)

    @app.get("/grades", response_model=List[GradeSummary])
    def list_grades(store: RecordStore = Depends(get_store)) -> List[GradeSummary]:
        return grade_overview(store)

    @app.get("/grades/{grade_id}/streams", response_model=List[GradeStreamSummary])
    def list_grade_streams(
        grade_id: str, store: RecordStore = Depends(get_store)
    ) -> List[GradeStreamSummary]:
        return grade_streams(store, grade_id)


app = create_app()
