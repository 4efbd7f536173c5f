"""FastAPI dependencies for shared services."""
from __future__ import annotations

from fastapi import Request

from .db import RecordStore
from .services import RecordService


def get_store(request: Request) -> RecordStore:
    """Return the store opened by the application lifespan."""

    return request.app.state.store


def get_records(request: Request) -> RecordService:
    return request.app.state.records
