"""Convenient re-exports for the record access layer."""
from __future__ import annotations

from .overview import grade_overview, grade_streams
from .records import RecordService
from .repository import ENTITIES, EntityDefinition, Repository

__all__ = [
    "ENTITIES",
    "EntityDefinition",
    "RecordService",
    "Repository",
    "grade_overview",
    "grade_streams",
]
