"""Pre-commit validation keeping the records graph consistent.

Every function here runs inside the caller's write transaction, before the
flush that would persist a change. A violation raises and the surrounding
transaction rolls back, so nothing is written.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import ColumnProperty, RelationshipDirection, RelationshipProperty, Session

from ..db import Base
from ..db.models import Stream, Student
from ..errors import (
    ForeignKeyViolation,
    RecordStoreError,
    ReferentialIntegrityViolation,
    StreamGradeMismatch,
    UniqueConstraintViolation,
)

LOGGER = logging.getLogger(__name__)


def _column_name(prop: ColumnProperty) -> str:
    return prop.columns[0].name


def unique_properties(model: type[Base]) -> list[ColumnProperty]:
    """Column properties backed by a primary key or unique constraint."""
    props = []
    for prop in inspect(model).column_attrs:
        column = prop.columns[0]
        if column.primary_key or column.unique:
            props.append(prop)
    return props


def foreign_key_properties(model: type[Base]) -> dict[str, tuple[ColumnProperty, type[Base]]]:
    """Map attribute name to ``(property, referenced model)`` for each foreign key."""
    result: dict[str, tuple[ColumnProperty, type[Base]]] = {}
    for prop in inspect(model).column_attrs:
        for foreign_key in prop.columns[0].foreign_keys:
            result[prop.key] = (prop, _model_for_table(foreign_key.column.table))
    return result


def _model_for_table(table) -> type[Base]:
    for mapper in Base.registry.mappers:
        if mapper.local_table is table:
            return mapper.class_
    raise LookupError(f"no mapped class for table {table.name!r}")


def restricting_relationships(model: type[Base]) -> list[RelationshipProperty]:
    """One-to-many relationships whose rows cannot exist without ``model``."""
    relationships = []
    for rel in inspect(model).relationships:
        if rel.direction is not RelationshipDirection.ONETOMANY:
            continue
        if any(not column.nullable for column in rel.remote_side):
            relationships.append(rel)
    return relationships


def check_foreign_keys(session: Session, model: type[Base], values: Mapping[str, Any]) -> None:
    """Reject values whose referenced parent rows do not exist."""
    for key, (prop, parent) in foreign_key_properties(model).items():
        value = values.get(key)
        if value is None:
            continue
        if session.get(parent, value) is None:
            raise ForeignKeyViolation(_column_name(prop), value)


def check_unique(
    session: Session,
    model: type[Base],
    values: Mapping[str, Any],
    *,
    exclude_id: Any = None,
) -> None:
    """Reject values colliding with another row on a unique column."""
    primary_key = inspect(model).primary_key[0]
    for prop in unique_properties(model):
        value = values.get(prop.key)
        if value is None:
            continue
        stmt = select(primary_key).where(getattr(model, prop.key) == value)
        if exclude_id is not None:
            stmt = stmt.where(primary_key != exclude_id)
        if session.execute(stmt.limit(1)).first() is not None:
            raise UniqueConstraintViolation(_column_name(prop), model.__tablename__)


def check_student_placement(
    session: Session, values: Mapping[str, Any], instance: Student | None = None
) -> None:
    """A student's stream must belong to the student's own grade."""
    stream = session.get(Stream, values["stream_id"])
    if stream is None:
        raise ForeignKeyViolation("streamId", values["stream_id"])
    if stream.grade_id != values["grade_id"]:
        raise StreamGradeMismatch(stream.id, values["grade_id"], stream.grade_id)


def check_stream_regrade(
    session: Session, values: Mapping[str, Any], instance: Stream | None = None
) -> None:
    """A stream keeping students cannot move to another grade."""
    if instance is None or values["grade_id"] == instance.grade_id:
        return
    enrolled = session.scalar(
        select(func.count())
        .select_from(Student)
        .where(Student.stream_id == instance.id, Student.grade_id != values["grade_id"])
    )
    if enrolled:
        raise ReferentialIntegrityViolation("streams", {"students": enrolled}, action="regrade")


def count_dependents(session: Session, instance: Base) -> dict[str, int]:
    """Count rows that would be orphaned by deleting ``instance``."""
    mapper = inspect(type(instance))
    dependents: dict[str, int] = {}
    for rel in restricting_relationships(type(instance)):
        target = rel.mapper.class_
        clauses = []
        for local, remote in rel.local_remote_pairs:
            local_key = mapper.get_property_by_column(local).key
            clauses.append(remote == getattr(instance, local_key))
        total = session.scalar(select(func.count()).select_from(target).where(*clauses))
        if total:
            dependents[rel.key] = total
    return dependents


def translate_integrity_error(exc: IntegrityError, model: type[Base]) -> RecordStoreError | None:
    """Map a database constraint failure onto the record store errors.

    Pre-checks catch almost every violation; this covers writers racing past
    them, where the database constraint is the final arbiter.
    """
    message = str(exc.orig)
    table = model.__tablename__
    for prop in unique_properties(model):
        column = _column_name(prop)
        if f"{table}.{column}" in message or f"uq_{table}_{column}" in message:
            return UniqueConstraintViolation(column, table)
    for prop, _parent in foreign_key_properties(model).values():
        column = _column_name(prop)
        if f"fk_{table}_{column}_" in message:
            return ForeignKeyViolation(column)
    if "FOREIGN KEY" in message.upper():
        return ForeignKeyViolation(None, message=message)
    LOGGER.warning("Unrecognised integrity error on %s: %s", table, message)
    return None


__all__ = [
    "check_foreign_keys",
    "check_stream_regrade",
    "check_student_placement",
    "check_unique",
    "count_dependents",
    "foreign_key_properties",
    "restricting_relationships",
    "translate_integrity_error",
    "unique_properties",
]
