"""Record access layer: one repository per entity, uniform operations.

Every mutation runs in a single transaction obtained from the
:class:`~school_records.db.RecordStore`. Input is validated with the
entity's pydantic schema, then the integrity checks run against the same
session before anything is flushed. Reads return plain pydantic records,
detached from the session.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Iterator, Mapping, Optional, TypeVar

from pydantic import ValidationError
from sqlalchemy import Integer, func, inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql import Select

from ..db import Base, RecordStore
from ..db.models import Grade, Guardian, Stream, Student, Teacher, User
from ..errors import (
    ForeignKeyViolation,
    InvalidFilter,
    InvalidRecord,
    MalformedKey,
    NotFound,
    ReferentialIntegrityViolation,
    UniqueConstraintViolation,
)
from ..schemas import (
    GradeCreate,
    GradeRecord,
    GuardianCreate,
    GuardianRecord,
    InputModel,
    RecordModel,
    StreamCreate,
    StreamRecord,
    StudentCreate,
    StudentRecord,
    TeacherCreate,
    TeacherRecord,
    UserCreate,
    UserRecord,
)
from . import integrity
from .query import OrderBy, Where, build_order_by, build_where, field_lookup

LOGGER = logging.getLogger(__name__)

FETCH_BATCH_SIZE = 100

RecordT = TypeVar("RecordT", bound=RecordModel)
Validator = Callable[[Session, Mapping[str, Any], Optional[Base]], None]


@dataclass(frozen=True)
class EntityDefinition:
    """Binds a model to its input schema, result record and extra checks."""

    name: str
    model: type[Base]
    schema: type[InputModel]
    record: type[RecordModel]
    validators: tuple[Validator, ...] = field(default=())

    @property
    def table(self) -> str:
        return self.model.__tablename__


ENTITIES: tuple[EntityDefinition, ...] = (
    EntityDefinition("user", User, UserCreate, UserRecord),
    EntityDefinition("grade", Grade, GradeCreate, GradeRecord),
    EntityDefinition(
        "stream", Stream, StreamCreate, StreamRecord, (integrity.check_stream_regrade,)
    ),
    EntityDefinition("teacher", Teacher, TeacherCreate, TeacherRecord),
    EntityDefinition("guardian", Guardian, GuardianCreate, GuardianRecord),
    EntityDefinition(
        "student", Student, StudentCreate, StudentRecord, (integrity.check_student_placement,)
    ),
)

_RECORDS_BY_MODEL: dict[type[Base], type[RecordModel]] = {
    definition.model: definition.record for definition in ENTITIES
}


def column_values(instance: Base) -> dict[str, Any]:
    return {prop.key: getattr(instance, prop.key) for prop in inspect(type(instance)).column_attrs}


class Repository(Generic[RecordT]):
    """CRUD operations for one entity."""

    def __init__(self, store: RecordStore, definition: EntityDefinition) -> None:
        self.store = store
        self.definition = definition
        self.model = definition.model
        self._mapper = inspect(definition.model)
        self._fields = field_lookup(definition.model)
        self._unique_keys = {prop.key for prop in integrity.unique_properties(definition.model)}
        self._primary_key = self._mapper.primary_key[0]
        self._relations = {rel.key: rel for rel in self._mapper.relationships}

    def __repr__(self) -> str:  # pragma: no cover - repr not critical
        return f"Repository({self.definition.name!r})"

    # ------------------------------------------------------------------
    # Key, input and include handling
    # ------------------------------------------------------------------

    def normalize_key(self, key: Any) -> dict[str, Any]:
        """Return ``{attribute: value}`` for a unique lookup key.

        A bare value is taken as the primary key.
        """
        if not isinstance(key, Mapping):
            key = {self._primary_key.name: key}
        if len(key) != 1:
            raise MalformedKey(f"{self.definition.name} key must name exactly one unique field")
        (name, value), = key.items()
        attribute = self._fields.get(name)
        if attribute is None or attribute.key not in self._unique_keys:
            raise MalformedKey(f"{name!r} is not a unique field of {self.definition.name}")
        if value is None or isinstance(value, (Mapping, list, tuple, set, bool)):
            raise MalformedKey(f"invalid value for {self.definition.name}.{name}: {value!r}")
        column = attribute.property.columns[0]
        if isinstance(column.type, Integer) and not isinstance(value, int):
            try:
                value = int(value)
            except (TypeError, ValueError):
                raise MalformedKey(
                    f"{self.definition.name}.{name} expects an integer, got {value!r}"
                ) from None
        return {attribute.key: value}

    def _validate(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        try:
            payload = self.definition.schema.model_validate(dict(fields))
        except ValidationError as exc:
            raise InvalidRecord(
                self.definition.name, exc.errors(include_url=False, include_context=False)
            ) from exc
        return payload.model_dump()

    def _field_names(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Translate aliased (camelCase) input keys to schema field names."""
        aliases = {
            info.alias: name
            for name, info in self.definition.schema.model_fields.items()
            if info.alias
        }
        return {aliases.get(key, key): value for key, value in fields.items()}

    def _check_include(self, include: Iterable[str]) -> tuple[str, ...]:
        names = tuple(include)
        for name in names:
            if name not in self._relations:
                raise InvalidFilter(f"{self.definition.name} has no relation {name!r}")
        return names

    def _loader_options(self, include: tuple[str, ...]) -> list:
        return [selectinload(getattr(self.model, name)) for name in include]

    def _to_record(self, instance: Base, include: tuple[str, ...] = ()) -> RecordT:
        data = column_values(instance)
        for name in include:
            related = getattr(instance, name)
            record_cls = _RECORDS_BY_MODEL[self._relations[name].mapper.class_]
            if related is None:
                data[name] = None
            elif isinstance(related, list):
                data[name] = [record_cls.model_validate(column_values(item)) for item in related]
            else:
                data[name] = record_cls.model_validate(column_values(related))
        return self.definition.record.model_validate(data)

    # ------------------------------------------------------------------
    # Session-level helpers shared by the write operations
    # ------------------------------------------------------------------

    def _lookup(self, key: Mapping[str, Any]) -> Select:
        (name, value), = key.items()
        return select(self.model).where(getattr(self.model, name) == value)

    def _get_for_update(self, session: Session, key: Mapping[str, Any]) -> Base | None:
        return session.scalars(self._lookup(key).with_for_update()).one_or_none()

    def _run_validators(
        self, session: Session, values: Mapping[str, Any], instance: Base | None
    ) -> None:
        for validator in self.definition.validators:
            validator(session, values, instance)

    def _flush(self, session: Session) -> None:
        try:
            session.flush()
        except IntegrityError as exc:
            translated = integrity.translate_integrity_error(exc, self.model)
            if translated is None:
                raise
            raise translated from exc

    def _insert(self, session: Session, values: Mapping[str, Any]) -> Base:
        integrity.check_foreign_keys(session, self.model, values)
        integrity.check_unique(session, self.model, values)
        self._run_validators(session, values, None)
        instance = self.model(**values)
        session.add(instance)
        self._flush(session)
        LOGGER.debug("Created %s %s", self.definition.name, getattr(instance, self._primary_key.name))
        return instance

    def _apply_update(self, session: Session, instance: Base, fields: Mapping[str, Any]) -> Base:
        incoming = self._field_names(fields)
        if not incoming:
            return instance
        schema_fields = self.definition.schema.model_fields
        current = {
            name: value for name, value in column_values(instance).items() if name in schema_fields
        }
        merged = self._validate({**current, **incoming})
        changes = {name: merged[name] for name in incoming if name in merged}
        if not changes:
            return instance

        instance_id = getattr(instance, self._primary_key.name)
        integrity.check_foreign_keys(session, self.model, changes)
        integrity.check_unique(session, self.model, changes, exclude_id=instance_id)
        self._run_validators(session, merged, instance)
        for name, value in changes.items():
            setattr(instance, name, value)
        self._flush(session)
        LOGGER.debug("Updated %s %s: %s", self.definition.name, instance_id, sorted(changes))
        return instance

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def create(self, fields: Mapping[str, Any], *, include: Iterable[str] = ()) -> RecordT:
        """Validate and persist a new row; returns it with id and timestamps."""
        include = self._check_include(include)
        values = self._validate(fields)
        try:
            with self.store.transaction() as session:
                instance = self._insert(session, values)
                return self._to_record(instance, include)
        except (UniqueConstraintViolation, ForeignKeyViolation) as exc:
            LOGGER.info("Rejected %s create: %s", self.definition.name, exc)
            raise

    def find_one(self, key: Any, *, include: Iterable[str] = ()) -> RecordT | None:
        """Return the record matching a unique key, or ``None`` when absent."""
        key = self.normalize_key(key)
        include = self._check_include(include)
        stmt = self._lookup(key).options(*self._loader_options(include))
        with self.store.read_session() as session:
            instance = session.scalars(stmt).one_or_none()
            if instance is None:
                return None
            return self._to_record(instance, include)

    def find_many(
        self,
        where: Where | None = None,
        *,
        order_by: OrderBy = None,
        skip: int = 0,
        take: int | None = None,
        include: Iterable[str] = (),
    ) -> Iterator[RecordT]:
        """Lazily yield records matching ``where``, ordered, then paginated.

        The filter is validated immediately; rows are fetched as the iterator
        is consumed. The read session stays open until the iterator is
        exhausted or closed.
        """
        if skip < 0 or (take is not None and take < 0):
            raise InvalidFilter("skip and take must be non-negative")
        include = self._check_include(include)
        stmt = (
            select(self.model)
            .where(*build_where(self.model, where))
            .order_by(*build_order_by(self.model, order_by))
            .options(*self._loader_options(include))
        )
        if skip:
            stmt = stmt.offset(skip)
        if take is not None:
            stmt = stmt.limit(take)
        return self._iterate(stmt, include)

    def _iterate(self, stmt: Select, include: tuple[str, ...]) -> Iterator[RecordT]:
        with self.store.read_session() as session:
            result = session.scalars(stmt.execution_options(yield_per=FETCH_BATCH_SIZE))
            for instance in result:
                yield self._to_record(instance, include)

    def count(self, where: Where | None = None) -> int:
        stmt = select(func.count()).select_from(self.model).where(*build_where(self.model, where))
        with self.store.read_session() as session:
            return session.scalar(stmt) or 0

    def update(
        self, key: Any, fields: Mapping[str, Any], *, include: Iterable[str] = ()
    ) -> RecordT:
        """Apply ``fields`` to an existing row, re-running every create check."""
        key = self.normalize_key(key)
        include = self._check_include(include)
        with self.store.transaction() as session:
            instance = self._get_for_update(session, key)
            if instance is None:
                raise NotFound(self.definition.name, key)
            self._apply_update(session, instance, fields)
            return self._to_record(instance, include)

    def delete(self, key: Any) -> int:
        """Delete a row; rows with dependents are refused (RESTRICT)."""
        key = self.normalize_key(key)
        with self.store.transaction() as session:
            instance = self._get_for_update(session, key)
            if instance is None:
                raise NotFound(self.definition.name, key)
            dependents = integrity.count_dependents(session, instance)
            if dependents:
                LOGGER.info(
                    "Refused to delete %s %s with dependents %s",
                    self.definition.name,
                    key,
                    dependents,
                )
                raise ReferentialIntegrityViolation(self.definition.table, dependents)
            session.delete(instance)
            try:
                session.flush()
            except IntegrityError as exc:
                # A dependent was inserted after the check above.
                raise ReferentialIntegrityViolation(self.definition.table, {}) from exc
            LOGGER.debug("Deleted %s %s", self.definition.name, key)
            return 1

    def upsert(
        self,
        key: Any,
        create_fields: Mapping[str, Any],
        update_fields: Mapping[str, Any],
        *,
        include: Iterable[str] = (),
    ) -> RecordT:
        """Create the row for ``key`` if absent, otherwise apply ``update_fields``.

        When a concurrent writer inserts the same key first, the insert is
        rolled back to a savepoint and the update path runs instead.
        """
        key = self.normalize_key(key)
        include = self._check_include(include)
        values = self._validate(self._key_in_fields(key, create_fields))
        (key_name, key_value), = key.items()
        if key_name not in values:
            values[key_name] = key_value

        with self.store.transaction() as session:
            instance = self._get_for_update(session, key)
            if instance is None:
                try:
                    with session.begin_nested():
                        instance = self._insert(session, values)
                    return self._to_record(instance, include)
                except UniqueConstraintViolation:
                    instance = self._get_for_update(session, key)
                    if instance is None:
                        raise
                    LOGGER.info("Concurrent upsert of %s %s; updating", self.definition.name, key)
            self._apply_update(session, instance, update_fields)
            return self._to_record(instance, include)

    def _key_in_fields(self, key: Mapping[str, Any], fields: Mapping[str, Any]) -> dict[str, Any]:
        """Copy the lookup key into the create payload when the schema has that field."""
        fields = self._field_names(fields)
        (name, value), = key.items()
        if name in self.definition.schema.model_fields:
            fields.setdefault(name, value)
        return fields


__all__ = ["ENTITIES", "EntityDefinition", "Repository", "column_values"]
