"""Entity-addressed facade over the per-entity repositories."""
from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping

from ..db import Base, RecordStore
from ..errors import UnknownEntity
from ..schemas import (
    GradeRecord,
    GuardianRecord,
    RecordModel,
    StreamRecord,
    StudentRecord,
    TeacherRecord,
    UserRecord,
)
from .query import OrderBy, Where
from .repository import ENTITIES, Repository

Entity = str | type[Base]


class RecordService:
    """Uniform create/find/update/delete/upsert over every entity.

    Entities are addressed by name (``"student"``, ``"students"``) or by
    model class::

        service = RecordService(store)
        grade = service.create("grade", {"name": "Grade 5"})
        service.find_many("stream", {"grade_id": grade.id}, order_by="name")
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store
        self._by_name: dict[str, Repository] = {}
        self._by_model: dict[type[Base], Repository] = {}
        for definition in ENTITIES:
            repository: Repository = Repository(store, definition)
            self._by_name[definition.name] = repository
            self._by_name[definition.table] = repository
            self._by_model[definition.model] = repository

    @property
    def users(self) -> Repository[UserRecord]:
        return self._by_name["user"]

    @property
    def grades(self) -> Repository[GradeRecord]:
        return self._by_name["grade"]

    @property
    def streams(self) -> Repository[StreamRecord]:
        return self._by_name["stream"]

    @property
    def teachers(self) -> Repository[TeacherRecord]:
        return self._by_name["teacher"]

    @property
    def guardians(self) -> Repository[GuardianRecord]:
        return self._by_name["guardian"]

    @property
    def students(self) -> Repository[StudentRecord]:
        return self._by_name["student"]

    def repository(self, entity: Entity) -> Repository:
        if isinstance(entity, str):
            repository = self._by_name.get(entity.lower())
        else:
            repository = self._by_model.get(entity)
        if repository is None:
            raise UnknownEntity(f"unknown entity {entity!r}")
        return repository

    def create(
        self, entity: Entity, fields: Mapping[str, Any], *, include: Iterable[str] = ()
    ) -> RecordModel:
        return self.repository(entity).create(fields, include=include)

    def find_one(
        self, entity: Entity, key: Any, *, include: Iterable[str] = ()
    ) -> RecordModel | None:
        return self.repository(entity).find_one(key, include=include)

    def find_many(
        self,
        entity: Entity,
        where: Where | None = None,
        *,
        order_by: OrderBy = None,
        skip: int = 0,
        take: int | None = None,
        include: Iterable[str] = (),
    ) -> Iterator[RecordModel]:
        return self.repository(entity).find_many(
            where, order_by=order_by, skip=skip, take=take, include=include
        )

    def count(self, entity: Entity, where: Where | None = None) -> int:
        return self.repository(entity).count(where)

    def update(
        self,
        entity: Entity,
        key: Any,
        fields: Mapping[str, Any],
        *,
        include: Iterable[str] = (),
    ) -> RecordModel:
        return self.repository(entity).update(key, fields, include=include)

    def delete(self, entity: Entity, key: Any) -> int:
        return self.repository(entity).delete(key)

    def upsert(
        self,
        entity: Entity,
        key: Any,
        create_fields: Mapping[str, Any],
        update_fields: Mapping[str, Any],
        *,
        include: Iterable[str] = (),
    ) -> RecordModel:
        return self.repository(entity).upsert(key, create_fields, update_fields, include=include)


__all__ = ["RecordService"]
