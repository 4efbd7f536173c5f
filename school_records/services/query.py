"""Translate filter and ordering mappings into SQLAlchemy clauses.

Filters are mappings keyed by field name (``admission_number`` or the column
name ``admissionNumber``). A plain value means equality; a mapping selects
operators::

    {"first_name": {"contains": "an", "mode": "insensitive"},
     "created_at": {"gte": start},
     "or": [{"email": None}, {"grade_id": {"in": grade_ids}}]}

The logical keys are ``and``, ``or`` and ``not`` (or their upper-case forms).
A list under ``not`` excludes rows matching any of its groups.

Orderings are a field name (``"-name"`` for descending), a ``(field,
direction)`` pair, a ``{field: direction}`` mapping, or a sequence of those.
A direction is ``"asc"``/``"desc"`` or ``{"sort": ..., "nulls": "first"|"last"}``.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Sequence

from sqlalchemy import and_, false, func, inspect, not_, or_, true
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.sql.elements import ColumnElement

from ..db import Base
from ..errors import InvalidFilter

Where = Mapping[str, Any]
OrderBy = Any

# Both spellings of the logical combinators are accepted; nothing else.
_LOGICAL_KEYS = {
    "and": "and",
    "or": "or",
    "not": "not",
    "AND": "and",
    "OR": "or",
    "NOT": "not",
}

_OPERATORS: dict[str, Callable[[Any, Any], ColumnElement]] = {
    "equals": lambda column, value: column.is_(None) if value is None else column == value,
    "not": lambda column, value: column.is_not(None) if value is None else column != value,
    "in": lambda column, value: column.in_(list(value)),
    "not_in": lambda column, value: column.not_in(list(value)),
    "contains": lambda column, value: column.contains(value, autoescape=True),
    "starts_with": lambda column, value: column.startswith(value, autoescape=True),
    "ends_with": lambda column, value: column.endswith(value, autoescape=True),
    "lt": lambda column, value: column < value,
    "lte": lambda column, value: column <= value,
    "gt": lambda column, value: column > value,
    "gte": lambda column, value: column >= value,
}

_INSENSITIVE_OPERATORS: dict[str, Callable[[Any, Any], ColumnElement]] = {
    "equals": lambda column, value: func.lower(column) == value.lower(),
    "not": lambda column, value: func.lower(column) != value.lower(),
    "contains": lambda column, value: column.icontains(value, autoescape=True),
    "starts_with": lambda column, value: column.istartswith(value, autoescape=True),
    "ends_with": lambda column, value: column.iendswith(value, autoescape=True),
}

# camelCase spellings accepted alongside the snake_case names.
_OPERATOR_ALIASES = {
    "notIn": "not_in",
    "startsWith": "starts_with",
    "endsWith": "ends_with",
}


def field_lookup(model: type[Base]) -> dict[str, InstrumentedAttribute]:
    """Map both attribute and column names to the model's column attributes."""
    lookup: dict[str, InstrumentedAttribute] = {}
    for prop in inspect(model).column_attrs:
        attribute = getattr(model, prop.key)
        lookup[prop.key] = attribute
        lookup[prop.columns[0].name] = attribute
    return lookup


def _resolve(lookup: Mapping[str, InstrumentedAttribute], model: type[Base], name: str):
    try:
        return lookup[name]
    except KeyError:
        raise InvalidFilter(f"{model.__name__} has no field {name!r}") from None


def _field_clause(column, condition: Any) -> ColumnElement:
    if not isinstance(condition, Mapping):
        return _OPERATORS["equals"](column, condition)

    insensitive = condition.get("mode") == "insensitive"
    clauses = []
    for raw_operator, value in condition.items():
        if raw_operator == "mode":
            continue
        operator = _OPERATOR_ALIASES.get(raw_operator, raw_operator)
        if operator not in _OPERATORS:
            raise InvalidFilter(f"unsupported filter operator {raw_operator!r}")
        if operator in ("in", "not_in") and (
            isinstance(value, (str, bytes)) or not isinstance(value, Iterable)
        ):
            raise InvalidFilter(f"{raw_operator!r} expects a collection of values")
        if insensitive and operator in _INSENSITIVE_OPERATORS and isinstance(value, str):
            clauses.append(_INSENSITIVE_OPERATORS[operator](column, value))
        else:
            clauses.append(_OPERATORS[operator](column, value))
    return and_(*clauses)


def build_where(model: type[Base], where: Where | None) -> list[ColumnElement]:
    """Return the conjunction of clauses described by ``where``."""
    if not where:
        return []
    if not isinstance(where, Mapping):
        raise InvalidFilter("filters must be a mapping of field names to conditions")

    lookup = field_lookup(model)
    clauses: list[ColumnElement] = []
    for key, condition in where.items():
        logical = _LOGICAL_KEYS.get(key)
        if logical is not None:
            clauses.append(_logical_clause(model, logical, condition))
            continue
        clauses.append(_field_clause(_resolve(lookup, model, key), condition))
    return clauses


def _conjunction(clauses: list[ColumnElement]) -> ColumnElement:
    return and_(*clauses) if clauses else true()


def _logical_clause(model: type[Base], logical: str, condition: Any) -> ColumnElement:
    # A mapping is one group of conditions; a list holds several groups.
    if isinstance(condition, Mapping):
        group = _conjunction(build_where(model, condition))
        return not_(group) if logical == "not" else group
    if isinstance(condition, (str, bytes)) or not isinstance(condition, Iterable):
        raise InvalidFilter(f"{logical!r} expects a mapping or a list of mappings")

    parts = [_conjunction(build_where(model, item)) for item in condition]
    if logical == "or":
        return or_(*parts) if parts else false()
    if not parts:
        return true()
    if logical == "not":
        return not_(or_(*parts))
    return and_(*parts)


def _is_pair(item: Any) -> bool:
    return (
        isinstance(item, tuple)
        and len(item) == 2
        and isinstance(item[0], str)
        and (isinstance(item[1], Mapping) or item[1] in ("asc", "desc"))
    )


def _order_items(order_by: OrderBy) -> list[tuple[str, Any]]:
    if order_by is None:
        return []
    if isinstance(order_by, str):
        if order_by.startswith("-"):
            return [(order_by[1:], "desc")]
        return [(order_by, "asc")]
    if isinstance(order_by, Mapping):
        return list(order_by.items())
    if _is_pair(order_by):
        return [order_by]
    if isinstance(order_by, Sequence):
        items: list[tuple[str, Any]] = []
        for item in order_by:
            items.extend(_order_items(item))
        return items
    raise InvalidFilter(f"unsupported ordering {order_by!r}")


def build_order_by(model: type[Base], order_by: OrderBy) -> list[ColumnElement]:
    """Ordering clauses, always ending with the primary key as a tie-break."""
    lookup = field_lookup(model)
    clauses: list[ColumnElement] = []
    used: set[str] = set()
    for name, direction in _order_items(order_by):
        column = _resolve(lookup, model, name)
        nulls = None
        if isinstance(direction, Mapping):
            nulls = direction.get("nulls")
            direction = direction.get("sort", "asc")
        if direction not in ("asc", "desc"):
            raise InvalidFilter(f"unsupported sort direction {direction!r}")
        clause = column.desc() if direction == "desc" else column.asc()
        if nulls == "first":
            clause = clause.nulls_first()
        elif nulls == "last":
            clause = clause.nulls_last()
        elif nulls is not None:
            raise InvalidFilter(f"unsupported null ordering {nulls!r}")
        clauses.append(clause)
        used.add(column.key)

    for column in inspect(model).primary_key:
        attribute = lookup[column.name]
        if attribute.key not in used:
            clauses.append(attribute.asc())
    return clauses


__all__ = ["Where", "OrderBy", "build_order_by", "build_where", "field_lookup"]
