from __future__ import annotations

from typing import Iterator

import pytest

from school_records.db import RecordStore
from school_records.db.models import Guardian, Student, User
from school_records.errors import InvalidFilter
from school_records.services import RecordService
from school_records.services.query import build_order_by, build_where, field_lookup


@pytest.fixture()
def service(tmp_path) -> Iterator[RecordService]:
    with RecordStore(f"sqlite:///{tmp_path / 'query.db'}") as store:
        store.init_db()
        service = RecordService(store)
        for name, phone, email in [
            ("Mary Doe", "0712345678", "mary@school.com"),
            ("Peter Kamau", "0723456789", None),
            ("Amina Hassan", "0734567890", "amina@school.com"),
        ]:
            service.create("guardian", {"name": name, "phone": phone, "email": email})
        yield service


def names(records) -> list[str]:
    return [record.name for record in records]


def test_field_lookup_accepts_attribute_and_column_names() -> None:
    lookup = field_lookup(Student)

    assert lookup["admission_number"] is lookup["admissionNumber"]
    assert "relationship" in field_lookup(Guardian)


def test_order_by_always_ends_with_primary_key() -> None:
    clauses = build_order_by(User, "-email")

    assert len(clauses) == 2
    assert "users.id ASC" in str(clauses[-1])
    assert len(build_order_by(User, [("id", "desc")])) == 1


def test_where_rejects_non_mapping() -> None:
    with pytest.raises(InvalidFilter):
        build_where(Guardian, ["name"])


def test_null_equality_and_negation(service) -> None:
    assert names(service.find_many("guardian", {"email": None})) == ["Peter Kamau"]
    assert names(
        service.find_many("guardian", {"email": {"not": None}}, order_by="name")
    ) == ["Amina Hassan", "Mary Doe"]


def test_camel_case_operators(service) -> None:
    found = service.find_many(
        "guardian",
        {"name": {"startsWith": "m", "mode": "insensitive"}, "phone": {"notIn": ["0723456789"]}},
    )
    assert names(found) == ["Mary Doe"]
    assert names(service.find_many("guardian", {"name": {"endsWith": "Kamau"}})) == ["Peter Kamau"]


def test_logical_not_and_comparisons(service) -> None:
    found = service.find_many(
        "guardian",
        {"not": {"name": "Mary Doe"}, "phone": {"gte": "0720000000"}},
        order_by={"phone": "desc"},
    )
    assert names(found) == ["Amina Hassan", "Peter Kamau"]


def test_not_list_excludes_every_group(service) -> None:
    found = service.find_many(
        "guardian", {"not": [{"name": "Mary Doe"}, {"name": "Amina Hassan"}]}
    )
    assert names(found) == ["Peter Kamau"]

    everyone = [{"name": "Mary Doe"}, {"name": "Amina Hassan"}, {"name": "Peter Kamau"}]
    assert names(service.find_many("guardian", {"not": everyone})) == []
    assert names(service.find_many("guardian", {"NOT": everyone})) == []


def test_empty_logical_lists(service) -> None:
    assert names(service.find_many("guardian", {"or": []})) == []
    assert service.count("guardian", {"and": []}) == 3
    assert service.count("guardian", {"not": []}) == 3


def test_logical_keys_match_exactly(service) -> None:
    found = service.find_many("guardian", {"OR": [{"name": "Mary Doe"}, {"email": None}]})
    assert sorted(names(found)) == ["Mary Doe", "Peter Kamau"]

    with pytest.raises(InvalidFilter):
        service.find_many("guardian", {"Or": [{"name": "Mary Doe"}]})
    with pytest.raises(InvalidFilter):
        service.find_many("guardian", {"and": "Mary Doe"})


def test_nulls_ordering(service) -> None:
    found = service.find_many(
        "guardian", order_by=[("email", {"sort": "asc", "nulls": "first"}), "name"]
    )
    assert names(found)[0] == "Peter Kamau"


def test_invalid_operators_and_directions(service) -> None:
    with pytest.raises(InvalidFilter):
        service.find_many("guardian", {"name": {"in": "Mary Doe"}})
    with pytest.raises(InvalidFilter):
        service.find_many("guardian", order_by=("name", "sideways"))
    with pytest.raises(InvalidFilter):
        service.find_many("guardian", order_by=[("name", {"nulls": "middle"})])
    with pytest.raises(InvalidFilter):
        service.find_many("guardian", order_by=42)
