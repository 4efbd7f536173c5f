from __future__ import annotations

from typing import Iterator

import pytest
from sqlalchemy import select

from school_records.db import RecordStore
from school_records.db.fixtures import ADMIN_EMAIL, create_admin_user, seed_dev_data
from school_records.db.models import User
from school_records.security import build_context, verify_password
from school_records.services import RecordService, grade_streams

FAST_HASHING = build_context(rounds=4)


@pytest.fixture()
def service(tmp_path) -> Iterator[RecordService]:
    with RecordStore(f"sqlite:///{tmp_path / 'seed.db'}") as store:
        store.init_db()
        yield RecordService(store)


def test_create_admin_user_is_idempotent(service: RecordService) -> None:
    admin, created = create_admin_user(service, context=FAST_HASHING)
    again, created_again = create_admin_user(service, context=FAST_HASHING)

    assert created is True
    assert created_again is False
    assert again.id == admin.id
    assert admin.role.value == "ADMIN"
    assert service.count("user") == 1


def test_admin_password_is_hashed(service: RecordService) -> None:
    create_admin_user(service, context=FAST_HASHING)

    with service.store.read_session() as session:
        stored = session.scalar(select(User.password).where(User.email == ADMIN_EMAIL))

    assert stored != "admin123"
    assert verify_password("admin123", stored)


def test_seed_dev_data_is_repeatable(service: RecordService) -> None:
    create_admin_user(service, context=FAST_HASHING)

    first = seed_dev_data(service, context=FAST_HASHING)
    second = seed_dev_data(service, context=FAST_HASHING)

    assert first == second == {
        "user": 4,
        "grade": 1,
        "stream": 1,
        "teacher": 1,
        "guardian": 1,
        "student": 1,
    }


def test_seeded_student_is_placed_in_supervised_stream(service: RecordService) -> None:
    seed_dev_data(service, context=FAST_HASHING)

    student = service.find_one(
        "student", {"admissionNumber": "A100"}, include=("grade", "stream")
    )
    assert student is not None
    assert student.grade.name == "Grade 5"
    assert student.stream.grade_id == student.grade_id

    streams = grade_streams(service.store, student.grade_id)
    assert [(s.name, s.class_teacher, s.students) for s in streams] == [("5A", "Sarah", 1)]
