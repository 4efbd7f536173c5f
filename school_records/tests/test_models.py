from __future__ import annotations

from typing import Iterator

import pytest
import sqlalchemy as sa
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from school_records.db import Base, RecordStore
from school_records.db.models import Grade, Guardian, Stream, Student, Teacher, User, UserRole


@pytest.fixture()
def store(tmp_path) -> Iterator[RecordStore]:
    with RecordStore(f"sqlite:///{tmp_path / 'models.db'}") as store:
        store.init_db()
        yield store


def build_graph(session: Session) -> Student:
    grade = Grade(name="Grade 5", slug="grade-5")
    stream = Stream(name="5A", slug="5a", grade=grade)
    guardian = Guardian(name="Mary Doe", phone="0712345678")
    student = Student(
        first_name="Jane",
        last_name="Doe",
        date_of_birth="2014-03-02",
        gender="female",
        street_address="12 Market Road",
        city="Nairobi",
        state="Nairobi",
        admission_number="A100",
        enrollment_date="2024-01-08",
        password="hashed",
        guardian=guardian,
        grade=grade,
        stream=stream,
    )
    session.add(student)
    session.flush()
    return student


def make_teacher() -> Teacher:
    return Teacher(
        first_name="Sarah", last_name="Johnson", email="sarah@school.com", phone="0712345678"
    )


def count_rows(session: Session, model: type[Base]) -> int:
    return session.scalar(select(sa.func.count()).select_from(model)) or 0


def test_persisted_columns_use_camel_case(store: RecordStore) -> None:
    inspector = sa.inspect(store.engine)
    student_columns = {column["name"] for column in inspector.get_columns("students")}
    assert {"guardianId", "gradeId", "streamId", "admissionNumber"} <= student_columns
    stream_columns = {column["name"] for column in inspector.get_columns("streams")}
    assert {"gradeId", "teacherId"} <= stream_columns
    teacher_columns = {column["name"] for column in inspector.get_columns("teachers")}
    assert "previousEmployments" in teacher_columns


def test_unique_constraints_follow_naming_convention(store: RecordStore) -> None:
    inspector = sa.inspect(store.engine)
    names = {item["name"] for item in inspector.get_unique_constraints("students")}
    assert {"uq_students_admissionNumber", "uq_students_email"} <= names
    stream_names = {item["name"] for item in inspector.get_unique_constraints("streams")}
    assert "uq_streams_teacherId" in stream_names


def test_defaults_assigned_on_flush(store: RecordStore) -> None:
    with store.transaction() as session:
        student = build_graph(session)
        assert len(student.id) == 36
        assert student.created_at is not None
        assert student.updated_at is not None

        user = User(email="admin@school.com", username="admin", password="hashed")
        session.add(user)
        session.flush()
        assert user.role is UserRole.STAFF
        assert user.is_active is True
        assert isinstance(user.id, int)


def test_foreign_keys_enforced_by_database(store: RecordStore) -> None:
    with pytest.raises(IntegrityError):
        with store.transaction() as session:
            session.add(Stream(name="9Z", slug="9z", grade_id="missing-grade"))
            session.flush()

    with store.read_session() as session:
        assert count_rows(session, Stream) == 0


def test_teacher_stream_uniqueness_enforced_by_database(store: RecordStore) -> None:
    with pytest.raises(IntegrityError):
        with store.transaction() as session:
            grade = Grade(name="Grade 5", slug="grade-5")
            teacher = make_teacher()
            session.add_all([grade, teacher])
            session.flush()
            session.add_all(
                [
                    Stream(name="5A", slug="5a", grade_id=grade.id, teacher_id=teacher.id),
                    Stream(name="5B", slug="5b", grade_id=grade.id, teacher_id=teacher.id),
                ]
            )
            session.flush()


def test_deleting_teacher_clears_stream_assignment(store: RecordStore) -> None:
    with store.transaction() as session:
        student = build_graph(session)
        teacher = make_teacher()
        student.stream.teacher = teacher
        session.flush()
        stream_id = student.stream_id
        teacher_id = teacher.id

    with store.transaction() as session:
        session.delete(session.get(Teacher, teacher_id))

    with store.read_session() as session:
        stream = session.get(Stream, stream_id)
        assert stream is not None
        assert stream.teacher_id is None


def test_database_restricts_deleting_referenced_grade(store: RecordStore) -> None:
    with store.transaction() as session:
        grade_id = build_graph(session).grade_id

    with pytest.raises(IntegrityError):
        with store.transaction() as session:
            session.execute(sa.delete(Grade).where(Grade.id == grade_id))

    with store.read_session() as session:
        assert session.get(Grade, grade_id) is not None
        assert count_rows(session, Student) == 1
