"""Aggregated read models used by the dashboard endpoints."""
from __future__ import annotations

from sqlalchemy import func, select

from ..db import RecordStore
from ..db.models import Grade, Stream, Student, Teacher
from ..errors import NotFound
from ..schemas import GradeStreamSummary, GradeSummary


def grade_overview(store: RecordStore) -> list[GradeSummary]:
    """Every grade with its stream and student counts, ordered by name."""
    stream_counts = (
        select(Stream.grade_id.label("grade_id"), func.count(Stream.id).label("total"))
        .group_by(Stream.grade_id)
        .subquery()
    )
    student_counts = (
        select(Student.grade_id.label("grade_id"), func.count(Student.id).label("total"))
        .group_by(Student.grade_id)
        .subquery()
    )
    stmt = (
        select(
            Grade.id,
            Grade.name,
            func.coalesce(stream_counts.c.total, 0),
            func.coalesce(student_counts.c.total, 0),
        )
        .outerjoin(stream_counts, stream_counts.c.grade_id == Grade.id)
        .outerjoin(student_counts, student_counts.c.grade_id == Grade.id)
        .order_by(Grade.name, Grade.id)
    )
    with store.read_session() as session:
        return [
            GradeSummary(id=grade_id, name=name, streams=streams, students=students)
            for grade_id, name, streams, students in session.execute(stmt)
        ]


def grade_streams(store: RecordStore, grade_id: str) -> list[GradeStreamSummary]:
    """Streams of one grade with the class teacher's first name and head count."""
    student_counts = (
        select(Student.stream_id.label("stream_id"), func.count(Student.id).label("total"))
        .group_by(Student.stream_id)
        .subquery()
    )
    stmt = (
        select(
            Stream.id,
            Stream.name,
            Stream.slug,
            Teacher.first_name,
            func.coalesce(student_counts.c.total, 0),
        )
        .outerjoin(Teacher, Stream.teacher_id == Teacher.id)
        .outerjoin(student_counts, student_counts.c.stream_id == Stream.id)
        .where(Stream.grade_id == grade_id)
        .order_by(Stream.name, Stream.id)
    )
    with store.read_session() as session:
        if session.get(Grade, grade_id) is None:
            raise NotFound("grade", {"id": grade_id})
        return [
            GradeStreamSummary(
                id=stream_id, name=name, slug=slug, class_teacher=first_name, students=students
            )
            for stream_id, name, slug, first_name, students in session.execute(stmt)
        ]


__all__ = ["grade_overview", "grade_streams"]
