"""Stream model."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_records.db import Base
from school_records.db.models.common import TimestampMixin, id_column


class Stream(TimestampMixin, Base):
    """A section within a grade, optionally supervised by one teacher."""

    __tablename__ = "streams"

    id: Mapped[str] = id_column()
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(128), nullable=False)
    grade_id: Mapped[str] = mapped_column(
        "gradeId", ForeignKey("grades.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    # Unique so that a teacher supervises at most one stream.
    teacher_id: Mapped[str | None] = mapped_column(
        "teacherId", ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True, unique=True
    )

    grade: Mapped["Grade"] = relationship("Grade", back_populates="streams")
    teacher: Mapped[Optional["Teacher"]] = relationship("Teacher", back_populates="stream")
    students: Mapped[list["Student"]] = relationship(
        "Student", back_populates="stream", passive_deletes="all"
    )

    def __repr__(self) -> str:  # pragma: no cover - repr not critical
        return f"Stream(id={self.id!r}, name={self.name!r}, grade_id={self.grade_id!r})"
