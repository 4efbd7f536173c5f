"""Student model."""
from __future__ import annotations

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_records.db import Base
from school_records.db.models.common import TimestampMixin, id_column


class Student(TimestampMixin, Base):
    """An enrolled learner; always has exactly one guardian, grade and stream."""

    __tablename__ = "students"

    id: Mapped[str] = id_column()
    first_name: Mapped[str] = mapped_column("firstName", String(128), nullable=False)
    last_name: Mapped[str] = mapped_column("lastName", String(128), nullable=False)
    date_of_birth: Mapped[str] = mapped_column("dateOfBirth", String(32), nullable=False)
    gender: Mapped[str] = mapped_column(String(32), nullable=False)

    email: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    phone_number: Mapped[str | None] = mapped_column("phoneNumber", String(32), nullable=True)

    street_address: Mapped[str] = mapped_column("streetAddress", String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(128), nullable=False)
    state: Mapped[str] = mapped_column(String(128), nullable=False)
    zip_code: Mapped[str | None] = mapped_column("zipCode", String(16), nullable=True)

    admission_number: Mapped[str] = mapped_column(
        "admissionNumber", String(64), nullable=False, unique=True
    )
    enrollment_date: Mapped[str] = mapped_column("enrollmentDate", String(32), nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)

    guardian_id: Mapped[str] = mapped_column(
        "guardianId", ForeignKey("guardians.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    grade_id: Mapped[str] = mapped_column(
        "gradeId", ForeignKey("grades.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    stream_id: Mapped[str] = mapped_column(
        "streamId", ForeignKey("streams.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    guardian: Mapped["Guardian"] = relationship("Guardian", back_populates="students")
    grade: Mapped["Grade"] = relationship("Grade", back_populates="students")
    stream: Mapped["Stream"] = relationship("Stream", back_populates="students")

    def __repr__(self) -> str:  # pragma: no cover - repr not critical
        return f"Student(id={self.id!r}, admission_number={self.admission_number!r})"
