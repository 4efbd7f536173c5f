"""Teacher domain model."""
from __future__ import annotations

import enum
from datetime import date
from typing import Any, Optional

from sqlalchemy import JSON, Date, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_records.db import Base
from school_records.db.models.common import TimestampMixin, enum_column, id_column


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class EmploymentType(str, enum.Enum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"


class Teacher(TimestampMixin, Base):
    """Represents an educator; may supervise one stream."""

    __tablename__ = "teachers"

    id: Mapped[str] = id_column()

    first_name: Mapped[str] = mapped_column("firstName", String(128), nullable=False)
    last_name: Mapped[str] = mapped_column("lastName", String(128), nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column("dateOfBirth", Date, nullable=True)
    gender: Mapped[Gender | None] = mapped_column(enum_column(Gender, "teacher_gender"), nullable=True)

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    alternate_phone: Mapped[str | None] = mapped_column("alternatePhone", String(32), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(128), nullable=True)
    state: Mapped[str | None] = mapped_column(String(128), nullable=True)
    zip_code: Mapped[str | None] = mapped_column("zipCode", String(16), nullable=True)

    emergency_contact_name: Mapped[str | None] = mapped_column(
        "emergencyContactName", String(255), nullable=True
    )
    emergency_contact_phone: Mapped[str | None] = mapped_column(
        "emergencyContactPhone", String(32), nullable=True
    )
    emergency_contact_relationship: Mapped[str | None] = mapped_column(
        "emergencyContactRelationship", String(64), nullable=True
    )

    highest_qualification: Mapped[str | None] = mapped_column(
        "highestQualification", String(255), nullable=True
    )
    specialization: Mapped[str | None] = mapped_column(String(255), nullable=True)
    teaching_experience: Mapped[str | None] = mapped_column(
        "teachingExperience", String(64), nullable=True
    )
    subjects_can_teach: Mapped[list[str]] = mapped_column(
        "subjectsCanTeach", JSON, nullable=False, default=list
    )
    grades_can_teach: Mapped[list[str]] = mapped_column(
        "gradesCanTeach", JSON, nullable=False, default=list
    )

    employment_type: Mapped[EmploymentType | None] = mapped_column(
        "employmentType", enum_column(EmploymentType, "employment_type"), nullable=True
    )
    joining_date: Mapped[date | None] = mapped_column("joiningDate", Date, nullable=True)
    position: Mapped[str | None] = mapped_column(String(128), nullable=True)
    department: Mapped[str | None] = mapped_column(String(128), nullable=True)
    previous_employments: Mapped[list[dict[str, Any]]] = mapped_column(
        "previousEmployments", JSON, nullable=False, default=list
    )

    certifications: Mapped[str | None] = mapped_column(Text, nullable=True)
    skills: Mapped[str | None] = mapped_column(Text, nullable=True)
    languages: Mapped[str | None] = mapped_column(Text, nullable=True)
    additional_notes: Mapped[str | None] = mapped_column("additionalNotes", Text, nullable=True)

    stream: Mapped[Optional["Stream"]] = relationship(
        "Stream", back_populates="teacher", uselist=False
    )

    def __repr__(self) -> str:  # pragma: no cover - repr not critical
        return f"Teacher(id={self.id!r}, email={self.email!r})"
