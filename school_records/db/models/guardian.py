"""Guardian model."""
from __future__ import annotations

import enum
from datetime import date

from sqlalchemy import Date, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_records.db import Base
from school_records.db.models.common import TimestampMixin, enum_column, id_column


class ContactMethod(str, enum.Enum):
    PHONE = "phone"
    EMAIL = "email"
    BOTH = "both"


class Guardian(TimestampMixin, Base):
    """A student's responsible contact."""

    __tablename__ = "guardians"

    id: Mapped[str] = id_column()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    relationship_to_student: Mapped[str | None] = mapped_column(
        "relationship", String(64), nullable=True
    )
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    occupation: Mapped[str | None] = mapped_column(String(128), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column("dateOfBirth", Date, nullable=True)
    education_level: Mapped[str | None] = mapped_column("educationLevel", String(128), nullable=True)
    preferred_contact_method: Mapped[ContactMethod] = mapped_column(
        "preferredContactMethod",
        enum_column(ContactMethod, "contact_method"),
        nullable=False,
        default=ContactMethod.BOTH,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    students: Mapped[list["Student"]] = relationship(
        "Student", back_populates="guardian", passive_deletes="all"
    )

    def __repr__(self) -> str:  # pragma: no cover - repr not critical
        return f"Guardian(id={self.id!r}, name={self.name!r})"
