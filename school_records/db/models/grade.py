"""Grade model."""
from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_records.db import Base
from school_records.db.models.common import TimestampMixin, id_column


class Grade(TimestampMixin, Base):
    """An academic year level grouping streams and students."""

    __tablename__ = "grades"

    id: Mapped[str] = id_column()
    slug: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)

    streams: Mapped[list["Stream"]] = relationship(
        "Stream", back_populates="grade", passive_deletes="all", order_by="Stream.name"
    )
    students: Mapped[list["Student"]] = relationship(
        "Student", back_populates="grade", passive_deletes="all"
    )

    def __repr__(self) -> str:  # pragma: no cover - repr not critical
        return f"Grade(id={self.id!r}, name={self.name!r})"
