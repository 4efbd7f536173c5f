"""User account model."""
from __future__ import annotations

import enum

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from school_records.db import Base
from school_records.db.models.common import TimestampMixin, enum_column


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    STAFF = "STAFF"


class User(TimestampMixin, Base):
    """An account able to sign in; independent of the school records graph."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    # Always an opaque hash; hashing happens before the store is called.
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        enum_column(UserRole, "user_role"), nullable=False, default=UserRole.STAFF
    )
    image: Mapped[str | None] = mapped_column(String(512), nullable=True)
    first_name: Mapped[str | None] = mapped_column("firstName", String(128), nullable=True)
    last_name: Mapped[str | None] = mapped_column("lastName", String(128), nullable=True)
    is_active: Mapped[bool] = mapped_column("isActive", Boolean, nullable=False, default=True)

    def __repr__(self) -> str:  # pragma: no cover - repr not critical
        return f"User(id={self.id!r}, email={self.email!r}, role={self.role!r})"
