"""Initial school records schema."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20250301_000001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("createdAt", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updatedAt", sa.DateTime(timezone=True), nullable=False),
    ]


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False, create_constraint=True)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("role", _enum("user_role", "ADMIN", "TEACHER", "STUDENT", "STAFF"), nullable=False),
        sa.Column("image", sa.String(length=512), nullable=True),
        sa.Column("firstName", sa.String(length=128), nullable=True),
        sa.Column("lastName", sa.String(length=128), nullable=True),
        sa.Column("isActive", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    op.create_table(
        "grades",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("slug", sa.String(length=128), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_grades"),
        sa.UniqueConstraint("slug", name="uq_grades_slug"),
        sa.UniqueConstraint("name", name="uq_grades_name"),
    )

    op.create_table(
        "teachers",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("firstName", sa.String(length=128), nullable=False),
        sa.Column("lastName", sa.String(length=128), nullable=False),
        sa.Column("dateOfBirth", sa.Date(), nullable=True),
        sa.Column("gender", _enum("teacher_gender", "male", "female", "other"), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=False),
        sa.Column("alternatePhone", sa.String(length=32), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=128), nullable=True),
        sa.Column("state", sa.String(length=128), nullable=True),
        sa.Column("zipCode", sa.String(length=16), nullable=True),
        sa.Column("emergencyContactName", sa.String(length=255), nullable=True),
        sa.Column("emergencyContactPhone", sa.String(length=32), nullable=True),
        sa.Column("emergencyContactRelationship", sa.String(length=64), nullable=True),
        sa.Column("highestQualification", sa.String(length=255), nullable=True),
        sa.Column("specialization", sa.String(length=255), nullable=True),
        sa.Column("teachingExperience", sa.String(length=64), nullable=True),
        sa.Column("subjectsCanTeach", sa.JSON(), nullable=False),
        sa.Column("gradesCanTeach", sa.JSON(), nullable=False),
        sa.Column(
            "employmentType",
            _enum("employment_type", "full_time", "part_time", "contract"),
            nullable=True,
        ),
        sa.Column("joiningDate", sa.Date(), nullable=True),
        sa.Column("position", sa.String(length=128), nullable=True),
        sa.Column("department", sa.String(length=128), nullable=True),
        sa.Column("previousEmployments", sa.JSON(), nullable=False),
        sa.Column("certifications", sa.Text(), nullable=True),
        sa.Column("skills", sa.Text(), nullable=True),
        sa.Column("languages", sa.Text(), nullable=True),
        sa.Column("additionalNotes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_teachers"),
    )

    op.create_table(
        "guardians",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("relationship", sa.String(length=64), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("occupation", sa.String(length=128), nullable=True),
        sa.Column("dateOfBirth", sa.Date(), nullable=True),
        sa.Column("educationLevel", sa.String(length=128), nullable=True),
        sa.Column(
            "preferredContactMethod",
            _enum("contact_method", "phone", "email", "both"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_guardians"),
    )

    op.create_table(
        "streams",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("slug", sa.String(length=128), nullable=False),
        sa.Column("gradeId", sa.String(length=36), nullable=False),
        sa.Column("teacherId", sa.String(length=36), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["gradeId"], ["grades.id"], name="fk_streams_gradeId_grades", ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(
            ["teacherId"], ["teachers.id"], name="fk_streams_teacherId_teachers", ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_streams"),
        sa.UniqueConstraint("name", name="uq_streams_name"),
        sa.UniqueConstraint("teacherId", name="uq_streams_teacherId"),
    )
    op.create_index("ix_streams_gradeId", "streams", ["gradeId"], unique=False)

    op.create_table(
        "students",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("firstName", sa.String(length=128), nullable=False),
        sa.Column("lastName", sa.String(length=128), nullable=False),
        sa.Column("dateOfBirth", sa.String(length=32), nullable=False),
        sa.Column("gender", sa.String(length=32), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phoneNumber", sa.String(length=32), nullable=True),
        sa.Column("streetAddress", sa.String(length=255), nullable=False),
        sa.Column("city", sa.String(length=128), nullable=False),
        sa.Column("state", sa.String(length=128), nullable=False),
        sa.Column("zipCode", sa.String(length=16), nullable=True),
        sa.Column("admissionNumber", sa.String(length=64), nullable=False),
        sa.Column("enrollmentDate", sa.String(length=32), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("guardianId", sa.String(length=36), nullable=False),
        sa.Column("gradeId", sa.String(length=36), nullable=False),
        sa.Column("streamId", sa.String(length=36), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["guardianId"], ["guardians.id"], name="fk_students_guardianId_guardians", ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(
            ["gradeId"], ["grades.id"], name="fk_students_gradeId_grades", ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(
            ["streamId"], ["streams.id"], name="fk_students_streamId_streams", ondelete="RESTRICT"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_students"),
        sa.UniqueConstraint("email", name="uq_students_email"),
        sa.UniqueConstraint("admissionNumber", name="uq_students_admissionNumber"),
    )
    op.create_index("ix_students_guardianId", "students", ["guardianId"], unique=False)
    op.create_index("ix_students_gradeId", "students", ["gradeId"], unique=False)
    op.create_index("ix_students_streamId", "students", ["streamId"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_students_streamId", table_name="students")
    op.drop_index("ix_students_gradeId", table_name="students")
    op.drop_index("ix_students_guardianId", table_name="students")
    op.drop_table("students")
    op.drop_index("ix_streams_gradeId", table_name="streams")
    op.drop_table("streams")
    op.drop_table("guardians")
    op.drop_table("teachers")
    op.drop_table("grades")
    op.drop_table("users")
