"""Development fixture helpers."""
from __future__ import annotations

import logging
from typing import Any, Mapping

from passlib.context import CryptContext

from school_records.db import RecordStore
from school_records.db.models import UserRole
from school_records.schemas import GradeRecord, GuardianRecord, TeacherRecord, UserRecord
from school_records.security import hash_password
from school_records.services import RecordService

LOGGER = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@school.com"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"

DEV_USERS: tuple[dict[str, Any], ...] = (
    {
        "username": "admin",
        "email": ADMIN_EMAIL,
        "first_name": "Admin",
        "last_name": "User",
        "role": UserRole.ADMIN,
        "password": ADMIN_PASSWORD,
    },
    {
        "username": "teacher1",
        "email": "teacher@school.com",
        "first_name": "Sarah",
        "last_name": "Johnson",
        "role": UserRole.TEACHER,
        "password": "teacher123",
    },
    {
        "username": "staff1",
        "email": "staff@school.com",
        "first_name": "Mike",
        "last_name": "Wilson",
        "role": UserRole.STAFF,
        "password": "staff123",
    },
    {
        "username": "teacher2",
        "email": "john.doe@school.com",
        "first_name": "John",
        "last_name": "Doe",
        "role": UserRole.TEACHER,
        "password": "teacher123",
    },
)


def create_admin_user(
    service: RecordService, *, context: CryptContext | None = None
) -> tuple[UserRecord, bool]:
    """Create the bootstrap administrator unless one already uses its email.

    Returns the account and whether it was created by this call.
    """
    existing = service.users.find_one({"email": ADMIN_EMAIL})
    if existing is not None:
        LOGGER.info("Admin user already exists")
        return existing, False

    admin = service.users.create(
        {
            "email": ADMIN_EMAIL,
            "username": ADMIN_USERNAME,
            "password": hash_password(ADMIN_PASSWORD, context),
            "role": UserRole.ADMIN,
        }
    )
    LOGGER.info("Admin user created: id=%s email=%s", admin.id, admin.email)
    return admin, True


def _first(service: RecordService, entity: str, where: Mapping[str, Any]):
    matches = list(service.find_many(entity, where, take=1))
    return matches[0] if matches else None


def _ensure_teacher(service: RecordService) -> TeacherRecord:
    teacher = _first(service, "teacher", {"email": "sarah.johnson@school.com"})
    if teacher is None:
        teacher = service.teachers.create(
            {
                "firstName": "Sarah",
                "lastName": "Johnson",
                "email": "sarah.johnson@school.com",
                "phone": "0712345678",
                "gender": "female",
                "employmentType": "full_time",
                "subjectsCanTeach": ["Mathematics", "Science"],
                "gradesCanTeach": ["Grade 5"],
                "position": "Class Teacher",
                "department": "Sciences",
            }
        )
    return teacher


def _ensure_guardian(service: RecordService) -> GuardianRecord:
    guardian = _first(service, "guardian", {"phone": "0798765432"})
    if guardian is None:
        guardian = service.guardians.create(
            {
                "name": "Mary Doe",
                "relationship": "Mother",
                "phone": "0798765432",
                "email": "mary.doe@school.com",
                "preferredContactMethod": "phone",
            }
        )
    return guardian


def seed_dev_data(
    service: RecordService, *, context: CryptContext | None = None
) -> dict[str, int]:
    """Populate the database with demo accounts and one enrolled student.

    Safe to run repeatedly: every row is looked up or upserted by a natural key.
    """
    for user in DEV_USERS:
        fields = {**user, "password": hash_password(user["password"], context)}
        record = service.users.upsert({"email": user["email"]}, fields, {})
        LOGGER.info("Seeded user %s (%s)", record.email, record.role.value)

    grade: GradeRecord = service.grades.upsert({"name": "Grade 5"}, {"name": "Grade 5"}, {})
    teacher = _ensure_teacher(service)
    stream = service.streams.upsert(
        {"name": "5A"},
        {"name": "5A", "gradeId": grade.id, "teacherId": teacher.id},
        {},
    )
    guardian = _ensure_guardian(service)
    service.students.upsert(
        {"admissionNumber": "A100"},
        {
            "firstName": "Jane",
            "lastName": "Doe",
            "dateOfBirth": "2014-03-02",
            "gender": "female",
            "guardianId": guardian.id,
            "streetAddress": "12 Market Road",
            "city": "Nairobi",
            "state": "Nairobi",
            "admissionNumber": "A100",
            "gradeId": grade.id,
            "streamId": stream.id,
            "enrollmentDate": "2024-01-08",
            "password": hash_password("student123", context),
        },
        {},
    )

    counts = {
        entity: service.count(entity)
        for entity in ("user", "grade", "stream", "teacher", "guardian", "student")
    }
    LOGGER.info("Seed complete: %s", counts)
    return counts


def main() -> None:  # pragma: no cover - command line entry point
    logging.basicConfig(level=logging.INFO)
    with RecordStore() as store:
        store.init_db()
        service = RecordService(store)
        create_admin_user(service)
        seed_dev_data(service)


if __name__ == "__main__":  # pragma: no cover
    main()
