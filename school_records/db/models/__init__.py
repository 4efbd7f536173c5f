"""SQLAlchemy model package."""
from school_records.db.models.grade import Grade
from school_records.db.models.guardian import ContactMethod, Guardian
from school_records.db.models.stream import Stream
from school_records.db.models.student import Student
from school_records.db.models.teacher import EmploymentType, Gender, Teacher
from school_records.db.models.user import User, UserRole

__all__ = [
    "ContactMethod",
    "EmploymentType",
    "Gender",
    "Grade",
    "Guardian",
    "Stream",
    "Student",
    "Teacher",
    "User",
    "UserRole",
]
