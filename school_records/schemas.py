"""Pydantic schemas shared across the record store."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationInfo,
    field_serializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .db.models import ContactMethod, EmploymentType, Gender, UserRole
from .utils import slugify


class InputModel(BaseModel):
    """Base for create payloads; accepts snake_case or camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def blank_optional_to_none(cls, value: Any, info: ValidationInfo) -> Any:
        field = cls.model_fields.get(info.field_name)
        if value == "" and field is not None and not field.is_required():
            return None
        return value


class RecordModel(BaseModel):
    """Base for plain result records returned by the access layer."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------------------------------------------------------------------------
# Create payloads
# ---------------------------------------------------------------------------


class UserCreate(InputModel):
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=64)
    password: str = Field(..., min_length=1, description="Already-hashed password")
    role: UserRole = UserRole.STAFF
    image: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool = True


class GradeCreate(InputModel):
    name: str = Field(..., min_length=1, max_length=128)
    slug: Optional[str] = Field(default=None, max_length=128)

    @model_validator(mode="after")
    def default_slug(self) -> "GradeCreate":
        if not self.slug:
            self.slug = slugify(self.name)
        return self


class StreamCreate(InputModel):
    name: str = Field(..., min_length=1, max_length=128)
    slug: Optional[str] = Field(default=None, max_length=128)
    grade_id: str = Field(..., min_length=1)
    teacher_id: Optional[str] = None

    @model_validator(mode="after")
    def default_slug(self) -> "StreamCreate":
        if not self.slug:
            self.slug = slugify(self.name)
        return self


class PreviousEmployment(InputModel):
    institution: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    start_date: str = Field(..., min_length=1)
    end_date: str = Field(..., min_length=1)
    reason_for_leaving: str = Field(..., min_length=1)


class TeacherCreate(InputModel):
    # Personal information
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    email: EmailStr
    phone: str = Field(..., min_length=10)
    alternate_phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None

    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None

    # Professional information
    highest_qualification: Optional[str] = None
    specialization: Optional[str] = None
    teaching_experience: Optional[str] = None
    subjects_can_teach: List[str] = Field(default_factory=list)
    grades_can_teach: List[str] = Field(default_factory=list)

    employment_type: Optional[EmploymentType] = None
    joining_date: Optional[date] = None
    position: Optional[str] = None
    department: Optional[str] = None
    previous_employments: List[PreviousEmployment] = Field(default_factory=list)

    certifications: Optional[str] = None
    skills: Optional[str] = None
    languages: Optional[str] = None
    additional_notes: Optional[str] = None

    @field_serializer("previous_employments")
    def dump_previous_employments(self, items: List[PreviousEmployment]) -> list[dict[str, str]]:
        # Stored as JSON with the same camelCase keys clients send.
        return [item.model_dump(by_alias=True) for item in items]


class GuardianCreate(InputModel):
    name: str = Field(..., min_length=2)
    relationship_to_student: Optional[str] = Field(default=None, alias="relationship")
    phone: str = Field(..., min_length=10)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    occupation: Optional[str] = None
    date_of_birth: Optional[date] = None
    education_level: Optional[str] = None
    preferred_contact_method: ContactMethod = ContactMethod.BOTH
    notes: Optional[str] = None


class StudentCreate(InputModel):
    # Personal information
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    date_of_birth: str = Field(..., min_length=1)
    gender: str = Field(..., min_length=1)
    guardian_id: str = Field(..., min_length=1)

    # Contact information
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None

    # Address
    street_address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: Optional[str] = None

    # Academic information
    admission_number: str = Field(..., min_length=1)
    grade_id: str = Field(..., min_length=1)
    stream_id: str = Field(..., min_length=1)
    enrollment_date: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1, description="Already-hashed password")

    message: Optional[str] = None


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------


class TimestampedRecord(RecordModel):
    created_at: datetime
    updated_at: datetime


class UserRecord(TimestampedRecord):
    id: int
    email: str
    username: str
    password: Optional[str] = Field(default=None, exclude=True, repr=False)
    role: UserRole
    image: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool


class GradeRecord(TimestampedRecord):
    id: str
    slug: str
    name: str

    streams: Optional[List["StreamRecord"]] = None
    students: Optional[List["StudentRecord"]] = None


class StreamRecord(TimestampedRecord):
    id: str
    name: str
    slug: str
    grade_id: str
    teacher_id: Optional[str] = None

    grade: Optional[GradeRecord] = None
    teacher: Optional["TeacherRecord"] = None
    students: Optional[List["StudentRecord"]] = None


class TeacherRecord(TimestampedRecord):
    id: str
    first_name: str
    last_name: str
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    email: str
    phone: str
    alternate_phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None
    highest_qualification: Optional[str] = None
    specialization: Optional[str] = None
    teaching_experience: Optional[str] = None
    subjects_can_teach: List[str] = Field(default_factory=list)
    grades_can_teach: List[str] = Field(default_factory=list)
    employment_type: Optional[EmploymentType] = None
    joining_date: Optional[date] = None
    position: Optional[str] = None
    department: Optional[str] = None
    previous_employments: List[PreviousEmployment] = Field(default_factory=list)
    certifications: Optional[str] = None
    skills: Optional[str] = None
    languages: Optional[str] = None
    additional_notes: Optional[str] = None

    stream: Optional[StreamRecord] = None


class GuardianRecord(TimestampedRecord):
    id: str
    name: str
    relationship_to_student: Optional[str] = Field(default=None, alias="relationship")
    phone: str
    email: Optional[str] = None
    address: Optional[str] = None
    occupation: Optional[str] = None
    date_of_birth: Optional[date] = None
    education_level: Optional[str] = None
    preferred_contact_method: ContactMethod
    notes: Optional[str] = None

    students: Optional[List["StudentRecord"]] = None


class StudentRecord(TimestampedRecord):
    id: str
    first_name: str
    last_name: str
    date_of_birth: str
    gender: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    street_address: str
    city: str
    state: str
    zip_code: Optional[str] = None
    admission_number: str
    enrollment_date: str
    password: Optional[str] = Field(default=None, exclude=True, repr=False)
    message: Optional[str] = None
    guardian_id: str
    grade_id: str
    stream_id: str

    guardian: Optional[GuardianRecord] = None
    grade: Optional[GradeRecord] = None
    stream: Optional[StreamRecord] = None


for _record in (GradeRecord, StreamRecord, TeacherRecord, GuardianRecord, StudentRecord):
    _record.model_rebuild()


# ---------------------------------------------------------------------------
# Overviews
# ---------------------------------------------------------------------------


class GradeSummary(RecordModel):
    id: str
    name: str
    streams: int
    students: int


class GradeStreamSummary(RecordModel):
    id: str
    name: str
    slug: str
    class_teacher: Optional[str] = None
    students: int


class HealthStatus(RecordModel):
    status: str
    timestamp: datetime
    database: bool
    uptime: float
    environment: str
    error: Optional[str] = None
