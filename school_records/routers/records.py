"""Create, list and delete endpoints for the school record entities."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status

from ..dependencies import get_records
from ..schemas import GradeRecord, GuardianRecord, StreamRecord, StudentRecord, TeacherRecord
from ..security import hash_password
from ..services import RecordService

router = APIRouter(tags=["records"])

STUDENT_RELATIONS = ("guardian", "grade", "stream")

# URL collection -> entity name
COLLECTIONS = {
    "grades": "grade",
    "streams": "stream",
    "teachers": "teacher",
    "guardians": "guardian",
    "students": "student",
}


def _page(
    records: RecordService,
    entity: str,
    order_by: Optional[List[str]],
    skip: int,
    take: Optional[int],
    include: tuple[str, ...] = (),
) -> list:
    return list(
        records.find_many(entity, order_by=order_by or None, skip=skip, take=take, include=include)
    )


@router.post("/grades", response_model=GradeRecord, status_code=status.HTTP_201_CREATED)
def create_grade(
    payload: Dict[str, Any] = Body(...), records: RecordService = Depends(get_records)
) -> GradeRecord:
    return records.create("grade", payload)


@router.post("/streams", response_model=StreamRecord, status_code=status.HTTP_201_CREATED)
def create_stream(
    payload: Dict[str, Any] = Body(...), records: RecordService = Depends(get_records)
) -> StreamRecord:
    return records.create("stream", payload)


@router.get("/streams", response_model=List[StreamRecord])
def list_streams(
    order_by: Optional[List[str]] = Query(None, alias="orderBy"),
    skip: int = 0,
    take: Optional[int] = None,
    records: RecordService = Depends(get_records),
) -> List[StreamRecord]:
    return _page(records, "stream", order_by, skip, take)


@router.post("/teachers", response_model=TeacherRecord, status_code=status.HTTP_201_CREATED)
def create_teacher(
    payload: Dict[str, Any] = Body(...), records: RecordService = Depends(get_records)
) -> TeacherRecord:
    return records.create("teacher", payload)


@router.get("/teachers", response_model=List[TeacherRecord])
def list_teachers(
    order_by: Optional[List[str]] = Query(None, alias="orderBy"),
    skip: int = 0,
    take: Optional[int] = None,
    records: RecordService = Depends(get_records),
) -> List[TeacherRecord]:
    return _page(records, "teacher", order_by, skip, take, ("stream",))


@router.post("/guardians", response_model=GuardianRecord, status_code=status.HTTP_201_CREATED)
def create_guardian(
    payload: Dict[str, Any] = Body(...), records: RecordService = Depends(get_records)
) -> GuardianRecord:
    return records.create("guardian", payload)


@router.get("/guardians", response_model=List[GuardianRecord])
def list_guardians(
    order_by: Optional[List[str]] = Query(None, alias="orderBy"),
    skip: int = 0,
    take: Optional[int] = None,
    records: RecordService = Depends(get_records),
) -> List[GuardianRecord]:
    return _page(records, "guardian", order_by, skip, take)


@router.post("/students", response_model=StudentRecord, status_code=status.HTTP_201_CREATED)
def create_student(
    payload: Dict[str, Any] = Body(...), records: RecordService = Depends(get_records)
) -> StudentRecord:
    # The store keeps only hashes; plain passwords are hashed on the way in.
    password = payload.get("password")
    if isinstance(password, str) and password.strip():
        payload = {**payload, "password": hash_password(password)}
    return records.create("student", payload, include=STUDENT_RELATIONS)


@router.get("/students", response_model=List[StudentRecord])
def list_students(
    order_by: Optional[List[str]] = Query(None, alias="orderBy"),
    skip: int = 0,
    take: Optional[int] = None,
    records: RecordService = Depends(get_records),
) -> List[StudentRecord]:
    return _page(records, "student", order_by, skip, take, STUDENT_RELATIONS)


@router.get("/students/{student_id}", response_model=StudentRecord)
def get_student(
    student_id: str, records: RecordService = Depends(get_records)
) -> StudentRecord:
    student = records.students.find_one(student_id, include=STUDENT_RELATIONS)
    if student is None:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


@router.delete("/{collection}/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_record(
    collection: str, record_id: str, records: RecordService = Depends(get_records)
) -> Response:
    entity = COLLECTIONS.get(collection)
    if entity is None:
        raise HTTPException(status_code=404, detail=f"Unknown collection {collection!r}")
    records.delete(entity, record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
