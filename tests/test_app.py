from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from school_records.app import create_app
from school_records.db import RecordStore
from school_records.db.models import Student
from school_records.security import verify_password
from school_records.services import RecordService


@pytest.fixture()
def store(tmp_path) -> RecordStore:
    return RecordStore(f"sqlite:///{tmp_path / 'app.db'}")


@pytest.fixture()
def client(store: RecordStore) -> Iterator[TestClient]:
    with TestClient(create_app(store)) as client:
        yield client


@pytest.fixture()
def enrolled(client: TestClient) -> dict[str, str]:
    records: RecordService = client.app.state.records
    grade = records.create("grade", {"name": "Grade 5"})
    teacher = records.create(
        "teacher",
        {"firstName": "Sarah", "lastName": "Johnson", "email": "s@school.com", "phone": "0712345678"},
    )
    stream = records.create("stream", {"name": "5A", "gradeId": grade.id, "teacherId": teacher.id})
    guardian = records.create(
        "guardian", {"name": "Mary Doe", "relationship": "Mother", "phone": "0798765432"}
    )
    student = records.create(
        "student",
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
            "password": "$2b$12$hashed",
        },
    )
    return {
        "grade": grade.id,
        "stream": stream.id,
        "guardian": guardian.id,
        "student": student.id,
    }


def student_payload(enrolled: dict[str, str], **overrides) -> dict[str, str]:
    payload = {
        "firstName": "Brian",
        "lastName": "Otieno",
        "dateOfBirth": "2014-06-11",
        "gender": "male",
        "guardianId": enrolled["guardian"],
        "streetAddress": "4 Station Lane",
        "city": "Nairobi",
        "state": "Nairobi",
        "admissionNumber": "A101",
        "gradeId": enrolled["grade"],
        "streamId": enrolled["stream"],
        "enrollmentDate": "2024-01-08",
        "password": "student123",
    }
    payload.update(overrides)
    return payload


def test_health_reports_database_status(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["database"] is True
    assert payload["environment"]
    assert payload["uptime"] >= 0


def test_health_returns_503_when_store_unavailable(client: TestClient, store: RecordStore) -> None:
    store.close()

    response = client.get("/health")

    assert response.status_code == 503
    payload = response.json()
    assert payload["status"] == "error"
    assert payload["database"] is False
    assert payload["error"]


def test_grade_overview(client: TestClient, enrolled) -> None:
    response = client.get("/grades")

    assert response.status_code == 200
    assert response.json() == [
        {"id": enrolled["grade"], "name": "Grade 5", "streams": 1, "students": 1}
    ]


def test_grade_streams(client: TestClient, enrolled) -> None:
    response = client.get(f"/grades/{enrolled['grade']}/streams")

    assert response.status_code == 200
    assert response.json() == [
        {
            "id": enrolled["stream"],
            "name": "5A",
            "slug": "5a",
            "classTeacher": "Sarah",
            "students": 1,
        }
    ]


def test_grade_streams_for_unknown_grade(client: TestClient) -> None:
    response = client.get("/grades/missing/streams")

    assert response.status_code == 404


def test_student_lookup(client: TestClient, enrolled) -> None:
    response = client.get(f"/students/{enrolled['student']}")

    assert response.status_code == 200
    payload = response.json()
    assert payload["admissionNumber"] == "A100"
    assert payload["grade"]["name"] == "Grade 5"
    assert payload["stream"]["name"] == "5A"
    assert payload["guardian"]["relationship"] == "Mother"
    assert "password" not in payload


def test_unknown_student_is_404(client: TestClient) -> None:
    response = client.get("/students/missing")

    assert response.status_code == 404
    assert response.json()["detail"] == "Student not found"


def test_store_unavailable_maps_to_503(client: TestClient, store: RecordStore) -> None:
    store.close()

    response = client.get("/grades")

    assert response.status_code == 503
    assert response.json()["detail"] == "Record store unavailable"


def test_create_student_with_relations(client: TestClient, enrolled) -> None:
    response = client.post("/students", json=student_payload(enrolled))

    assert response.status_code == 201
    payload = response.json()
    assert payload["admissionNumber"] == "A101"
    assert payload["grade"]["name"] == "Grade 5"
    assert payload["guardian"]["id"] == enrolled["guardian"]
    assert "password" not in payload

    records: RecordService = client.app.state.records
    with records.store.read_session() as session:
        stored = session.scalar(
            select(Student.password).where(Student.admission_number == "A101")
        )
    assert stored != "student123"
    assert verify_password("student123", stored)


def test_duplicate_admission_number_is_409(client: TestClient, enrolled) -> None:
    response = client.post("/students", json=student_payload(enrolled, admissionNumber="A100"))

    assert response.status_code == 409
    assert response.json()["field"] == "admissionNumber"


def test_unknown_guardian_is_400(client: TestClient, enrolled) -> None:
    response = client.post("/students", json=student_payload(enrolled, guardianId="missing"))

    assert response.status_code == 400
    assert response.json()["field"] == "guardianId"


def test_stream_outside_grade_is_400(client: TestClient, enrolled) -> None:
    other = client.post("/grades", json={"name": "Grade 6"}).json()

    response = client.post("/students", json=student_payload(enrolled, gradeId=other["id"]))

    assert response.status_code == 400
    assert response.json()["field"] == "streamId"


def test_invalid_payload_is_422(client: TestClient, enrolled) -> None:
    response = client.post(
        "/students", json=student_payload(enrolled, firstName="", email="not-an-email")
    )

    assert response.status_code == 422
    fields = {tuple(error["loc"]) for error in response.json()["errors"]}
    assert ("first_name",) in fields or ("firstName",) in fields


def test_create_and_list_streams(client: TestClient, enrolled) -> None:
    teacher = client.post(
        "/teachers",
        json={
            "firstName": "Paul",
            "lastName": "Mwangi",
            "email": "p@school.com",
            "phone": "0700111222",
        },
    )
    assert teacher.status_code == 201

    created = client.post(
        "/streams",
        json={"name": "5B", "gradeId": enrolled["grade"], "teacherId": teacher.json()["id"]},
    )
    assert created.status_code == 201
    assert created.json()["slug"] == "5b"

    listed = client.get("/streams", params={"orderBy": "-name"})
    assert listed.status_code == 200
    assert [item["name"] for item in listed.json()] == ["5B", "5A"]

    taken = client.post(
        "/streams",
        json={"name": "5C", "gradeId": enrolled["grade"], "teacherId": teacher.json()["id"]},
    )
    assert taken.status_code == 409
    assert taken.json()["field"] == "teacherId"


def test_list_students_and_teachers(client: TestClient, enrolled) -> None:
    students = client.get("/students").json()
    assert [s["admissionNumber"] for s in students] == ["A100"]
    assert students[0]["stream"]["name"] == "5A"

    teachers = client.get("/teachers").json()
    assert [(t["firstName"], t["stream"]["name"]) for t in teachers] == [("Sarah", "5A")]

    guardians = client.get("/guardians", params={"take": 1}).json()
    assert [g["name"] for g in guardians] == ["Mary Doe"]


def test_list_rejects_bad_ordering_and_paging(client: TestClient, enrolled) -> None:
    assert client.get("/students", params={"orderBy": "nickname"}).status_code == 400
    assert client.get("/guardians", params={"skip": -1}).status_code == 400


def test_delete_with_dependents_is_409(client: TestClient, enrolled) -> None:
    response = client.delete(f"/grades/{enrolled['grade']}")

    assert response.status_code == 409
    assert response.json()["dependents"]
    assert client.get("/grades").json()[0]["students"] == 1


def test_delete_student_then_guardian(client: TestClient, enrolled) -> None:
    assert client.delete(f"/students/{enrolled['student']}").status_code == 204
    assert client.delete(f"/guardians/{enrolled['guardian']}").status_code == 204
    assert client.get(f"/students/{enrolled['student']}").status_code == 404
    assert client.delete(f"/guardians/{enrolled['guardian']}").status_code == 404
    assert client.delete(f"/courses/{enrolled['grade']}").status_code == 404
