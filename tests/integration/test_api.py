# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""End-to-end API tests against a real database."""

import httpx
import pytest
import pytest_asyncio

from src.api.app import create_app
from src.api.dependencies import get_uow
from src.infrastructure.database.unit_of_work import UnitOfWork

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def client(db_sessionmaker):
    """HTTP client whose requests each get a session on the test database."""
    app = create_app()

    async def override_uow():
        async with db_sessionmaker() as session:
            yield UnitOfWork(session)
            await session.commit()

    app.dependency_overrides[get_uow] = override_uow
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


async def _register(client, email: str) -> dict:
    response = await client.post(
        "/api/v1/students",
        json={"first_name": "Grace", "last_name": "Hopper", "email": email},
    )
    assert response.status_code == 201
    return response.json()


class TestStudentsApi:
    """Student registration over HTTP."""

    @pytest.mark.asyncio
    async def test_register_and_fetch(self, client):
        created = await _register(client, "grace@example.edu")

        response = await client.get(f"/api/v1/students/{created['id']}")

        assert response.status_code == 200
        assert response.json()["email"] == "grace@example.edu"
        assert response.json()["gpa"] is None
        assert created["student_number"].startswith("STU")

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client):
        await _register(client, "dup@example.edu")

        response = await client.post(
            "/api/v1/students",
            json={"first_name": "Other", "last_name": "Person", "email": "DUP@example.edu"},
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_email_of_deleted_student_is_409(self, client):
        created = await _register(client, "left@example.edu")
        deleted = await client.delete(f"/api/v1/students/{created['id']}")
        assert deleted.status_code == 204

        response = await client.post(
            "/api/v1/students",
            json={"first_name": "Grace", "last_name": "Hopper", "email": "left@example.edu"},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"


class TestEnrollmentApi:
    """Course creation, enrollment and completion over HTTP."""

    @pytest.mark.asyncio
    async def test_enroll_grade_and_complete(self, client):
        student = await _register(client, "flow@example.edu")
        course = (
            await client.post(
                "/api/v1/courses",
                json={"code": "CS101", "title": "Intro", "credits": 4, "capacity": 1},
            )
        ).json()

        enrolled = await client.post(
            "/api/v1/enrollments", json={"student_id": student["id"], "course_id": course["id"]}
        )
        assert enrolled.status_code == 201
        enrollment_id = enrolled.json()["enrollment"]["id"]

        again = await client.post(
            "/api/v1/enrollments", json={"student_id": student["id"], "course_id": course["id"]}
        )
        assert again.status_code == 200
        assert again.json()["eligibility"]["code"] == "already_enrolled"

        grade = await client.post(
            "/api/v1/grades",
            json={
                "student_id": student["id"],
                "course_id": course["id"],
                "grade_type": "Final",
                "value": "85",
                "max_value": "100",
            },
        )
        assert grade.status_code == 201
        assert grade.json()["letter_grade"] == "B"

        completed = await client.post(f"/api/v1/enrollments/{enrollment_id}/complete", json={})
        assert completed.status_code == 200
        assert completed.json()["status"] == "Completed"

        refreshed = (await client.get(f"/api/v1/students/{student['id']}")).json()
        assert refreshed["gpa"] in ("3.40", "3.4", 3.4)
        assert refreshed["total_credits_earned"] == 4


class TestCoursesApi:
    """Course creation over HTTP."""

    @pytest.mark.asyncio
    async def test_code_of_deleted_course_is_409(self, client):
        payload = {"code": "HIS101", "title": "History", "credits": 3, "capacity": 10}
        created = (await client.post("/api/v1/courses", json=payload)).json()
        deleted = await client.delete(f"/api/v1/courses/{created['id']}")
        assert deleted.status_code == 204

        response = await client.post("/api/v1/courses", json=payload)

        assert response.status_code == 409


class TestImportApi:
    """Batch imports over HTTP."""

    @pytest.mark.asyncio
    async def test_import_students_csv(self, client):
        content = (
            "FirstName,LastName,Email,PhoneNumber,DateOfBirth,EnrollmentDate,Address,City,State,ZipCode\n"
            "Ada,Lovelace,ada@example.edu,,1990-12-10,,,,,\n"
            "Alan,Turing,not-an-email,,,,,,,\n"
        ).encode("utf-8")

        response = await client.post(
            "/api/v1/imports/students",
            files={"file": ("students.csv", content, "text/csv")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "committed"
        assert (body["successful_rows"], body["failed_rows"]) == (1, 1)
        assert body["row_errors"][0]["row_number"] == 3

        listing = (await client.get("/api/v1/students")).json()
        assert listing["total"] == 1

    @pytest.mark.asyncio
    async def test_bad_header_is_400(self, client):
        response = await client.post(
            "/api/v1/imports/courses",
            files={"file": ("courses.csv", b"Code,Name\nCS1,Intro\n", "text/csv")},
        )

        assert response.status_code == 400
        assert response.json()["status"] == "rejected"
        assert response.json()["errors"][0] == "Column headers do not match expected format"
