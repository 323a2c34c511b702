# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the API routers with mocked services."""

import csv
import io
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.api.dependencies import get_app_settings, get_uow
from src.api.routes.health import ComponentHealth
from src.core.config import ImportSettings, Settings
from src.domains.bulk_import.schemas import ImportKind, ImportResult, ImportStatus
from src.domains.enrollment.eligibility import DenialReason, EligibilityResult
from src.domains.enrollment.service import EnrollmentResult
from src.domains.student.service import DuplicateStudentEmailError, StudentNotFoundError


@pytest.fixture
def app(mock_uow):
    """Application with the unit of work replaced by a mock."""
    application = create_app()

    async def override_uow():
        yield mock_uow

    application.dependency_overrides[get_uow] = override_uow
    return application


@pytest.fixture
def client(app):
    """Test client; the lifespan is not run."""
    return TestClient(app)


class TestRoutes:
    """Tests for route registration."""

    def test_routes_registered(self, app):
        paths = {route.path for route in app.routes}

        assert "/health" in paths
        assert "/api/v1/students" in paths
        assert "/api/v1/courses/{course_id}/prerequisites" in paths
        assert "/api/v1/enrollments" in paths
        assert "/api/v1/grades/bulk" in paths
        assert "/api/v1/imports/{kind}" in paths
        assert "/api/v1/analytics/completion" in paths


class TestHealth:
    """Tests for the health endpoints."""

    def test_health(self, client):
        healthy = ComponentHealth(status="healthy", latency_ms=1.5)
        with patch("src.api.routes.health.check_database", AsyncMock(return_value=healthy)):
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_not_ready_without_database(self, client):
        down = ComponentHealth(status="unhealthy", message="Database not initialized")
        with patch("src.api.routes.health.check_database", AsyncMock(return_value=down)):
            response = client.get("/ready")

        assert response.json()["ready"] is False


class TestErrorMapping:
    """Tests for domain errors mapped to HTTP statuses."""

    def test_not_found_is_404(self, client):
        service = MagicMock()
        service.get_student = AsyncMock(side_effect=StudentNotFoundError("missing"))
        with patch("src.api.v1.students._get_service", return_value=service):
            response = client.get("/api/v1/students/missing")

        assert response.status_code == 404
        assert response.json() == {
            "error": "not_found",
            "detail": "Student with id missing not found",
        }

    def test_duplicate_email_is_409(self, client):
        service = MagicMock()
        service.register_student = AsyncMock(
            side_effect=DuplicateStudentEmailError("ada@example.edu")
        )
        payload = {"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.edu"}
        with patch("src.api.v1.students._get_service", return_value=service):
            response = client.post("/api/v1/students", json=payload)

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_invalid_email_is_422(self, client):
        payload = {"first_name": "Ada", "last_name": "Lovelace", "email": "not-an-email"}

        response = client.post("/api/v1/students", json=payload)

        assert response.status_code == 422


class TestEnrollmentRoutes:
    """Tests for the enrollment endpoints."""

    def test_refusal_is_200_with_reason(self, client):
        service = MagicMock()
        service.enroll_student = AsyncMock(
            return_value=EnrollmentResult(
                eligibility=EligibilityResult.denied(DenialReason.COURSE_FULL)
            )
        )
        with patch("src.api.v1.enrollments._get_service", return_value=service):
            response = client.post(
                "/api/v1/enrollments", json={"student_id": "s1", "course_id": "c1"}
            )

        assert response.status_code == 200
        body = response.json()
        assert body["enrollment"] is None
        assert body["eligibility"]["code"] == "course_full"
        assert body["eligibility"]["reason"] == "Course is full"

    def test_eligibility_check(self, client):
        service = MagicMock()
        service.check_eligibility = AsyncMock(
            return_value=EligibilityResult.denied(
                DenialReason.PREREQUISITES_NOT_MET,
                unmet_prerequisites=["c0"],
                unmet_prerequisite_codes=["CS100"],
            )
        )
        with patch("src.api.v1.enrollments._get_service", return_value=service):
            response = client.get(
                "/api/v1/enrollments/eligibility",
                params={"student_id": "s1", "course_id": "c1"},
            )

        assert response.status_code == 200
        assert response.json()["can_enroll"] is False
        assert response.json()["unmet_prerequisite_codes"] == ["CS100"]


class TestImportRoutes:
    """Tests for the batch import endpoints."""

    @pytest.mark.parametrize(
        ("status", "http_status"),
        [
            (ImportStatus.COMMITTED, 200),
            (ImportStatus.REJECTED, 400),
            (ImportStatus.ROLLED_BACK, 500),
        ],
    )
    def test_status_codes(self, client, status, http_status):
        importer = MagicMock()
        importer.import_file = AsyncMock(
            return_value=ImportResult(kind=ImportKind.COURSES, status=status, batch_id="b1")
        )
        with patch("src.api.v1.imports._get_service", return_value=importer):
            response = client.post(
                "/api/v1/imports/courses",
                files={"file": ("courses.csv", b"CourseCode\n", "text/csv")},
            )

        assert response.status_code == http_status
        assert response.json()["status"] == status.value

    def test_oversized_upload_is_413(self, app, client):
        app.dependency_overrides[get_app_settings] = lambda: Settings(
            _env_file=None, imports=ImportSettings(max_file_mb=1)
        )

        response = client.post(
            "/api/v1/imports/students",
            files={"file": ("students.csv", b"x" * (1024 * 1024 + 1), "text/csv")},
        )

        assert response.status_code == 413

    def test_unknown_kind_is_422(self, client):
        response = client.post(
            "/api/v1/imports/instructors",
            files={"file": ("t.csv", b"a\n", "text/csv")},
        )

        assert response.status_code == 422

    def test_csv_template(self, client):
        response = client.get("/api/v1/imports/enrollments/template")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "enrollments" in response.headers["content-disposition"]
        header = next(csv.reader(io.StringIO(response.text.lstrip("\ufeff"))))
        assert header == ["StudentEmail", "CourseCode", "EnrollmentDate"]

    def test_xlsx_template(self, client):
        response = client.get("/api/v1/imports/courses/template", params={"format": "xlsx"})

        assert response.status_code == 200
        assert response.content[:2] == b"PK"
