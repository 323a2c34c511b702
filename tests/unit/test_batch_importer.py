# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for BatchImporter with mocked domain services."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.core.config import ImportSettings
from src.domains.bulk_import.schemas import ImportKind, ImportStatus
from src.domains.bulk_import.service import (
    CONSTRAINT_VIOLATION,
    HEADER_MISMATCH,
    ROLLED_BACK_MESSAGE,
    BatchImporter,
)
from src.domains.enrollment.eligibility import DenialReason, EligibilityResult
from src.domains.enrollment.service import EnrollmentResult
from src.domains.student.service import DuplicateStudentEmailError

STUDENT_HEADER = "FirstName,LastName,Email,PhoneNumber,DateOfBirth,EnrollmentDate,Address,City,State,ZipCode"


def _students_csv(rows: list[str]) -> bytes:
    return "\n".join([STUDENT_HEADER, *rows]).encode("utf-8")


def _student_line(n: int, date_of_birth: str = "2004-01-15", email: str | None = None) -> str:
    email = email or f"student{n}@example.edu"
    return f"First{n},Last{n},{email},,{date_of_birth},2024-09-01,,,,"


@pytest.fixture
def settings():
    """Import limits for tests."""
    return ImportSettings(max_rows=100, max_file_mb=1, validate_schema=True)


@pytest.fixture
def importer(mock_uow, settings):
    """Importer whose student service records every staged email."""
    imp = BatchImporter(mock_uow, settings)
    imp.students = MagicMock()
    seen: set[str] = set()

    async def add_student(request):
        if request.email in seen:
            raise DuplicateStudentEmailError(request.email)
        seen.add(request.email)
        return MagicMock(email=request.email)

    imp.students.add_student = AsyncMock(side_effect=add_student)
    return imp


class TestImportStudents:
    """Tests for importing a students file."""

    @pytest.mark.asyncio
    async def test_partial_success_commits_valid_rows(self, importer, mock_uow):
        lines = [_student_line(n) for n in range(1, 8)]
        lines.insert(2, _student_line(90, date_of_birth="31/31/2004"))
        lines.insert(5, _student_line(91, date_of_birth="not a date"))
        lines.append(_student_line(99, email="student1@example.edu"))
        assert len(lines) == 10

        result = await importer.import_file(_students_csv(lines), "students.csv", ImportKind.STUDENTS)

        assert result.status == ImportStatus.COMMITTED
        assert result.total_rows == 10
        assert result.successful_rows == 7
        assert result.failed_rows == 3
        assert [e.row_number for e in result.row_errors] == [4, 7, 11]
        assert result.errors[0] == "Row 4 error: Invalid DateOfBirth '31/31/2004'"
        assert "already exists" in result.errors[2]
        assert result.batch_id
        mock_uow.begin_transaction.assert_awaited_once()
        mock_uow.commit.assert_awaited_once()
        mock_uow.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_all_rows_failing_still_commits(self, importer, mock_uow):
        lines = [_student_line(1, date_of_birth="bad"), _student_line(2, date_of_birth="bad")]

        result = await importer.import_file(_students_csv(lines), "students.csv", ImportKind.STUDENTS)

        assert result.status == ImportStatus.COMMITTED
        assert result.successful_rows == 0
        assert result.failed_rows == 2

    @pytest.mark.asyncio
    async def test_header_mismatch_rejects_file(self, importer, mock_uow):
        content = b"FirstName,LastName,Email\nAda,Lovelace,ada@example.edu\n"

        result = await importer.import_file(content, "students.csv", ImportKind.STUDENTS)

        assert result.status == ImportStatus.REJECTED
        assert result.errors[0] == HEADER_MISMATCH
        assert result.total_rows == 0
        importer.students.add_student.assert_not_awaited()
        mock_uow.begin_transaction.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_header_check_can_be_skipped(self, importer):
        content = b"Email,FirstName,LastName\nada@example.edu,Ada,Lovelace\n"

        result = await importer.import_file(
            content, "students.csv", ImportKind.STUDENTS, validate_schema=False
        )

        assert result.status == ImportStatus.COMMITTED
        assert result.successful_rows == 1

    @pytest.mark.asyncio
    async def test_constraint_violation_is_a_row_error(self, importer, mock_uow):
        staged = importer.students.add_student.side_effect

        async def reject_second(request):
            if request.email == "student2@example.edu":
                raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
            return await staged(request)

        importer.students.add_student = AsyncMock(side_effect=reject_second)
        lines = [_student_line(n) for n in range(1, 4)]

        result = await importer.import_file(_students_csv(lines), "students.csv", ImportKind.STUDENTS)

        assert result.status == ImportStatus.COMMITTED
        assert (result.successful_rows, result.failed_rows) == (2, 1)
        assert result.errors == [f"Row 3 error: {CONSTRAINT_VIOLATION}"]
        assert mock_uow.savepoint.call_count == 3
        mock_uow.commit.assert_awaited_once()
        mock_uow.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_error_rolls_back(self, importer, mock_uow):
        importer.students.add_student = AsyncMock(side_effect=RuntimeError("connection lost"))
        lines = [_student_line(1), _student_line(2)]

        result = await importer.import_file(_students_csv(lines), "students.csv", ImportKind.STUDENTS)

        assert result.status == ImportStatus.ROLLED_BACK
        assert result.successful_rows == 0
        assert result.failed_rows == 2
        assert result.errors[0] == ROLLED_BACK_MESSAGE
        mock_uow.rollback.assert_awaited_once()
        mock_uow.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_commit_failure_rolls_back(self, importer, mock_uow):
        mock_uow.commit.side_effect = RuntimeError("deadlock")

        result = await importer.import_file(
            _students_csv([_student_line(1)]), "students.csv", ImportKind.STUDENTS
        )

        assert result.status == ImportStatus.ROLLED_BACK
        mock_uow.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cancellation_rolls_back_and_propagates(self, importer, mock_uow):
        importer.students.add_student = AsyncMock(side_effect=asyncio.CancelledError())

        with pytest.raises(asyncio.CancelledError):
            await importer.import_file(
                _students_csv([_student_line(1)]), "students.csv", ImportKind.STUDENTS
            )

        mock_uow.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_too_many_rows(self, mock_uow):
        importer = BatchImporter(mock_uow, ImportSettings(max_rows=2))
        lines = [_student_line(n) for n in range(3)]

        result = await importer.import_file(_students_csv(lines), "students.csv", ImportKind.STUDENTS)

        assert result.status == ImportStatus.REJECTED
        assert "limit is 2" in result.errors[0]

    @pytest.mark.asyncio
    async def test_unsupported_format(self, importer):
        result = await importer.import_file(b"data", "students.xls", ImportKind.STUDENTS)

        assert result.status == ImportStatus.REJECTED
        assert "Unsupported file format" in result.errors[0]


class TestImportEnrollments:
    """Tests for importing an enrollments file."""

    @pytest.mark.asyncio
    async def test_refusals_become_row_errors(self, mock_uow, settings):
        student = MagicMock(id="student-1")
        course = MagicMock(id="course-1", code="CS101")

        async def get_by_email(email):
            return student if email == "ada@example.edu" else None

        mock_uow.students.get_by_email.side_effect = get_by_email
        mock_uow.courses.get_by_code.return_value = course

        importer = BatchImporter(mock_uow, settings)
        importer.enrollments = MagicMock()
        importer.enrollments.add_enrollment = AsyncMock(
            side_effect=[
                EnrollmentResult(eligibility=EligibilityResult.eligible(), enrollment=MagicMock()),
                EnrollmentResult(eligibility=EligibilityResult.denied(DenialReason.COURSE_FULL)),
            ]
        )
        content = (
            b"StudentEmail,CourseCode,EnrollmentDate\n"
            b"ada@example.edu,CS101,2024-09-01\n"
            b"ada@example.edu,CS101,\n"
            b"ghost@example.edu,CS101,\n"
        )

        result = await importer.import_file(content, "enrollments.csv", ImportKind.ENROLLMENTS)

        assert result.status == ImportStatus.COMMITTED
        assert result.successful_rows == 1
        assert result.errors == [
            "Row 3 error: Course is full",
            "Row 4 error: Student with email ghost@example.edu not found",
        ]


class TestValidateFile:
    """Tests for validate_file."""

    def test_valid_header(self, importer):
        check = importer.validate_file(
            b"CourseCode,Title,Description,Credits,MaxStudents\n", "c.csv", ImportKind.COURSES
        )
        assert check.valid is True

    def test_unreadable_file_is_reported(self, importer):
        check = importer.validate_file(b"", "c.csv", ImportKind.COURSES)

        assert check.valid is False
        assert check.errors == ["File is empty"]
