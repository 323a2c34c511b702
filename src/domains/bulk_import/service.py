# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch importer for students, courses, grades and enrollments.

A batch goes through four phases:

1. Schema pre-flight: the header row must equal the kind's column list
   exactly, in order. A mismatch rejects the file before any row is read.
2. Row parsing: each row is converted to a typed record. Failures become
   row errors and the batch continues.
3. Business validation: each record is staged through the owning domain
   service (duplicate email or code, unknown student or course, ineligible
   enrollment) inside its own savepoint. Failures, including database
   constraint violations raised while staging, undo only that row and
   become row errors; the batch continues.
4. Commit: every staged record is committed in one transaction. Any
   unexpected error in phases 3-4 rolls the whole batch back.

Example:
    importer = BatchImporter(uow)
    result = await importer.import_file(content, "students.csv", ImportKind.STUDENTS)
    if result.status == ImportStatus.COMMITTED:
        print(result.successful_rows, result.errors)
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Awaitable, Callable

from sqlalchemy.exc import IntegrityError

from src.core.config import ImportSettings, get_settings
from src.core.exceptions import NotFoundError, ValidationError
from src.domains.bulk_import.readers import read_headers, read_table
from src.domains.bulk_import.rows import (
    parse_course_row,
    parse_enrollment_row,
    parse_grade_row,
    parse_student_row,
)
from src.domains.bulk_import.schemas import (
    EXPECTED_COLUMNS,
    ImportKind,
    ImportResult,
    ImportStatus,
    RowError,
    SchemaCheck,
)
from src.domains.course.service import CourseService
from src.domains.enrollment.service import EnrollmentService
from src.domains.grading.service import GradeService
from src.domains.student.service import StudentService
from src.infrastructure.database.models.academic import Course, Student
from src.infrastructure.database.unit_of_work import UnitOfWork
from src.models.common import GradeType
from src.utils.logging import get_logger, log_context

logger = get_logger(__name__)

HEADER_MISMATCH = "Column headers do not match expected format"
ROLLED_BACK_MESSAGE = "Import failed: transaction rolled back"
CONSTRAINT_VIOLATION = "Row conflicts with existing data"

RowHandler = Callable[[dict[str, str]], Awaitable[None]]


class RowRejectedError(ValidationError):
    """Raised when a well-formed row fails a business check."""

    pass


def check_headers(headers: tuple[str, ...], kind: ImportKind) -> SchemaCheck:
    """Compare a header row against the column list of an import kind.

    Args:
        headers: Header cells as read from the file.
        kind: Import kind whose schema applies.

    Returns:
        SchemaCheck; on mismatch the first error is always HEADER_MISMATCH,
        followed by details on missing, unexpected or reordered columns.
    """
    expected = EXPECTED_COLUMNS[kind]
    if tuple(headers) == expected:
        return SchemaCheck(valid=True, expected=expected, found=tuple(headers))

    errors = [HEADER_MISMATCH]
    missing = [column for column in expected if column not in headers]
    unexpected = [column for column in headers if column not in expected]
    if missing:
        errors.append(f"Missing columns: {', '.join(missing)}")
    if unexpected:
        errors.append(f"Unexpected columns: {', '.join(unexpected)}")
    if not missing and not unexpected:
        errors.append(f"Columns must be in this order: {', '.join(expected)}")
    return SchemaCheck(valid=False, errors=errors, expected=expected, found=tuple(headers))


class BatchImporter:
    """Imports tabular files through the domain services.

    Attributes:
        uow: Unit of work; one batch is one transaction on it.
        settings: Import limits.
    """

    def __init__(self, uow: UnitOfWork, settings: ImportSettings | None = None) -> None:
        """Initialize the importer.

        Args:
            uow: Unit of work shared with the domain services.
            settings: Import limits, defaults to the application settings.
        """
        self.uow = uow
        self.settings = settings or get_settings().imports
        self.students = StudentService(uow)
        self.courses = CourseService(uow)
        self.enrollments = EnrollmentService(uow)
        self.grades = GradeService(uow)
        self._handlers: dict[ImportKind, RowHandler] = {
            ImportKind.STUDENTS: self._import_student,
            ImportKind.COURSES: self._import_course,
            ImportKind.GRADES: self._import_grade,
            ImportKind.ENROLLMENTS: self._import_enrollment,
        }

    def validate_file(self, content: bytes, filename: str, kind: ImportKind) -> SchemaCheck:
        """Run the schema pre-flight check without importing anything.

        Unreadable files and unsupported formats are reported as an invalid
        check, not raised.
        """
        kind = ImportKind(kind)
        try:
            headers = read_headers(content, filename)
        except ValidationError as e:
            return SchemaCheck(valid=False, errors=[e.message], expected=EXPECTED_COLUMNS[kind])
        return check_headers(headers, kind)

    async def import_file(
        self,
        content: bytes,
        filename: str,
        kind: ImportKind,
        validate_schema: bool | None = None,
    ) -> ImportResult:
        """Import a CSV or XLSX batch.

        Args:
            content: Raw file bytes.
            filename: Original file name; its extension picks the reader.
            kind: What the file contains.
            validate_schema: Run the header pre-flight. Defaults to the
                IMPORT_VALIDATE_SCHEMA setting.

        Returns:
            ImportResult. Row failures never raise; a rejected file or a
            rolled-back batch is reported through the result status.

        Raises:
            asyncio.CancelledError: After rolling back, if the caller's task
                is cancelled mid-batch.
        """
        kind = ImportKind(kind)
        batch_id = uuid.uuid4().hex[:12]
        if validate_schema is None:
            validate_schema = self.settings.validate_schema

        with log_context(import_kind=kind.value, import_batch=batch_id):
            logger.info("Import started", filename=filename, size=len(content))

            if len(content) > self.settings.max_file_bytes:
                return self._rejected(
                    kind, batch_id, [f"File exceeds the {self.settings.max_file_mb} MB limit"]
                )

            try:
                table = read_table(content, filename)
            except ValidationError as e:
                return self._rejected(kind, batch_id, [e.message])

            if validate_schema:
                check = check_headers(table.headers, kind)
                if not check.valid:
                    return self._rejected(kind, batch_id, check.errors)

            if len(table.rows) > self.settings.max_rows:
                return self._rejected(
                    kind,
                    batch_id,
                    [f"File has {len(table.rows)} data rows, the limit is {self.settings.max_rows}"],
                )

            result = ImportResult(
                kind=kind,
                status=ImportStatus.COMMITTED,
                total_rows=len(table.rows),
                batch_id=batch_id,
            )
            handler = self._handlers[kind]

            await self.uow.begin_transaction()
            try:
                for row in table.rows:
                    try:
                        async with self.uow.savepoint():
                            await handler(row.values)
                    except (ValidationError, NotFoundError) as e:
                        result.row_errors.append(RowError(row.number, e.message))
                        continue
                    except IntegrityError as e:
                        logger.warning(
                            "Row rejected by database constraint", row=row.number, error=str(e.orig)
                        )
                        result.row_errors.append(RowError(row.number, CONSTRAINT_VIOLATION))
                        continue
                    result.successful_rows += 1
                await self.uow.commit()
            except asyncio.CancelledError:
                logger.warning("Import cancelled, rolling back")
                await self.uow.rollback()
                raise
            except Exception:
                logger.exception("Import failed, rolling back")
                await self.uow.rollback()
                return ImportResult(
                    kind=kind,
                    status=ImportStatus.ROLLED_BACK,
                    total_rows=result.total_rows,
                    successful_rows=0,
                    failed_rows=result.total_rows,
                    row_errors=result.row_errors,
                    batch_errors=[ROLLED_BACK_MESSAGE],
                    batch_id=batch_id,
                )

            result.failed_rows = len(result.row_errors)
            logger.info(
                "Import committed",
                total=result.total_rows,
                successful=result.successful_rows,
                failed=result.failed_rows,
            )
            return result

    def _rejected(self, kind: ImportKind, batch_id: str, errors: list[str]) -> ImportResult:
        logger.info("Import rejected", errors=errors)
        return ImportResult(
            kind=kind,
            status=ImportStatus.REJECTED,
            batch_errors=list(errors),
            batch_id=batch_id,
        )

    async def _import_student(self, values: dict[str, str]) -> None:
        await self.students.add_student(parse_student_row(values))

    async def _import_course(self, values: dict[str, str]) -> None:
        await self.courses.add_course(parse_course_row(values))

    async def _import_grade(self, values: dict[str, str]) -> None:
        row = parse_grade_row(values)
        student = await self._student_by_email(row.student_email)
        course = await self._course_by_code(row.course_code)

        assignment_id = None
        if row.assignment_title:
            assignment = await self.uow.assignments.get_by_title(course.id, row.assignment_title)
            if assignment is None:
                raise RowRejectedError(
                    f"Assignment '{row.assignment_title}' not found in course {course.code}"
                )
            assignment_id = assignment.id

        # A row without an assignment is the course's final grade
        await self.grades.add_grade(
            student_id=student.id,
            course_id=course.id,
            value=row.value,
            max_value=row.max_value,
            grade_type=GradeType.ASSIGNMENT if assignment_id else GradeType.FINAL,
            assignment_id=assignment_id,
        )

    async def _import_enrollment(self, values: dict[str, str]) -> None:
        row = parse_enrollment_row(values)
        student = await self._student_by_email(row.student_email)
        course = await self._course_by_code(row.course_code)

        result = await self.enrollments.add_enrollment(student.id, course.id, row.enrollment_date)
        if not result.succeeded:
            raise RowRejectedError(result.eligibility.reason)

    async def _student_by_email(self, email: str) -> Student:
        student = await self.uow.students.get_by_email(email)
        if student is None:
            raise RowRejectedError(f"Student with email {email} not found")
        return student

    async def _course_by_code(self, code: str) -> Course:
        course = await self.uow.courses.get_by_code(code)
        if course is None:
            raise RowRejectedError(f"Course with code {code.upper()} not found")
        return course
