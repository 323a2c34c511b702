# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Row converters: normalized import rows -> typed records.

Each converter either returns a record or raises RowParseError with a
message fit for the row error list. Converters do not touch the database;
existence and duplicate checks happen in the importer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from pydantic import ValidationError as PydanticValidationError

from src.core.exceptions import ValidationError
from src.models.course import CourseCreateRequest
from src.models.student import StudentCreateRequest
from src.utils.datetime import date_to_utc, parse_date

DEFAULT_CREDITS = 3
DEFAULT_MAX_STUDENTS = 30


class RowParseError(ValidationError):
    """Raised when a row cannot be converted to a record."""

    pass


@dataclass(frozen=True)
class GradeRow:
    student_email: str
    course_code: str
    assignment_title: str | None
    value: Decimal
    max_value: Decimal


@dataclass(frozen=True)
class EnrollmentRow:
    student_email: str
    course_code: str
    enrollment_date: datetime | None


def _required(values: dict[str, str], column: str) -> str:
    value = values.get(column, "").strip()
    if not value:
        raise RowParseError(f"{column} is required")
    return value


def _optional(values: dict[str, str], column: str) -> str | None:
    value = values.get(column, "").strip()
    return value or None


def _optional_date(values: dict[str, str], column: str) -> date | None:
    value = _optional(values, column)
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError:
        raise RowParseError(f"Invalid {column} '{value}'") from None


def _positive_int(values: dict[str, str], column: str, default: int) -> int:
    value = _optional(values, column)
    if value is None:
        return default
    try:
        number = Decimal(value)
    except InvalidOperation:
        raise RowParseError(f"{column} must be a whole number, got '{value}'") from None
    if not number.is_finite() or number != number.to_integral_value() or number <= 0:
        raise RowParseError(f"{column} must be a positive whole number, got '{value}'")
    return int(number)


def _decimal(values: dict[str, str], column: str) -> Decimal:
    value = _required(values, column)
    try:
        number = Decimal(value)
    except InvalidOperation:
        raise RowParseError(f"{column} must be a number, got '{value}'") from None
    if not number.is_finite():
        raise RowParseError(f"{column} must be a finite number")
    return number


def _first_error(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg", "")


def parse_student_row(values: dict[str, str]) -> StudentCreateRequest:
    """Convert a students row."""
    first_name = _required(values, "FirstName")
    last_name = _required(values, "LastName")
    email = _required(values, "Email")
    date_of_birth = _optional_date(values, "DateOfBirth")
    enrollment_date = _optional_date(values, "EnrollmentDate")

    try:
        return StudentCreateRequest(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone_number=_optional(values, "PhoneNumber"),
            date_of_birth=date_of_birth,
            enrollment_date=enrollment_date,
            address=_optional(values, "Address"),
            city=_optional(values, "City"),
            state=_optional(values, "State"),
            zip_code=_optional(values, "ZipCode"),
        )
    except PydanticValidationError as e:
        raise RowParseError(_first_error(e)) from None


def parse_course_row(values: dict[str, str]) -> CourseCreateRequest:
    """Convert a courses row. Credits default to 3 and MaxStudents to 30."""
    code = _required(values, "CourseCode")
    title = _required(values, "Title")
    credits = _positive_int(values, "Credits", DEFAULT_CREDITS)
    capacity = _positive_int(values, "MaxStudents", DEFAULT_MAX_STUDENTS)

    try:
        return CourseCreateRequest(
            code=code,
            title=title,
            description=_optional(values, "Description"),
            credits=credits,
            capacity=capacity,
        )
    except PydanticValidationError as e:
        raise RowParseError(_first_error(e)) from None


def parse_grade_row(values: dict[str, str]) -> GradeRow:
    """Convert a grades row."""
    return GradeRow(
        student_email=_required(values, "StudentEmail"),
        course_code=_required(values, "CourseCode"),
        assignment_title=_optional(values, "AssignmentTitle"),
        value=_decimal(values, "Value"),
        max_value=_decimal(values, "MaxValue"),
    )


def parse_enrollment_row(values: dict[str, str]) -> EnrollmentRow:
    """Convert an enrollments row. A blank EnrollmentDate means now."""
    enrollment_date = _optional_date(values, "EnrollmentDate")
    return EnrollmentRow(
        student_email=_required(values, "StudentEmail"),
        course_code=_required(values, "CourseCode"),
        enrollment_date=date_to_utc(enrollment_date) if enrollment_date else None,
    )
