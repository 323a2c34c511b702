# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Column schemas and result types for batch imports.

Each import kind has a fixed, ordered column list. The list is a
published contract (see the downloadable templates): a header row must
match it exactly, in order, for the file to pass schema validation.
Changing a list means bumping SCHEMA_VERSION.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

SCHEMA_VERSION = "1"


class ImportKind(str, Enum):
    """What a batch file contains."""

    STUDENTS = "students"
    COURSES = "courses"
    GRADES = "grades"
    ENROLLMENTS = "enrollments"


class ImportStatus(str, Enum):
    """Terminal state of a batch.

    REJECTED: the header check failed, no row was processed.
    COMMITTED: rows were processed and the transaction committed, even if
        some rows failed validation.
    ROLLED_BACK: an unexpected error aborted the write phase; nothing
        from the batch was kept.
    """

    REJECTED = "rejected"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


EXPECTED_COLUMNS: dict[ImportKind, tuple[str, ...]] = {
    ImportKind.STUDENTS: (
        "FirstName",
        "LastName",
        "Email",
        "PhoneNumber",
        "DateOfBirth",
        "EnrollmentDate",
        "Address",
        "City",
        "State",
        "ZipCode",
    ),
    ImportKind.COURSES: (
        "CourseCode",
        "Title",
        "Description",
        "Credits",
        "MaxStudents",
    ),
    ImportKind.GRADES: (
        "StudentEmail",
        "CourseCode",
        "AssignmentTitle",
        "Value",
        "MaxValue",
    ),
    ImportKind.ENROLLMENTS: (
        "StudentEmail",
        "CourseCode",
        "EnrollmentDate",
    ),
}

# One illustrative data row per kind, shipped in the templates.
EXAMPLE_ROWS: dict[ImportKind, tuple[str, ...]] = {
    ImportKind.STUDENTS: (
        "Jane",
        "Doe",
        "jane.doe@example.edu",
        "555-0100",
        "2004-05-17",
        "2024-09-01",
        "12 College Ave",
        "Springfield",
        "IL",
        "62701",
    ),
    ImportKind.COURSES: ("CS101", "Introduction to Programming", "Fundamentals of programming", "3", "30"),
    ImportKind.GRADES: ("jane.doe@example.edu", "CS101", "Homework 1", "85", "100"),
    ImportKind.ENROLLMENTS: ("jane.doe@example.edu", "CS101", "2024-09-01"),
}


@dataclass(frozen=True)
class SchemaCheck:
    """Outcome of the header pre-flight check."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    expected: tuple[str, ...] = ()
    found: tuple[str, ...] = ()


@dataclass(frozen=True)
class RowError:
    """A failed row. row_number is the spreadsheet row (header is row 1)."""

    row_number: int
    message: str

    def __str__(self) -> str:
        return f"Row {self.row_number} error: {self.message}"


@dataclass
class ImportResult:
    """Outcome of a batch import.

    Row-level failures are data in row_errors; batch-level failures are
    signalled through status and batch_errors.
    """

    kind: ImportKind
    status: ImportStatus
    total_rows: int = 0
    successful_rows: int = 0
    failed_rows: int = 0
    row_errors: list[RowError] = field(default_factory=list)
    batch_errors: list[str] = field(default_factory=list)
    batch_id: str | None = None

    @property
    def errors(self) -> list[str]:
        """Batch errors followed by row errors, as display strings."""
        return [*self.batch_errors, *(str(error) for error in self.row_errors)]

    @property
    def succeeded(self) -> bool:
        """Whether the batch itself completed (row failures allowed)."""
        return self.status == ImportStatus.COMMITTED
