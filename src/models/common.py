# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Common enums and pagination models shared across the API and services."""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class StudentStatus(str, Enum):
    """Lifecycle status of a student record."""

    ACTIVE = "Active"
    PROBATION = "Probation"
    SUSPENDED = "Suspended"
    GRADUATED = "Graduated"
    WITHDRAWN = "Withdrawn"
    LEAVE = "Leave"


class EnrollmentStatus(str, Enum):
    """Status of a (student, course) enrollment."""

    ACTIVE = "Active"
    COMPLETED = "Completed"
    DROPPED = "Dropped"
    WITHDRAWN = "Withdrawn"
    WAITLISTED = "Waitlisted"

    @classmethod
    def open_statuses(cls) -> tuple["EnrollmentStatus", ...]:
        """Statuses that occupy the (student, course) slot."""
        return (cls.ACTIVE, cls.WAITLISTED)

    @property
    def is_terminal(self) -> bool:
        """Whether the enrollment has left the open states."""
        return self not in self.open_statuses()


class GradeType(str, Enum):
    """Kind of graded work."""

    ASSIGNMENT = "Assignment"
    QUIZ = "Quiz"
    EXAM = "Exam"
    MIDTERM = "Midterm"
    FINAL = "Final"
    PROJECT = "Project"


class PagedResponse(BaseModel, Generic[T]):
    """Generic paginated list response."""

    items: list[T] = Field(default_factory=list, description="Page items")
    total: int = Field(..., description="Total matching items")
    page: int = Field(..., description="1-based page number")
    page_size: int = Field(..., description="Items per page")

    @property
    def total_pages(self) -> int:
        """Number of pages for the current page size."""
        if self.page_size <= 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size
