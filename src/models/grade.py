# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade request/response models.

percentage and letter_grade never appear on requests; they are derived
from value and max_value on every write.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import GradeType


class GradeCreateRequest(BaseModel):
    """Request to record a grade."""

    student_id: str = Field(..., description="Student ID")
    course_id: str = Field(..., description="Course ID")
    assignment_id: str | None = Field(None, description="Assignment ID")
    grade_type: GradeType = Field(GradeType.ASSIGNMENT, description="Kind of graded work")
    value: Decimal = Field(..., description="Points earned")
    max_value: Decimal = Field(..., gt=0, description="Points possible")
    weight: Decimal = Field(Decimal("1"), ge=0, description="Weight within the course")
    graded_by: str | None = Field(None, max_length=100)
    comments: str | None = None


class GradeUpdateRequest(BaseModel):
    """Request to change a grade. Omitted fields keep their value."""

    value: Decimal | None = None
    max_value: Decimal | None = Field(None, gt=0)
    weight: Decimal | None = Field(None, ge=0)
    comments: str | None = None


class BulkGradeEntry(BaseModel):
    """One student's grade in a bulk grade submission."""

    student_id: str
    value: Decimal
    comments: str | None = None


class BulkGradeCreateRequest(BaseModel):
    """Grades for one course and grade type, recorded in a single transaction."""

    course_id: str
    assignment_id: str | None = None
    grade_type: GradeType = GradeType.ASSIGNMENT
    max_value: Decimal = Field(..., gt=0)
    weight: Decimal = Field(Decimal("1"), ge=0)
    graded_by: str | None = None
    grades: list[BulkGradeEntry] = Field(..., min_length=1)


class GradeResponse(BaseModel):
    """Grade details."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_id: str
    enrollment_id: str | None = None
    assignment_id: str | None = None
    grade_type: GradeType
    value: Decimal
    max_value: Decimal
    percentage: Decimal
    letter_grade: str
    weight: Decimal
    is_published: bool
    published_at: datetime | None = None
    graded_by: str | None = None
    comments: str | None = None
    created_at: datetime
    updated_at: datetime


class BulkGradeResponse(BaseModel):
    """Outcome of a bulk grade submission."""

    created: list[GradeResponse] = Field(default_factory=list)
    skipped_student_ids: list[str] = Field(default_factory=list)


class GradeDistributionResponse(BaseModel):
    """Letter distribution of a course's grades."""

    course_id: str
    total: int
    buckets: dict[str, int] = Field(default_factory=dict, description="A/B/C/D/F counts")
    letters: dict[str, int] = Field(default_factory=dict, description="Exact letter counts")


class GpaResponse(BaseModel):
    """A student's GPA after recomputation."""

    student_id: str
    gpa: Decimal | None = None
    total_credits_earned: int
