# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics response models.

Statistics are None when nothing matched the selection.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class LetterShareResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    letter_grade: str
    count: int
    percentage: Decimal
    average_score: Decimal


class GradePerformanceResponse(BaseModel):
    """Grade statistics for a course or for all courses."""

    model_config = ConfigDict(from_attributes=True)

    course_id: str | None = None
    total_grades: int = 0
    average_score: Decimal | None = None
    highest_score: Decimal | None = None
    lowest_score: Decimal | None = None
    median_score: Decimal | None = None
    distribution: list[LetterShareResponse] = Field(default_factory=list)


class CourseCompletionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    course_id: str
    course_code: str
    title: str
    total_enrollments: int
    completed: int
    active: int
    dropped: int
    completion_rate: Decimal | None = None


class CompletionSummaryResponse(BaseModel):
    """Enrollment outcomes across all courses."""

    model_config = ConfigDict(from_attributes=True)

    total_enrollments: int = 0
    completed: int = 0
    active: int = 0
    dropped: int = 0
    overall_completion_rate: Decimal | None = None
    by_course: list[CourseCompletionResponse] = Field(default_factory=list)
