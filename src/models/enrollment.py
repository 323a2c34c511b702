# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment request/response models."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import EnrollmentStatus


class EnrollStudentRequest(BaseModel):
    """Request to enroll a student in a course."""

    student_id: str = Field(..., description="Student ID")
    course_id: str = Field(..., description="Course ID")


class CompleteEnrollmentRequest(BaseModel):
    """Request to complete an enrollment.

    When final_grade is omitted, the latest Final-type grade is used.
    """

    final_grade: Decimal | None = Field(None, ge=0, le=100, description="Final grade, 0-100")


class EligibilityResponse(BaseModel):
    """Eligibility check outcome."""

    can_enroll: bool
    reason: str | None = None
    code: str | None = None
    unmet_prerequisites: list[str] = Field(default_factory=list)
    unmet_prerequisite_codes: list[str] = Field(default_factory=list)


class EnrollmentResponse(BaseModel):
    """Enrollment details."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_id: str
    status: EnrollmentStatus
    enrollment_date: datetime
    completion_date: datetime | None = None
    final_grade: Decimal | None = None
    letter_grade: str | None = None


class EnrollmentAttemptResponse(BaseModel):
    """Result of an enrollment attempt: the eligibility decision plus the record."""

    eligibility: EligibilityResponse
    enrollment: EnrollmentResponse | None = None
