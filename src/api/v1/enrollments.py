# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment API endpoints.

This module provides endpoints for enrollments:
- GET /eligibility - Check whether a student may enroll in a course
- POST / - Enroll a student (refusals are 200 with can_enroll=false)
- GET /{enrollment_id} - Get enrollment details
- POST /{enrollment_id}/drop - Drop an open enrollment
- POST /{enrollment_id}/withdraw - Withdraw from an open enrollment
- POST /{enrollment_id}/complete - Complete with a final grade
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from src.api.dependencies import RecordsUoW
from src.domains.enrollment.eligibility import EligibilityResult
from src.domains.enrollment.service import EnrollmentService
from src.infrastructure.database.unit_of_work import UnitOfWork
from src.models.enrollment import (
    CompleteEnrollmentRequest,
    EligibilityResponse,
    EnrollmentAttemptResponse,
    EnrollmentResponse,
    EnrollStudentRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(uow: UnitOfWork) -> EnrollmentService:
    """Get enrollment service instance.

    Args:
        uow: Request-scoped unit of work.

    Returns:
        Configured EnrollmentService instance.
    """
    return EnrollmentService(uow)


def _eligibility_response(result: EligibilityResult) -> EligibilityResponse:
    return EligibilityResponse(
        can_enroll=result.can_enroll,
        reason=result.reason,
        code=result.code.value if result.code else None,
        unmet_prerequisites=result.unmet_prerequisites,
        unmet_prerequisite_codes=result.unmet_prerequisite_codes,
    )


@router.get("/eligibility", response_model=EligibilityResponse, summary="Check eligibility")
async def check_eligibility(
    uow: RecordsUoW,
    student_id: Annotated[str, Query(description="Student ID")],
    course_id: Annotated[str, Query(description="Course ID")],
) -> EligibilityResponse:
    """Run the enrollment checks without writing anything."""
    result = await _get_service(uow).check_eligibility(student_id, course_id)
    return _eligibility_response(result)


@router.post("", response_model=EnrollmentAttemptResponse, summary="Enroll student")
async def enroll_student(
    data: EnrollStudentRequest,
    uow: RecordsUoW,
    response: Response,
) -> EnrollmentAttemptResponse:
    """Enroll a student if eligible.

    Returns 201 with the enrollment on success, or 200 with the refusal
    reason when the student is not eligible.
    """
    result = await _get_service(uow).enroll_student(data.student_id, data.course_id)
    if result.succeeded:
        response.status_code = status.HTTP_201_CREATED
    return EnrollmentAttemptResponse(
        eligibility=_eligibility_response(result.eligibility),
        enrollment=EnrollmentResponse.model_validate(result.enrollment) if result.enrollment else None,
    )


@router.get("/{enrollment_id}", response_model=EnrollmentResponse, summary="Get enrollment")
async def get_enrollment(enrollment_id: str, uow: RecordsUoW) -> EnrollmentResponse:
    enrollment = await _get_service(uow).get_enrollment(enrollment_id)
    return EnrollmentResponse.model_validate(enrollment)


@router.post("/{enrollment_id}/drop", response_model=EnrollmentResponse, summary="Drop enrollment")
async def drop_enrollment(enrollment_id: str, uow: RecordsUoW) -> EnrollmentResponse:
    enrollment = await _get_service(uow).drop_enrollment(enrollment_id)
    return EnrollmentResponse.model_validate(enrollment)


@router.post(
    "/{enrollment_id}/withdraw",
    response_model=EnrollmentResponse,
    summary="Withdraw enrollment",
)
async def withdraw_enrollment(enrollment_id: str, uow: RecordsUoW) -> EnrollmentResponse:
    enrollment = await _get_service(uow).withdraw_enrollment(enrollment_id)
    return EnrollmentResponse.model_validate(enrollment)


@router.post(
    "/{enrollment_id}/complete",
    response_model=EnrollmentResponse,
    summary="Complete enrollment",
)
async def complete_enrollment(
    enrollment_id: str,
    data: CompleteEnrollmentRequest,
    uow: RecordsUoW,
) -> EnrollmentResponse:
    """Complete an active enrollment and recompute the student's GPA."""
    enrollment = await _get_service(uow).complete_enrollment(enrollment_id, data.final_grade)
    return EnrollmentResponse.model_validate(enrollment)
