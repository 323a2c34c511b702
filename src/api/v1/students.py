# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student API endpoints.

This module provides endpoints for student records:
- POST / - Register a student
- GET / - List students with pagination
- GET /{student_id} - Get student details
- PATCH /{student_id}/status - Change student status
- DELETE /{student_id} - Soft-delete a student
- GET /{student_id}/enrollments - List a student's enrollments
- GET /{student_id}/available-courses - Courses the student can enroll in
- GET /{student_id}/grades - List a student's grades
- POST /{student_id}/gpa - Recompute the student's GPA
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Query, status

from src.api.dependencies import PageParams, RecordsUoW
from src.domains.enrollment.service import EnrollmentService
from src.domains.grading.service import GradeService
from src.domains.student.service import StudentService
from src.infrastructure.database.unit_of_work import UnitOfWork
from src.models.common import EnrollmentStatus, StudentStatus
from src.models.course import CourseResponse
from src.models.enrollment import EnrollmentResponse
from src.models.grade import GpaResponse, GradeResponse
from src.models.student import (
    StudentCreateRequest,
    StudentListResponse,
    StudentResponse,
    StudentStatusUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(uow: UnitOfWork) -> StudentService:
    """Get student service instance.

    Args:
        uow: Request-scoped unit of work.

    Returns:
        Configured StudentService instance.
    """
    return StudentService(uow)


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register student",
)
async def register_student(data: StudentCreateRequest, uow: RecordsUoW) -> StudentResponse:
    """Register a student. Duplicate emails are rejected with 409."""
    student = await _get_service(uow).register_student(data)
    return StudentResponse.model_validate(student)


@router.get("", response_model=StudentListResponse, summary="List students")
async def list_students(
    uow: RecordsUoW,
    pagination: PageParams,
    status_filter: Annotated[StudentStatus | None, Query(alias="status")] = None,
) -> StudentListResponse:
    """List students ordered by name."""
    result = await _get_service(uow).list_students(
        page=pagination.page,
        page_size=pagination.page_size,
        status=status_filter,
    )
    return StudentListResponse(
        items=[StudentResponse.model_validate(s) for s in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
    )


@router.get("/{student_id}", response_model=StudentResponse, summary="Get student")
async def get_student(student_id: str, uow: RecordsUoW) -> StudentResponse:
    student = await _get_service(uow).get_student(student_id)
    return StudentResponse.model_validate(student)


@router.patch("/{student_id}/status", response_model=StudentResponse, summary="Change status")
async def update_student_status(
    student_id: str,
    data: StudentStatusUpdateRequest,
    uow: RecordsUoW,
) -> StudentResponse:
    student = await _get_service(uow).update_status(student_id, data.status)
    return StudentResponse.model_validate(student)


@router.delete(
    "/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete student",
)
async def delete_student(student_id: str, uow: RecordsUoW) -> None:
    """Soft-delete a student. History is kept."""
    await _get_service(uow).delete_student(student_id)


@router.get(
    "/{student_id}/enrollments",
    response_model=list[EnrollmentResponse],
    summary="List student enrollments",
)
async def list_student_enrollments(
    student_id: str,
    uow: RecordsUoW,
    status_filter: Annotated[EnrollmentStatus | None, Query(alias="status")] = None,
) -> list[EnrollmentResponse]:
    enrollments = await EnrollmentService(uow).get_student_enrollments(student_id, status_filter)
    return [EnrollmentResponse.model_validate(e) for e in enrollments]


@router.get(
    "/{student_id}/available-courses",
    response_model=list[CourseResponse],
    summary="List courses open to the student",
)
async def list_available_courses(student_id: str, uow: RecordsUoW) -> list[CourseResponse]:
    """Active courses with free seats whose prerequisites the student has met."""
    courses = await EnrollmentService(uow).get_available_courses(student_id)
    return [CourseResponse.model_validate(c) for c in courses]


@router.get(
    "/{student_id}/grades",
    response_model=list[GradeResponse],
    summary="List student grades",
)
async def list_student_grades(
    student_id: str,
    uow: RecordsUoW,
    course_id: Annotated[str | None, Query(description="Filter by course")] = None,
    published_only: Annotated[bool, Query(description="Only published grades")] = False,
) -> list[GradeResponse]:
    grades = await GradeService(uow).get_student_grades(
        student_id, course_id=course_id, published_only=published_only
    )
    return [GradeResponse.model_validate(g) for g in grades]


@router.post("/{student_id}/gpa", response_model=GpaResponse, summary="Recalculate GPA")
async def recalculate_gpa(student_id: str, uow: RecordsUoW) -> GpaResponse:
    """Recompute and store the student's GPA from completed enrollments."""
    gpa = await GradeService(uow).calculate_gpa(student_id)
    student = await _get_service(uow).get_student(student_id)
    logger.info("GPA recalculated for student %s: %s", student_id, gpa)
    return GpaResponse(
        student_id=student_id,
        gpa=gpa,
        total_credits_earned=student.total_credits_earned,
    )
