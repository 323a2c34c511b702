# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course API endpoints.

This module provides endpoints for the course catalogue:
- POST / - Create a course
- GET / - List courses with pagination
- GET /by-code/{code} - Get a course by code
- GET /{course_id} - Get course details
- PATCH /{course_id}/capacity - Change capacity
- PUT /{course_id}/prerequisites - Replace prerequisites
- DELETE /{course_id} - Soft-delete a course
- GET /{course_id}/grades - List course grades
- GET /{course_id}/grades/distribution - Letter distribution
- POST /{course_id}/grades/publish - Publish all pending grades
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Query, status

from src.api.dependencies import PageParams, RecordsUoW
from src.domains.course.service import CourseService
from src.domains.grading.service import GradeService
from src.infrastructure.database.models.academic import Course
from src.infrastructure.database.unit_of_work import UnitOfWork
from src.models.course import (
    CourseCapacityUpdateRequest,
    CourseCreateRequest,
    CourseListResponse,
    CoursePrerequisitesUpdateRequest,
    CourseResponse,
)
from src.models.grade import GradeDistributionResponse, GradeResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(uow: UnitOfWork) -> CourseService:
    """Get course service instance.

    Args:
        uow: Request-scoped unit of work.

    Returns:
        Configured CourseService instance.
    """
    return CourseService(uow)


async def _to_response(service: CourseService, course: Course) -> CourseResponse:
    response = CourseResponse.model_validate(course)
    response.prerequisite_ids = await service.uow.prerequisites.prerequisite_ids(course.id)
    return response


@router.post(
    "",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create course",
)
async def create_course(data: CourseCreateRequest, uow: RecordsUoW) -> CourseResponse:
    """Create a course. Duplicate codes are rejected with 409."""
    service = _get_service(uow)
    course = await service.create_course(data)
    return await _to_response(service, course)


@router.get("", response_model=CourseListResponse, summary="List courses")
async def list_courses(
    uow: RecordsUoW,
    pagination: PageParams,
    active_only: Annotated[bool, Query(description="Only courses open for enrollment")] = False,
) -> CourseListResponse:
    service = _get_service(uow)
    result = await service.list_courses(
        page=pagination.page,
        page_size=pagination.page_size,
        active_only=active_only,
    )
    return CourseListResponse(
        items=[await _to_response(service, c) for c in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
    )


@router.get("/by-code/{code}", response_model=CourseResponse, summary="Get course by code")
async def get_course_by_code(code: str, uow: RecordsUoW) -> CourseResponse:
    service = _get_service(uow)
    return await _to_response(service, await service.get_course_by_code(code))


@router.get("/{course_id}", response_model=CourseResponse, summary="Get course")
async def get_course(course_id: str, uow: RecordsUoW) -> CourseResponse:
    service = _get_service(uow)
    return await _to_response(service, await service.get_course(course_id))


@router.patch("/{course_id}/capacity", response_model=CourseResponse, summary="Change capacity")
async def update_capacity(
    course_id: str,
    data: CourseCapacityUpdateRequest,
    uow: RecordsUoW,
) -> CourseResponse:
    """Change capacity. Going below current enrollment is rejected with 409."""
    service = _get_service(uow)
    course = await service.update_capacity(course_id, data.capacity)
    return await _to_response(service, course)


@router.put(
    "/{course_id}/prerequisites",
    response_model=CourseResponse,
    summary="Replace prerequisites",
)
async def set_prerequisites(
    course_id: str,
    data: CoursePrerequisitesUpdateRequest,
    uow: RecordsUoW,
) -> CourseResponse:
    """Replace the prerequisite set. Cycles are rejected with 400."""
    service = _get_service(uow)
    await service.set_prerequisites(course_id, data.prerequisite_ids)
    return await _to_response(service, await service.get_course(course_id))


@router.delete(
    "/{course_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete course",
)
async def delete_course(course_id: str, uow: RecordsUoW) -> None:
    """Soft-delete a course without open enrollments."""
    await _get_service(uow).delete_course(course_id)


@router.get("/{course_id}/grades", response_model=list[GradeResponse], summary="List course grades")
async def list_course_grades(course_id: str, uow: RecordsUoW) -> list[GradeResponse]:
    grades = await GradeService(uow).get_course_grades(course_id)
    return [GradeResponse.model_validate(g) for g in grades]


@router.get(
    "/{course_id}/grades/distribution",
    response_model=GradeDistributionResponse,
    summary="Grade distribution",
)
async def get_grade_distribution(course_id: str, uow: RecordsUoW) -> GradeDistributionResponse:
    distribution = await GradeService(uow).get_grade_distribution(course_id)
    return GradeDistributionResponse(
        course_id=distribution.course_id,
        total=distribution.total,
        buckets=distribution.buckets,
        letters=distribution.letters,
    )


@router.post("/{course_id}/grades/publish", summary="Publish course grades")
async def publish_course_grades(course_id: str, uow: RecordsUoW) -> dict[str, int]:
    published = await GradeService(uow).publish_course_grades(course_id)
    logger.info("Published %d grades for course %s", published, course_id)
    return {"published": published}
