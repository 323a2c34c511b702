# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade API endpoints.

This module provides endpoints for grades:
- POST / - Record a grade
- POST /bulk - Record grades for many students of one course
- GET /{grade_id} - Get grade details
- PATCH /{grade_id} - Change a grade
- DELETE /{grade_id} - Delete a grade
- POST /{grade_id}/publish - Publish a grade

Percentage and letter grade are always derived on the server.
"""

import logging

from fastapi import APIRouter, status

from src.api.dependencies import RecordsUoW
from src.domains.grading.service import GradeService
from src.infrastructure.database.unit_of_work import UnitOfWork
from src.models.grade import (
    BulkGradeCreateRequest,
    BulkGradeResponse,
    GradeCreateRequest,
    GradeResponse,
    GradeUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(uow: UnitOfWork) -> GradeService:
    """Get grade service instance.

    Args:
        uow: Request-scoped unit of work.

    Returns:
        Configured GradeService instance.
    """
    return GradeService(uow)


@router.post(
    "",
    response_model=GradeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record grade",
)
async def create_grade(data: GradeCreateRequest, uow: RecordsUoW) -> GradeResponse:
    """Record a grade for a student enrolled in the course."""
    grade = await _get_service(uow).create_grade(data)
    return GradeResponse.model_validate(grade)


@router.post(
    "/bulk",
    response_model=BulkGradeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record grades in bulk",
)
async def bulk_create_grades(data: BulkGradeCreateRequest, uow: RecordsUoW) -> BulkGradeResponse:
    """Record a grade sheet in one transaction. Unenrolled students are skipped."""
    result = await _get_service(uow).bulk_create_grades(data)
    return BulkGradeResponse(
        created=[GradeResponse.model_validate(g) for g in result.created],
        skipped_student_ids=result.skipped_student_ids,
    )


@router.get("/{grade_id}", response_model=GradeResponse, summary="Get grade")
async def get_grade(grade_id: str, uow: RecordsUoW) -> GradeResponse:
    grade = await _get_service(uow).get_grade(grade_id)
    return GradeResponse.model_validate(grade)


@router.patch("/{grade_id}", response_model=GradeResponse, summary="Update grade")
async def update_grade(grade_id: str, data: GradeUpdateRequest, uow: RecordsUoW) -> GradeResponse:
    grade = await _get_service(uow).update_grade(grade_id, data)
    return GradeResponse.model_validate(grade)


@router.delete("/{grade_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete grade")
async def delete_grade(grade_id: str, uow: RecordsUoW) -> None:
    await _get_service(uow).delete_grade(grade_id)


@router.post("/{grade_id}/publish", response_model=GradeResponse, summary="Publish grade")
async def publish_grade(grade_id: str, uow: RecordsUoW) -> GradeResponse:
    grade = await _get_service(uow).publish_grade(grade_id)
    return GradeResponse.model_validate(grade)
