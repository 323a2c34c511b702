# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics API endpoints.

This module provides read-only summaries:
- GET /grades/performance - Grade statistics, optionally per course and date range
- GET /completion - Course completion rates
"""

import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Query

from src.api.dependencies import RecordsUoW
from src.domains.analytics.service import AnalyticsService
from src.infrastructure.database.unit_of_work import UnitOfWork
from src.models.analytics import CompletionSummaryResponse, GradePerformanceResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(uow: UnitOfWork) -> AnalyticsService:
    """Get analytics service instance.

    Args:
        uow: Request-scoped unit of work.

    Returns:
        Configured AnalyticsService instance.
    """
    return AnalyticsService(uow)


@router.get(
    "/grades/performance",
    response_model=GradePerformanceResponse,
    summary="Grade performance",
)
async def get_grade_performance(
    uow: RecordsUoW,
    course_id: Annotated[str | None, Query(description="Limit to one course")] = None,
    from_date: Annotated[datetime | None, Query(description="Grades recorded at or after")] = None,
    to_date: Annotated[datetime | None, Query(description="Grades recorded at or before")] = None,
) -> GradePerformanceResponse:
    """Count, mean, extremes, median and letter distribution of grade percentages."""
    performance = await _get_service(uow).get_grade_performance(
        course_id=course_id,
        from_date=from_date,
        to_date=to_date,
    )
    return GradePerformanceResponse.model_validate(performance)


@router.get("/completion", response_model=CompletionSummaryResponse, summary="Completion rates")
async def get_completion_summary(uow: RecordsUoW) -> CompletionSummaryResponse:
    summary = await _get_service(uow).get_completion_summary()
    return CompletionSummaryResponse.model_validate(summary)
