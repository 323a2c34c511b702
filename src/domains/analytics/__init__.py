# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics domain services.

This module provides:
- statistics: mean, median and nearest-rank percentile helpers
- service: grade performance and course completion summaries

Usage:
    from src.domains.analytics import AnalyticsService, median

    service = AnalyticsService(uow)
    performance = await service.get_grade_performance(course_id=course_id)
"""

from src.domains.analytics.service import (
    AnalyticsService,
    CompletionSummary,
    CourseCompletion,
    GradePerformance,
    LetterShare,
)
from src.domains.analytics.statistics import mean, median, percentile

__all__ = [
    # Statistics
    "mean",
    "median",
    "percentile",
    # Service
    "AnalyticsService",
    "GradePerformance",
    "LetterShare",
    "CompletionSummary",
    "CourseCompletion",
]
