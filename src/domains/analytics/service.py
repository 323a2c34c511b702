# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics service module.

This module provides read-only summaries over grades and enrollments:
- Grade performance (count, mean, extremes, median, letter distribution)
  for one course or all courses, optionally limited to a date range
- Course completion rates

Summaries of an empty selection carry None for every statistic rather
than zero placeholders.

Usage:
    from src.domains.analytics import AnalyticsService

    service = AnalyticsService(uow)
    performance = await service.get_grade_performance(course_id=course.id)
    completion = await service.get_completion_summary()
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_EVEN, Decimal

from src.domains.analytics.statistics import mean, median
from src.domains.course.service import CourseNotFoundError
from src.domains.grading.calculator import LETTER_GRADES
from src.infrastructure.database.models.academic import Course, Enrollment, Grade
from src.infrastructure.database.unit_of_work import UnitOfWork
from src.models.common import EnrollmentStatus
from src.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _round(value: Decimal | None) -> Decimal | None:
    if value is None:
        return None
    return value.quantize(CENT, rounding=ROUND_HALF_EVEN)


def _rate(part: int, whole: int) -> Decimal | None:
    if whole == 0:
        return None
    return _round(Decimal(part) * 100 / Decimal(whole))


@dataclass
class LetterShare:
    """One letter of a grade distribution."""

    letter_grade: str
    count: int
    percentage: Decimal
    average_score: Decimal


@dataclass
class GradePerformance:
    """Grade statistics over a selection of grades."""

    course_id: str | None
    total_grades: int = 0
    average_score: Decimal | None = None
    highest_score: Decimal | None = None
    lowest_score: Decimal | None = None
    median_score: Decimal | None = None
    distribution: list[LetterShare] = field(default_factory=list)


@dataclass
class CourseCompletion:
    """Enrollment outcome counts for one course."""

    course_id: str
    course_code: str
    title: str
    total_enrollments: int
    completed: int
    active: int
    dropped: int
    completion_rate: Decimal | None


@dataclass
class CompletionSummary:
    """Enrollment outcomes across all courses."""

    total_enrollments: int = 0
    completed: int = 0
    active: int = 0
    dropped: int = 0
    overall_completion_rate: Decimal | None = None
    by_course: list[CourseCompletion] = field(default_factory=list)


class AnalyticsService:
    """Service for grade and enrollment analytics.

    Attributes:
        uow: Unit of work for the academic records database.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        """Initialize analytics service.

        Args:
            uow: Unit of work shared with the caller.
        """
        self.uow = uow

    async def get_grade_performance(
        self,
        course_id: str | None = None,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
    ) -> GradePerformance:
        """Summarize grade percentages.

        Args:
            course_id: Limit to one course, or None for all courses.
            from_date: Only grades recorded at or after this time.
            to_date: Only grades recorded at or before this time.

        Returns:
            GradePerformance; statistics are None when no grade matches.

        Raises:
            CourseNotFoundError: If course_id is given but does not exist.
        """
        criteria = []
        if course_id is not None:
            if await self.uow.courses.get_by_id(course_id) is None:
                raise CourseNotFoundError(course_id)
            criteria.append(Grade.course_id == course_id)
        if from_date is not None:
            criteria.append(Grade.created_at >= ensure_utc(from_date))
        if to_date is not None:
            criteria.append(Grade.created_at <= ensure_utc(to_date))

        grades = await self.uow.grades.find(*criteria)
        scores = [grade.percentage for grade in grades]
        if not scores:
            return GradePerformance(course_id=course_id)

        by_letter: dict[str, list[Decimal]] = defaultdict(list)
        for grade in grades:
            by_letter[grade.letter_grade].append(grade.percentage)

        distribution = [
            LetterShare(
                letter_grade=letter,
                count=len(by_letter[letter]),
                percentage=_rate(len(by_letter[letter]), len(scores)),
                average_score=_round(mean(by_letter[letter])),
            )
            for letter in LETTER_GRADES
            if by_letter.get(letter)
        ]

        logger.debug("Grade performance: course=%s, grades=%d", course_id, len(scores))
        return GradePerformance(
            course_id=course_id,
            total_grades=len(scores),
            average_score=_round(mean(scores)),
            highest_score=max(scores),
            lowest_score=min(scores),
            median_score=_round(median(scores)),
            distribution=distribution,
        )

    async def get_completion_summary(self) -> CompletionSummary:
        """Count completed, active and dropped enrollments per course.

        Courses without enrollments are left out of by_course, which is
        ordered by completion rate, highest first.
        """
        enrollments = await self.uow.enrollments.find()
        if not enrollments:
            return CompletionSummary()

        courses = await self.uow.courses.find(include_deleted=True, order_by=[Course.code])
        by_course: dict[str, list[Enrollment]] = defaultdict(list)
        for enrollment in enrollments:
            by_course[enrollment.course_id].append(enrollment)

        rows = []
        for course in courses:
            course_enrollments = by_course.get(course.id)
            if not course_enrollments:
                continue
            counts = _status_counts(course_enrollments)
            rows.append(
                CourseCompletion(
                    course_id=course.id,
                    course_code=course.code,
                    title=course.title,
                    total_enrollments=len(course_enrollments),
                    completed=counts[EnrollmentStatus.COMPLETED.value],
                    active=counts[EnrollmentStatus.ACTIVE.value],
                    dropped=counts[EnrollmentStatus.DROPPED.value],
                    completion_rate=_rate(counts[EnrollmentStatus.COMPLETED.value], len(course_enrollments)),
                )
            )
        rows.sort(key=lambda row: row.completion_rate or Decimal("0"), reverse=True)

        totals = _status_counts(enrollments)
        return CompletionSummary(
            total_enrollments=len(enrollments),
            completed=totals[EnrollmentStatus.COMPLETED.value],
            active=totals[EnrollmentStatus.ACTIVE.value],
            dropped=totals[EnrollmentStatus.DROPPED.value],
            overall_completion_rate=_rate(totals[EnrollmentStatus.COMPLETED.value], len(enrollments)),
            by_course=rows,
        )


def _status_counts(enrollments: list[Enrollment]) -> dict[str, int]:
    counts: dict[str, int] = defaultdict(int)
    for enrollment in enrollments:
        counts[enrollment.status] += 1
    return counts
