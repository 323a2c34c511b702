# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Credit-weighted GPA aggregation.

GPA is recomputed from scratch over every Completed enrollment with a
final grade:

    grade_point   = final_grade / 25          (0-100 scale -> 0-4 scale)
    total_points  = sum(grade_point * credits)
    total_credits = sum(credits)
    gpa           = total_points / total_credits

A student with no credit-bearing completed enrollments keeps whatever GPA
they had. GpaAggregator is the only writer of Student.gpa.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal

from src.core.exceptions import NotFoundError
from src.infrastructure.database.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

GRADE_POINT_DIVISOR = Decimal("25")
GPA_PRECISION = Decimal("0.01")


@dataclass(frozen=True)
class GpaSummary:
    """Result of a GPA computation.

    gpa is None when there were no credits to weight by.
    """

    gpa: Decimal | None
    total_points: Decimal
    total_credits: int


def compute_gpa(completed: Iterable[tuple[Decimal, int]]) -> GpaSummary:
    """Compute a credit-weighted GPA.

    Args:
        completed: (final_grade, credits) pairs of completed enrollments.

    Returns:
        GpaSummary with the GPA rounded half-even to two decimals.
    """
    total_points = Decimal("0")
    total_credits = 0
    for final_grade, credits in completed:
        grade_point = Decimal(str(final_grade)) / GRADE_POINT_DIVISOR
        total_points += grade_point * credits
        total_credits += credits

    if total_credits <= 0:
        return GpaSummary(gpa=None, total_points=total_points, total_credits=0)

    gpa = (total_points / total_credits).quantize(GPA_PRECISION, rounding=ROUND_HALF_EVEN)
    return GpaSummary(gpa=gpa, total_points=total_points, total_credits=total_credits)


class GpaAggregator:
    """Recomputes and persists a student's GPA.

    The aggregator writes through the unit of work but never commits; the
    calling service owns the transaction.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        self.uow = uow

    async def recompute(self, student_id: str) -> Decimal | None:
        """Recompute a student's GPA and total credits earned.

        Args:
            student_id: Student identifier.

        Returns:
            The student's GPA after recomputation (possibly unchanged).

        Raises:
            NotFoundError: If the student does not exist.
        """
        student = await self.uow.students.get_by_id(student_id, include_deleted=True)
        if student is None:
            raise NotFoundError("Student", student_id)

        rows = await self.uow.enrollments.completed_with_credits(student_id)
        summary = compute_gpa(rows)

        if summary.gpa is None:
            logger.debug("No completed credits for student %s, GPA left unchanged", student_id)
            return student.gpa

        student.gpa = summary.gpa
        student.total_credits_earned = summary.total_credits
        await self.uow.students.update(student)

        logger.info(
            "Recomputed GPA: student=%s, gpa=%s, credits=%d",
            student_id,
            summary.gpa,
            summary.total_credits,
        )
        return summary.gpa
