# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment eligibility evaluation.

EligibilityEvaluator runs the enrollment checks in a fixed order and stops
at the first failure:

1. Student exists and is not soft-deleted.
2. Course exists, is not soft-deleted and is active.
3. No Active/Waitlisted enrollment exists for the pair.
4. The course has a free seat.
5. All prerequisites are completed.

The evaluator only reads. "Not eligible" is a normal result, never an
exception; the caller performs the enrollment write, which re-checks
capacity and uniqueness atomically (see EnrollmentService).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from src.domains.enrollment.prerequisites import completed_course_ids, resolve
from src.infrastructure.database.models.academic import Course
from src.infrastructure.database.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class DenialReason(str, Enum):
    """Machine-readable reason an enrollment was refused."""

    STUDENT_NOT_FOUND = "student_not_found"
    COURSE_NOT_FOUND = "course_not_found"
    COURSE_INACTIVE = "course_inactive"
    ALREADY_ENROLLED = "already_enrolled"
    COURSE_FULL = "course_full"
    PREREQUISITES_NOT_MET = "prerequisites_not_met"

    @property
    def message(self) -> str:
        """Human-readable reason shown to callers."""
        return DENIAL_MESSAGES[self]


DENIAL_MESSAGES: dict[DenialReason, str] = {
    DenialReason.STUDENT_NOT_FOUND: "Student not found",
    DenialReason.COURSE_NOT_FOUND: "Course not found",
    DenialReason.COURSE_INACTIVE: "Course is not active",
    DenialReason.ALREADY_ENROLLED: "Student is already enrolled in this course",
    DenialReason.COURSE_FULL: "Course is full",
    DenialReason.PREREQUISITES_NOT_MET: "Student has not met all prerequisites for this course",
}


@dataclass(frozen=True)
class EligibilityResult:
    """Outcome of an eligibility check.

    Attributes:
        can_enroll: True when every check passed.
        reason: Human-readable reason when refused, else None.
        code: Machine-readable reason when refused, else None.
        unmet_prerequisites: Ids of missing prerequisite courses.
        unmet_prerequisite_codes: Codes of those courses, same order.
    """

    can_enroll: bool
    reason: str | None = None
    code: DenialReason | None = None
    unmet_prerequisites: list[str] = field(default_factory=list)
    unmet_prerequisite_codes: list[str] = field(default_factory=list)

    @classmethod
    def eligible(cls) -> "EligibilityResult":
        return cls(can_enroll=True)

    @classmethod
    def denied(
        cls,
        code: DenialReason,
        unmet_prerequisites: list[str] | None = None,
        unmet_prerequisite_codes: list[str] | None = None,
    ) -> "EligibilityResult":
        return cls(
            can_enroll=False,
            reason=code.message,
            code=code,
            unmet_prerequisites=unmet_prerequisites or [],
            unmet_prerequisite_codes=unmet_prerequisite_codes or [],
        )


class EligibilityEvaluator:
    """Read-only enrollment eligibility checks.

    Attributes:
        uow: Unit of work used for all lookups.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        self.uow = uow

    async def evaluate(self, student_id: str, course_id: str) -> EligibilityResult:
        """Decide whether a student may enroll in a course.

        Args:
            student_id: Student identifier.
            course_id: Course identifier.

        Returns:
            EligibilityResult; refusals carry the first failing reason.
        """
        student = await self.uow.students.get_by_id(student_id)
        if student is None:
            return EligibilityResult.denied(DenialReason.STUDENT_NOT_FOUND)

        course = await self.uow.courses.get_by_id(course_id)
        if course is None:
            return EligibilityResult.denied(DenialReason.COURSE_NOT_FOUND)
        if not course.is_active:
            return EligibilityResult.denied(DenialReason.COURSE_INACTIVE)

        if await self.uow.enrollments.get_open(student_id, course_id) is not None:
            return EligibilityResult.denied(DenialReason.ALREADY_ENROLLED)

        if course.current_enrollment >= course.capacity:
            return EligibilityResult.denied(DenialReason.COURSE_FULL)

        prerequisite_ids = await self.uow.prerequisites.prerequisite_ids(course_id)
        if prerequisite_ids:
            grades = await self.uow.grades.find_by(student_id=student_id)
            check = resolve(prerequisite_ids, completed_course_ids(grades))
            if not check.satisfied:
                codes = await self._course_codes(check.unmet)
                logger.debug(
                    "Prerequisites not met: student=%s, course=%s, unmet=%s",
                    student_id,
                    course_id,
                    codes,
                )
                return EligibilityResult.denied(
                    DenialReason.PREREQUISITES_NOT_MET,
                    unmet_prerequisites=check.unmet,
                    unmet_prerequisite_codes=codes,
                )

        return EligibilityResult.eligible()

    async def _course_codes(self, course_ids: list[str]) -> list[str]:
        """Codes for the given course ids, keeping their order.

        Deleted prerequisite courses still resolve to their code; ids
        with no row at all are reported as-is.
        """
        courses = await self.uow.courses.find(Course.id.in_(course_ids), include_deleted=True)
        by_id = {course.id: course.code for course in courses}
        return [by_id.get(course_id, course_id) for course_id in course_ids]
