# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service for managing student course enrollments.

This module provides the EnrollmentService class for:
- Eligibility checks and enrollment
- Dropping, withdrawing and completing enrollments
- Listing a student's enrollments and the courses open to them

Enrollment is a two-step operation: the EligibilityEvaluator gives the
user-facing answer, then the write re-checks the invariants atomically.
The seat is taken with a conditional UPDATE and the one-open-enrollment
rule is backed by a partial unique index, so two concurrent requests can
neither overfill a course nor double-enroll a student.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from src.core.exceptions import NotFoundError, ValidationError
from src.domains.enrollment.eligibility import (
    DenialReason,
    EligibilityEvaluator,
    EligibilityResult,
)
from src.domains.grading.calculator import letter_grade_for, to_decimal
from src.domains.grading.gpa import GpaAggregator
from src.domains.student.service import StudentNotFoundError
from src.infrastructure.database.models.academic import Course, Enrollment, Grade
from src.infrastructure.database.unit_of_work import UnitOfWork
from src.models.common import EnrollmentStatus, GradeType
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

MAX_FINAL_GRADE = Decimal("100")


class EnrollmentNotFoundError(NotFoundError):
    """Raised when an enrollment does not exist."""

    def __init__(self, enrollment_id: object) -> None:
        super().__init__("Enrollment", enrollment_id)


class InvalidEnrollmentStateError(ValidationError):
    """Raised when an enrollment transition is not allowed from its status."""

    pass


class MissingFinalGradeError(ValidationError):
    """Raised when completing an enrollment without any final grade."""

    pass


@dataclass(frozen=True)
class EnrollmentResult:
    """Outcome of an enrollment attempt.

    Attributes:
        eligibility: The eligibility decision. When the atomic write lost a
            race, this is the refusal the write observed.
        enrollment: The created enrollment, or None if refused.
    """

    eligibility: EligibilityResult
    enrollment: Enrollment | None = None

    @property
    def succeeded(self) -> bool:
        return self.enrollment is not None


class EnrollmentService:
    """Service for managing enrollments.

    Attributes:
        uow: Unit of work for the academic records database.
        evaluator: Eligibility evaluator sharing the unit of work.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        """Initialize enrollment service.

        Args:
            uow: Unit of work shared with the caller.
        """
        self.uow = uow
        self.evaluator = EligibilityEvaluator(uow)

    async def check_eligibility(self, student_id: str, course_id: str) -> EligibilityResult:
        """Run the eligibility checks without writing anything."""
        return await self.evaluator.evaluate(student_id, course_id)

    async def add_enrollment(
        self,
        student_id: str,
        course_id: str,
        enrollment_date: datetime | None = None,
    ) -> EnrollmentResult:
        """Evaluate and stage an enrollment without committing.

        Used directly by batch imports. A unique-index violation raised by
        a concurrent writer propagates as IntegrityError.

        Args:
            student_id: Student identifier.
            course_id: Course identifier.
            enrollment_date: Enrollment timestamp, defaults to now.

        Returns:
            EnrollmentResult; refused attempts leave nothing staged.
        """
        eligibility = await self.evaluator.evaluate(student_id, course_id)
        if not eligibility.can_enroll:
            return EnrollmentResult(eligibility=eligibility)

        course = await self.uow.courses.get_by_id(course_id)
        if not await self.uow.courses.reserve_seat(course):
            logger.info("Lost race for last seat: student=%s, course=%s", student_id, course_id)
            return EnrollmentResult(eligibility=EligibilityResult.denied(DenialReason.COURSE_FULL))

        enrollment = Enrollment(
            student_id=student_id,
            course_id=course_id,
            status=EnrollmentStatus.ACTIVE.value,
            enrollment_date=enrollment_date or utc_now(),
        )
        await self.uow.enrollments.add(enrollment)
        return EnrollmentResult(eligibility=eligibility, enrollment=enrollment)

    async def enroll_student(self, student_id: str, course_id: str) -> EnrollmentResult:
        """Enroll a student in a course if eligible.

        Refusals are returned, not raised.

        Args:
            student_id: Student identifier.
            course_id: Course identifier.

        Returns:
            EnrollmentResult with the created enrollment or the refusal.
        """
        try:
            result = await self.add_enrollment(student_id, course_id)
        except IntegrityError:
            await self.uow.rollback()
            logger.info("Concurrent duplicate enrollment: student=%s, course=%s", student_id, course_id)
            return EnrollmentResult(
                eligibility=EligibilityResult.denied(DenialReason.ALREADY_ENROLLED)
            )

        if not result.succeeded:
            logger.info(
                "Enrollment refused: student=%s, course=%s, reason=%s",
                student_id,
                course_id,
                result.eligibility.reason,
            )
            return result

        await self.uow.commit()
        logger.info(
            "Enrolled student: student=%s, course=%s, enrollment=%s",
            student_id,
            course_id,
            result.enrollment.id,
        )
        return result

    async def get_enrollment(self, enrollment_id: str) -> Enrollment:
        """Get an enrollment by ID.

        Raises:
            EnrollmentNotFoundError: If the enrollment does not exist.
        """
        enrollment = await self.uow.enrollments.get_by_id(enrollment_id)
        if enrollment is None:
            raise EnrollmentNotFoundError(enrollment_id)
        return enrollment

    async def drop_enrollment(self, enrollment_id: str) -> Enrollment:
        """Drop an open enrollment and release its seat."""
        return await self._close(enrollment_id, EnrollmentStatus.DROPPED)

    async def withdraw_enrollment(self, enrollment_id: str) -> Enrollment:
        """Withdraw from an open enrollment and release its seat."""
        return await self._close(enrollment_id, EnrollmentStatus.WITHDRAWN)

    async def _close(self, enrollment_id: str, status: EnrollmentStatus) -> Enrollment:
        enrollment = await self.get_enrollment(enrollment_id)
        if not enrollment.is_open:
            raise InvalidEnrollmentStateError(
                f"Cannot mark enrollment as {status.value} from status {enrollment.status}"
            )

        held_seat = enrollment.status == EnrollmentStatus.ACTIVE.value
        enrollment.status = status.value
        await self.uow.enrollments.update(enrollment)
        if held_seat:
            await self._release_seat(enrollment.course_id)
        await self.uow.commit()

        logger.info("Enrollment %s -> %s", enrollment_id, status.value)
        return enrollment

    async def complete_enrollment(
        self,
        enrollment_id: str,
        final_grade: Decimal | None = None,
    ) -> Enrollment:
        """Complete an Active enrollment and recompute the student's GPA.

        Args:
            enrollment_id: Enrollment identifier.
            final_grade: Final grade on a 0-100 scale. When None, the
                percentage of the latest Final-type grade is used.

        Returns:
            The completed enrollment.

        Raises:
            EnrollmentNotFoundError: If the enrollment does not exist.
            InvalidEnrollmentStateError: If the enrollment is not Active.
            ValidationError: If final_grade is outside 0-100.
            MissingFinalGradeError: If no final grade is available.
        """
        enrollment = await self.get_enrollment(enrollment_id)
        if enrollment.status != EnrollmentStatus.ACTIVE.value:
            raise InvalidEnrollmentStateError(
                f"Only active enrollments can be completed (status is {enrollment.status})"
            )

        if final_grade is None:
            final_grade = await self._latest_final_percentage(enrollment)
            if final_grade is None:
                raise MissingFinalGradeError(
                    "No final grade given and no Final grade recorded for this enrollment"
                )
        final_grade = to_decimal(final_grade, "final_grade")
        if final_grade < 0 or final_grade > MAX_FINAL_GRADE:
            raise ValidationError("Final grade must be between 0 and 100")

        enrollment.status = EnrollmentStatus.COMPLETED.value
        enrollment.completion_date = utc_now()
        enrollment.final_grade = final_grade
        enrollment.letter_grade = letter_grade_for(final_grade)
        await self.uow.enrollments.update(enrollment)
        await self._release_seat(enrollment.course_id)

        await GpaAggregator(self.uow).recompute(enrollment.student_id)
        await self.uow.commit()

        logger.info(
            "Completed enrollment %s with final grade %s (%s)",
            enrollment_id,
            final_grade,
            enrollment.letter_grade,
        )
        return enrollment

    async def _latest_final_percentage(self, enrollment: Enrollment) -> Decimal | None:
        finals = await self.uow.grades.find(
            Grade.student_id == enrollment.student_id,
            Grade.course_id == enrollment.course_id,
            Grade.grade_type == GradeType.FINAL.value,
            order_by=[Grade.created_at.desc()],
            limit=1,
        )
        return finals[0].percentage if finals else None

    async def _release_seat(self, course_id: str) -> None:
        course = await self.uow.courses.get_by_id(course_id, include_deleted=True)
        if course is not None:
            await self.uow.courses.release_seat(course)

    async def get_student_enrollments(
        self,
        student_id: str,
        status: EnrollmentStatus | None = None,
    ) -> list[Enrollment]:
        """List a student's enrollments, newest first.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        if await self.uow.students.get_by_id(student_id) is None:
            raise StudentNotFoundError(student_id)

        criteria = [Enrollment.student_id == student_id]
        if status is not None:
            criteria.append(Enrollment.status == status.value)
        return await self.uow.enrollments.find(
            *criteria, order_by=[Enrollment.enrollment_date.desc()]
        )

    async def get_available_courses(self, student_id: str) -> list[Course]:
        """Active courses the student could enroll in right now.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        if await self.uow.students.get_by_id(student_id) is None:
            raise StudentNotFoundError(student_id)

        candidates = await self.uow.courses.find(
            Course.is_active.is_(True),
            Course.current_enrollment < Course.capacity,
            order_by=[Course.code],
        )
        available = []
        for course in candidates:
            result = await self.evaluator.evaluate(student_id, course.id)
            if result.can_enroll:
                available.append(course)
        return available
