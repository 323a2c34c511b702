# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade service for recording and maintaining grades.

This module provides the GradeService class for:
- Recording single grades and bulk grade sheets
- Updating, deleting and publishing grades
- Per-student and per-course grade listings and distributions
- Explicit GPA recalculation

Every write derives percentage and letter grade through the calculator,
keeps the enrollment's final grade in step with its latest Final-type
grade, and recomputes the student's GPA before committing.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal

from src.core.exceptions import NotFoundError, ValidationError
from src.domains.course.service import CourseNotFoundError
from src.domains.grading.calculator import (
    HUNDRED,
    LETTER_GRADES,
    GradeCalculation,
    GradeValidationError,
    calculate_grade,
    letter_bucket,
)
from src.domains.grading.gpa import GpaAggregator
from src.domains.student.service import StudentNotFoundError
from src.infrastructure.database.models.academic import Enrollment, Grade
from src.infrastructure.database.unit_of_work import UnitOfWork
from src.models.common import EnrollmentStatus, GradeType
from src.models.grade import (
    BulkGradeCreateRequest,
    GradeCreateRequest,
    GradeUpdateRequest,
)
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

# Enrollment statuses a grade may be recorded against
GRADEABLE_STATUSES = (EnrollmentStatus.ACTIVE.value, EnrollmentStatus.COMPLETED.value)

DISTRIBUTION_BUCKETS = ("A", "B", "C", "D", "F")


class GradeNotFoundError(NotFoundError):
    """Raised when a grade does not exist."""

    def __init__(self, grade_id: object) -> None:
        super().__init__("Grade", grade_id)


class AssignmentNotFoundError(NotFoundError):
    """Raised when an assignment does not exist on the course."""

    def __init__(self, assignment_id: object) -> None:
        super().__init__("Assignment", assignment_id)


class NotEnrolledError(ValidationError):
    """Raised when grading a student who is not enrolled in the course."""

    def __init__(self) -> None:
        super().__init__("Student not enrolled in this course")


def check_final_percentage(grade_type: str, calculation: GradeCalculation) -> None:
    """Reject a Final grade that cannot stand as the enrollment's final grade.

    Other grade types may carry extra credit or penalties; a Final grade is
    copied onto its enrollment, whose final grade is on a 0-100 scale.

    Raises:
        GradeValidationError: If a Final grade's percentage is outside 0-100.
    """
    if grade_type != GradeType.FINAL.value:
        return
    if calculation.percentage < 0 or calculation.percentage > HUNDRED:
        raise GradeValidationError(
            f"Final grade must be between 0 and 100 percent, got {calculation.percentage}"
        )


@dataclass
class BulkGradeResult:
    """Outcome of a bulk grade submission."""

    created: list[Grade] = field(default_factory=list)
    skipped_student_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GradeDistribution:
    """Letter distribution of a course's grades."""

    course_id: str
    total: int
    buckets: dict[str, int]
    letters: dict[str, int]


class GradeService:
    """Service for managing grades.

    Attributes:
        uow: Unit of work for the academic records database.
        gpa: GPA aggregator sharing the unit of work.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        """Initialize grade service.

        Args:
            uow: Unit of work shared with the caller.
        """
        self.uow = uow
        self.gpa = GpaAggregator(uow)

    async def add_grade(
        self,
        student_id: str,
        course_id: str,
        value: Decimal,
        max_value: Decimal,
        grade_type: GradeType = GradeType.ASSIGNMENT,
        assignment_id: str | None = None,
        weight: Decimal = Decimal("1"),
        graded_by: str | None = None,
        comments: str | None = None,
    ) -> Grade:
        """Stage a grade and its side effects without committing.

        Used directly by batch imports. The student's GPA is recomputed
        before returning.

        Raises:
            StudentNotFoundError: If the student does not exist.
            CourseNotFoundError: If the course does not exist.
            AssignmentNotFoundError: If the assignment is not on the course.
            NotEnrolledError: If there is no Active or Completed enrollment.
            GradeValidationError: If max_value <= 0, a value is not numeric,
                or a Final grade falls outside 0-100 percent.
        """
        calculation = calculate_grade(value, max_value)
        check_final_percentage(grade_type.value, calculation)

        if await self.uow.students.get_by_id(student_id) is None:
            raise StudentNotFoundError(student_id)
        if await self.uow.courses.get_by_id(course_id) is None:
            raise CourseNotFoundError(course_id)

        if assignment_id is not None:
            assignment = await self.uow.assignments.get_by_id(assignment_id)
            if assignment is None or assignment.course_id != course_id:
                raise AssignmentNotFoundError(assignment_id)

        enrollment = await self._gradeable_enrollment(student_id, course_id)
        if enrollment is None:
            raise NotEnrolledError()

        grade = Grade(
            student_id=student_id,
            course_id=course_id,
            enrollment_id=enrollment.id,
            assignment_id=assignment_id,
            grade_type=grade_type.value,
            value=Decimal(str(value)),
            max_value=Decimal(str(max_value)),
            percentage=calculation.percentage,
            letter_grade=calculation.letter_grade,
            weight=weight,
            is_published=False,
            graded_by=graded_by,
            comments=comments,
        )
        await self.uow.grades.add(grade)

        if grade.grade_type == GradeType.FINAL.value:
            await self._sync_final_grade(enrollment)
        await self.gpa.recompute(student_id)
        return grade

    async def create_grade(self, request: GradeCreateRequest) -> Grade:
        """Record a grade for an enrolled student.

        Args:
            request: Grade data.

        Returns:
            The created grade with derived percentage and letter.
        """
        grade = await self.add_grade(
            student_id=request.student_id,
            course_id=request.course_id,
            value=request.value,
            max_value=request.max_value,
            grade_type=request.grade_type,
            assignment_id=request.assignment_id,
            weight=request.weight,
            graded_by=request.graded_by,
            comments=request.comments,
        )
        await self.uow.commit()

        logger.info(
            "Recorded grade: id=%s, student=%s, course=%s, %s%% (%s)",
            grade.id,
            grade.student_id,
            grade.course_id,
            grade.percentage,
            grade.letter_grade,
        )
        return grade

    async def bulk_create_grades(self, request: BulkGradeCreateRequest) -> BulkGradeResult:
        """Record grades for many students of one course in one transaction.

        Students without an Active enrollment in the course are skipped
        and reported; any other failure rolls the whole sheet back.

        Raises:
            CourseNotFoundError: If the course does not exist.
        """
        if await self.uow.courses.get_by_id(request.course_id) is None:
            raise CourseNotFoundError(request.course_id)

        result = BulkGradeResult()
        await self.uow.begin_transaction()
        try:
            for entry in request.grades:
                try:
                    grade = await self.add_grade(
                        student_id=entry.student_id,
                        course_id=request.course_id,
                        value=entry.value,
                        max_value=request.max_value,
                        grade_type=request.grade_type,
                        assignment_id=request.assignment_id,
                        weight=request.weight,
                        graded_by=request.graded_by,
                        comments=entry.comments,
                    )
                except (StudentNotFoundError, NotEnrolledError):
                    logger.warning(
                        "Skipping grade for student %s: not enrolled in course %s",
                        entry.student_id,
                        request.course_id,
                    )
                    result.skipped_student_ids.append(entry.student_id)
                    continue
                result.created.append(grade)
            await self.uow.commit()
        except BaseException:
            await self.uow.rollback()
            raise

        logger.info(
            "Bulk graded course %s: %d created, %d skipped",
            request.course_id,
            len(result.created),
            len(result.skipped_student_ids),
        )
        return result

    async def get_grade(self, grade_id: str) -> Grade:
        """Get a grade by ID.

        Raises:
            GradeNotFoundError: If the grade does not exist.
        """
        grade = await self.uow.grades.get_by_id(grade_id)
        if grade is None:
            raise GradeNotFoundError(grade_id)
        return grade

    async def update_grade(self, grade_id: str, request: GradeUpdateRequest) -> Grade:
        """Change a grade and re-derive percentage and letter.

        Raises:
            GradeNotFoundError: If the grade does not exist.
            GradeValidationError: If the resulting max_value <= 0, or a Final
                grade would fall outside 0-100 percent.
        """
        grade = await self.get_grade(grade_id)

        value = request.value if request.value is not None else grade.value
        max_value = request.max_value if request.max_value is not None else grade.max_value
        calculation = calculate_grade(value, max_value)
        check_final_percentage(grade.grade_type, calculation)

        grade.value = Decimal(str(value))
        grade.max_value = Decimal(str(max_value))
        grade.percentage = calculation.percentage
        grade.letter_grade = calculation.letter_grade
        if request.weight is not None:
            grade.weight = request.weight
        if request.comments is not None:
            grade.comments = request.comments
        await self.uow.grades.update(grade)

        await self._after_grade_change(grade)
        await self.uow.commit()

        logger.info("Updated grade %s: %s%% (%s)", grade_id, grade.percentage, grade.letter_grade)
        return grade

    async def delete_grade(self, grade_id: str) -> None:
        """Delete a grade and recompute what depended on it.

        Raises:
            GradeNotFoundError: If the grade does not exist.
        """
        grade = await self.get_grade(grade_id)
        await self.uow.grades.remove(grade)

        await self._after_grade_change(grade)
        await self.uow.commit()

        logger.info("Deleted grade %s", grade_id)

    async def publish_grade(self, grade_id: str) -> Grade:
        """Make a grade visible to the student.

        Raises:
            GradeNotFoundError: If the grade does not exist.
        """
        grade = await self.get_grade(grade_id)
        if not grade.is_published:
            grade.is_published = True
            grade.published_at = utc_now()
            await self.uow.grades.update(grade)
            await self.uow.commit()
        return grade

    async def publish_course_grades(self, course_id: str) -> int:
        """Publish every unpublished grade of a course.

        Returns:
            Number of grades published.

        Raises:
            CourseNotFoundError: If the course does not exist.
        """
        if await self.uow.courses.get_by_id(course_id) is None:
            raise CourseNotFoundError(course_id)

        pending = await self.uow.grades.find_by(course_id=course_id, is_published=False)
        published_at = utc_now()
        for grade in pending:
            grade.is_published = True
            grade.published_at = published_at
            await self.uow.grades.update(grade)
        await self.uow.commit()

        logger.info("Published %d grades for course %s", len(pending), course_id)
        return len(pending)

    async def get_student_grades(
        self,
        student_id: str,
        course_id: str | None = None,
        published_only: bool = False,
    ) -> list[Grade]:
        """List a student's grades, newest first.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        if await self.uow.students.get_by_id(student_id) is None:
            raise StudentNotFoundError(student_id)

        criteria = [Grade.student_id == student_id]
        if course_id is not None:
            criteria.append(Grade.course_id == course_id)
        if published_only:
            criteria.append(Grade.is_published.is_(True))
        return await self.uow.grades.find(*criteria, order_by=[Grade.created_at.desc()])

    async def get_course_grades(self, course_id: str) -> list[Grade]:
        """List a course's grades, newest first.

        Raises:
            CourseNotFoundError: If the course does not exist.
        """
        if await self.uow.courses.get_by_id(course_id) is None:
            raise CourseNotFoundError(course_id)
        return await self.uow.grades.find(
            Grade.course_id == course_id, order_by=[Grade.created_at.desc()]
        )

    async def get_grade_distribution(self, course_id: str) -> GradeDistribution:
        """Count a course's grades per letter and per A-F bucket.

        Raises:
            CourseNotFoundError: If the course does not exist.
        """
        grades = await self.get_course_grades(course_id)
        letters = Counter(grade.letter_grade for grade in grades)
        buckets = Counter(letter_bucket(grade.letter_grade) for grade in grades)

        return GradeDistribution(
            course_id=course_id,
            total=len(grades),
            buckets={bucket: buckets.get(bucket, 0) for bucket in DISTRIBUTION_BUCKETS},
            letters={letter: letters.get(letter, 0) for letter in LETTER_GRADES},
        )

    async def calculate_gpa(self, student_id: str) -> Decimal | None:
        """Recompute and persist a student's GPA on demand.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        if await self.uow.students.get_by_id(student_id) is None:
            raise StudentNotFoundError(student_id)
        gpa = await self.gpa.recompute(student_id)
        await self.uow.commit()
        return gpa

    async def _gradeable_enrollment(self, student_id: str, course_id: str) -> Enrollment | None:
        rows = await self.uow.enrollments.find(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
            Enrollment.status.in_(GRADEABLE_STATUSES),
            order_by=[Enrollment.enrollment_date.desc()],
            limit=1,
        )
        return rows[0] if rows else None

    async def _after_grade_change(self, grade: Grade) -> None:
        if grade.grade_type == GradeType.FINAL.value and grade.enrollment_id:
            enrollment = await self.uow.enrollments.get_by_id(grade.enrollment_id)
            if enrollment is not None:
                await self._sync_final_grade(enrollment)
        await self.gpa.recompute(grade.student_id)

    async def _sync_final_grade(self, enrollment: Enrollment) -> None:
        """Copy the latest Final grade of an enrollment onto it."""
        finals = await self.uow.grades.find(
            Grade.enrollment_id == enrollment.id,
            Grade.grade_type == GradeType.FINAL.value,
            order_by=[Grade.created_at.desc()],
            limit=1,
        )
        if finals:
            enrollment.final_grade = finals[0].percentage
            enrollment.letter_grade = finals[0].letter_grade
        else:
            enrollment.final_grade = None
            enrollment.letter_grade = None
        await self.uow.enrollments.update(enrollment)
