# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic record models.

Tables:
    students: Student master records (soft-deleted).
    courses: Course catalogue with capacity bookkeeping (soft-deleted).
    course_prerequisites: Course -> prerequisite course relation.
    enrollments: Student/course enrollments and their final grade.
    assignments: Graded work items of a course.
    grades: Individual grade entries with derived percentage and letter.

Status columns store the string value of the enums in src.models.common.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from src.models.common import EnrollmentStatus, GradeType, StudentStatus
from src.utils.datetime import utc_now

DEFAULT_CREDITS_REQUIRED = 120

_OPEN_ENROLLMENT_PREDICATE = text("status IN ('Active', 'Waitlisted')")


class Student(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """A student record.

    gpa is derived by the GPA aggregator and is None until the first
    completed enrollment with a final grade exists.
    """

    __tablename__ = "students"

    student_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(30), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    enrollment_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=StudentStatus.ACTIVE.value
    )
    gpa: Mapped[Decimal | None] = mapped_column(Numeric(3, 2), nullable=True)
    total_credits_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_credits_required: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_CREDITS_REQUIRED
    )

    __table_args__ = (
        CheckConstraint("gpa IS NULL OR (gpa >= 0 AND gpa <= 4)", name="gpa_range"),
    )

    @property
    def full_name(self) -> str:
        """First and last name joined."""
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Student {self.student_number} {self.email}>"


class Course(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """A course with a seat capacity.

    current_enrollment counts Active enrollments and never exceeds
    capacity; seats are reserved with a conditional UPDATE in
    CourseRepository.reserve_seat.
    """

    __tablename__ = "courses"

    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    credits: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    current_enrollment: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("credits > 0", name="credits_positive"),
        CheckConstraint("capacity > 0", name="capacity_positive"),
        CheckConstraint(
            "current_enrollment >= 0 AND current_enrollment <= capacity",
            name="enrollment_within_capacity",
        ),
    )

    @property
    def available_seats(self) -> int:
        """Seats left before the course is full."""
        return max(self.capacity - self.current_enrollment, 0)

    @property
    def is_full(self) -> bool:
        return self.current_enrollment >= self.capacity

    def __repr__(self) -> str:
        return f"<Course {self.code}>"


class CoursePrerequisite(Base):
    """Relation row: course_id requires prerequisite_id to be completed."""

    __tablename__ = "course_prerequisites"

    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True
    )
    prerequisite_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="RESTRICT"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = (
        CheckConstraint("course_id <> prerequisite_id", name="not_self"),
    )


class Enrollment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A student's enrollment in a course.

    At most one Active or Waitlisted enrollment may exist per
    (student, course); the partial unique index enforces it.
    """

    __tablename__ = "enrollments"

    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=EnrollmentStatus.ACTIVE.value
    )
    enrollment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    completion_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    final_grade: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    letter_grade: Mapped[str | None] = mapped_column(String(2), nullable=True)

    __table_args__ = (
        Index(
            "uq_enrollments_open_student_course",
            "student_id",
            "course_id",
            unique=True,
            postgresql_where=_OPEN_ENROLLMENT_PREDICATE,
            sqlite_where=_OPEN_ENROLLMENT_PREDICATE,
        ),
        CheckConstraint(
            "final_grade IS NULL OR (final_grade >= 0 AND final_grade <= 100)",
            name="final_grade_range",
        ),
    )

    @property
    def is_open(self) -> bool:
        """Whether the enrollment still occupies the (student, course) slot."""
        return self.status in {s.value for s in EnrollmentStatus.open_statuses()}


class Assignment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A graded work item belonging to a course."""

    __tablename__ = "assignments"

    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    max_points: Mapped[Decimal] = mapped_column(Numeric(7, 2), nullable=False, default=Decimal("100"))
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("course_id", "title", name="uq_assignments_course_title"),
    )


class Grade(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A single grade entry.

    percentage and letter_grade are derived from value/max_value by the
    grade calculator on every write and are never set independently.
    """

    __tablename__ = "grades"

    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    enrollment_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("enrollments.id", ondelete="SET NULL"), nullable=True
    )
    assignment_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("assignments.id", ondelete="SET NULL"), nullable=True
    )
    grade_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=GradeType.ASSIGNMENT.value
    )
    value: Mapped[Decimal] = mapped_column(Numeric(7, 2), nullable=False)
    max_value: Mapped[Decimal] = mapped_column(Numeric(7, 2), nullable=False)
    percentage: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    letter_grade: Mapped[str] = mapped_column(String(2), nullable=False)
    weight: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("1"))
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    graded_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("max_value > 0", name="max_value_positive"),
    )
