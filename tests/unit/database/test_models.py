# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for database models.

Tests model definitions, constraints, and helper methods.
"""

from datetime import date

import pytest

from src.infrastructure.database.models.base import Base, SoftDeleteMixin, TimestampMixin
from src.infrastructure.database.models.academic import (
    Assignment,
    Course,
    CoursePrerequisite,
    Enrollment,
    Grade,
    Student,
)


class TestBase:
    """Test base model functionality."""

    def test_base_inherits_declarative_base(self):
        """Verify Base is a declarative base."""
        assert hasattr(Base, "metadata")
        assert hasattr(Base, "registry")

    def test_timestamp_mixin_has_created_at(self):
        """Verify TimestampMixin has created_at field."""
        assert hasattr(TimestampMixin, "created_at")
        assert hasattr(TimestampMixin, "updated_at")

    def test_soft_delete_mixin_has_deleted_at(self):
        """Verify SoftDeleteMixin has deleted_at field."""
        assert hasattr(SoftDeleteMixin, "deleted_at")

    def test_all_tables_registered(self):
        assert set(Base.metadata.tables) == {
            "students",
            "courses",
            "course_prerequisites",
            "enrollments",
            "assignments",
            "grades",
        }


class TestConstraints:
    """Test constraint names follow the naming convention."""

    def _constraint_names(self, model) -> set[str]:
        return {c.name for c in model.__table__.constraints if c.name}

    def test_student_constraints(self):
        names = self._constraint_names(Student)
        assert "pk_students" in names
        assert "uq_students_email" in names
        assert "uq_students_student_number" in names
        assert "ck_students_gpa_range" in names

    def test_course_capacity_constraint(self):
        assert "ck_courses_enrollment_within_capacity" in self._constraint_names(Course)

    def test_prerequisite_cannot_be_self(self):
        assert "ck_course_prerequisites_not_self" in self._constraint_names(CoursePrerequisite)

    def test_open_enrollment_index_is_partial_and_unique(self):
        index = next(
            i for i in Enrollment.__table__.indexes if i.name == "uq_enrollments_open_student_course"
        )
        assert index.unique is True
        assert [c.name for c in index.columns] == ["student_id", "course_id"]
        assert index.dialect_options["postgresql"]["where"] is not None
        assert index.dialect_options["sqlite"]["where"] is not None

    def test_grade_max_value_positive(self):
        assert "ck_grades_max_value_positive" in self._constraint_names(Grade)

    def test_assignment_titles_unique_per_course(self):
        assert "uq_assignments_course_title" in self._constraint_names(Assignment)


class TestModelHelpers:
    """Test model properties."""

    def test_student_full_name(self):
        student = Student(first_name="Ada", last_name="Lovelace", email="ada@example.edu")
        assert student.full_name == "Ada Lovelace"

    def test_soft_delete(self):
        student = Student(first_name="Ada", last_name="Lovelace", enrollment_date=date(2024, 9, 1))
        assert student.is_deleted is False

        student.soft_delete()

        assert student.is_deleted is True

    @pytest.mark.parametrize(
        ("current", "capacity", "available", "full"),
        [(0, 30, 30, False), (29, 30, 1, False), (30, 30, 0, True)],
    )
    def test_course_seats(self, current, capacity, available, full):
        course = Course(code="CS101", title="Intro", capacity=capacity, current_enrollment=current)
        assert course.available_seats == available
        assert course.is_full is full

    @pytest.mark.parametrize(
        ("status", "is_open"),
        [("Active", True), ("Waitlisted", True), ("Completed", False), ("Dropped", False), ("Withdrawn", False)],
    )
    def test_enrollment_is_open(self, status, is_open):
        assert Enrollment(status=status).is_open is is_open
