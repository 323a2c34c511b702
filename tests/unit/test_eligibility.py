# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for EligibilityEvaluator."""

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from src.domains.enrollment.eligibility import (
    DenialReason,
    EligibilityEvaluator,
    EligibilityResult,
)


@pytest.fixture
def course():
    """Create mock course with free seats."""
    c = MagicMock()
    c.id = "course-2"
    c.code = "CS201"
    c.is_active = True
    c.capacity = 30
    c.current_enrollment = 10
    return c


@pytest.fixture
def uow(mock_uow, course):
    """Unit of work where every check passes."""
    mock_uow.students.get_by_id.return_value = MagicMock(id="student-1")
    mock_uow.courses.get_by_id.return_value = course
    mock_uow.enrollments.get_open.return_value = None
    mock_uow.prerequisites.prerequisite_ids.return_value = []
    mock_uow.grades.find_by.return_value = []
    return mock_uow


class TestEvaluate:
    """Tests for the ordered eligibility checks."""

    @pytest.mark.asyncio
    async def test_eligible(self, uow):
        result = await EligibilityEvaluator(uow).evaluate("student-1", "course-2")

        assert result.can_enroll is True
        assert result.reason is None
        assert result.code is None

    @pytest.mark.asyncio
    async def test_student_not_found(self, uow):
        uow.students.get_by_id.return_value = None

        result = await EligibilityEvaluator(uow).evaluate("missing", "course-2")

        assert result.can_enroll is False
        assert result.code == DenialReason.STUDENT_NOT_FOUND
        assert result.reason == "Student not found"
        uow.courses.get_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_course_not_found(self, uow):
        uow.courses.get_by_id.return_value = None

        result = await EligibilityEvaluator(uow).evaluate("student-1", "missing")

        assert result.code == DenialReason.COURSE_NOT_FOUND
        assert result.reason == "Course not found"

    @pytest.mark.asyncio
    async def test_course_inactive(self, uow, course):
        course.is_active = False

        result = await EligibilityEvaluator(uow).evaluate("student-1", "course-2")

        assert result.code == DenialReason.COURSE_INACTIVE

    @pytest.mark.asyncio
    async def test_already_enrolled(self, uow):
        uow.enrollments.get_open.return_value = MagicMock(status="Active")

        result = await EligibilityEvaluator(uow).evaluate("student-1", "course-2")

        assert result.code == DenialReason.ALREADY_ENROLLED
        assert result.reason == "Student is already enrolled in this course"

    @pytest.mark.asyncio
    async def test_course_full(self, uow, course):
        course.current_enrollment = 30

        result = await EligibilityEvaluator(uow).evaluate("student-1", "course-2")

        assert result.code == DenialReason.COURSE_FULL
        assert result.reason == "Course is full"

    @pytest.mark.asyncio
    async def test_already_enrolled_checked_before_capacity(self, uow, course):
        course.current_enrollment = 30
        uow.enrollments.get_open.return_value = MagicMock(status="Active")

        result = await EligibilityEvaluator(uow).evaluate("student-1", "course-2")

        assert result.code == DenialReason.ALREADY_ENROLLED

    @pytest.mark.asyncio
    async def test_prerequisites_not_met(self, uow):
        uow.prerequisites.prerequisite_ids.return_value = ["course-1", "course-0"]
        uow.grades.find_by.return_value = [
            SimpleNamespace(course_id="course-0", value=Decimal("3.5")),
            SimpleNamespace(course_id="course-1", value=Decimal("1.5")),
        ]
        uow.courses.find.return_value = [SimpleNamespace(id="course-1", code="CS101")]

        result = await EligibilityEvaluator(uow).evaluate("student-1", "course-2")

        assert result.can_enroll is False
        assert result.code == DenialReason.PREREQUISITES_NOT_MET
        assert result.reason == "Student has not met all prerequisites for this course"
        assert result.unmet_prerequisites == ["course-1"]
        assert result.unmet_prerequisite_codes == ["CS101"]

    @pytest.mark.asyncio
    async def test_prerequisites_met(self, uow):
        uow.prerequisites.prerequisite_ids.return_value = ["course-1"]
        uow.grades.find_by.return_value = [
            SimpleNamespace(course_id="course-1", value=Decimal("2.0")),
        ]

        result = await EligibilityEvaluator(uow).evaluate("student-1", "course-2")

        assert result.can_enroll is True

    @pytest.mark.asyncio
    async def test_no_prerequisites_skips_grade_lookup(self, uow):
        await EligibilityEvaluator(uow).evaluate("student-1", "course-2")

        uow.grades.find_by.assert_not_awaited()


class TestEligibilityResult:
    """Tests for the result constructors."""

    def test_denied_carries_message(self):
        result = EligibilityResult.denied(DenialReason.COURSE_FULL)
        assert result.can_enroll is False
        assert result.reason == DenialReason.COURSE_FULL.message
        assert result.unmet_prerequisites == []

    def test_eligible(self):
        assert EligibilityResult.eligible().can_enroll is True
