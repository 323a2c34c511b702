# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for GPA computation and the GPA aggregator."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from src.core.exceptions import NotFoundError
from src.domains.grading.gpa import GpaAggregator, compute_gpa


class TestComputeGpa:
    """Tests for compute_gpa."""

    def test_credit_weighted(self, sample_grade_values):
        """(3.6 * 3 + 2.8 * 4) / 7 = 22 / 7, rounded to 3.14."""
        summary = compute_gpa(sample_grade_values)
        assert summary.gpa == Decimal("3.14")
        assert summary.total_credits == 7
        assert summary.total_points == Decimal("22.0")

    def test_single_perfect_course(self):
        summary = compute_gpa([(Decimal("100"), 4)])
        assert summary.gpa == Decimal("4.00")

    def test_no_courses_gives_none(self):
        summary = compute_gpa([])
        assert summary.gpa is None
        assert summary.total_credits == 0

    def test_zero_credits_gives_none(self):
        summary = compute_gpa([(Decimal("90"), 0)])
        assert summary.gpa is None

    def test_all_failing(self):
        summary = compute_gpa([(Decimal("0"), 3), (Decimal("0"), 3)])
        assert summary.gpa == Decimal("0.00")


@pytest.fixture
def student():
    """Create mock student."""
    s = MagicMock()
    s.id = "student-1"
    s.gpa = Decimal("2.50")
    s.total_credits_earned = 3
    return s


class TestGpaAggregator:
    """Tests for GpaAggregator.recompute."""

    @pytest.mark.asyncio
    async def test_recompute_writes_gpa_and_credits(self, mock_uow, student, sample_grade_values):
        mock_uow.students.get_by_id.return_value = student
        mock_uow.enrollments.completed_with_credits.return_value = sample_grade_values

        gpa = await GpaAggregator(mock_uow).recompute("student-1")

        assert gpa == Decimal("3.14")
        assert student.gpa == Decimal("3.14")
        assert student.total_credits_earned == 7
        mock_uow.students.update.assert_awaited_once_with(student)
        mock_uow.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_completed_credits_leaves_gpa_unchanged(self, mock_uow, student):
        mock_uow.students.get_by_id.return_value = student
        mock_uow.enrollments.completed_with_credits.return_value = []

        gpa = await GpaAggregator(mock_uow).recompute("student-1")

        assert gpa == Decimal("2.50")
        assert student.gpa == Decimal("2.50")
        mock_uow.students.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_student(self, mock_uow):
        mock_uow.students.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await GpaAggregator(mock_uow).recompute("missing")
