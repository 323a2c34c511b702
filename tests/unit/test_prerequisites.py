# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for prerequisite resolution and cycle detection."""

from decimal import Decimal
from types import SimpleNamespace

from src.domains.course.service import creates_cycle
from src.domains.enrollment.prerequisites import (
    PASSING_GRADE_VALUE,
    completed_course_ids,
    resolve,
)


def _grade(course_id: str, value: str) -> SimpleNamespace:
    return SimpleNamespace(course_id=course_id, value=Decimal(value))


class TestCompletedCourseIds:
    """Tests for completed_course_ids."""

    def test_passing_threshold_is_inclusive(self):
        grades = [_grade("c1", "2.0"), _grade("c2", "1.99")]
        assert completed_course_ids(grades) == {"c1"}

    def test_threshold_applies_to_raw_value(self):
        assert PASSING_GRADE_VALUE == Decimal("2.0")
        assert completed_course_ids([_grade("c1", "85")]) == {"c1"}

    def test_any_passing_grade_completes_the_course(self):
        grades = [_grade("c1", "0"), _grade("c1", "3")]
        assert completed_course_ids(grades) == {"c1"}

    def test_no_grades(self):
        assert completed_course_ids([]) == set()


class TestResolve:
    """Tests for resolve."""

    def test_no_prerequisites_is_satisfied(self):
        check = resolve([], set())
        assert check.satisfied is True
        assert check.unmet == []

    def test_all_completed(self):
        check = resolve(["a", "b"], {"a", "b", "c"})
        assert check.satisfied is True

    def test_unmet_keep_input_order(self):
        check = resolve(["c", "a", "b"], {"a"})
        assert check.satisfied is False
        assert check.unmet == ["c", "b"]

    def test_unmet_are_deduplicated(self):
        check = resolve(["x", "x"], set())
        assert check.unmet == ["x"]


class TestCreatesCycle:
    """Tests for prerequisite cycle detection."""

    def test_no_edges(self):
        assert creates_cycle("a", ["b"], []) is False

    def test_direct_cycle(self):
        # b already requires a
        assert creates_cycle("a", ["b"], [("b", "a")]) is True

    def test_transitive_cycle(self):
        edges = [("b", "c"), ("c", "a")]
        assert creates_cycle("a", ["b"], edges) is True

    def test_existing_edges_of_course_are_ignored(self):
        # a's own edges are being replaced
        edges = [("a", "b"), ("b", "c")]
        assert creates_cycle("a", ["c"], edges) is False

    def test_diamond_is_not_a_cycle(self):
        edges = [("b", "d"), ("c", "d")]
        assert creates_cycle("a", ["b", "c"], edges) is False
