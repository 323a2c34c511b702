# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Prerequisite resolution.

A course counts as completed for a student when the student holds at
least one grade on it whose raw value is >= PASSING_GRADE_VALUE. The
threshold is a fixed domain constant on the raw grade value, not on the
percentage.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Protocol

PASSING_GRADE_VALUE = Decimal("2.0")


class GradeLike(Protocol):
    course_id: str
    value: Decimal


@dataclass(frozen=True)
class PrerequisiteCheck:
    """Outcome of a prerequisite check.

    Attributes:
        satisfied: True when no prerequisite is missing.
        unmet: Missing prerequisite course ids, in the order they were given.
    """

    satisfied: bool
    unmet: list[str] = field(default_factory=list)


def completed_course_ids(grades: Iterable[GradeLike]) -> set[str]:
    """Course ids the student has completed according to their grades."""
    return {
        grade.course_id
        for grade in grades
        if grade.value is not None and Decimal(str(grade.value)) >= PASSING_GRADE_VALUE
    }


def resolve(prerequisite_ids: Iterable[str], completed_ids: Iterable[str]) -> PrerequisiteCheck:
    """Check a prerequisite set against a completed-course set.

    Args:
        prerequisite_ids: Required course ids (may be empty).
        completed_ids: Course ids the student has completed.

    Returns:
        PrerequisiteCheck with the unmet ids in input order, deduplicated.
    """
    completed = set(completed_ids)
    unmet: list[str] = []
    for course_id in prerequisite_ids:
        if course_id not in completed and course_id not in unmet:
            unmet.append(course_id)
    return PrerequisiteCheck(satisfied=not unmet, unmet=unmet)
