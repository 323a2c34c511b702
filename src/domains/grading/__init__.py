# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grading domain package.

This package provides:
- calculator: percentage and letter grade derivation
- gpa: credit-weighted GPA aggregation
- service: grade recording, updates, publishing and distributions
"""

from src.domains.grading.calculator import (
    LETTER_GRADE_THRESHOLDS,
    GradeCalculation,
    GradeValidationError,
    calculate_grade,
    calculate_percentage,
    letter_grade_for,
)
from src.domains.grading.gpa import GpaAggregator, GpaSummary, compute_gpa
from src.domains.grading.service import (
    AssignmentNotFoundError,
    BulkGradeResult,
    GradeDistribution,
    GradeNotFoundError,
    GradeService,
    NotEnrolledError,
)

__all__ = [
    "LETTER_GRADE_THRESHOLDS",
    "GradeCalculation",
    "GradeValidationError",
    "calculate_grade",
    "calculate_percentage",
    "letter_grade_for",
    "GpaAggregator",
    "GpaSummary",
    "compute_gpa",
    "GradeService",
    "GradeNotFoundError",
    "AssignmentNotFoundError",
    "NotEnrolledError",
    "BulkGradeResult",
    "GradeDistribution",
]
