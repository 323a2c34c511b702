# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides course enrollment functionality including:
- Prerequisite resolution
- Eligibility evaluation
- Enrollment, drop, withdrawal and completion
"""

from src.domains.enrollment.eligibility import (
    DENIAL_MESSAGES,
    DenialReason,
    EligibilityEvaluator,
    EligibilityResult,
)
from src.domains.enrollment.prerequisites import (
    PASSING_GRADE_VALUE,
    PrerequisiteCheck,
    completed_course_ids,
    resolve,
)
from src.domains.enrollment.service import (
    EnrollmentNotFoundError,
    EnrollmentResult,
    EnrollmentService,
    InvalidEnrollmentStateError,
    MissingFinalGradeError,
)

__all__ = [
    "EnrollmentService",
    "EnrollmentResult",
    "EnrollmentNotFoundError",
    "InvalidEnrollmentStateError",
    "MissingFinalGradeError",
    "EligibilityEvaluator",
    "EligibilityResult",
    "DenialReason",
    "DENIAL_MESSAGES",
    "PASSING_GRADE_VALUE",
    "PrerequisiteCheck",
    "completed_course_ids",
    "resolve",
]
