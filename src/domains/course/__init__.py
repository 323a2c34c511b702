# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course domain package.

This package provides course catalogue management:
- Course creation and capacity changes
- Prerequisite relations with cycle rejection
- Soft deletion
"""

from src.domains.course.service import (
    CourseCapacityError,
    CourseInUseError,
    CourseNotFoundError,
    CourseService,
    DuplicateCourseCodeError,
    PrerequisiteCycleError,
    creates_cycle,
)

__all__ = [
    "CourseService",
    "CourseNotFoundError",
    "DuplicateCourseCodeError",
    "CourseCapacityError",
    "CourseInUseError",
    "PrerequisiteCycleError",
    "creates_cycle",
]
