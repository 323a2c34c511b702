# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models for the academic records database."""

from src.infrastructure.database.models.academic import (
    Assignment,
    Course,
    CoursePrerequisite,
    Enrollment,
    Grade,
    Student,
)
from src.infrastructure.database.models.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    new_uuid,
)

__all__ = [
    "Base",
    "SoftDeleteMixin",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "new_uuid",
    "Student",
    "Course",
    "CoursePrerequisite",
    "Enrollment",
    "Assignment",
    "Grade",
]
