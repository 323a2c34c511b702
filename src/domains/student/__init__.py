# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student domain package.

This package provides student record management:
- Registration with unique email and student number
- Status changes and soft deletion
"""

from src.domains.student.service import (
    DuplicateStudentEmailError,
    StudentNotFoundError,
    StudentService,
)

__all__ = [
    "StudentService",
    "StudentNotFoundError",
    "DuplicateStudentEmailError",
]
