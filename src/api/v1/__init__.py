# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    students: Student registration, status, listing and per-student views.
    courses: Course catalogue, capacity, prerequisites and course grades.
    enrollments: Eligibility checks and the enrollment lifecycle.
    grades: Grade recording, updates and publishing.
    imports: CSV/XLSX batch imports and templates.
    analytics: Grade performance and completion summaries.
"""

from fastapi import APIRouter

from src.api.v1 import analytics, courses, enrollments, grades, imports, students

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(students.router, prefix="/students", tags=["Students"])
router.include_router(courses.router, prefix="/courses", tags=["Courses"])
router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])
router.include_router(grades.router, prefix="/grades", tags=["Grades"])
router.include_router(imports.router, prefix="/imports", tags=["Batch Imports"])
router.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])

__all__ = ["router"]
