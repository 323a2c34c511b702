# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the academic records engine.

Each domain module provides services that orchestrate operations across
the repositories of a shared unit of work.

Domains:
    student: Student registration, status and soft deletion.
    course: Course catalogue, capacity and prerequisites.
    enrollment: Eligibility evaluation and enrollment lifecycle.
    grading: Grade calculation, recording and GPA aggregation.
    bulk_import: CSV/XLSX batch imports and templates.
    analytics: Grade statistics.
"""
