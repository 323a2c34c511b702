# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial academic records schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-03-03

This migration creates all tables based on the SQLAlchemy models in
src/infrastructure/database/models/academic.py. Constraint names follow
the metadata naming convention.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

OPEN_ENROLLMENT_PREDICATE = sa.text("status IN ('Active', 'Waitlisted')")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create academic records tables."""
    # ==========================================================================
    # 1. students table
    # ==========================================================================
    op.create_table(
        "students",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("student_number", sa.String(20), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(30), nullable=True),
        sa.Column("date_of_birth", sa.Date, nullable=True),
        sa.Column("enrollment_date", sa.Date, nullable=False),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("zip_code", sa.String(20), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="Active"),
        sa.Column("gpa", sa.Numeric(3, 2), nullable=True),
        sa.Column("total_credits_earned", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_credits_required", sa.Integer, nullable=False, server_default="120"),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_students")),
        sa.UniqueConstraint("student_number", name=op.f("uq_students_student_number")),
        sa.UniqueConstraint("email", name=op.f("uq_students_email")),
        sa.CheckConstraint(
            "gpa IS NULL OR (gpa >= 0 AND gpa <= 4)",
            name=op.f("ck_students_gpa_range"),
        ),
    )

    # ==========================================================================
    # 2. courses table
    # ==========================================================================
    op.create_table(
        "courses",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("credits", sa.Integer, nullable=False, server_default="3"),
        sa.Column("capacity", sa.Integer, nullable=False, server_default="30"),
        sa.Column("current_enrollment", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_courses")),
        sa.UniqueConstraint("code", name=op.f("uq_courses_code")),
        sa.CheckConstraint("credits > 0", name=op.f("ck_courses_credits_positive")),
        sa.CheckConstraint("capacity > 0", name=op.f("ck_courses_capacity_positive")),
        sa.CheckConstraint(
            "current_enrollment >= 0 AND current_enrollment <= capacity",
            name=op.f("ck_courses_enrollment_within_capacity"),
        ),
    )

    # ==========================================================================
    # 3. course_prerequisites table
    # ==========================================================================
    op.create_table(
        "course_prerequisites",
        sa.Column("course_id", sa.String(36), nullable=False),
        sa.Column("prerequisite_id", sa.String(36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint(
            "course_id", "prerequisite_id", name=op.f("pk_course_prerequisites")
        ),
        sa.ForeignKeyConstraint(
            ["course_id"],
            ["courses.id"],
            name=op.f("fk_course_prerequisites_course_id_courses"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["prerequisite_id"],
            ["courses.id"],
            name=op.f("fk_course_prerequisites_prerequisite_id_courses"),
            ondelete="RESTRICT",
        ),
        sa.CheckConstraint(
            "course_id <> prerequisite_id",
            name=op.f("ck_course_prerequisites_not_self"),
        ),
    )

    # ==========================================================================
    # 4. enrollments table
    # ==========================================================================
    op.create_table(
        "enrollments",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("student_id", sa.String(36), nullable=False),
        sa.Column("course_id", sa.String(36), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="Active"),
        sa.Column("enrollment_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completion_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("final_grade", sa.Numeric(5, 2), nullable=True),
        sa.Column("letter_grade", sa.String(2), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_enrollments")),
        sa.ForeignKeyConstraint(
            ["student_id"],
            ["students.id"],
            name=op.f("fk_enrollments_student_id_students"),
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["course_id"],
            ["courses.id"],
            name=op.f("fk_enrollments_course_id_courses"),
            ondelete="RESTRICT",
        ),
        sa.CheckConstraint(
            "final_grade IS NULL OR (final_grade >= 0 AND final_grade <= 100)",
            name=op.f("ck_enrollments_final_grade_range"),
        ),
    )
    op.create_index(op.f("ix_enrollments_student_id"), "enrollments", ["student_id"])
    op.create_index(op.f("ix_enrollments_course_id"), "enrollments", ["course_id"])
    # One open (Active or Waitlisted) enrollment per student and course
    op.create_index(
        "uq_enrollments_open_student_course",
        "enrollments",
        ["student_id", "course_id"],
        unique=True,
        postgresql_where=OPEN_ENROLLMENT_PREDICATE,
        sqlite_where=OPEN_ENROLLMENT_PREDICATE,
    )

    # ==========================================================================
    # 5. assignments table
    # ==========================================================================
    op.create_table(
        "assignments",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("course_id", sa.String(36), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("max_points", sa.Numeric(7, 2), nullable=False, server_default="100"),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_assignments")),
        sa.ForeignKeyConstraint(
            ["course_id"],
            ["courses.id"],
            name=op.f("fk_assignments_course_id_courses"),
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("course_id", "title", name="uq_assignments_course_title"),
    )
    op.create_index(op.f("ix_assignments_course_id"), "assignments", ["course_id"])

    # ==========================================================================
    # 6. grades table
    # ==========================================================================
    op.create_table(
        "grades",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("student_id", sa.String(36), nullable=False),
        sa.Column("course_id", sa.String(36), nullable=False),
        sa.Column("enrollment_id", sa.String(36), nullable=True),
        sa.Column("assignment_id", sa.String(36), nullable=True),
        sa.Column("grade_type", sa.String(20), nullable=False, server_default="Assignment"),
        sa.Column("value", sa.Numeric(7, 2), nullable=False),
        sa.Column("max_value", sa.Numeric(7, 2), nullable=False),
        sa.Column("percentage", sa.Numeric(6, 2), nullable=False),
        sa.Column("letter_grade", sa.String(2), nullable=False),
        sa.Column("weight", sa.Numeric(5, 2), nullable=False, server_default="1"),
        sa.Column("is_published", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("graded_by", sa.String(100), nullable=True),
        sa.Column("comments", sa.Text, nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_grades")),
        sa.ForeignKeyConstraint(
            ["student_id"],
            ["students.id"],
            name=op.f("fk_grades_student_id_students"),
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["course_id"],
            ["courses.id"],
            name=op.f("fk_grades_course_id_courses"),
            ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["enrollment_id"],
            ["enrollments.id"],
            name=op.f("fk_grades_enrollment_id_enrollments"),
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["assignment_id"],
            ["assignments.id"],
            name=op.f("fk_grades_assignment_id_assignments"),
            ondelete="SET NULL",
        ),
        sa.CheckConstraint("max_value > 0", name=op.f("ck_grades_max_value_positive")),
    )
    op.create_index(op.f("ix_grades_student_id"), "grades", ["student_id"])
    op.create_index(op.f("ix_grades_course_id"), "grades", ["course_id"])


def downgrade() -> None:
    """Drop academic records tables."""
    op.drop_table("grades")
    op.drop_table("assignments")
    op.drop_index("uq_enrollments_open_student_course", table_name="enrollments")
    op.drop_table("enrollments")
    op.drop_table("course_prerequisites")
    op.drop_table("courses")
    op.drop_table("students")
