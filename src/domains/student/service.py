# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student service for managing student records.

This module provides the StudentService class for:
- Student registration with student-number allocation
- Student lookup and paginated listing
- Status changes and soft deletion

GPA is never written here; see src.domains.grading.gpa.
"""

from __future__ import annotations

import logging

from src.core.exceptions import ConflictError, NotFoundError
from src.infrastructure.database.models.academic import Student
from src.infrastructure.database.repository import PagedResult
from src.infrastructure.database.unit_of_work import UnitOfWork
from src.models.common import StudentStatus
from src.models.student import StudentCreateRequest
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class StudentNotFoundError(NotFoundError):
    """Raised when a student is missing or soft-deleted."""

    def __init__(self, student_id: object) -> None:
        super().__init__("Student", student_id)


class DuplicateStudentEmailError(ConflictError):
    """Raised when a student with the same email already exists."""

    def __init__(self, email: str) -> None:
        super().__init__(f"Student with email {email} already exists")
        self.email = email


class StudentService:
    """Service for managing students.

    Attributes:
        uow: Unit of work for the academic records database.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        """Initialize student service.

        Args:
            uow: Unit of work shared with the caller.
        """
        self.uow = uow

    async def add_student(self, request: StudentCreateRequest) -> Student:
        """Stage a new student without committing.

        Used directly by batch imports, which commit once per batch.

        Args:
            request: Student registration data.

        Returns:
            The staged student.

        Raises:
            DuplicateStudentEmailError: If the email is already registered.
        """
        email = str(request.email).strip()
        if await self.uow.students.get_by_email(email, include_deleted=True) is not None:
            raise DuplicateStudentEmailError(email)

        enrollment_date = request.enrollment_date or utc_now().date()
        student = Student(
            student_number=await self.uow.students.next_student_number(utc_now().year),
            first_name=request.first_name.strip(),
            last_name=request.last_name.strip(),
            email=email,
            phone_number=request.phone_number,
            date_of_birth=request.date_of_birth,
            enrollment_date=enrollment_date,
            address=request.address,
            city=request.city,
            state=request.state,
            zip_code=request.zip_code,
            status=StudentStatus.ACTIVE.value,
        )
        return await self.uow.students.add(student)

    async def register_student(self, request: StudentCreateRequest) -> Student:
        """Register a new student.

        Args:
            request: Student registration data.

        Returns:
            The created student.

        Raises:
            DuplicateStudentEmailError: If the email is already registered.
        """
        student = await self.add_student(request)
        await self.uow.commit()

        logger.info("Registered student: id=%s, number=%s", student.id, student.student_number)
        return student

    async def get_student(self, student_id: str) -> Student:
        """Get a student by ID.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        student = await self.uow.students.get_by_id(student_id)
        if student is None:
            raise StudentNotFoundError(student_id)
        return student

    async def get_student_by_email(self, email: str) -> Student:
        """Get a student by email.

        Raises:
            StudentNotFoundError: If no live student has this email.
        """
        student = await self.uow.students.get_by_email(email)
        if student is None:
            raise StudentNotFoundError(email)
        return student

    async def list_students(
        self,
        page: int = 1,
        page_size: int = 20,
        status: StudentStatus | None = None,
    ) -> PagedResult[Student]:
        """List students ordered by last name.

        Args:
            page: 1-based page number.
            page_size: Items per page.
            status: Optional status filter.
        """
        criteria = []
        if status is not None:
            criteria.append(Student.status == status.value)
        return await self.uow.students.get_paged(
            *criteria,
            page=page,
            page_size=page_size,
            order_by=[Student.last_name, Student.first_name, Student.id],
        )

    async def update_status(self, student_id: str, status: StudentStatus) -> Student:
        """Change a student's status.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        student = await self.get_student(student_id)
        previous = student.status
        student.status = status.value
        await self.uow.students.update(student)
        await self.uow.commit()

        logger.info("Student %s status: %s -> %s", student_id, previous, status.value)
        return student

    async def delete_student(self, student_id: str) -> None:
        """Soft-delete a student. Enrollments and grades are kept.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        student = await self.get_student(student_id)
        student.soft_delete()
        await self.uow.students.update(student)
        await self.uow.commit()

        logger.info("Soft-deleted student %s", student_id)

