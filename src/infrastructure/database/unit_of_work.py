# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit of work: one session, one transaction, all repositories.

Services receive a UnitOfWork instead of a raw session. Every repository
shares the session, so everything staged through them commits or rolls
back together.

Example:
    async with get_session() as session:
        uow = UnitOfWork(session)
        await uow.begin_transaction()
        student = await uow.students.get_by_id(student_id)
        ...
        await uow.commit()
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import TransactionError
from src.infrastructure.database.repository import (
    AssignmentRepository,
    CourseRepository,
    EnrollmentRepository,
    GradeRepository,
    PrerequisiteRepository,
    StudentRepository,
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Transaction boundary over the academic record repositories.

    Attributes:
        session: The underlying async session.
        students: Student repository.
        courses: Course repository.
        prerequisites: Course prerequisite repository.
        enrollments: Enrollment repository.
        assignments: Assignment repository.
        grades: Grade repository.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.students = StudentRepository(session)
        self.courses = CourseRepository(session)
        self.prerequisites = PrerequisiteRepository(session)
        self.enrollments = EnrollmentRepository(session)
        self.assignments = AssignmentRepository(session)
        self.grades = GradeRepository(session)

    async def begin_transaction(self) -> None:
        """Start a transaction unless one is already open."""
        if not self.session.in_transaction():
            await self.session.begin()

    async def commit(self) -> None:
        """Commit the current transaction.

        Raises:
            TransactionError: If the commit fails. The session has been
                rolled back by the time this is raised.
        """
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.error("Commit failed, rolling back: %s", e)
            await self.session.rollback()
            raise TransactionError("Failed to commit transaction", e) from e

    async def rollback(self) -> None:
        """Roll back the current transaction."""
        await self.session.rollback()

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        """Run a block inside a nested transaction (SAVEPOINT).

        If the block raises, only its own writes are undone and the
        exception propagates; the outer transaction stays usable.

        Example:
            async with uow.savepoint():
                await uow.students.add(student)
        """
        async with self.session.begin_nested():
            yield
