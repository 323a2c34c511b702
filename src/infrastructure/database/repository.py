# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Generic async repositories over the academic records models.

Repositories never commit. Writes are flushed so generated ids and
constraint violations surface immediately; the owning UnitOfWork decides
when the transaction ends.

Soft-deleted rows (models with SoftDeleteMixin) are hidden from every
read unless include_deleted=True is passed.

Example:
    repo = Repository(session, Course)
    page = await repo.get_paged(Course.is_active.is_(True), page=2, page_size=10)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import ColumnElement, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models.academic import (
    Assignment,
    Course,
    CoursePrerequisite,
    Enrollment,
    Grade,
    Student,
)
from src.infrastructure.database.models.base import Base, SoftDeleteMixin
from src.models.common import EnrollmentStatus

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


@dataclass
class PagedResult(Generic[ModelT]):
    """A page of entities plus the total count of matching rows."""

    items: list[ModelT] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20


class Repository(Generic[ModelT]):
    """Async CRUD access for a single model.

    Attributes:
        session: Session shared with the owning unit of work.
        model: Mapped class this repository serves.
    """

    def __init__(self, session: AsyncSession, model: type[ModelT]) -> None:
        self.session = session
        self.model = model

    def _visible(self, include_deleted: bool) -> list[ColumnElement[bool]]:
        if include_deleted or not issubclass(self.model, SoftDeleteMixin):
            return []
        return [self.model.deleted_at.is_(None)]

    def _filters(self, filters: dict[str, Any]) -> list[ColumnElement[bool]]:
        return [getattr(self.model, name) == value for name, value in filters.items()]

    async def get_by_id(self, entity_id: str, *, include_deleted: bool = False) -> ModelT | None:
        """Fetch an entity by primary key.

        Args:
            entity_id: Primary key value.
            include_deleted: Return soft-deleted rows too.

        Returns:
            The entity, or None if missing or soft-deleted.
        """
        entity = await self.session.get(self.model, entity_id)
        if entity is None:
            return None
        if not include_deleted and isinstance(entity, SoftDeleteMixin) and entity.is_deleted:
            return None
        return entity

    async def find(
        self,
        *criteria: ColumnElement[bool],
        order_by: Sequence[Any] | None = None,
        limit: int | None = None,
        include_deleted: bool = False,
    ) -> list[ModelT]:
        """Return all entities matching the given SQL criteria."""
        stmt = select(self.model).where(*criteria, *self._visible(include_deleted))
        if order_by:
            stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_by(self, **filters: Any) -> list[ModelT]:
        """Return all entities whose columns equal the given values."""
        return await self.find(*self._filters(filters))

    async def first_by(self, **filters: Any) -> ModelT | None:
        """Return the first entity matching the given column values, if any."""
        rows = await self.find(*self._filters(filters), limit=1)
        return rows[0] if rows else None

    async def count(self, *criteria: ColumnElement[bool], include_deleted: bool = False) -> int:
        """Count entities matching the given SQL criteria."""
        stmt = (
            select(func.count())
            .select_from(self.model)
            .where(*criteria, *self._visible(include_deleted))
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def add(self, entity: ModelT) -> ModelT:
        """Stage a new entity and flush it."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def update(self, entity: ModelT) -> ModelT:
        """Flush pending changes of an attached entity."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def remove(self, entity: ModelT) -> None:
        """Hard-delete an entity.

        Models with SoftDeleteMixin should be soft-deleted through
        entity.soft_delete() and update() instead.
        """
        await self.session.delete(entity)
        await self.session.flush()

    async def get_paged(
        self,
        *criteria: ColumnElement[bool],
        page: int = 1,
        page_size: int = 20,
        order_by: Sequence[Any] | None = None,
        include_deleted: bool = False,
    ) -> PagedResult[ModelT]:
        """Return one page of matching entities and the total count.

        Args:
            *criteria: SQL filter expressions.
            page: 1-based page number.
            page_size: Page size, at least 1.
            order_by: Ordering; defaults to the primary key for stable pages.
            include_deleted: Include soft-deleted rows.
        """
        page = max(page, 1)
        page_size = max(page_size, 1)

        total = await self.count(*criteria, include_deleted=include_deleted)

        stmt = select(self.model).where(*criteria, *self._visible(include_deleted))
        ordering = order_by or self.model.__mapper__.primary_key
        stmt = stmt.order_by(*ordering).offset((page - 1) * page_size).limit(page_size)

        result = await self.session.execute(stmt)
        return PagedResult(
            items=list(result.scalars().all()),
            total=total,
            page=page,
            page_size=page_size,
        )


class StudentRepository(Repository[Student]):
    """Student access with student-number allocation."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Student)

    async def get_by_email(
        self, email: str, *, include_deleted: bool = False
    ) -> Student | None:
        """Look up a student by email, case-insensitively."""
        rows = await self.find(
            func.lower(Student.email) == email.strip().lower(),
            limit=1,
            include_deleted=include_deleted,
        )
        return rows[0] if rows else None

    async def next_student_number(self, year: int) -> str:
        """Allocate the next STU{year}{seq:05d} number.

        Soft-deleted students keep their numbers, so they are counted too.
        """
        prefix = f"STU{year}"
        existing = await self.count(
            Student.student_number.like(f"{prefix}%"), include_deleted=True
        )
        return f"{prefix}{existing + 1:05d}"


class CourseRepository(Repository[Course]):
    """Course access with atomic seat bookkeeping."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Course)

    async def get_by_code(
        self, code: str, *, include_deleted: bool = False
    ) -> Course | None:
        """Look up a course by code, case-insensitively."""
        rows = await self.find(
            func.upper(Course.code) == code.strip().upper(),
            limit=1,
            include_deleted=include_deleted,
        )
        return rows[0] if rows else None

    async def reserve_seat(self, course: Course) -> bool:
        """Atomically take one seat if the course is not full.

        The capacity check and increment happen in a single UPDATE, so two
        concurrent enrollments cannot both take the last seat.

        Returns:
            True if a seat was taken, False if the course was full.
        """
        stmt = (
            update(Course)
            .where(Course.id == course.id, Course.current_enrollment < Course.capacity)
            .values(current_enrollment=Course.current_enrollment + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.refresh(course, attribute_names=["current_enrollment"])
        return result.rowcount == 1

    async def release_seat(self, course: Course) -> None:
        """Give back one seat, never going below zero."""
        stmt = (
            update(Course)
            .where(Course.id == course.id, Course.current_enrollment > 0)
            .values(current_enrollment=Course.current_enrollment - 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.refresh(course, attribute_names=["current_enrollment"])


class EnrollmentRepository(Repository[Enrollment]):
    """Enrollment access."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Enrollment)

    async def get_open(self, student_id: str, course_id: str) -> Enrollment | None:
        """Return the Active or Waitlisted enrollment for the pair, if any."""
        open_statuses = [s.value for s in EnrollmentStatus.open_statuses()]
        rows = await self.find(
            Enrollment.student_id == student_id,
            Enrollment.course_id == course_id,
            Enrollment.status.in_(open_statuses),
            limit=1,
        )
        return rows[0] if rows else None

    async def completed_with_credits(self, student_id: str) -> list[tuple[Decimal, int]]:
        """Final grades and course credits of the student's completed enrollments.

        Only Completed enrollments with a final grade are returned.
        """
        stmt = (
            select(Enrollment.final_grade, Course.credits)
            .join(Course, Course.id == Enrollment.course_id)
            .where(
                Enrollment.student_id == student_id,
                Enrollment.status == EnrollmentStatus.COMPLETED.value,
                Enrollment.final_grade.is_not(None),
            )
        )
        result = await self.session.execute(stmt)
        return [(Decimal(str(final)), int(credits)) for final, credits in result.all()]


class GradeRepository(Repository[Grade]):
    """Grade access."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Grade)


class AssignmentRepository(Repository[Assignment]):
    """Assignment access."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Assignment)

    async def get_by_title(self, course_id: str, title: str) -> Assignment | None:
        """Look up a course assignment by title, case-insensitively."""
        rows = await self.find(
            Assignment.course_id == course_id,
            func.lower(Assignment.title) == title.strip().lower(),
            limit=1,
        )
        return rows[0] if rows else None


class PrerequisiteRepository(Repository[CoursePrerequisite]):
    """Course prerequisite relation access."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, CoursePrerequisite)

    async def prerequisite_ids(self, course_id: str) -> list[str]:
        """Prerequisite course ids of a course, in stable order."""
        rows = await self.find(
            CoursePrerequisite.course_id == course_id,
            order_by=[CoursePrerequisite.created_at, CoursePrerequisite.prerequisite_id],
        )
        return [row.prerequisite_id for row in rows]

    async def all_edges(self) -> list[tuple[str, str]]:
        """Every (course_id, prerequisite_id) pair, for cycle detection."""
        result = await self.session.execute(
            select(CoursePrerequisite.course_id, CoursePrerequisite.prerequisite_id)
        )
        return [(course_id, prereq_id) for course_id, prereq_id in result.all()]
