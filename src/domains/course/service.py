# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course service for managing the course catalogue.

This module provides the CourseService class for:
- Course creation with unique codes
- Capacity changes that respect current enrollment
- Prerequisite management with cycle rejection
- Soft deletion of courses without open enrollments
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable

from src.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.infrastructure.database.models.academic import Course, CoursePrerequisite, Enrollment
from src.infrastructure.database.repository import PagedResult
from src.infrastructure.database.unit_of_work import UnitOfWork
from src.models.common import EnrollmentStatus
from src.models.course import CourseCreateRequest

logger = logging.getLogger(__name__)


class CourseNotFoundError(NotFoundError):
    """Raised when a course is missing or soft-deleted."""

    def __init__(self, course_id: object) -> None:
        super().__init__("Course", course_id)


class DuplicateCourseCodeError(ConflictError):
    """Raised when a course with the same code already exists."""

    def __init__(self, code: str) -> None:
        super().__init__(f"Course with code {code} already exists")
        self.code = code


class CourseCapacityError(ConflictError):
    """Raised when a capacity change would drop below current enrollment."""

    pass


class CourseInUseError(ConflictError):
    """Raised when deleting a course that still has open enrollments."""

    pass


class PrerequisiteCycleError(ValidationError):
    """Raised when a prerequisite change would create a cycle."""

    pass


def creates_cycle(
    course_id: str,
    prerequisite_ids: Iterable[str],
    edges: Iterable[tuple[str, str]],
) -> bool:
    """Check whether giving course_id these prerequisites closes a cycle.

    Args:
        course_id: Course whose prerequisite set is being replaced.
        prerequisite_ids: The proposed prerequisite set.
        edges: Existing (course_id, prerequisite_id) pairs. Edges leaving
            course_id are ignored because they are being replaced.

    Returns:
        True if course_id is reachable from any proposed prerequisite.
    """
    graph: dict[str, set[str]] = defaultdict(set)
    for source, target in edges:
        if source != course_id:
            graph[source].add(target)

    stack = list(prerequisite_ids)
    seen: set[str] = set()
    while stack:
        node = stack.pop()
        if node == course_id:
            return True
        if node in seen:
            continue
        seen.add(node)
        stack.extend(graph.get(node, ()))
    return False


class CourseService:
    """Service for managing courses.

    Attributes:
        uow: Unit of work for the academic records database.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        """Initialize course service.

        Args:
            uow: Unit of work shared with the caller.
        """
        self.uow = uow

    async def add_course(self, request: CourseCreateRequest) -> Course:
        """Stage a new course without committing.

        Prerequisites on the request are ignored here; use
        set_prerequisites once the course exists.

        Raises:
            DuplicateCourseCodeError: If the code is already taken.
        """
        code = request.code.strip().upper()
        if await self.uow.courses.get_by_code(code, include_deleted=True) is not None:
            raise DuplicateCourseCodeError(code)

        course = Course(
            code=code,
            title=request.title.strip(),
            description=request.description,
            credits=request.credits,
            capacity=request.capacity,
            current_enrollment=0,
            is_active=request.is_active,
        )
        return await self.uow.courses.add(course)

    async def create_course(self, request: CourseCreateRequest) -> Course:
        """Create a course, optionally with prerequisites.

        Args:
            request: Course data.

        Returns:
            The created course.

        Raises:
            DuplicateCourseCodeError: If the code is already taken.
            CourseNotFoundError: If a prerequisite does not exist.
        """
        course = await self.add_course(request)
        if request.prerequisite_ids:
            await self._replace_prerequisites(course, request.prerequisite_ids)
        await self.uow.commit()

        logger.info("Created course: id=%s, code=%s", course.id, course.code)
        return course

    async def get_course(self, course_id: str) -> Course:
        """Get a course by ID.

        Raises:
            CourseNotFoundError: If the course does not exist.
        """
        course = await self.uow.courses.get_by_id(course_id)
        if course is None:
            raise CourseNotFoundError(course_id)
        return course

    async def get_course_by_code(self, code: str) -> Course:
        """Get a course by code.

        Raises:
            CourseNotFoundError: If no live course has this code.
        """
        course = await self.uow.courses.get_by_code(code)
        if course is None:
            raise CourseNotFoundError(code)
        return course

    async def list_courses(
        self,
        page: int = 1,
        page_size: int = 20,
        active_only: bool = False,
    ) -> PagedResult[Course]:
        """List courses ordered by code."""
        criteria = [Course.is_active.is_(True)] if active_only else []
        return await self.uow.courses.get_paged(
            *criteria,
            page=page,
            page_size=page_size,
            order_by=[Course.code],
        )

    async def update_capacity(self, course_id: str, capacity: int) -> Course:
        """Change a course's capacity.

        Args:
            course_id: Course identifier.
            capacity: New maximum number of enrolled students.

        Raises:
            CourseNotFoundError: If the course does not exist.
            ValidationError: If capacity is not positive.
            CourseCapacityError: If capacity is below current enrollment.
        """
        if capacity <= 0:
            raise ValidationError("Capacity must be greater than zero")

        course = await self.get_course(course_id)
        if capacity < course.current_enrollment:
            raise CourseCapacityError(
                f"Cannot set max students to {capacity} when "
                f"{course.current_enrollment} students are already enrolled"
            )

        course.capacity = capacity
        await self.uow.courses.update(course)
        await self.uow.commit()

        logger.info("Course %s capacity set to %d", course.code, capacity)
        return course

    async def get_prerequisite_ids(self, course_id: str) -> list[str]:
        """Prerequisite course ids of a course.

        Raises:
            CourseNotFoundError: If the course does not exist.
        """
        await self.get_course(course_id)
        return await self.uow.prerequisites.prerequisite_ids(course_id)

    async def set_prerequisites(self, course_id: str, prerequisite_ids: list[str]) -> list[str]:
        """Replace a course's prerequisite set.

        Args:
            course_id: Course identifier.
            prerequisite_ids: New prerequisite course ids (may be empty).

        Returns:
            The stored prerequisite ids.

        Raises:
            CourseNotFoundError: If the course or a prerequisite does not exist.
            PrerequisiteCycleError: If the change would create a cycle.
        """
        course = await self.get_course(course_id)
        stored = await self._replace_prerequisites(course, prerequisite_ids)
        await self.uow.commit()

        logger.info("Course %s prerequisites set to %s", course.code, stored)
        return stored

    async def _replace_prerequisites(self, course: Course, prerequisite_ids: list[str]) -> list[str]:
        wanted = list(dict.fromkeys(prerequisite_ids))

        if course.id in wanted:
            raise PrerequisiteCycleError("A course cannot be its own prerequisite")

        for prerequisite_id in wanted:
            if await self.uow.courses.get_by_id(prerequisite_id) is None:
                raise CourseNotFoundError(prerequisite_id)

        edges = await self.uow.prerequisites.all_edges()
        if creates_cycle(course.id, wanted, edges):
            raise PrerequisiteCycleError(
                f"Prerequisites for {course.code} would create a cycle"
            )

        for existing in await self.uow.prerequisites.find_by(course_id=course.id):
            await self.uow.prerequisites.remove(existing)
        for prerequisite_id in wanted:
            await self.uow.prerequisites.add(
                CoursePrerequisite(course_id=course.id, prerequisite_id=prerequisite_id)
            )
        return wanted

    async def delete_course(self, course_id: str) -> None:
        """Soft-delete a course and close it for enrollment.

        Raises:
            CourseNotFoundError: If the course does not exist.
            CourseInUseError: If the course has open enrollments.
        """
        course = await self.get_course(course_id)

        open_statuses = [s.value for s in EnrollmentStatus.open_statuses()]
        open_count = await self.uow.enrollments.count(
            Enrollment.course_id == course_id,
            Enrollment.status.in_(open_statuses),
        )
        if open_count:
            raise CourseInUseError(
                f"Cannot delete course {course.code} with {open_count} active enrollments"
            )

        course.is_active = False
        course.soft_delete()
        await self.uow.courses.update(course)
        await self.uow.commit()

        logger.info("Soft-deleted course %s", course.code)
