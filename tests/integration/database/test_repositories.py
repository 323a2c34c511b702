# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for repositories and the unit of work."""

from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from src.core.exceptions import TransactionError
from src.infrastructure.database.models.academic import Course, Enrollment, Student
from src.infrastructure.database.unit_of_work import UnitOfWork
from src.utils.datetime import utc_now

pytestmark = pytest.mark.integration


class TestStudentRepository:
    """Tests for StudentRepository."""

    @pytest.mark.asyncio
    async def test_student_numbers_are_sequential(self, create_student):
        first = await create_student("one@example.edu")
        second = await create_student("two@example.edu")

        year = utc_now().year
        assert first.student_number == f"STU{year}00001"
        assert second.student_number == f"STU{year}00002"

    @pytest.mark.asyncio
    async def test_get_by_email_ignores_case(self, uow, create_student):
        student = await create_student("Mixed.Case@example.edu")

        found = await uow.students.get_by_email("mixed.case@EXAMPLE.edu")

        assert found is not None
        assert found.id == student.id

    @pytest.mark.asyncio
    async def test_soft_deleted_rows_are_hidden(self, uow, create_student):
        student = await create_student("gone@example.edu")
        student.soft_delete()
        await uow.students.update(student)
        await uow.commit()

        assert await uow.students.get_by_id(student.id) is None
        assert await uow.students.get_by_id(student.id, include_deleted=True) is not None
        assert await uow.students.get_by_email("gone@example.edu") is None

    @pytest.mark.asyncio
    async def test_deleted_students_keep_their_numbers(self, uow, create_student):
        first = await create_student("first@example.edu")
        first.soft_delete()
        await uow.students.update(first)
        await uow.commit()

        second = await create_student("second@example.edu")

        assert second.student_number != first.student_number

    @pytest.mark.asyncio
    async def test_paging(self, uow, create_student):
        for n in range(5):
            await create_student(f"s{n}@example.edu", last_name=f"Name{n}")

        page = await uow.students.get_paged(
            page=2, page_size=2, order_by=[Student.last_name]
        )

        assert page.total == 5
        assert [s.last_name for s in page.items] == ["Name2", "Name3"]


class TestCourseRepository:
    """Tests for CourseRepository seat bookkeeping."""

    @pytest.mark.asyncio
    async def test_get_by_code_ignores_case(self, uow, create_course):
        course = await create_course("MATH201")

        found = await uow.courses.get_by_code("math201")

        assert found.id == course.id

    @pytest.mark.asyncio
    async def test_reserve_seat_stops_at_capacity(self, uow, create_course):
        course = await create_course("ART100", capacity=2)

        assert await uow.courses.reserve_seat(course) is True
        assert await uow.courses.reserve_seat(course) is True
        assert await uow.courses.reserve_seat(course) is False
        assert course.current_enrollment == 2

    @pytest.mark.asyncio
    async def test_release_seat_never_goes_negative(self, uow, create_course):
        course = await create_course("ART101")

        await uow.courses.release_seat(course)

        assert course.current_enrollment == 0


class TestUnitOfWork:
    """Tests for commit and rollback behaviour."""

    @pytest.mark.asyncio
    async def test_rollback_discards_staged_rows(self, uow):
        await uow.begin_transaction()
        await uow.courses.add(Course(code="TMP1", title="Temp"))
        await uow.rollback()

        assert await uow.courses.count() == 0

    @pytest.mark.asyncio
    async def test_one_open_enrollment_per_pair(self, uow, create_student, create_course):
        student = await create_student("dup@example.edu")
        course = await create_course("BIO110")
        await uow.enrollments.add(Enrollment(student_id=student.id, course_id=course.id))

        with pytest.raises(IntegrityError):
            await uow.enrollments.add(Enrollment(student_id=student.id, course_id=course.id))

    @pytest.mark.asyncio
    async def test_closed_enrollments_do_not_block_reenrollment(self, uow, create_student, create_course):
        student = await create_student("again@example.edu")
        course = await create_course("BIO111")
        await uow.enrollments.add(
            Enrollment(student_id=student.id, course_id=course.id, status="Dropped")
        )
        await uow.enrollments.add(Enrollment(student_id=student.id, course_id=course.id))
        await uow.commit()

        assert await uow.enrollments.count(Enrollment.student_id == student.id) == 2

    @pytest.mark.asyncio
    async def test_commit_failure_raises_transaction_error(self, uow, db_sessionmaker):
        uow.session.add(
            Student(
                student_number="STU000001",
                first_name="A",
                last_name="B",
                email="clash@example.edu",
                enrollment_date=date(2024, 9, 1),
            )
        )
        uow.session.add(
            Student(
                student_number="STU000002",
                first_name="C",
                last_name="D",
                email="clash@example.edu",
                enrollment_date=date(2024, 9, 1),
            )
        )

        with pytest.raises(TransactionError):
            await uow.commit()

        async with db_sessionmaker() as other:
            assert await UnitOfWork(other).students.count() == 0
