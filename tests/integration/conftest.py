# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest fixtures for integration tests.

Provides a file-backed SQLite database per test, built from the ORM
metadata, plus sessions and units of work bound to it. Set
TEST_DATABASE_URL to run the same tests against PostgreSQL.
"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.domains.course.service import CourseService
from src.domains.student.service import StudentService
from src.infrastructure.database.connection import build_engine, build_sessionmaker
from src.infrastructure.database.models.academic import Course, Student
from src.infrastructure.database.models.base import Base
from src.infrastructure.database.unit_of_work import UnitOfWork
from src.models.course import CourseCreateRequest
from src.models.student import StudentCreateRequest


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    """Get database URL for tests."""
    return os.environ.get("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'records.db'}")


@pytest_asyncio.fixture
async def db_engine(db_url: str) -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine with a fresh schema."""
    engine = build_engine(db_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def db_sessionmaker(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Sessionmaker configured like the application's."""
    return build_sessionmaker(db_engine)


@pytest_asyncio.fixture
async def db_session(
    db_sessionmaker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for database tests."""
    async with db_sessionmaker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def uow(db_session: AsyncSession) -> UnitOfWork:
    """Unit of work over the test session."""
    return UnitOfWork(db_session)


# =============================================================================
# Record Factories
# =============================================================================


@pytest.fixture
def create_student(uow: UnitOfWork):
    """Register and commit a student."""

    async def _create(email: str, first_name: str = "Test", last_name: str = "Student") -> Student:
        request = StudentCreateRequest(first_name=first_name, last_name=last_name, email=email)
        return await StudentService(uow).register_student(request)

    return _create


@pytest.fixture
def create_course(uow: UnitOfWork):
    """Create and commit a course."""

    async def _create(
        code: str,
        capacity: int = 30,
        credits: int = 3,
        prerequisite_ids: list[str] | None = None,
    ) -> Course:
        request = CourseCreateRequest(
            code=code,
            title=f"Course {code}",
            credits=credits,
            capacity=capacity,
            prerequisite_ids=prerequisite_ids or [],
        )
        return await CourseService(uow).create_course(request)

    return _create
