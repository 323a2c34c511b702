# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests (mocked unit of work)
- Integration tests (SQLite database, API)
"""

from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

REPOSITORY_NAMES = ("students", "courses", "prerequisites", "enrollments", "assignments", "grades")


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def test_environment() -> dict[str, str]:
    """Provide test environment variables.

    Returns:
        Dictionary of environment variables for testing.
    """
    return {
        "ENVIRONMENT": "development",
        "DEBUG": "true",
        "LOG_LEVEL": "DEBUG",
        "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
        "IMPORT_MAX_ROWS": "10000",
        "IMPORT_MAX_FILE_MB": "10",
    }


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (uses a database)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Helper Fixtures
# =============================================================================


def make_mock_uow() -> MagicMock:
    """Build a unit of work whose repositories and transaction calls are async mocks."""
    uow = MagicMock()
    for name in REPOSITORY_NAMES:
        setattr(uow, name, AsyncMock())
    uow.begin_transaction = AsyncMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    @asynccontextmanager
    async def savepoint():
        yield

    uow.savepoint = MagicMock(side_effect=savepoint)
    return uow


@pytest.fixture
def mock_uow() -> MagicMock:
    """Provide a mocked unit of work."""
    return make_mock_uow()


@pytest.fixture
def sample_student_id() -> str:
    """Provide a sample student ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440001"


@pytest.fixture
def sample_course_id() -> str:
    """Provide a sample course ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440002"


@pytest.fixture
def sample_student_data() -> dict[str, Any]:
    """Provide sample student registration data for testing."""
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.edu",
        "date_of_birth": date(2003, 12, 10),
        "enrollment_date": date(2024, 9, 1),
    }


@pytest.fixture
def sample_course_data() -> dict[str, Any]:
    """Provide sample course data for testing."""
    return {
        "code": "CS101",
        "title": "Introduction to Programming",
        "credits": 3,
        "capacity": 30,
    }


@pytest.fixture
def sample_grade_values() -> list[tuple[Decimal, int]]:
    """Final grades and credits of two completed courses."""
    return [(Decimal("90"), 3), (Decimal("70"), 4)]
