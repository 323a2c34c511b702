# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the academic records engine.

This package provides:
- connection: async engine and session lifecycle
- models: SQLAlchemy ORM models
- repository: generic and per-entity async repositories
- unit_of_work: the transaction boundary services work through

Example:
    from src.infrastructure.database import UnitOfWork, get_session

    async with get_session() as session:
        uow = UnitOfWork(session)
        course = await uow.courses.get_by_code("CS101")
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    build_engine,
    build_sessionmaker,
    close_database,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
)
from src.infrastructure.database.repository import PagedResult, Repository
from src.infrastructure.database.unit_of_work import UnitOfWork

__all__ = [
    "DatabaseError",
    "build_engine",
    "build_sessionmaker",
    "close_database",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_database",
    "PagedResult",
    "Repository",
    "UnitOfWork",
]
