# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Initialize and close the database at application start and stop
- Get a unit of work bound to a request-scoped session
- Get settings and pagination parameters

Example:
    @router.get("/students")
    async def list_students(
        uow: UnitOfWork = Depends(get_uow),
    ):
        ...
"""

import logging
from dataclasses import dataclass
from typing import Annotated, AsyncGenerator

from fastapi import Depends, Query

from src.core.config import Settings, get_settings
from src.infrastructure.database.connection import (
    close_database,
    get_session,
    init_database,
)
from src.infrastructure.database.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


async def init_db() -> None:
    """Initialize the database connection pool."""
    await init_database(get_settings())


async def close_db() -> None:
    """Close the database connection pool."""
    await close_database()


async def get_uow() -> AsyncGenerator[UnitOfWork, None]:
    """Get a unit of work for one request.

    The session commits when the request succeeds and rolls back when the
    endpoint raises.

    Yields:
        UnitOfWork bound to a fresh session.
    """
    async with get_session() as session:
        yield UnitOfWork(session)


def get_app_settings() -> Settings:
    """Get application settings."""
    return get_settings()


@dataclass(frozen=True)
class Pagination:
    """Page parameters after applying the configured limits."""

    page: int
    page_size: int


def get_pagination(
    page: Annotated[int, Query(ge=1, description="1-based page number")] = 1,
    page_size: Annotated[int | None, Query(ge=1, description="Items per page")] = None,
) -> Pagination:
    """Resolve page parameters, clamping page_size to API_MAX_PAGE_SIZE."""
    api = get_settings().api
    size = page_size or api.default_page_size
    return Pagination(page=page, page_size=min(size, api.max_page_size))


RecordsUoW = Annotated[UnitOfWork, Depends(get_uow)]
PageParams = Annotated[Pagination, Depends(get_pagination)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
