# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for the academic records engine.

This module provides standardized datetime operations to ensure consistency
across the codebase.

Design Decisions:
-----------------
1. All timestamps are stored in UTC (TIMESTAMPTZ)
2. All Python datetimes are timezone-aware (with timezone.utc)
3. Calendar values coming from import files (birth dates, enrollment
   dates) are parsed through parse_date so every reader accepts the same
   set of formats

Usage:
------
    from src.utils.datetime import utc_now

    # For SQLAlchemy model defaults
    created_at = mapped_column(DateTime(timezone=True), default=utc_now)
"""

from datetime import date, datetime, timezone

# Accepted textual date formats for import cells, tried in order.
DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d.%m.%Y",
    "%Y/%m/%d",
)


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def parse_date(value: str) -> date:
    """Parse a calendar date from an import cell.

    Accepts the formats in DATE_FORMATS as well as full ISO 8601
    timestamps (spreadsheet cells holding a datetime are normalized to
    ISO text by the readers).

    Args:
        value: Cell text.

    Returns:
        The parsed date.

    Raises:
        ValueError: If the text matches none of the accepted formats.
    """
    text = value.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValueError(f"Invalid date '{value}'") from None


def date_to_utc(value: date) -> datetime:
    """Convert a calendar date to midnight UTC."""
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


# Aliases for convenience
now = utc_now
