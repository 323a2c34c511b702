# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course request/response models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CourseCreateRequest(BaseModel):
    """Request to create a course."""

    code: str = Field(..., min_length=1, max_length=20, description="Unique course code")
    title: str = Field(..., min_length=1, max_length=200, description="Course title")
    description: str | None = Field(None, description="Course description")
    credits: int = Field(3, gt=0, description="Credit value")
    capacity: int = Field(30, gt=0, description="Maximum enrollable students")
    is_active: bool = Field(True, description="Open for enrollment")
    prerequisite_ids: list[str] = Field(default_factory=list, description="Prerequisite course IDs")


class CourseCapacityUpdateRequest(BaseModel):
    """Request to change a course's capacity."""

    capacity: int = Field(..., gt=0, description="New maximum enrollable students")


class CoursePrerequisitesUpdateRequest(BaseModel):
    """Request to replace a course's prerequisite set."""

    prerequisite_ids: list[str] = Field(default_factory=list, description="Prerequisite course IDs")


class CourseResponse(BaseModel):
    """Course details."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    title: str
    description: str | None = None
    credits: int
    capacity: int
    current_enrollment: int
    available_seats: int
    is_active: bool
    prerequisite_ids: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class CourseListResponse(BaseModel):
    """Paginated course list."""

    items: list[CourseResponse] = Field(default_factory=list)
    total: int
    page: int
    page_size: int
