# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student request/response models."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from src.models.common import StudentStatus


class StudentCreateRequest(BaseModel):
    """Request to register a student."""

    first_name: str = Field(..., min_length=1, max_length=100, description="First name")
    last_name: str = Field(..., min_length=1, max_length=100, description="Last name")
    email: EmailStr = Field(..., description="Unique email address")
    phone_number: str | None = Field(None, max_length=30, description="Phone number")
    date_of_birth: date | None = Field(None, description="Date of birth")
    enrollment_date: date | None = Field(None, description="Admission date, defaults to today")
    address: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    zip_code: str | None = Field(None, max_length=20)


class StudentStatusUpdateRequest(BaseModel):
    """Request to change a student's status."""

    status: StudentStatus = Field(..., description="New status")


class StudentResponse(BaseModel):
    """Student details. GPA is read-only and None until first computed."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Student ID")
    student_number: str = Field(..., description="Student number")
    first_name: str
    last_name: str
    email: str
    phone_number: str | None = None
    date_of_birth: date | None = None
    enrollment_date: date
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    status: StudentStatus
    gpa: Decimal | None = Field(None, description="Derived GPA on a 0-4 scale")
    total_credits_earned: int
    total_credits_required: int
    created_at: datetime
    updated_at: datetime


class StudentListResponse(BaseModel):
    """Paginated student list."""

    items: list[StudentResponse] = Field(default_factory=list)
    total: int
    page: int
    page_size: int
