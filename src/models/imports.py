# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch import response models."""

from pydantic import BaseModel, ConfigDict, Field


class RowErrorResponse(BaseModel):
    """A failed row. row_number counts the header as row 1."""

    model_config = ConfigDict(from_attributes=True)

    row_number: int
    message: str


class SchemaCheckResponse(BaseModel):
    """Header pre-flight outcome."""

    model_config = ConfigDict(from_attributes=True)

    valid: bool
    errors: list[str] = Field(default_factory=list)
    expected: list[str] = Field(default_factory=list, description="Required header, in order")
    found: list[str] = Field(default_factory=list, description="Header read from the file")


class ImportResultResponse(BaseModel):
    """Outcome of a batch import."""

    model_config = ConfigDict(from_attributes=True)

    batch_id: str | None = None
    kind: str
    status: str = Field(..., description="rejected, committed or rolled_back")
    total_rows: int
    successful_rows: int
    failed_rows: int
    errors: list[str] = Field(default_factory=list, description="Batch errors, then row errors")
    row_errors: list[RowErrorResponse] = Field(default_factory=list)
