# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch import API endpoints.

This module provides endpoints for CSV/XLSX batch imports:
- POST /{kind}/validate - Check a file's header row without importing
- POST /{kind} - Import a file
- GET /{kind}/template - Download a CSV or XLSX template

kind is one of students, courses, grades, enrollments. Rejected and
rolled-back batches are reported in the body with status 400 and 500.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, File, HTTPException, Query, Response, UploadFile, status

from src.api.dependencies import AppSettings, RecordsUoW
from src.core.config import Settings
from src.domains.bulk_import.readers import FileFormat
from src.domains.bulk_import.schemas import ImportKind, ImportResult, ImportStatus, SchemaCheck
from src.domains.bulk_import.service import BatchImporter
from src.domains.bulk_import.templates import CONTENT_TYPES, build_template, template_filename
from src.infrastructure.database.unit_of_work import UnitOfWork
from src.models.imports import ImportResultResponse, RowErrorResponse, SchemaCheckResponse

logger = logging.getLogger(__name__)

router = APIRouter()

_STATUS_CODES = {
    ImportStatus.COMMITTED: status.HTTP_200_OK,
    ImportStatus.REJECTED: status.HTTP_400_BAD_REQUEST,
    ImportStatus.ROLLED_BACK: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _get_service(uow: UnitOfWork, settings: Settings) -> BatchImporter:
    """Get batch importer instance.

    Args:
        uow: Request-scoped unit of work.
        settings: Application settings for import limits.

    Returns:
        Configured BatchImporter instance.
    """
    return BatchImporter(uow, settings.imports)


async def _read_upload(file: UploadFile, settings: Settings) -> bytes:
    limit = settings.imports.max_file_bytes
    content = await file.read(limit + 1)
    if len(content) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds the {settings.imports.max_file_mb} MB limit",
        )
    return content


def _schema_response(check: SchemaCheck) -> SchemaCheckResponse:
    return SchemaCheckResponse(
        valid=check.valid,
        errors=check.errors,
        expected=list(check.expected),
        found=list(check.found),
    )


def _result_response(result: ImportResult) -> ImportResultResponse:
    return ImportResultResponse(
        batch_id=result.batch_id,
        kind=result.kind.value,
        status=result.status.value,
        total_rows=result.total_rows,
        successful_rows=result.successful_rows,
        failed_rows=result.failed_rows,
        errors=result.errors,
        row_errors=[
            RowErrorResponse(row_number=e.row_number, message=e.message) for e in result.row_errors
        ],
    )


@router.post("/{kind}/validate", response_model=SchemaCheckResponse, summary="Validate import file")
async def validate_import_file(
    kind: ImportKind,
    uow: RecordsUoW,
    settings: AppSettings,
    file: Annotated[UploadFile, File(description="CSV or XLSX file")],
) -> SchemaCheckResponse:
    """Check that the header row matches the kind's column schema."""
    content = await _read_upload(file, settings)
    check = _get_service(uow, settings).validate_file(content, file.filename or "", kind)
    return _schema_response(check)


@router.post("/{kind}", response_model=ImportResultResponse, summary="Import file")
async def import_file(
    kind: ImportKind,
    uow: RecordsUoW,
    settings: AppSettings,
    response: Response,
    file: Annotated[UploadFile, File(description="CSV or XLSX file")],
    validate_schema: Annotated[
        bool | None, Query(description="Run the header check first (default from settings)")
    ] = None,
) -> ImportResultResponse:
    """Import a batch file. Valid rows are committed together; failed rows are listed."""
    content = await _read_upload(file, settings)
    logger.info("Import upload: kind=%s, file=%s, bytes=%d", kind.value, file.filename, len(content))

    result = await _get_service(uow, settings).import_file(
        content, file.filename or "", kind, validate_schema=validate_schema
    )
    response.status_code = _STATUS_CODES[result.status]
    return _result_response(result)


@router.get("/{kind}/template", summary="Download import template")
async def download_template(
    kind: ImportKind,
    file_format: Annotated[FileFormat, Query(alias="format")] = FileFormat.CSV,
) -> Response:
    """Header row plus one example row, as CSV or XLSX."""
    return Response(
        content=build_template(kind, file_format),
        media_type=CONTENT_TYPES[file_format],
        headers={
            "Content-Disposition": f'attachment; filename="{template_filename(kind, file_format)}"'
        },
    )
