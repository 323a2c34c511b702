# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch import domain package.

This package provides:
- schemas: per-kind column lists and result types
- readers: CSV and XLSX normalization
- rows: row-to-record converters
- templates: downloadable CSV and XLSX templates
- service: the BatchImporter
"""

from src.domains.bulk_import.readers import FileFormat, detect_format, read_table
from src.domains.bulk_import.schemas import (
    EXPECTED_COLUMNS,
    SCHEMA_VERSION,
    ImportKind,
    ImportResult,
    ImportStatus,
    RowError,
    SchemaCheck,
)
from src.domains.bulk_import.service import BatchImporter, RowRejectedError, check_headers
from src.domains.bulk_import.templates import build_csv_template, build_template, build_xlsx_template

__all__ = [
    "BatchImporter",
    "RowRejectedError",
    "check_headers",
    "EXPECTED_COLUMNS",
    "SCHEMA_VERSION",
    "ImportKind",
    "ImportResult",
    "ImportStatus",
    "RowError",
    "SchemaCheck",
    "FileFormat",
    "detect_format",
    "read_table",
    "build_csv_template",
    "build_xlsx_template",
    "build_template",
]
