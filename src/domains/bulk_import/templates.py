# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Downloadable import templates.

A template is the expected header row for an import kind plus one example
row, as CSV or XLSX. The XLSX template also carries a read-me sheet with
the schema version.
"""

from __future__ import annotations

import csv
import io

from openpyxl import Workbook
from openpyxl.styles import Font

from src.domains.bulk_import.readers import FileFormat
from src.domains.bulk_import.schemas import (
    EXAMPLE_ROWS,
    EXPECTED_COLUMNS,
    SCHEMA_VERSION,
    ImportKind,
)

CONTENT_TYPES: dict[FileFormat, str] = {
    FileFormat.CSV: "text/csv",
    FileFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def template_filename(kind: ImportKind, file_format: FileFormat) -> str:
    """Suggested download name, e.g. students_template_v1.csv."""
    return f"{kind.value}_template_v{SCHEMA_VERSION}.{file_format.value}"


def build_csv_template(kind: ImportKind, include_example: bool = True) -> bytes:
    """Build a CSV template for an import kind."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPECTED_COLUMNS[kind])
    if include_example:
        writer.writerow(EXAMPLE_ROWS[kind])
    return buffer.getvalue().encode("utf-8")


def build_xlsx_template(kind: ImportKind, include_example: bool = True) -> bytes:
    """Build an XLSX template for an import kind.

    The first sheet holds the header and example row; a second sheet
    documents the kind and schema version.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = kind.value.capitalize()
    ws.append(list(EXPECTED_COLUMNS[kind]))
    for cell in ws[1]:
        cell.font = Font(bold=True)
    if include_example:
        ws.append(list(EXAMPLE_ROWS[kind]))
    for index, column in enumerate(EXPECTED_COLUMNS[kind], start=1):
        ws.column_dimensions[ws.cell(row=1, column=index).column_letter].width = max(len(column) + 4, 14)

    info = wb.create_sheet("About")
    info.append(["Import kind", kind.value])
    info.append(["Schema version", SCHEMA_VERSION])
    info.append(["Columns", ", ".join(EXPECTED_COLUMNS[kind])])
    info.append(["Note", "Keep the header row unchanged; dates use YYYY-MM-DD"])

    bio = io.BytesIO()
    wb.save(bio)
    return bio.getvalue()


def build_template(kind: ImportKind, file_format: FileFormat) -> bytes:
    """Build a template in the requested format."""
    if file_format == FileFormat.XLSX:
        return build_xlsx_template(kind)
    return build_csv_template(kind)
