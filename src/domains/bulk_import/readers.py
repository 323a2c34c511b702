# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tabular file readers for batch imports.

CSV and XLSX files are normalized to the same shape: a header tuple and a
list of rows mapping column name -> stripped string. The format is picked
from the file extension only.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from pathlib import PurePath

from openpyxl import load_workbook

from src.core.exceptions import ValidationError

# Data rows start on spreadsheet row 2; row 1 is the header.
FIRST_DATA_ROW = 2


class FileFormat(str, Enum):
    CSV = "csv"
    XLSX = "xlsx"


class UnsupportedFormatError(ValidationError):
    """Raised for files that are neither .csv nor .xlsx."""

    pass


class FileReadError(ValidationError):
    """Raised when a file cannot be decoded as its declared format."""

    pass


@dataclass(frozen=True)
class TabularRow:
    """One data row. number is the spreadsheet row number."""

    number: int
    values: dict[str, str]


@dataclass
class TabularData:
    headers: tuple[str, ...] = ()
    rows: list[TabularRow] = field(default_factory=list)


def detect_format(filename: str) -> FileFormat:
    """Pick the reader from the file extension.

    Raises:
        UnsupportedFormatError: For any other extension, including legacy .xls.
    """
    suffix = PurePath(filename or "").suffix.lower()
    if suffix == ".csv":
        return FileFormat.CSV
    if suffix == ".xlsx":
        return FileFormat.XLSX
    raise UnsupportedFormatError(
        f"Unsupported file format '{suffix or filename}'. Use .csv or .xlsx"
    )


def read_table(content: bytes, filename: str) -> TabularData:
    """Read a CSV or XLSX file into normalized rows.

    Fully blank rows are skipped but still counted for row numbering.

    Raises:
        UnsupportedFormatError: If the extension is not supported.
        FileReadError: If the content is empty or cannot be parsed.
    """
    if not content:
        raise FileReadError("File is empty")

    if detect_format(filename) == FileFormat.CSV:
        raw_rows = _csv_rows(content)
    else:
        raw_rows = _xlsx_rows(content)

    if not raw_rows or not any(raw_rows[0]):
        raise FileReadError("File is empty")

    header_cells = list(raw_rows[0])
    # Spreadsheets often report trailing empty columns
    while header_cells and not header_cells[-1]:
        header_cells.pop()
    headers = tuple(header_cells)

    rows = []
    for offset, raw in enumerate(raw_rows[1:]):
        if not any(raw):
            continue
        padded = list(raw) + [""] * (len(headers) - len(raw))
        rows.append(
            TabularRow(
                number=FIRST_DATA_ROW + offset,
                values={header: padded[i] for i, header in enumerate(headers) if header},
            )
        )
    return TabularData(headers=headers, rows=rows)


def read_headers(content: bytes, filename: str) -> tuple[str, ...]:
    """Read only the header row."""
    return read_table(content, filename).headers


def _csv_rows(content: bytes) -> list[list[str]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise FileReadError(f"CSV file is not valid UTF-8: {e}") from e

    try:
        return [[cell.strip() for cell in row] for row in csv.reader(io.StringIO(text))]
    except csv.Error as e:
        raise FileReadError(f"Invalid CSV file: {e}") from e


def _xlsx_rows(content: bytes) -> list[list[str]]:
    try:
        wb = load_workbook(filename=io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        # openpyxl raises zipfile, KeyError and its own errors for bad files
        raise FileReadError(f"Invalid Excel file: {e}") from e

    try:
        ws = wb.active
        if ws is None:
            raise FileReadError("Excel file has no active sheet")
        return [[_cell_str(value) for value in row] for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _cell_str(value: object) -> str:
    """Render a spreadsheet cell the way it would appear in a CSV export."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
