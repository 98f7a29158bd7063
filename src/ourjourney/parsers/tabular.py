"""Tabular decoding of memories sheets.

Turns raw bytes into an ordered list of loosely-typed row mappings. This layer
knows nothing about memories: it only knows spreadsheets and CSV.

Spreadsheets are read with pandas (openpyxl for .xlsx, xlrd for .xls). Only
the first sheet is used and its first row supplies the column names. Date
cells arrive as native ``datetime`` values, blank cells are left out of the
mapping and fully blank rows are skipped.

CSV is read with the standard library ``csv`` module. Every value is a
string and the first non-empty line is the header. Later empty lines are
skipped, and values past the header width are kept under ``EXTRA_FIELDS_KEY``
so later stages can report them.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Any

import numpy as np
import pandas as pd

from ourjourney.parsers.base import CorruptFileError, SourceFormat, coerce_format

logger = logging.getLogger(__name__)

RowMapping = dict[str, Any]

# Holds values found beyond the last header column of a CSV row
EXTRA_FIELDS_KEY = "__extra_fields__"

# Free-text cells can run past the csv module's default 128 KiB field limit
MAX_CSV_FIELD_SIZE = 16 * 1024 * 1024

if csv.field_size_limit() < MAX_CSV_FIELD_SIZE:
    csv.field_size_limit(MAX_CSV_FIELD_SIZE)


def decode(
    data: bytes,
    source_format: SourceFormat | str,
    *,
    strip_headers: bool = True,
) -> list[RowMapping]:
    """Decode memories-sheet bytes into row mappings.

    Args:
        data: Complete file contents
        source_format: Format hint ("xlsx", "xls", "csv" or a SourceFormat)
        strip_headers: Trim whitespace around column names

    Returns:
        Row mappings in source order

    Raises:
        UnsupportedFormatError: If the hint is not a supported format
        CorruptFileError: If spreadsheet bytes cannot be read
    """
    fmt = coerce_format(source_format)
    if fmt.is_spreadsheet:
        rows = decode_spreadsheet(data, fmt, strip_headers=strip_headers)
    else:
        rows = decode_csv(data, strip_headers=strip_headers)

    logger.debug(f"Decoded {len(rows)} rows from {fmt.value} input ({len(data)} bytes)")
    return rows


# =============================================================================
# Spreadsheets
# =============================================================================


def decode_spreadsheet(
    data: bytes,
    source_format: SourceFormat,
    *,
    strip_headers: bool = True,
) -> list[RowMapping]:
    """Read the first sheet of an Excel workbook.

    Args:
        data: Workbook bytes
        source_format: SourceFormat.XLSX or SourceFormat.XLS
        strip_headers: Trim whitespace around column names

    Returns:
        One mapping per non-blank data row

    Raises:
        CorruptFileError: If the engine cannot read the workbook
    """
    # pandas sniffs the content and picks openpyxl (xlsx) or xlrd (xls), so a
    # workbook saved with the wrong extension still reads
    try:
        frame = pd.read_excel(
            io.BytesIO(data),
            sheet_name=0,
            header=0,
            dtype=object,
        )
    except ImportError:
        raise
    except Exception as e:
        raise CorruptFileError(
            f"Could not read {source_format.value} workbook: {e}",
        ) from e

    headers = [_header_name(column, strip_headers) for column in frame.columns]

    rows: list[RowMapping] = []
    for values in frame.itertuples(index=False, name=None):
        row: RowMapping = {}
        for header, value in zip(headers, values):
            cell = _clean_cell(value)
            if cell is not None:
                row[header] = cell
        if row:
            rows.append(row)

    return rows


def _header_name(column: Any, strip: bool) -> str:
    name = str(column)
    return name.strip() if strip else name


def _clean_cell(value: Any) -> Any:
    """Convert a pandas cell to a plain Python value, or None for blanks."""
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if value == "":
        return None
    return value


# =============================================================================
# CSV
# =============================================================================


def decode_csv(data: bytes, *, strip_headers: bool = True) -> list[RowMapping]:
    """Read CSV with a header row.

    Blank lines before the header are skipped; the first line with content
    supplies the column names.

    Args:
        data: CSV bytes
        strip_headers: Trim whitespace around column names

    Returns:
        One mapping per non-empty line, all values strings

    Raises:
        CorruptFileError: If the csv module rejects the text
    """
    text = _decode_text(data)
    reader = csv.reader(io.StringIO(text, newline=""))

    try:
        header = next((record for record in reader if record), None)
        if header is None:
            return []
        if strip_headers:
            header = [name.strip() for name in header]

        rows: list[RowMapping] = []
        for record in reader:
            if not record:
                continue
            rows.append(_csv_row(header, record, reader.line_num))
    except csv.Error as e:
        raise CorruptFileError(f"Could not read csv file (line {reader.line_num}): {e}") from e

    return rows


def _csv_row(header: list[str], record: list[str], line_number: int) -> RowMapping:
    # Short rows leave trailing columns out of the mapping
    row: RowMapping = dict(zip(header, record))
    if len(record) > len(header):
        row[EXTRA_FIELDS_KEY] = record[len(header):]
        logger.debug(
            f"CSV line {line_number} has {len(record) - len(header)} values past the header"
        )
    return row


def _decode_text(data: bytes) -> str:
    """Decode as UTF-8 (dropping a BOM), falling back to latin-1."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.debug("CSV is not valid UTF-8, decoding as latin-1")
        return data.decode("latin-1")
