"""Parser base infrastructure for Our Journey.

This module holds the shared vocabulary of the ingestion layer: the supported
source formats, the exceptions the pipeline can raise, and the result objects
it returns.

Classes:
    SourceFormat: Enum of supported spreadsheet/CSV formats
    IngestStatus: Enum for ingest outcome
    FieldWarning: A non-fatal note about one field of one row
    IngestResult: Complete result of an ingest, with warnings
    IngestError: Base exception for ingest failures
    UnsupportedFormatError: Filename/format hint is not xlsx, xls or csv
    CorruptFileError: Bytes could not be decoded in the chosen format

Functions:
    detect_format: Choose a SourceFormat from a filename

Example:
    >>> detect_format("Our_Journey.XLSX")
    <SourceFormat.XLSX: 'xlsx'>
    >>> detect_format("memories.pdf")
    Traceback (most recent call last):
    ...
    UnsupportedFormatError: Unsupported file format ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ourjourney.core.memory import Memory, memories_envelope

logger = logging.getLogger(__name__)


# =============================================================================
# Enums
# =============================================================================


class SourceFormat(str, Enum):
    """Supported memory-sheet formats.

    Attributes:
        XLSX: Office Open XML workbook
        XLS: Legacy Excel 97-2003 workbook
        CSV: Comma-separated values with a header row
    """

    XLSX = "xlsx"
    XLS = "xls"
    CSV = "csv"

    @property
    def extension(self) -> str:
        """File extension including the leading dot."""
        return f".{self.value}"

    @property
    def is_spreadsheet(self) -> bool:
        """True for the Excel formats."""
        return self in (SourceFormat.XLSX, SourceFormat.XLS)


class IngestStatus(str, Enum):
    """Outcome of an ingest.

    Attributes:
        SUCCESS: Every row parsed without any defaulting
        PARTIAL: Some fields were defaulted or coerced (see warnings)
    """

    SUCCESS = "success"
    PARTIAL = "partial"


SUPPORTED_EXTENSIONS: tuple[str, ...] = tuple(fmt.extension for fmt in SourceFormat)

UNSUPPORTED_FORMAT_MESSAGE = "Unsupported file format. Please upload .xlsx, .xls, or .csv file"


# =============================================================================
# Exceptions
# =============================================================================


class IngestError(Exception):
    """Base exception for ingest failures.

    Attributes:
        message: Error message
        filename: Name of the file being ingested, if known
    """

    def __init__(self, message: str, filename: str | None = None):
        super().__init__(message)
        self.message = message
        self.filename = filename


class UnsupportedFormatError(IngestError):
    """Filename extension or format hint is not xlsx, xls or csv."""

    pass


class CorruptFileError(IngestError):
    """File bytes could not be decoded in the format chosen by its extension."""

    pass


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class FieldWarning:
    """A non-fatal issue with one field of one row.

    Attributes:
        field: Memory field the warning is about (e.g. "latitude")
        message: Human-readable description of what was defaulted
        row_number: 1-based data row number (None if unknown)
        raw_value: The source value that caused the warning
    """

    field: str
    message: str
    row_number: int | None = None
    raw_value: Any = None

    def to_display(self) -> str:
        """Format as "row N, field: message"."""
        prefix = f"row {self.row_number}" if self.row_number is not None else "row ?"
        return f"{prefix}, {self.field}: {self.message}"


@dataclass
class IngestResult:
    """The complete result of ingesting one memories file.

    Attributes:
        memories: Memories in source row order
        warnings: Field-level warnings (empty when collection is disabled)
        filename: Name of the ingested file
        source_format: Format used to decode the bytes
        rows_read: Number of rows the decoder produced
        content_hash: SHA-256 fingerprint of the source bytes
        from_cache: True if served from an ingest cache
        duration_seconds: Time spent decoding and building
    """

    memories: list[Memory] = field(default_factory=list)
    warnings: list[FieldWarning] = field(default_factory=list)
    filename: str = ""
    source_format: SourceFormat | None = None
    rows_read: int = 0
    content_hash: str = ""
    from_cache: bool = False
    duration_seconds: float = 0.0

    @property
    def status(self) -> IngestStatus:
        """PARTIAL when any field had to be defaulted."""
        return IngestStatus.PARTIAL if self.warnings else IngestStatus.SUCCESS

    def rows_with_warnings(self) -> list[int]:
        """Sorted 1-based row numbers that produced at least one warning."""
        return sorted({w.row_number for w in self.warnings if w.row_number is not None})

    def warnings_for_row(self, row_number: int) -> list[FieldWarning]:
        """Warnings attached to a single row."""
        return [w for w in self.warnings if w.row_number == row_number]

    def to_envelope(self) -> dict[str, Any]:
        """JSON envelope for the HTTP layer."""
        return memories_envelope(self.memories)

    def to_summary(self) -> str:
        """Generate human-readable summary.

        Returns:
            Multi-line summary string
        """
        fmt = self.source_format.value if self.source_format else "unknown"
        lines = [
            f"Ingest Result for {self.filename or '<bytes>'}:",
            f"  Format: {fmt}",
            f"  Status: {self.status.value}",
            f"  Rows: {self.rows_read}",
            f"  Memories: {len(self.memories)}",
            f"  Warnings: {len(self.warnings)}",
            f"  Rows with warnings: {len(self.rows_with_warnings())}",
            f"  Cached: {'yes' if self.from_cache else 'no'}",
            f"  Duration: {self.duration_seconds:.2f}s",
        ]
        return "\n".join(lines)


# =============================================================================
# Module-Level Functions
# =============================================================================


def detect_format(filename: str) -> SourceFormat:
    """Choose the decoding format from a filename.

    Matching is a case-insensitive suffix test, so "trip.CSV" is CSV and
    "memories.csv.pdf" is rejected.

    Args:
        filename: Original filename (a path is fine too)

    Returns:
        Matching SourceFormat

    Raises:
        UnsupportedFormatError: If the suffix is not .xlsx, .xls or .csv
    """
    lowered = filename.lower()
    for fmt in SourceFormat:
        if lowered.endswith(fmt.extension):
            return fmt

    logger.debug(f"Rejected memories file with unsupported extension: {filename}")
    raise UnsupportedFormatError(UNSUPPORTED_FORMAT_MESSAGE, filename=filename)


def coerce_format(source_format: SourceFormat | str) -> SourceFormat:
    """Turn a format hint ("xlsx", ".CSV", SourceFormat.XLS) into a SourceFormat.

    Raises:
        UnsupportedFormatError: If the hint names no supported format
    """
    if isinstance(source_format, SourceFormat):
        return source_format
    hint = str(source_format).strip().lower().lstrip(".")
    try:
        return SourceFormat(hint)
    except ValueError:
        raise UnsupportedFormatError(UNSUPPORTED_FORMAT_MESSAGE) from None
