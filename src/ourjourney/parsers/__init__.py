"""Memories sheet parsing for Our Journey.

The ingestion layer turns an uploaded .xlsx, .xls or .csv file into Memory
records. ``ingest`` is the main entry point; ``ingest_with_report`` adds
field warnings and optional caching.
"""

from ourjourney.parsers.base import (
    SUPPORTED_EXTENSIONS,
    CorruptFileError,
    FieldWarning,
    IngestError,
    IngestResult,
    IngestStatus,
    SourceFormat,
    UnsupportedFormatError,
    detect_format,
)
from ourjourney.parsers.dates import normalize_date
from ourjourney.parsers.fields import first_present, resolve
from ourjourney.parsers.lists import split_list
from ourjourney.parsers.pipeline import ingest, ingest_file, ingest_with_report
from ourjourney.parsers.records import build_memory, build_memory_with_warnings
from ourjourney.parsers.tabular import decode

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "CorruptFileError",
    "FieldWarning",
    "IngestError",
    "IngestResult",
    "IngestStatus",
    "SourceFormat",
    "UnsupportedFormatError",
    "build_memory",
    "build_memory_with_warnings",
    "decode",
    "detect_format",
    "first_present",
    "ingest",
    "ingest_file",
    "ingest_with_report",
    "normalize_date",
    "resolve",
    "split_list",
]
