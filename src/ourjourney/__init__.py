"""Our Journey: memories sheet ingestion.

Turns the admin's spreadsheet (.xlsx, .xls or .csv) into canonical Memory
records for the memories gallery.

Example:
    >>> from ourjourney import ingest
    >>> memories = ingest(Path("memories.csv").read_bytes(), "memories.csv")
"""

__version__ = "1.0.0"

from ourjourney.core.memory import Memory, memories_envelope
from ourjourney.parsers.base import (
    CorruptFileError,
    FieldWarning,
    IngestError,
    IngestResult,
    UnsupportedFormatError,
)
from ourjourney.parsers.pipeline import ingest, ingest_file, ingest_with_report

__all__ = [
    "__version__",
    "CorruptFileError",
    "FieldWarning",
    "IngestError",
    "IngestResult",
    "Memory",
    "UnsupportedFormatError",
    "ingest",
    "ingest_file",
    "ingest_with_report",
    "memories_envelope",
]
