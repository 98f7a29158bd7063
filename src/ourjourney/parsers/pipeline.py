"""Ingest pipeline for Our Journey memories sheets.

This is the public entry point of the ingestion layer: give it the bytes of an
uploaded sheet and its filename, get back Memory objects in row order.

The pipeline:
1. Chooses a format from the filename extension (.xlsx, .xls, .csv)
2. Decodes the bytes into row mappings
3. Builds one Memory per row, defaulting anything malformed
4. Optionally reports field warnings and uses an explicit cache

Only the file as a whole can fail (unsupported extension, unreadable
workbook). Individual rows never raise.

Typical usage:
    >>> from ourjourney.parsers.pipeline import ingest, ingest_with_report
    >>>
    >>> memories = ingest(data, "memories.xlsx")
    >>> result = ingest_with_report(data, "memories.xlsx")
    >>> print(result.to_summary())
"""

from __future__ import annotations

import logging
from pathlib import Path

from ourjourney.cache import (
    MemoryCache,
    build_cache_key,
    fingerprint_bytes,
    fingerprint_parsing_config,
)
from ourjourney.config import ParsingConfig
from ourjourney.core.memory import Memory
from ourjourney.parsers.base import FieldWarning, IngestResult, detect_format
from ourjourney.parsers.records import build_memory, build_memory_with_warnings
from ourjourney.parsers.tabular import decode
from ourjourney.utils.logging import ParseTimer

logger = logging.getLogger(__name__)


def ingest(
    data: bytes,
    filename: str,
    config: ParsingConfig | None = None,
) -> list[Memory]:
    """Parse a memories sheet into Memory records.

    Args:
        data: Complete file contents
        filename: Original filename; its extension selects the decoder
        config: Parsing options (defaults if None)

    Returns:
        Memories in source row order

    Raises:
        UnsupportedFormatError: If the extension is not .xlsx, .xls or .csv
        CorruptFileError: If a workbook cannot be read
    """
    config = config or ParsingConfig()
    source_format = detect_format(filename)
    rows = decode(data, source_format, strip_headers=config.strip_headers)
    return [build_memory(row, pivot=config.year_pivot) for row in rows]


def ingest_with_report(
    data: bytes,
    filename: str,
    config: ParsingConfig | None = None,
    cache: MemoryCache | None = None,
) -> IngestResult:
    """Parse a memories sheet and report what had to be defaulted.

    Args:
        data: Complete file contents
        filename: Original filename; its extension selects the decoder
        config: Parsing options (defaults if None)
        cache: Optional cache shared between calls

    Returns:
        IngestResult with memories, warnings and bookkeeping

    Raises:
        UnsupportedFormatError: If the extension is not .xlsx, .xls or .csv
        CorruptFileError: If a workbook cannot be read
    """
    config = config or ParsingConfig()
    source_format = detect_format(filename)
    content_hash = fingerprint_bytes(data)

    cache_key = None
    if cache is not None:
        cache_key = build_cache_key(
            content_hash, source_format, fingerprint_parsing_config(config)
        )
        cached = cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for {filename} ({content_hash[:8]})")
            cached.filename = filename
            cached.from_cache = True
            return cached

    with ParseTimer(filename, logger=logger) as timer:
        rows = decode(data, source_format, strip_headers=config.strip_headers)

        memories: list[Memory] = []
        warnings: list[FieldWarning] = []
        for row_number, row in enumerate(rows, start=1):
            memory, row_warnings = build_memory_with_warnings(
                row, row_number=row_number, pivot=config.year_pivot
            )
            memories.append(memory)
            if config.collect_warnings:
                warnings.extend(row_warnings)

    result = IngestResult(
        memories=memories,
        warnings=warnings,
        filename=filename,
        source_format=source_format,
        rows_read=len(rows),
        content_hash=content_hash,
        duration_seconds=timer.elapsed,
    )

    logger.info(
        f"Parsed {len(memories)} memories from {filename} "
        f"({len(warnings)} warnings in {len(result.rows_with_warnings())} rows)"
    )

    if cache is not None and cache_key is not None:
        cache.put(cache_key, result)

    return result


def ingest_file(
    path: Path,
    config: ParsingConfig | None = None,
    cache: MemoryCache | None = None,
) -> IngestResult:
    """Read a memories sheet from disk and ingest it.

    Args:
        path: Path to the sheet
        config: Parsing options (defaults if None)
        cache: Optional cache shared between calls

    Returns:
        IngestResult for the file

    Raises:
        UnsupportedFormatError: If the extension is not supported (checked
            before the file is read)
        OSError: If the file cannot be read
        CorruptFileError: If a workbook cannot be read
    """
    detect_format(path.name)
    return ingest_with_report(path.read_bytes(), path.name, config=config, cache=cache)
