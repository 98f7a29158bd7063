"""Record building: one row mapping in, one Memory out.

The builder is tolerant. A malformed row still yields a
well-typed Memory: missing strings become "", unparseable coordinates become
0.0, unrecognised dates are kept as text. Nothing here raises.

Because silent defaults can hide typos (a bad latitude puts a marker in the
Gulf of Guinea), ``build_memory_with_warnings`` returns the same Memory along
with a list of FieldWarning objects describing what was defaulted.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime
from typing import Any, Mapping

from ourjourney.core.memory import Memory
from ourjourney.parsers.base import FieldWarning
from ourjourney.parsers.dates import DEFAULT_YEAR_PIVOT, normalize_date, parse_date
from ourjourney.parsers.fields import ResolvedRow, is_blank, resolve
from ourjourney.parsers.lists import split_list
from ourjourney.parsers.tabular import EXTRA_FIELDS_KEY

logger = logging.getLogger(__name__)

# Leading decimal number, e.g. "10.5" in "10.5 N"
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

_COORDINATE_LIMITS = {"latitude": 90.0, "longitude": 180.0}


# =============================================================================
# Scalar Coercion
# =============================================================================


def to_text(value: Any) -> str:
    """Stringify a cell for a text field.

    Integral floats lose their ".0" so a numeric id cell of 7 reads "7".
    """
    if is_blank(value):
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def parse_coordinate(value: Any) -> tuple[float | None, bool]:
    """Parse a coordinate cell.

    Native numbers are used as-is. Strings are read up to the end of their
    leading number, so "10.5abc" gives 10.5.

    Args:
        value: Raw cell value

    Returns:
        (number or None if unparseable, True if only a prefix was used)
    """
    if is_blank(value) or isinstance(value, bool):
        return None, False
    if isinstance(value, (int, float)):
        number = float(value)
        return (number, False) if math.isfinite(number) else (None, False)

    text = str(value)
    match = _LEADING_NUMBER.match(text)
    if not match:
        return None, False
    number = float(match.group(0))
    if not math.isfinite(number):
        return None, False
    partial = match.group(0).strip() != text.strip()
    return number, partial


# =============================================================================
# Builders
# =============================================================================


def build_memory(row: Mapping[str, Any], *, pivot: int = DEFAULT_YEAR_PIVOT) -> Memory:
    """Build the canonical Memory for one row.

    Args:
        row: Row mapping from the tabular decoder
        pivot: Two-digit year pivot for day/month/year dates

    Returns:
        Memory (never raises for any row content)
    """
    memory, _ = build_memory_with_warnings(row, pivot=pivot)
    return memory


def build_memory_with_warnings(
    row: Mapping[str, Any],
    *,
    row_number: int | None = None,
    pivot: int = DEFAULT_YEAR_PIVOT,
) -> tuple[Memory, list[FieldWarning]]:
    """Build a Memory and report every field that had to be defaulted.

    Args:
        row: Row mapping from the tabular decoder
        row_number: 1-based data row number, copied into each warning
        pivot: Two-digit year pivot

    Returns:
        (Memory, warnings) where warnings may be empty
    """
    resolved = resolve(row)
    warnings: list[FieldWarning] = []

    def warn(field: str, message: str, raw_value: Any = None) -> None:
        warnings.append(
            FieldWarning(field=field, message=message, row_number=row_number, raw_value=raw_value)
        )

    if is_blank(resolved.id):
        warn("id", "missing, defaulted to empty string")

    latitude = _coordinate(resolved, "latitude", warn)
    longitude = _coordinate(resolved, "longitude", warn)

    date_text = normalize_date(resolved.date, pivot=pivot)
    if date_text and parse_date(resolved.date, pivot=pivot) is None:
        warn("date", "not recognised as a date, kept as text", resolved.date)

    identifier = None
    if resolved.identifier_raw is not None:
        identifier = to_text(resolved.identifier_raw).strip()

    extra = row.get(EXTRA_FIELDS_KEY)
    if extra:
        warn("row", f"{len(extra)} value(s) past the last column ignored", list(extra))

    memory = Memory(
        id=to_text(resolved.id),
        title=to_text(resolved.title),
        country=to_text(resolved.country),
        city=to_text(resolved.city),
        latitude=latitude,
        longitude=longitude,
        date=date_text,
        description=to_text(resolved.description),
        categories=split_list(resolved.categories_raw),
        identifier=identifier,
        photo_files=split_list(resolved.photo_raw),
        video_files=split_list(resolved.video_raw),
        audio_files=split_list(resolved.audio_raw),
    )

    if warnings:
        logger.debug(f"Row {row_number}: {len(warnings)} field(s) defaulted")
    return memory, warnings


def _coordinate(resolved: ResolvedRow, field: str, warn) -> float:
    raw = getattr(resolved, field)
    if is_blank(raw):
        warn(field, "missing, defaulted to 0.0")
        return 0.0

    number, partial = parse_coordinate(raw)
    if number is None:
        warn(field, "unparseable, defaulted to 0.0", raw)
        return 0.0
    if partial:
        warn(field, f"trailing text ignored, read as {number}", raw)
    if abs(number) > _COORDINATE_LIMITS[field]:
        warn(field, f"outside ±{_COORDINATE_LIMITS[field]:g} degrees", raw)
    # -0.0 reads as 0.0
    return number + 0.0
