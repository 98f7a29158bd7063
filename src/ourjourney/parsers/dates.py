"""Date normalization for memories sheets.

People type dates into the sheet however they like, and spreadsheets hand
some of them over as real date values. Everything is normalized to one
canonical string:

1. Blank → ""
2. Native ``datetime``/``date`` → ISO-8601
3. ``D/M/YY`` or ``D/M/YYYY`` (day first) → ISO-8601, two-digit years pivoted
4. Anything python-dateutil understands that names a year, month or day → ISO-8601
5. Anything else is kept verbatim ("Summer 2019" and "Sunday" stay as written)

Normalization never raises. The canonical form is
``datetime.isoformat(timespec="milliseconds")``; naive values stay naive
(local time) and aware values keep their offset.

Example:
    >>> normalize_date("15/03/24")
    '2024-03-15T00:00:00.000'
    >>> normalize_date("01/02/50")
    '1950-02-01T00:00:00.000'
    >>> normalize_date("Summer 2019")
    'Summer 2019'
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time
from typing import Any

from dateutil import parser as dateutil_parser
from dateutil.relativedelta import relativedelta

from ourjourney.parsers.fields import is_blank

logger = logging.getLogger(__name__)

# Day/month/year with slashes, day first
DMY_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2,4})$")

# Two-digit years below the pivot are 20xx, the rest 19xx
DEFAULT_YEAR_PIVOT = 50

# Fills components a free-text date leaves out ("May 2019" → 1 May 2019)
_MISSING_COMPONENTS = datetime(2001, 1, 1)
_ALTERNATE_COMPONENTS = datetime(2002, 2, 2)


def expand_two_digit_year(year: int, pivot: int = DEFAULT_YEAR_PIVOT) -> int:
    """Map a short year onto a full one.

    Args:
        year: Year as written (values of 100 and above are returned unchanged)
        pivot: Years below this become 2000 + year, others 1900 + year

    Returns:
        Full year

    Example:
        >>> expand_two_digit_year(49), expand_two_digit_year(50)
        (2049, 1950)
    """
    if year >= 100:
        return year
    return 2000 + year if year < pivot else 1900 + year


def date_from_day_month_year(day: int, month: int, year: int) -> datetime:
    """Build a local datetime, rolling out-of-range parts into neighbours.

    Day 0 is the last day of the previous month and month 13 is January of
    the following year, the same arithmetic spreadsheet tools use.

    Raises:
        ValueError: If the result falls outside the supported year range
        OverflowError: Same, for extreme inputs
    """
    return datetime(year, 1, 1) + relativedelta(months=month - 1, days=day - 1)


def to_iso(value: datetime) -> str:
    """Canonical ISO-8601 form with millisecond precision."""
    return value.isoformat(timespec="milliseconds")


def parse_date(value: Any, *, pivot: int = DEFAULT_YEAR_PIVOT) -> datetime | None:
    """Interpret a cell as a datetime.

    Args:
        value: Raw cell value
        pivot: Two-digit year pivot

    Returns:
        Parsed datetime, or None if blank or not recognisable as a date
    """
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())

    text = str(value).strip()
    if not text:
        return None

    match = DMY_PATTERN.match(text)
    if match:
        day, month, year = (int(group) for group in match.groups())
        try:
            return date_from_day_month_year(day, month, expand_two_digit_year(year, pivot))
        except (ValueError, OverflowError):
            logger.debug(f"Day/month/year date out of range: {text!r}")
            return None

    return _parse_free_text(text)


def _parse_free_text(text: str) -> datetime | None:
    """Parse with dateutil, rejecting text that names no year, month or day.

    dateutil fills absent components from its default, so "Sunday" or
    "10:30" would otherwise become a date in 2001. Parsing against two
    different defaults shows which components the text supplied.
    """
    try:
        parsed = dateutil_parser.parse(text, default=_MISSING_COMPONENTS)
        alternate = dateutil_parser.parse(text, default=_ALTERNATE_COMPONENTS)
    except (ValueError, OverflowError, TypeError):
        return None

    supplied = [
        part for part in ("year", "month", "day") if getattr(parsed, part) == getattr(alternate, part)
    ]
    if not supplied:
        logger.debug(f"No year, month or day in {text!r}")
        return None
    return parsed


def normalize_date(value: Any, *, pivot: int = DEFAULT_YEAR_PIVOT) -> str:
    """Convert any date representation to its canonical string.

    Args:
        value: Raw cell value (datetime, date, string, number or None)
        pivot: Two-digit year pivot

    Returns:
        ISO-8601 string, "" for blank input, or the trimmed original text
    """
    if is_blank(value):
        return ""
    parsed = parse_date(value, pivot=pivot)
    if parsed is not None:
        return to_iso(parsed)
    return str(value).strip()
