"""Column alias resolution for memories sheets.

Memories sheets have been edited by hand for years, so several concepts live
under more than one column name ("categories" in new sheets, "tags" in the
original template, sometimes capitalised). Each concept has an explicit,
ordered tuple of candidate column names, and a single helper walks it:
the first present value wins.

A value counts as present when its column exists and the value is not None,
not NaN and not the empty string. An empty cell under "categories" therefore
falls through to "tags".

No type coercion happens here; that is the record builder's job.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

# Priority order matters: a row may populate more than one alias
CATEGORY_ALIASES: tuple[str, ...] = (
    "categories",
    "Categories",
    "tags",
    "Tags",
    "category",
    "Category",
)
IDENTIFIER_ALIASES: tuple[str, ...] = ("identifier", "Identifier")
PHOTO_ALIASES: tuple[str, ...] = ("photo_files", "photoFiles", "photos")
VIDEO_ALIASES: tuple[str, ...] = ("video_files", "videoFiles", "videos")
AUDIO_ALIASES: tuple[str, ...] = ("audio_files", "audioFiles", "audio")

# Single-name columns copied through as-is
SCALAR_COLUMNS: tuple[str, ...] = (
    "id",
    "title",
    "country",
    "city",
    "latitude",
    "longitude",
    "date",
    "description",
)


def is_blank(value: Any) -> bool:
    """True for None, NaN and the empty string."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value == ""


def first_present(row: Mapping[str, Any], candidates: Sequence[str]) -> Any | None:
    """Return the value of the first candidate column that is present.

    Args:
        row: Row mapping from the tabular decoder
        candidates: Column names in priority order

    Returns:
        The first non-blank value, or None if no candidate has one
    """
    for name in candidates:
        value = row.get(name)
        if not is_blank(value):
            return value
    return None


@dataclass(frozen=True)
class ResolvedRow:
    """Raw domain values pulled out of one row, before coercion.

    Every attribute is the untouched source value, or None when absent.
    """

    id: Any = None
    title: Any = None
    country: Any = None
    city: Any = None
    latitude: Any = None
    longitude: Any = None
    date: Any = None
    description: Any = None
    categories_raw: Any = None
    identifier_raw: Any = None
    photo_raw: Any = None
    video_raw: Any = None
    audio_raw: Any = None


def resolve(row: Mapping[str, Any]) -> ResolvedRow:
    """Resolve every memory field of a row from its candidate columns.

    Args:
        row: Row mapping from the tabular decoder

    Returns:
        ResolvedRow with raw values (None for anything absent)
    """
    scalars = {name: first_present(row, (name,)) for name in SCALAR_COLUMNS}
    return ResolvedRow(
        **scalars,
        categories_raw=first_present(row, CATEGORY_ALIASES),
        identifier_raw=first_present(row, IDENTIFIER_ALIASES),
        photo_raw=first_present(row, PHOTO_ALIASES),
        video_raw=first_present(row, VIDEO_ALIASES),
        audio_raw=first_present(row, AUDIO_ALIASES),
    )
