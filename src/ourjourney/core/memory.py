"""Core Memory Data Model for Our Journey.

This module defines the canonical "Memory" record produced by the ingestion
pipeline. A Memory is one tagged, located, dated experience: a title, a place,
a date and the photo/video/audio files that belong to it.

Memories are built from spreadsheet rows, so every field has a forgiving
default. A row with a typo never aborts an upload; it produces a
low-information but well-typed Memory instead.

Python attributes are snake_case. The JSON wire format consumed by the gallery
front end uses camelCase (``photoFiles``, ``videoFiles``, ``audioFiles``), and
``identifier`` is omitted entirely when a row has none.

Example:
    >>> memory = Memory(
    ...     id="1",
    ...     title="Wellington waterfront",
    ...     country="New Zealand",
    ...     city="Wellington",
    ...     latitude=-41.2865,
    ...     longitude=174.7762,
    ...     date="2024-01-15T00:00:00.000",
    ...     categories=["travel", "family"],
    ...     photo_files=["photo1.jpg"],
    ... )
    >>> memory.to_json_dict()["photoFiles"]
    ['photo1.jpg']
"""

from __future__ import annotations

from typing import Any, Iterable

from pydantic import BaseModel, Field


# =============================================================================
# Main Memory Model
# =============================================================================


class Memory(BaseModel):
    """Canonical memory record.

    Identity Fields:
        id: Source row id, stringified ("" when the row has none)
        identifier: Optional sub-filter label within a category

    Place Fields:
        country: Country name as written in the sheet
        city: City name as written in the sheet
        latitude: Decimal degrees, 0.0 when unparseable
        longitude: Decimal degrees, 0.0 when unparseable

    Content Fields:
        title: Short title
        date: ISO-8601 datetime string, or the original free text
        description: Longer description
        categories: Category tags in sheet order (not deduplicated)

    Media Fields:
        photo_files: Photo filenames (wire name ``photoFiles``)
        video_files: Video filenames (wire name ``videoFiles``)
        audio_files: Audio filenames (wire name ``audioFiles``)
    """

    id: str = ""
    title: str = ""
    country: str = ""
    city: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    date: str = ""
    description: str = ""
    categories: list[str] = Field(default_factory=list)
    identifier: str | None = None
    photo_files: list[str] = Field(default_factory=list, alias="photoFiles")
    video_files: list[str] | None = Field(default=None, alias="videoFiles")
    audio_files: list[str] | None = Field(default=None, alias="audioFiles")

    model_config = {"populate_by_name": True, "frozen": True}

    def has_coordinates(self) -> bool:
        """Check whether the memory can be placed on the map.

        (0, 0) is what a missing or unparseable coordinate defaults to, so it
        is treated as "no location".

        Returns:
            True if either coordinate is non-zero
        """
        return not (self.latitude == 0.0 and self.longitude == 0.0)

    def all_media_files(self) -> list[str]:
        """Return every referenced media filename in photo, video, audio order."""
        files = list(self.photo_files)
        files.extend(self.video_files or [])
        files.extend(self.audio_files or [])
        return files

    def to_display_location(self) -> str:
        """Generate a human-readable "City, Country" string.

        Returns:
            Location string, or "Unknown location" when both are blank
        """
        parts = [part for part in (self.city, self.country) if part]
        if parts:
            return ", ".join(parts)
        if self.has_coordinates():
            return f"{self.latitude:.4f}, {self.longitude:.4f}"
        return "Unknown location"

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize using wire (camelCase) names.

        ``None`` fields (an absent identifier, absent media lists) are left
        out, matching what the gallery front end expects.

        Returns:
            JSON-compatible dictionary
        """
        return self.model_dump(by_alias=True, exclude_none=True)


def memories_envelope(memories: Iterable[Memory]) -> dict[str, Any]:
    """Wrap memories in the ``{"success": true, "memories": [...]}`` envelope.

    Args:
        memories: Memories in display order

    Returns:
        JSON-compatible envelope dictionary
    """
    return {
        "success": True,
        "memories": [memory.to_json_dict() for memory in memories],
    }
