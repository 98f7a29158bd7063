"""Blank memories workbook for people filling in a new sheet.

The template carries the canonical column order, one example row and sensible
column widths. Any file produced here parses cleanly with ``ingest``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

logger = logging.getLogger(__name__)

TEMPLATE_FILENAME = "Our_Journey_Template.xlsx"
TEMPLATE_SHEET_TITLE = "Memories"

# (header, column width)
TEMPLATE_COLUMNS: tuple[tuple[str, int], ...] = (
    ("id", 10),
    ("title", 30),
    ("country", 20),
    ("city", 20),
    ("latitude", 12),
    ("longitude", 12),
    ("date", 12),
    ("description", 50),
    ("tags", 30),
    ("photo_files", 40),
    ("video_files", 40),
    ("audio_files", 40),
)

EXAMPLE_ROW: dict[str, object] = {
    "id": "1",
    "title": "Example Memory",
    "country": "New Zealand",
    "city": "Wellington",
    "latitude": -41.2865,
    "longitude": 174.7762,
    "date": "2024-01-15",
    "description": "A wonderful day in the capital city",
    "tags": "travel, family",
    "photo_files": "photo1.jpg, photo2.jpg",
    "video_files": "video1.mp4",
    "audio_files": "",
}


def template_headers() -> list[str]:
    """Column names in template order."""
    return [header for header, _ in TEMPLATE_COLUMNS]


def build_template_workbook() -> Workbook:
    """Build the template workbook in memory."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = TEMPLATE_SHEET_TITLE

    sheet.append(template_headers())
    for cell in sheet[1]:
        cell.font = Font(bold=True)

    sheet.append([EXAMPLE_ROW.get(header) or None for header in template_headers()])

    for index, (_, width) in enumerate(TEMPLATE_COLUMNS, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = width

    sheet.freeze_panes = "A2"
    return workbook


def generate_template(path: Path) -> Path:
    """Write the template workbook.

    Args:
        path: Output file, or a directory to write TEMPLATE_FILENAME into

    Returns:
        Path of the written workbook
    """
    if path.is_dir():
        path = path / TEMPLATE_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)

    build_template_workbook().save(path)
    logger.info(f"Template written to {path}")
    return path
