"""Central Pytest Fixtures for Our Journey.

Fixtures included:
- Sheet builders: csv_factory, xlsx_factory
- Sample sheets: sample_csv_bytes, sample_xlsx_bytes
- Directories: upload_dir
- Isolation: config and logging state reset around every test
"""

import csv
import io
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Sequence

import pytest
from openpyxl import Workbook

from ourjourney import config as config_module

STANDARD_HEADER = [
    "id",
    "title",
    "country",
    "city",
    "latitude",
    "longitude",
    "date",
    "description",
    "categories",
    "photo_files",
    "video_files",
    "audio_files",
]

SAMPLE_ROWS = [
    [
        "1",
        "Wellington waterfront",
        "New Zealand",
        "Wellington",
        "-41.2865",
        "174.7762",
        "15/01/24",
        "Windy walk",
        "travel, family",
        "photo1.jpg, photo2.jpg",
        "video1.mp4",
        "",
    ],
    [
        "2",
        "Lisbon trams",
        "Portugal",
        "Lisbon",
        "38.7223",
        "-9.1393",
        "2023-06-10",
        "Tram 28",
        "travel",
        "tram.jpg",
        "",
        "fado.mp3",
    ],
]


# =============================================================================
# Helper Functions
# =============================================================================


def build_csv(header: Sequence[str], rows: Sequence[Sequence[Any]]) -> bytes:
    """Build CSV bytes with quoting applied where needed."""
    buffer = io.StringIO(newline="")
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def build_xlsx(header: Sequence[str], rows: Sequence[Sequence[Any]]) -> bytes:
    """Build a one-sheet workbook in memory.

    Cells may hold native values (datetime, float, int); None leaves the
    cell blank.
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(list(header))
    for row in rows:
        sheet.append(list(row))
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Run every test in a clean cwd without OURJOURNEY_* variables."""
    for key in list(os.environ):
        if key.upper().startswith("OURJOURNEY_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        config_module,
        "DEFAULT_SEARCH_PATHS",
        (Path("./ourjourney.yaml"), Path("./ourjourney.yml")),
    )
    config_module.reset_config()

    yield

    config_module.reset_config()
    package_logger = logging.getLogger("ourjourney")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


# =============================================================================
# Sheet Fixtures
# =============================================================================


@pytest.fixture
def csv_factory() -> Callable[..., bytes]:
    """Factory building CSV bytes: csv_factory(rows, header=STANDARD_HEADER)."""

    def factory(rows: Sequence[Sequence[Any]], header: Sequence[str] = STANDARD_HEADER) -> bytes:
        return build_csv(header, rows)

    return factory


@pytest.fixture
def xlsx_factory() -> Callable[..., bytes]:
    """Factory building workbook bytes: xlsx_factory(rows, header=STANDARD_HEADER)."""

    def factory(rows: Sequence[Sequence[Any]], header: Sequence[str] = STANDARD_HEADER) -> bytes:
        return build_xlsx(header, rows)

    return factory


@pytest.fixture
def sample_csv_bytes() -> bytes:
    """Two clean memories as CSV."""
    return build_csv(STANDARD_HEADER, SAMPLE_ROWS)


@pytest.fixture
def sample_xlsx_bytes() -> bytes:
    """Two clean memories as a workbook, with native numbers and dates."""
    rows = [
        [1, "Wellington waterfront", "New Zealand", "Wellington", -41.2865, 174.7762,
         datetime(2024, 1, 15), "Windy walk", "travel, family", "photo1.jpg, photo2.jpg",
         "video1.mp4", None],
        [2, "Lisbon trams", "Portugal", "Lisbon", 38.7223, -9.1393,
         datetime(2023, 6, 10), "Tram 28", "travel", "tram.jpg", None, "fado.mp3"],
    ]
    return build_xlsx(STANDARD_HEADER, rows)


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    """Empty upload directory."""
    path = tmp_path / "uploads"
    path.mkdir()
    return path
