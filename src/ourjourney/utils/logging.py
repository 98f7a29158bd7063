"""Logging setup for Our Journey.

Console records go through rich on stderr, so stdout stays clean for
``ourjourney parse --format json``. An optional log file gets the full plain
record format.

Example:
    >>> from ourjourney.utils.logging import level_for, setup_logging, ParseTimer
    >>> setup_logging(level_for("WARNING", verbose=True))
    >>> with ParseTimer("memories.xlsx") as timer:
    ...     rows = decode(data, "xlsx")
    >>> timer.elapsed
    0.04
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

# =============================================================================
# Constants
# =============================================================================

PACKAGE_NAME = "ourjourney"

# Workbook engines chatter at INFO while reading
NOISY_LOGGERS = ("openpyxl", "xlrd", "fsspec")

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_console = Console(stderr=True)


# =============================================================================
# Setup Functions
# =============================================================================


def level_for(configured: str, *, verbose: bool = False, debug: bool = False) -> int:
    """Pick the effective log level.

    ``--debug`` wins over ``--verbose``, which wins over the configured level.
    Unknown level names fall back to WARNING.
    """
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    level = logging.getLevelName(configured.strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def setup_logging(
    level: int | str = logging.WARNING,
    log_file: Path | None = None,
    quiet_third_party: bool = True,
) -> logging.Logger:
    """Configure the ``ourjourney`` package logger.

    Safe to call repeatedly: handlers from an earlier call are closed and
    replaced.

    Args:
        level: Numeric level or level name.
        log_file: Optional path to a log file (parent directories are created).
        quiet_third_party: Raise workbook-engine loggers to WARNING.

    Returns:
        The package logger.
    """
    if isinstance(level, str):
        level = level_for(level)

    package_logger = logging.getLogger(PACKAGE_NAME)
    package_logger.setLevel(level)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=_console,
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
        tracebacks_show_locals=level == logging.DEBUG,
        markup=False,
    )
    console_handler.setLevel(level)
    package_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
        package_logger.addHandler(file_handler)

    if quiet_third_party:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    package_logger.propagate = False
    package_logger.debug(
        f"Logging configured: level={logging.getLevelName(level)}, file={log_file}"
    )
    return package_logger


# =============================================================================
# Parse Timing
# =============================================================================


class ParseTimer:
    """Times the parse of one sheet and logs its start and outcome.

    Attributes:
        filename: Sheet being parsed.
        level: Level for the start and completion records.
        logger: Logger to write to.
        elapsed: Seconds spent inside the block (set on exit).
    """

    def __init__(
        self,
        filename: str,
        level: int = logging.DEBUG,
        logger: logging.Logger | None = None,
    ) -> None:
        self.filename = filename
        self.level = level
        self.logger = logger or logging.getLogger(PACKAGE_NAME)
        self.elapsed: float = 0.0
        self._start_time: float = 0.0

    def __enter__(self) -> "ParseTimer":
        self._start_time = time.perf_counter()
        self.logger.log(self.level, f"Parsing {self.filename}...")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.elapsed = time.perf_counter() - self._start_time

        if exc_type is not None:
            # The caller reports the exception itself
            self.logger.log(
                self.level,
                f"Parsing {self.filename} failed after {self.elapsed:.2f}s: {exc_type.__name__}",
            )
        else:
            self.logger.log(self.level, f"Parsed {self.filename} in {self.elapsed:.2f}s")
