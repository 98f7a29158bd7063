"""Local-disk storage for the memories sheet and media files.

Layout under the upload directory::

    uploads/
        memories.xlsx      # at most one memories.* file at a time
        media/
            photo1.jpg
            video1.mp4

Uploading a new sheet replaces any previous ``memories.*`` file, whatever its
extension. Media filenames are reduced to their basename so a name like
``../../etc/passwd`` cannot escape the media directory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ourjourney.parsers.base import detect_format

logger = logging.getLogger(__name__)

MEMORIES_STEM = "memories"
MEDIA_DIRNAME = "media"


@dataclass(frozen=True)
class StoredFile:
    """Bytes of the stored memories sheet with the name to parse them by."""

    data: bytes
    filename: str


class LocalMemoryStore:
    """Memories sheet and media files kept in a local directory.

    Attributes:
        upload_dir: Root directory
        media_dir: Directory holding media files
    """

    def __init__(self, upload_dir: Path) -> None:
        self.upload_dir = Path(upload_dir)
        self.media_dir = self.upload_dir / MEDIA_DIRNAME

    def initialize(self) -> None:
        """Create the upload and media directories if needed."""
        self.media_dir.mkdir(parents=True, exist_ok=True)

    # =========================================================================
    # Memories Sheet
    # =========================================================================

    def save_memories_file(self, data: bytes, original_filename: str) -> Path:
        """Store a new memories sheet, replacing any previous one.

        Args:
            data: Sheet bytes
            original_filename: Uploaded filename; only its extension is kept

        Returns:
            Path of the stored sheet

        Raises:
            UnsupportedFormatError: If the extension is not supported
        """
        source_format = detect_format(original_filename)
        self.initialize()

        for existing in self._memories_files():
            existing.unlink()
            logger.debug(f"Removed previous memories file {existing.name}")

        target = self.upload_dir / f"{MEMORIES_STEM}{source_format.extension}"
        target.write_bytes(data)
        logger.info(f"Stored memories file as {target.name} ({len(data)} bytes)")
        return target

    def memories_file_path(self) -> Path | None:
        """Path of the stored memories sheet, or None if there is none."""
        files = self._memories_files()
        return files[0] if files else None

    def read(self) -> StoredFile | None:
        """Read the stored memories sheet.

        Returns:
            StoredFile, or None when nothing has been uploaded
        """
        path = self.memories_file_path()
        if path is None:
            return None
        return StoredFile(data=path.read_bytes(), filename=path.name)

    def version(self) -> str | None:
        """Cheap change token for the stored sheet.

        Changes whenever the sheet is replaced or rewritten (name,
        modification time and size), without reading its contents.

        Returns:
            Version string, or None when nothing has been uploaded
        """
        path = self.memories_file_path()
        if path is None:
            return None
        stat = path.stat()
        return f"{path.name}:{stat.st_mtime_ns}:{stat.st_size}"

    def _memories_files(self) -> list[Path]:
        if not self.upload_dir.is_dir():
            return []
        return sorted(
            p
            for p in self.upload_dir.iterdir()
            if p.is_file() and p.name.startswith(f"{MEMORIES_STEM}.")
        )

    # =========================================================================
    # Media Files
    # =========================================================================

    def save_media_file(self, filename: str, data: bytes) -> Path:
        """Store a media file under its basename."""
        self.initialize()
        target = self._media_path(filename)
        target.write_bytes(data)
        return target

    def media_file_path(self, filename: str) -> Path | None:
        """Path of a stored media file, or None if missing."""
        path = self._media_path(filename)
        return path if path.is_file() else None

    def list_media_files(self) -> list[str]:
        """Sorted names of all stored media files."""
        if not self.media_dir.is_dir():
            return []
        return sorted(p.name for p in self.media_dir.iterdir() if p.is_file())

    def delete_media_file(self, filename: str) -> bool:
        """Delete a media file. Returns True if it existed."""
        path = self.media_file_path(filename)
        if path is None:
            return False
        path.unlink()
        return True

    def _media_path(self, filename: str) -> Path:
        name = Path(filename).name
        if not name or name in (".", ".."):
            raise ValueError(f"Invalid media filename: {filename!r}")
        return self.media_dir / name
