"""Storage of the memories sheet and media files."""

from ourjourney.storage.local import LocalMemoryStore, StoredFile
from ourjourney.storage.repository import ByteSource, MemoryRepository, find_missing_media

__all__ = [
    "ByteSource",
    "LocalMemoryStore",
    "MemoryRepository",
    "StoredFile",
    "find_missing_media",
]
