"""Memories served from a byte source, with optional caching.

``MemoryRepository`` is what a request handler talks to. It asks its store
for the current sheet, parses it (or reuses a cached parse), and hands back an
IngestResult. The cache is passed in by the caller; nothing is global.

When the store reports the same version as last time and the parsed result
is still cached, the sheet is not even re-read. When the content changes, the
entries for the previous content are dropped from the cache.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from ourjourney.cache import MemoryCache, build_cache_key, fingerprint_parsing_config
from ourjourney.config import AppConfig, ParsingConfig
from ourjourney.core.memory import Memory
from ourjourney.parsers.base import IngestResult
from ourjourney.parsers.pipeline import ingest_with_report
from ourjourney.storage.local import LocalMemoryStore, StoredFile

logger = logging.getLogger(__name__)


class ByteSource(Protocol):
    """Anything that can hand over the current memories sheet."""

    def read(self) -> StoredFile | None: ...

    def version(self) -> str | None: ...


class MemoryRepository:
    """Loads memories from a byte source.

    Attributes:
        source: Where the memories sheet comes from
        cache: Optional parse cache
        config: Parsing options
    """

    def __init__(
        self,
        source: ByteSource,
        cache: MemoryCache | None = None,
        config: ParsingConfig | None = None,
    ) -> None:
        self.source = source
        self.cache = cache
        self.config = config or ParsingConfig()
        self._last_version: str | None = None
        self._last_result: IngestResult | None = None

    @classmethod
    def from_config(cls, config: AppConfig) -> MemoryRepository:
        """Build a repository over the configured upload directory.

        The cache follows the ``cache`` section; a disabled cache is left out
        entirely.
        """
        cache = MemoryCache.from_config(config.cache) if config.cache.enabled else None
        return cls(LocalMemoryStore(config.paths.upload_dir), cache=cache, config=config.parsing)

    def load(self) -> IngestResult:
        """Return the current memories.

        Returns:
            IngestResult; empty when no sheet has been uploaded

        Raises:
            UnsupportedFormatError: If the stored sheet has an unsupported name
            CorruptFileError: If the stored workbook cannot be read
        """
        version = self.source.version()
        if version is None:
            self._forget()
            return IngestResult()

        if (
            self.cache is not None
            and version == self._last_version
            and self._last_result is not None
        ):
            cached = self.cache.get(self._cache_key_for(self._last_result))
            if cached is not None:
                cached.from_cache = True
                return cached

        stored = self.source.read()
        if stored is None:
            self._forget()
            return IngestResult()

        result = ingest_with_report(
            stored.data, stored.filename, config=self.config, cache=self.cache
        )

        previous = self._last_result
        if (
            self.cache is not None
            and previous is not None
            and previous.content_hash != result.content_hash
        ):
            self.cache.invalidate_content(previous.content_hash)

        self._last_version = version
        self._last_result = result
        return result

    def memories(self) -> list[Memory]:
        """Shortcut for ``load().memories``."""
        return self.load().memories

    def _cache_key_for(self, result: IngestResult) -> str:
        return build_cache_key(
            result.content_hash, result.source_format, fingerprint_parsing_config(self.config)
        )

    def _forget(self) -> None:
        if self.cache is not None and self._last_result is not None:
            self.cache.invalidate_content(self._last_result.content_hash)
        self._last_version = None
        self._last_result = None


def find_missing_media(
    memories: Iterable[Memory],
    available: Iterable[str],
) -> list[tuple[str, str]]:
    """List media references that have no matching stored file.

    Args:
        memories: Parsed memories
        available: Names of stored media files

    Returns:
        (memory id, filename) pairs in memory order
    """
    present = set(available)
    missing: list[tuple[str, str]] = []
    for memory in memories:
        for filename in memory.all_media_files():
            if filename not in present:
                missing.append((memory.id, filename))
    return missing
