"""In-process cache of parsed memories sheets.

Parsing the memories sheet is recomputed for every request by default. When a
caller wants to avoid that, it creates a ``MemoryCache`` and passes it in
explicitly; there is no module-level cache.

Entries are keyed by the SHA-256 of the sheet bytes plus a fingerprint of the
parsing options, so an edited sheet or a changed year pivot never serves a
stale result. The cache is a pure optimization: the pipeline behaves the same
without it.

Example:
    >>> cache = MemoryCache(max_entries=4)
    >>> result = ingest_with_report(data, "memories.xlsx", cache=cache)
    >>> again = ingest_with_report(data, "memories.xlsx", cache=cache)
    >>> again.from_cache
    True
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from collections import OrderedDict
from dataclasses import replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ourjourney.config import CacheConfig, ParsingConfig
    from ourjourney.parsers.base import IngestResult, SourceFormat

logger = logging.getLogger(__name__)


# =============================================================================
# Fingerprints
# =============================================================================


def fingerprint_bytes(data: bytes) -> str:
    """SHA-256 hex digest of the source bytes."""
    return hashlib.sha256(data).hexdigest()


def fingerprint_parsing_config(config: "ParsingConfig") -> str:
    """Deterministic fingerprint of the options that change parse output.

    Args:
        config: Parsing configuration

    Returns:
        Full SHA-256 hex digest (64 characters)
    """
    config_dict = {
        "year_pivot": config.year_pivot,
        "strip_headers": config.strip_headers,
        "collect_warnings": config.collect_warnings,
    }
    json_str = json.dumps(config_dict, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(json_str.encode("utf-8")).hexdigest()


def build_cache_key(
    content_hash: str,
    source_format: "SourceFormat",
    config_fingerprint: str,
) -> str:
    """Combine content hash, format and options into one key.

    Returns:
        First 32 hex characters of SHA-256 hash
    """
    combined = f"{content_hash}:{source_format.value}:{config_fingerprint}"
    return hashlib.sha256(combined.encode("utf-8")).hexdigest()[:32]


# =============================================================================
# Main Cache Class
# =============================================================================


class MemoryCache:
    """Bounded, thread-safe LRU cache of IngestResult objects.

    Results are deep-copied on the way in and out so a caller that mutates
    its result cannot change what the next caller sees.

    Attributes:
        max_entries: Maximum number of results kept
    """

    def __init__(self, max_entries: int = 8, enabled: bool = True) -> None:
        """Initialize the cache.

        Args:
            max_entries: Maximum number of results kept (at least 1)
            enabled: If False, every operation is a no-op
        """
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")
        self.max_entries = max_entries
        self._enabled = enabled
        self._entries: OrderedDict[str, IngestResult] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @classmethod
    def from_config(cls, config: "CacheConfig") -> "MemoryCache":
        """Build a cache from the ``cache`` section of the app config."""
        return cls(max_entries=config.max_entries, enabled=config.enabled)

    @property
    def enabled(self) -> bool:
        """Whether caching is enabled."""
        return self._enabled

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    def get(self, key: str) -> "IngestResult | None":
        """Return a copy of the cached result, or None on a miss."""
        if not self._enabled:
            return None
        with self._lock:
            result = self._entries.get(key)
            if result is None:
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return _copy_result(result)

    def put(self, key: str, result: "IngestResult") -> None:
        """Store a copy of result, evicting the least recently used entry."""
        if not self._enabled:
            return
        with self._lock:
            self._entries[key] = _copy_result(result)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted cached sheet {evicted[:8]}")

    def invalidate_content(self, content_hash: str) -> int:
        """Drop every entry built from the given source bytes.

        Args:
            content_hash: SHA-256 of the stale source bytes

        Returns:
            Number of entries removed
        """
        with self._lock:
            stale = [
                key for key, result in self._entries.items() if result.content_hash == content_hash
            ]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached result(s) for {content_hash[:8]}")
        return len(stale)

    def invalidate(self, key: str) -> bool:
        """Drop one entry. Returns True if it existed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Remove all entries and reset statistics."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries


def _copy_result(result: "IngestResult") -> "IngestResult":
    return replace(
        result,
        memories=[memory.model_copy(deep=True) for memory in result.memories],
        warnings=list(result.warnings),
    )
