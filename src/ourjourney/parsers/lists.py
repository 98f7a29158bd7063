"""Comma-separated list fields (media filenames, category tags)."""

from __future__ import annotations

from typing import Any

from ourjourney.parsers.fields import is_blank

LIST_DELIMITER = ","


def split_list(raw: Any) -> list[str]:
    """Split a comma-separated cell into trimmed, non-empty tokens.

    Order and duplicates are kept. There is no escaping, so a filename or tag
    that itself contains a comma is split in two.

    Args:
        raw: Cell value (usually a string; other scalars are stringified)

    Returns:
        Tokens in source order

    Example:
        >>> split_list("a, b ,c,,d")
        ['a', 'b', 'c', 'd']
    """
    if is_blank(raw):
        return []
    tokens = (token.strip() for token in str(raw).split(LIST_DELIMITER))
    return [token for token in tokens if token]
