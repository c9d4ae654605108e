"""Text utilities for D-NAV."""

from __future__ import annotations

import re

ELLIPSIS = "…"

_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(value: str) -> str:
    """Collapse runs of whitespace into single spaces and trim.

    Examples:
        >>> normalize_whitespace("  ramp   production\\n in Q1 ")
        'ramp production in Q1'
    """
    return _WHITESPACE.sub(" ", value).strip()


def truncate_to_word(value: str, limit: int) -> str:
    """Truncate text to ``limit`` characters on a word boundary.

    The ellipsis counts toward the limit. Text that already fits is
    returned unchanged.

    Args:
        value: Text to truncate.
        limit: Maximum length of the result.

    Returns:
        Truncated text ending in an ellipsis, or the original text.

    Examples:
        >>> truncate_to_word("Begin production of the new line", 20)
        'Begin production of…'
        >>> truncate_to_word("short", 20)
        'short'
    """
    if len(value) <= limit:
        return value
    sliced = value[: max(1, limit - 1)]
    # Cut back to the last space unless the slice already ends on a word
    if not value[len(sliced)].isspace():
        last_space = sliced.rfind(" ")
        if last_space > 0:
            sliced = sliced[:last_space]
    return sliced.rstrip(" ,;:") + ELLIPSIS


def capitalize_first(value: str) -> str:
    """Uppercase the first character without touching the rest."""
    if not value:
        return value
    return value[0].upper() + value[1:]
