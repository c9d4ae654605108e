"""Sentence segmentation for cleaned page text."""

from __future__ import annotations

import re
from collections.abc import Iterable

from dnav.extract.clean import BULLET_PATTERN, merge_wrapped_lines
from dnav.extract.models import CleanedPage, DecisionSegment
from dnav.utils.text import normalize_whitespace

SOFT_HYPHEN = "\u00ad"
HYPHEN_WRAP_PATTERN = re.compile(r"([A-Za-z])-\n\s*([a-z])")
BULLET_GLYPH_PATTERN = re.compile(r"[•▪●◦·]")
HORIZONTAL_SPACE_PATTERN = re.compile(r"[ \t\f\v]+")
INLINE_BULLET_PATTERN = re.compile(r"\s*•\s*")
SENTENCE_BOUNDARY_PATTERN = re.compile(r"(?<=[.!?])\s+(?=[A-Z0-9])")
CLAUSE_BOUNDARY_PATTERN = re.compile(r"\s*;\s*")
COMMA_OUTSIDE_PARENS_PATTERN = re.compile(r",(?![^()]*\))")

# A sentence ending in one of these is glued to the next one
ABBREVIATIONS = frozenset(
    {"inc.", "corp.", "co.", "ltd.", "mr.", "ms.", "dr.", "vs.", "approx.", "no.", "u.s.", "e.g.", "i.e."}
)


def normalize_text(text: str) -> str:
    """Normalize raw text before splitting.

    Removes soft hyphens, rejoins words hyphenated across a line break,
    unifies bullet glyphs to ``•`` and collapses horizontal whitespace.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n").replace(SOFT_HYPHEN, "")
    text = HYPHEN_WRAP_PATTERN.sub(r"\1\2", text)
    text = BULLET_GLYPH_PATTERN.sub("•", text)
    text = HORIZONTAL_SPACE_PATTERN.sub(" ", text)
    return text.strip()


def _rejoin_abbreviations(parts: list[str]) -> list[str]:
    joined: list[str] = []
    for part in parts:
        if joined and joined[-1].rsplit(" ", 1)[-1].lower() in ABBREVIATIONS:
            joined[-1] = f"{joined[-1]} {part}"
        else:
            joined.append(part)
    return joined


def split_sentences(text: str) -> list[str]:
    """Split text into sentences and clauses.

    Bullets and semicolons are forced boundaries. Wrapped lines are merged
    first, so both raw and cleaned text can be passed in.

    Args:
        text: Text to split.

    Returns:
        Non-empty sentences in order.
    """
    normalized = normalize_text(text)
    lines = [normalize_whitespace(line) for line in normalized.split("\n")]
    pieces: list[str] = []
    for block in merge_wrapped_lines([line for line in lines if line]):
        for item in INLINE_BULLET_PATTERN.split(block):
            item = BULLET_PATTERN.sub("", item.strip())
            if not item:
                continue
            for sentence in _rejoin_abbreviations(SENTENCE_BOUNDARY_PATTERN.split(item)):
                pieces.extend(clause for clause in CLAUSE_BOUNDARY_PATTERN.split(sentence) if clause)
    return pieces


def split_long_segment(text: str, max_chars: int = 240, min_chars: int = 1) -> list[str]:
    """Break an overlong segment on commas that sit outside parentheses.

    The original text is returned when it fits, when it has no usable comma,
    or when every comma-separated part would be too short to keep.

    Args:
        text: Segment text.
        max_chars: Length above which splitting is attempted.
        min_chars: Minimum length a part needs to survive later filtering.

    Returns:
        One or more segment texts.
    """
    if max_chars < 1:
        raise ValueError("max_chars must be positive")
    if len(text) <= max_chars:
        return [text]
    parts = [part.strip() for part in COMMA_OUTSIDE_PARENS_PATTERN.split(text) if part.strip()]
    if len(parts) < 2 or all(len(part) < min_chars for part in parts):
        return [text]
    return parts


def segment_page(
    page: CleanedPage,
    min_chars: int = 35,
    max_chars: int = 240,
) -> list[DecisionSegment]:
    """Turn a cleaned page into scored-sized segments.

    Args:
        page: Cleaned page.
        min_chars: Segments shorter than this are dropped.
        max_chars: Segments longer than this are split on commas.

    Returns:
        Segments in reading order.
    """
    if min_chars < 1:
        raise ValueError("min_chars must be positive")

    segments: list[DecisionSegment] = []
    for line in page.lines:
        for sentence in split_sentences(line):
            for part in split_long_segment(sentence, max_chars, min_chars):
                text = normalize_whitespace(part)
                if len(text) < min_chars:
                    continue
                segments.append(
                    DecisionSegment(
                        text=text,
                        raw_excerpt=sentence,
                        page_number=page.page_number,
                        file_name=page.file_name,
                    )
                )
    return segments


def segment_pages(
    pages: Iterable[CleanedPage],
    min_chars: int = 35,
    max_chars: int = 240,
) -> list[DecisionSegment]:
    """Segment several cleaned pages, preserving page order."""
    segments: list[DecisionSegment] = []
    for page in pages:
        segments.extend(segment_page(page, min_chars, max_chars))
    return segments
