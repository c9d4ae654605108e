"""Text cleaning for extracted page text.

Removes running headers and footers, page numbers, footnotes, disclaimer
boilerplate and table-like lines, then merges lines that PDF extraction
wrapped mid-sentence back into logical blocks. Footnote markers glued to
words are stripped so the sentence around them survives, and a table-like
line that states a dated commitment is kept for the scorer to penalize.
"""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from collections.abc import Sequence

from dnav.config import CleaningConfig
from dnav.extract.models import CleanedPage, PageText
from dnav.extract.patterns import DEFAULT_HEURISTICS, HeuristicTables, matches_boilerplate
from dnav.utils.text import normalize_whitespace

logger = logging.getLogger(__name__)

PAGE_NUMBER_PATTERN = re.compile(r"^(?:page\s*)?\d{1,4}(?:\s*(?:of|/)\s*\d{1,4})?$", re.IGNORECASE)
FOOTNOTE_PATTERN = re.compile(r"^(?:\(\d{1,2}\)|\[\d{1,2}\]|[¹²³⁴⁵⁶⁷⁸⁹⁰]+)\s*\S")
BULLET_PATTERN = re.compile(r"^(?:[•▪●◦*\-–]|\d{1,2}[.)]|\(\d{1,2}\))\s+")
FOOTNOTE_MARKER_PATTERN = re.compile(r"^(?:\[\d{1,2}\]|[¹²³⁴⁵⁶⁷⁸⁹⁰]+)\s*")
# Markers glued to the preceding word, as in "plant(1)" or "2026[2]"
INLINE_FOOTNOTE_PATTERN = re.compile(r"\[(?:\d{1,2}|[a-z])\]|(?<=[^\s(])\(\d{1,2}\)|(?<=\S)[¹²³⁴⁵⁶⁷⁸⁹⁰]+")
SENTENCE_END_PATTERN = re.compile(r"[.!?][\"'”’)\]]?$")
HYPHEN_END_PATTERN = re.compile(r"[A-Za-z]-$")

# Standalone numbers; "Q1" and "H2" do not count
NUMERIC_TOKEN_PATTERN = re.compile(r"(?<![A-Za-z\d])\d+(?:[.,]\d+)*%?(?![A-Za-z\d])")
CURRENCY_PATTERN = re.compile(r"[$€£¥]\s?\d|\d\s?%|\(\d[\d,.]*\)")
DELIMITER_PATTERN = re.compile(r"[|;•]")
LONG_DIGIT_RUN_PATTERN = re.compile(r"\d{6,}")

# Short fragments are exempt from the digit-ratio test so that a wrapped
# tail like "Texas by 2025." survives.
MIN_RATIO_CHARS = 20
LOW_SIGNAL_DIGIT_RATIO = 0.2
LOW_SIGNAL_TABLE_LINES = 3
ALL_CAPS_MAX_WORDS = 8
ALL_CAPS_MAX_CHARS = 60


def _line_key(line: str) -> str:
    return normalize_whitespace(line).lower()


def digit_ratio(text: str) -> float:
    """Fraction of non-whitespace characters that are digits."""
    compact = "".join(text.split())
    if not compact:
        return 0.0
    return sum(ch.isdigit() for ch in compact) / len(compact)


def build_header_footer_set(
    pages: Sequence[PageText],
    cleaning: CleaningConfig | None = None,
) -> frozenset[str]:
    """Find short lines that recur across most pages.

    Args:
        pages: Pages of a single document.
        cleaning: Thresholds; defaults apply when omitted.

    Returns:
        Normalized lowercase lines to drop as running headers or footers.
    """
    cleaning = cleaning or CleaningConfig()
    if len(pages) < 2:
        return frozenset()

    counts: Counter[str] = Counter()
    for page in pages:
        seen = {
            _line_key(line)
            for line in page.text.splitlines()
            if line.strip() and len(line.strip()) <= cleaning.short_line_max
        }
        counts.update(seen)

    threshold = max(
        cleaning.header_footer_min_pages,
        math.ceil(len(pages) * cleaning.header_footer_ratio),
    )
    return frozenset(line for line, count in counts.items() if count >= threshold)


def is_page_number_line(line: str) -> bool:
    """Check for bare page markers such as ``3``, ``Page 3`` or ``3 of 10``."""
    return bool(PAGE_NUMBER_PATTERN.match(line.strip()))


def is_footnote_line(line: str) -> bool:
    """Check for footnote lines introduced by ``(1)``, ``[1]`` or superscripts."""
    return bool(FOOTNOTE_PATTERN.match(line.strip()))


def strip_footnote_markers(line: str) -> str:
    """Remove footnote markers glued to words, as in ``plant(1)`` or ``2026[2]``."""
    return normalize_whitespace(INLINE_FOOTNOTE_PATTERN.sub("", line))


def is_dated_commitment(line: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> bool:
    """A commitment phrase together with a time anchor."""
    if heuristics.commitment.search(line) is None:
        return False
    return any(pattern.search(line) for pattern in heuristics.time_anchors)


def is_bullet(line: str) -> bool:
    return bool(BULLET_PATTERN.match(line))


def is_boilerplate(line: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> bool:
    """Check if a line is disclaimer or financial statement boilerplate."""
    return matches_boilerplate(line, heuristics)


def is_all_caps_header(line: str) -> bool:
    """Check for a short all-caps heading like ``OUTLOOK`` or ``Q3 HIGHLIGHTS``."""
    stripped = line.strip()
    if not stripped or len(stripped) > ALL_CAPS_MAX_CHARS:
        return False
    if len(stripped.split()) > ALL_CAPS_MAX_WORDS:
        return False
    return stripped.isupper()


def is_table_like(line: str, cleaning: CleaningConfig | None = None) -> bool:
    """Check if a line reads like a table row rather than prose.

    Args:
        line: Line or segment to test.
        cleaning: Thresholds; defaults apply when omitted.

    Returns:
        True for digit-dense lines, rows of numbers, currency or percent
        clusters, delimited numeric cells, or long digit runs.
    """
    cleaning = cleaning or CleaningConfig()
    compact = "".join(line.split())
    if not compact:
        return False

    if len(compact) >= MIN_RATIO_CHARS and digit_ratio(compact) > cleaning.max_digit_ratio:
        return True

    numbers = len(NUMERIC_TOKEN_PATTERN.findall(line))
    if numbers >= cleaning.max_numeric_tokens:
        return True
    if len(CURRENCY_PATTERN.findall(line)) >= cleaning.max_currency_hits:
        return True
    if len(DELIMITER_PATTERN.findall(line)) >= 2 and numbers >= 3:
        return True
    return bool(LONG_DIGIT_RUN_PATTERN.search(compact))


def page_looks_low_signal(text: str, cleaning: CleaningConfig | None = None) -> bool:
    """Check if a whole page is dominated by numeric tables."""
    if digit_ratio(text) <= LOW_SIGNAL_DIGIT_RATIO:
        return False
    table_lines = sum(1 for line in text.splitlines() if line.strip() and is_table_like(line, cleaning))
    return table_lines >= LOW_SIGNAL_TABLE_LINES


def merge_wrapped_lines(lines: Sequence[str]) -> list[str]:
    """Join lines that were wrapped mid-sentence.

    A bullet line always starts a new block. Any other line continues the
    previous block unless that block ends a sentence and the new line starts
    with an uppercase letter or digit. Bullet blocks only take lowercase
    continuations.

    Args:
        lines: Whitespace-normalized, non-empty lines.

    Returns:
        Logical blocks in order.
    """
    blocks: list[str] = []
    for line in lines:
        if not blocks or is_bullet(line):
            blocks.append(line)
            continue

        previous = blocks[-1]
        ends_sentence = bool(SENTENCE_END_PATTERN.search(previous))
        if is_bullet(previous):
            joins = not ends_sentence and line[0].islower()
        else:
            joins = not (ends_sentence and (line[0].isupper() or line[0].isdigit()))

        if not joins:
            blocks.append(line)
        elif HYPHEN_END_PATTERN.search(previous) and line[0].islower():
            blocks[-1] = previous[:-1] + line
        else:
            blocks[-1] = f"{previous} {line}"
    return blocks


def clean_lines(
    text: str,
    frequent_lines: frozenset[str] = frozenset(),
    cleaning: CleaningConfig | None = None,
    heuristics: HeuristicTables = DEFAULT_HEURISTICS,
) -> list[str]:
    """Filter raw page text down to prose blocks.

    Args:
        text: Raw page text.
        frequent_lines: Header/footer keys from ``build_header_footer_set``.
        cleaning: Thresholds; defaults apply when omitted.
        heuristics: Keyword tables.

    Returns:
        Merged, whitespace-normalized blocks.
    """
    kept: list[str] = []
    for raw in text.splitlines():
        line = normalize_whitespace(raw)
        if not line:
            continue
        if _line_key(line) in frequent_lines:
            continue
        if is_page_number_line(line):
            continue
        if is_footnote_line(line):
            # Numbered items like "(1) We will ..." look the same as footnotes
            if heuristics.commitment.search(line) is None:
                continue
            line = FOOTNOTE_MARKER_PATTERN.sub("", line)
        line = strip_footnote_markers(line)
        if not line or is_boilerplate(line, heuristics) or is_all_caps_header(line):
            continue
        if is_table_like(line, cleaning) and not is_dated_commitment(line, heuristics):
            continue
        kept.append(line)

    return [block for block in merge_wrapped_lines(kept) if not is_boilerplate(block, heuristics)]


def clean_page(
    page: PageText,
    frequent_lines: frozenset[str] = frozenset(),
    file_name: str | None = None,
    cleaning: CleaningConfig | None = None,
    heuristics: HeuristicTables = DEFAULT_HEURISTICS,
) -> CleanedPage:
    """Clean a single page."""
    lines = clean_lines(page.text, frequent_lines, cleaning, heuristics)
    return CleanedPage(page_number=page.page, lines=tuple(lines), file_name=file_name)


def clean_pages(
    pages: Sequence[PageText],
    file_name: str | None = None,
    cleaning: CleaningConfig | None = None,
    heuristics: HeuristicTables = DEFAULT_HEURISTICS,
) -> list[CleanedPage]:
    """Clean every page of one document.

    Pages that end up with no lines are dropped.

    Args:
        pages: Pages of a single document.
        file_name: Source file name recorded on each cleaned page.
        cleaning: Thresholds; defaults apply when omitted.
        heuristics: Keyword tables.

    Returns:
        Cleaned pages that still carry text, in page order.
    """
    frequent = build_header_footer_set(pages, cleaning)
    cleaned: list[CleanedPage] = []
    for page in pages:
        result = clean_page(page, frequent, file_name, cleaning, heuristics)
        if result.lines:
            cleaned.append(result)

    dropped = len(pages) - len(cleaned)
    if dropped:
        logger.debug("Dropped %d empty page(s) from %s", dropped, file_name or "document")
    return cleaned
