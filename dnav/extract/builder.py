"""Construction of decision candidate drafts from scored segments."""

from __future__ import annotations

import hashlib
import re

from dnav.extract.models import Category, DecisionCandidateDraft, Evidence, ScoredSegment
from dnav.extract.patterns import DEFAULT_HEURISTICS, HeuristicTables, detect_category, detect_tags
from dnav.utils.text import capitalize_first, normalize_whitespace, truncate_to_word

QUOTE_CHARS_PATTERN = re.compile(r"[\"“”‘’`]")
LEADING_NOISE_PATTERN = re.compile(r"^[^A-Za-z0-9]+")
TRAILING_PUNCT = ".,;:!?-–"

TITLE_MAX_WORDS = 10
TITLE_MAX_MEANINGFUL_WORDS = 8
TITLE_FALLBACK_CHARS = 60


def _strip_title_prefixes(text: str, heuristics: HeuristicTables) -> str:
    previous = None
    while previous != text:
        previous = text
        text = heuristics.actor_prefix.sub("", text, count=1)
        text = heuristics.leading_time.sub("", text, count=1)
        text = LEADING_NOISE_PATTERN.sub("", text)
    return text


def build_title(text: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> str:
    """Build a short title from segment text.

    Strips quotes, the leading actor ("The company", "We") and leading time
    tokens, then keeps at most ten words or eight meaningful words.

    Args:
        text: Segment text.
        heuristics: Keyword tables.

    Returns:
        Capitalized title, or the first characters of the text when nothing
        meaningful is left.
    """
    cleaned = QUOTE_CHARS_PATTERN.sub("", normalize_whitespace(text))
    cleaned = _strip_title_prefixes(LEADING_NOISE_PATTERN.sub("", cleaned), heuristics)

    picked: list[str] = []
    meaningful = 0
    for word in cleaned.split():
        if len(picked) >= TITLE_MAX_WORDS or meaningful >= TITLE_MAX_MEANINGFUL_WORDS:
            break
        picked.append(word)
        if word.lower().strip(TRAILING_PUNCT) not in heuristics.title_stopwords:
            meaningful += 1

    while picked and picked[-1].lower().strip(TRAILING_PUNCT) in heuristics.title_stopwords:
        picked.pop()

    title = " ".join(picked).rstrip(TRAILING_PUNCT)
    if not title:
        title = normalize_whitespace(text)[:TITLE_FALLBACK_CHARS].strip()
    return capitalize_first(title)


def categorize(text: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> Category:
    return detect_category(text, heuristics)


def extract_tags(text: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> tuple[str, ...]:
    return detect_tags(text, heuristics)


def summarize(text: str, limit: int = 280) -> str:
    """Normalize whitespace and truncate on a word boundary."""
    if limit < 1:
        raise ValueError("limit must be positive")
    return truncate_to_word(normalize_whitespace(text), limit)


def normalize_quote(text: str) -> str:
    """Lowercase, whitespace-collapsed quote used for ids and containment."""
    return normalize_whitespace(QUOTE_CHARS_PATTERN.sub("", text)).lower()


def candidate_id(page: int, quote: str) -> str:
    """Derive a stable candidate id from the page and normalized quote.

    Examples:
        >>> candidate_id(3, "We will ramp") == candidate_id(3, "we  will RAMP")
        True
    """
    digest = hashlib.blake2b(f"{page}:{normalize_quote(quote)}".encode(), digest_size=8)
    return f"local-{page}-{digest.hexdigest()}"


def location_hint(page: int, file_name: str | None) -> str:
    if file_name:
        return f"{file_name}, page {page}"
    return f"page {page}"


def build_candidate(
    scored: ScoredSegment,
    summary_max_chars: int = 280,
    heuristics: HeuristicTables = DEFAULT_HEURISTICS,
) -> DecisionCandidateDraft:
    """Build a decision candidate draft from a scored segment.

    Args:
        scored: Segment with its score.
        summary_max_chars: Maximum length of the decision text.
        heuristics: Keyword tables.

    Returns:
        Draft candidate anchored to its page and quote.

    Raises:
        ValueError: If the segment has no page or no quote to cite.
    """
    segment = scored.segment
    quote = normalize_whitespace(segment.text)
    if not quote:
        raise ValueError("cannot build a candidate without an evidence quote")
    if segment.page_number < 1:
        raise ValueError(f"evidence page must be >= 1, got {segment.page_number}")

    # Comma-split parts borrow context from their whole sentence
    context = normalize_whitespace(segment.raw_excerpt) or quote
    category = categorize(quote, heuristics)
    if category is Category.OTHER:
        category = categorize(context, heuristics)

    evidence = Evidence(
        page=segment.page_number,
        quote=quote,
        file_name=segment.file_name,
        location_hint=location_hint(segment.page_number, segment.file_name),
    )
    return DecisionCandidateDraft(
        id=candidate_id(segment.page_number, quote),
        title=build_title(quote, heuristics),
        category=category,
        decision=summarize(quote, summary_max_chars),
        evidence=evidence,
        score=scored.score,
        has_commitment=scored.signals.has_commitment,
        has_time_anchor=scored.signals.has_time_anchor,
        tags=extract_tags(context, heuristics),
    )
