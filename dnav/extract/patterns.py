"""Heuristic tables for decision candidate extraction.

Every keyword list and regex the cleaner, scorer, builder and deduplicator
rely on lives here, bundled into a frozen ``HeuristicTables`` instance.
Callers receive the tables as an argument (``DEFAULT_HEURISTICS`` unless
overridden) so scoring stays a pure function of input and configuration.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Pattern

from dnav.extract.models import Category


def _phrase_pattern(phrases: Iterable[str]) -> Pattern[str]:
    """Compile phrases into one case-insensitive, word-bounded alternation."""
    parts = [re.escape(p).replace(r"\ ", r"\s+") for p in phrases]
    # Longest first so "plan to" wins over "plan"
    parts.sort(key=len, reverse=True)
    return re.compile(r"\b(?:" + "|".join(parts) + r")\b", re.IGNORECASE)


@dataclass(frozen=True)
class CategoryHint:
    """Keyword regex that maps text to a category."""

    category: Category
    pattern: Pattern[str]


@dataclass(frozen=True)
class TagHint:
    """Keyword regex that attaches a free-form tag."""

    tag: str
    pattern: Pattern[str]


# Intent-to-act phrases. Past tenses ("launched", "ramped") are excluded on purpose.
COMMITMENT_PHRASES = (
    "will",
    "plan to",
    "plans to",
    "planned",
    "planning to",
    "scheduled",
    "schedule to",
    "on track",
    "committed to",
    "commit to",
    "expect to",
    "expects to",
    "expected to",
    "aim to",
    "aims to",
    "intend to",
    "intends to",
    "target",
    "targets",
    "targeting",
    "begin",
    "begins",
    "beginning",
    "start",
    "starts",
    "ramp",
    "ramps",
    "ramping",
    "launch",
    "launches",
    "launching",
    "commission",
    "deploy",
    "deploys",
    "deploying",
    "build",
    "building",
    "expand",
    "expanding",
    "invest",
    "investing",
    "introduce",
    "roll out",
    "continue to pursue",
)

TIME_ANCHOR_PATTERNS = (
    re.compile(r"\b20\d{2}\b"),
    re.compile(r"\bq[1-4]\b", re.IGNORECASE),
    re.compile(r"\b(?:first|second|1st|2nd)\s+half\b", re.IGNORECASE),
    re.compile(r"\bh[12]\b", re.IGNORECASE),
    re.compile(r"\bfy\s?'?\d{2,4}\b", re.IGNORECASE),
    re.compile(r"\bfiscal\s+(?:year|20\d{2})\b", re.IGNORECASE),
    re.compile(r"\bby\s+(?:the\s+)?end\s+of\b", re.IGNORECASE),
    re.compile(r"\b(?:this|next)\s+(?:quarter|year|month)\b", re.IGNORECASE),
    re.compile(r"\blater\s+this\s+(?:year|quarter)\b", re.IGNORECASE),
    re.compile(r"\bover\s+the\s+next\b", re.IGNORECASE),
)

ACTION_NOUNS = (
    "production",
    "ramp",
    "launch",
    "commissioning",
    "construction",
    "deployment",
    "rollout",
    "factory",
    "factories",
    "gigafactory",
    "plant",
    "plants",
    "facility",
    "production line",
    "production lines",
    "assembly line",
    "manufacturing line",
    "capacity",
)

RETROSPECTIVE_MARKERS = (
    "achieved",
    "record",
    "reported",
    "grew",
    "increased",
    "decreased",
    "rose",
    "fell",
    "declined",
    "delivered",
)

DESCRIPTIVE_PHRASES = (
    "includes",
    "consists of",
    "is useful to",
    "provides information",
    "provides an overview",
    "is designed to",
    "is intended to",
)

# Everyday errands that make a personal note look like a plan
TRIVIAL_ACTIONS = (
    "coffee",
    "gym",
    "walk",
    "walked",
    "email",
    "emails",
    "meeting",
    "meetings",
    "lunch",
    "dinner",
    "supplies",
    "travel",
    "trip",
)

CAPABILITY_PHRASES = (
    "can now",
    "is able to",
    "able to",
)

# Wording that turns a capability into an actual rollout
ROLLOUT_CUES = (
    "launch",
    "launches",
    "launching",
    "rollout",
    "roll out",
    "deploy",
    "deploys",
    "deploying",
    "begin",
    "begins",
    "start",
    "starts",
    "ramp",
    "ramps",
    "ramping",
    "expand",
    "expanding",
    "scale",
    "scaling",
)

CONSTRAINT_CUES = (
    "pending",
    "subject to",
    "dependent on",
    "depends on",
    "regulatory",
    "constraint",
    "constraints",
    "constrained",
    "capacity",
    "cost",
    "costs",
    "risk",
    "risks",
    "approval",
    "approvals",
    "budget",
)

FIRST_PERSON_PATTERN = re.compile(r"\bI\b")

BOILERPLATE_PATTERNS = (
    re.compile(r"forward[-\s]looking\s+statements?", re.IGNORECASE),
    re.compile(r"could\s+cause\s+actual\s+results\s+to\s+differ", re.IGNORECASE),
    re.compile(r"\bsafe\s+harbou?r\b", re.IGNORECASE),
    re.compile(r"\bnon-gaap\b", re.IGNORECASE),
    re.compile(r"\bgaap\b", re.IGNORECASE),
    re.compile(r"\bunaudited\b", re.IGNORECASE),
    re.compile(r"\breconciliation\b", re.IGNORECASE),
    re.compile(r"\btable\s+of\s+contents?\b", re.IGNORECASE),
    re.compile(r"\bwebcast\b", re.IGNORECASE),
    re.compile(r"available\s+for\s+replay", re.IGNORECASE),
    re.compile(r"\bconference\s+call\b", re.IGNORECASE),
    re.compile(r"\brisk\s+factors\b", re.IGNORECASE),
    re.compile(r"\bin\s+(?:millions|thousands|billions)\s+of\b", re.IGNORECASE),
    re.compile(r"estimates\s+based\s+on", re.IGNORECASE),
    re.compile(r"^\s*sources?\s*:", re.IGNORECASE),
    re.compile(r"^\s*copyright\b|©", re.IGNORECASE),
    re.compile(r"\ball\s+rights\s+reserved\b", re.IGNORECASE),
)

# Leading actors removed from titles
ACTOR_PREFIX = re.compile(
    r"^(?:the\s+)?(?:company|management|tesla|team|we|our)\b[\s,]*",
    re.IGNORECASE,
)

# Leading time tokens removed from titles ("Q1 2026,", "In 2025", "First half")
LEADING_TIME = re.compile(
    r"^(?:in\s+|during\s+|by\s+)?(?:q[1-4](?:\s?'?\d{2,4})?|(?:fy\s?)?20\d{2}"
    r"|(?:first|second)\s+half(?:\s+of)?(?:\s+20\d{2})?|h[12](?:\s+20\d{2})?)\b[\s,:]*",
    re.IGNORECASE,
)

CATEGORY_HINTS = (
    CategoryHint(
        Category.PRODUCT,
        re.compile(
            r"\b(?:products?|models?|vehicles?|software|features?|fsd|robotaxi|cybercab|launch)\b",
            re.IGNORECASE,
        ),
    ),
    CategoryHint(
        Category.OPERATIONS,
        re.compile(
            r"\b(?:factory|factories|plants?|construction|ramp\w*|production|deploy\w*"
            r"|capacity|commission\w*|manufacturing|supply\s+chain)\b",
            re.IGNORECASE,
        ),
    ),
    CategoryHint(
        Category.FINANCE,
        re.compile(
            r"\b(?:price|pricing|margins?|capex|capital\s+expenditures?|cash|financing"
            r"|liquidity|debt|dividends?|buybacks?)\b",
            re.IGNORECASE,
        ),
    ),
    CategoryHint(
        Category.SALES,
        re.compile(
            r"\b(?:markets|countries|sales|go-to-market|distribution|customers|dealers?)\b",
            re.IGNORECASE,
        ),
    ),
    CategoryHint(
        Category.STRATEGY,
        re.compile(
            r"\b(?:strategy|strategic|platform|roadmap|priorit\w*|focus|expand\w*"
            r"|partnerships?|acquisitions?)\b",
            re.IGNORECASE,
        ),
    ),
    CategoryHint(
        Category.HIRING,
        re.compile(
            r"\b(?:hire|hiring|headcount|recruit\w*|talent|workforce|staffing)\b",
            re.IGNORECASE,
        ),
    ),
    CategoryHint(
        Category.LEGAL,
        re.compile(
            r"\b(?:legal|lawsuits?|litigation|regulat\w*|compliance|patents?|licen[cs]\w*)\b",
            re.IGNORECASE,
        ),
    ),
)

TAG_HINTS = (
    TagHint("factory", re.compile(r"\b(?:factory|factories|gigafactory|plants?)\b", re.IGNORECASE)),
    TagHint("ramp", re.compile(r"\bramp\w*", re.IGNORECASE)),
    TagHint("launch", re.compile(r"\blaunch\w*", re.IGNORECASE)),
    TagHint("production", re.compile(r"\bproduction\b", re.IGNORECASE)),
    TagHint("commissioning", re.compile(r"\bcommission\w*", re.IGNORECASE)),
)

TITLE_STOPWORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "to", "of", "for", "in", "on",
        "at", "by", "with", "from", "as", "into", "is", "are", "was", "were",
        "be", "been", "being", "this", "that", "these", "those", "its",
        "their", "it",
    }
)

# Pronouns, modals and planning filler carry no signal for similarity
DEDUP_STOPWORDS = TITLE_STOPWORDS | frozenset(
    {
        "we", "our", "us", "they", "them", "i", "you", "he", "she", "his",
        "her", "will", "would", "should", "could", "may", "might", "shall",
        "can", "plan", "plans", "planned", "intend", "intends", "expect",
        "expects", "expected", "believe", "believes", "continue",
        "continues", "despite", "also", "has", "have", "had", "do", "does",
    }
)


@dataclass(frozen=True)
class HeuristicTables:
    """Immutable bundle of every keyword table used by the pipeline."""

    commitment: Pattern[str]
    time_anchors: tuple[Pattern[str], ...]
    action_nouns: Pattern[str]
    retrospective: Pattern[str]
    descriptive: Pattern[str]
    trivial_actions: Pattern[str]
    capability: Pattern[str]
    rollout_cues: Pattern[str]
    constraint_cues: Pattern[str]
    first_person: Pattern[str]
    boilerplate: tuple[Pattern[str], ...]
    actor_prefix: Pattern[str]
    leading_time: Pattern[str]
    category_hints: tuple[CategoryHint, ...]
    tag_hints: tuple[TagHint, ...]
    title_stopwords: frozenset[str]
    dedup_stopwords: frozenset[str]


DEFAULT_HEURISTICS = HeuristicTables(
    commitment=_phrase_pattern(COMMITMENT_PHRASES),
    time_anchors=TIME_ANCHOR_PATTERNS,
    action_nouns=_phrase_pattern(ACTION_NOUNS),
    retrospective=_phrase_pattern(RETROSPECTIVE_MARKERS),
    descriptive=_phrase_pattern(DESCRIPTIVE_PHRASES),
    trivial_actions=_phrase_pattern(TRIVIAL_ACTIONS),
    capability=_phrase_pattern(CAPABILITY_PHRASES),
    rollout_cues=_phrase_pattern(ROLLOUT_CUES),
    constraint_cues=_phrase_pattern(CONSTRAINT_CUES),
    first_person=FIRST_PERSON_PATTERN,
    boilerplate=BOILERPLATE_PATTERNS,
    actor_prefix=ACTOR_PREFIX,
    leading_time=LEADING_TIME,
    category_hints=CATEGORY_HINTS,
    tag_hints=TAG_HINTS,
    title_stopwords=TITLE_STOPWORDS,
    dedup_stopwords=DEDUP_STOPWORDS,
)


def detect_category(text: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> Category:
    """Detect the category of a decision based on content.

    Hints are tested in order and the first match wins.

    Args:
        text: Decision text.
        heuristics: Keyword tables to use.

    Returns:
        Matching category, or ``Category.OTHER``.
    """
    for hint in heuristics.category_hints:
        if hint.pattern.search(text):
            return hint.category
    return Category.OTHER


def detect_tags(text: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> tuple[str, ...]:
    """Return the keyword tags present in text, in table order."""
    return tuple(hint.tag for hint in heuristics.tag_hints if hint.pattern.search(text))


def matches_boilerplate(text: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> bool:
    """Check whether text matches a disclaimer or statement boilerplate phrase."""
    return any(pattern.search(text) for pattern in heuristics.boilerplate)
