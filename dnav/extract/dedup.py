"""Near-duplicate detection, merging and ranking of candidates.

Candidates are visited best-first (see ``preference_key``), so the first
member of every similarity cluster is its winner. Losers are folded into
the winner's ``duplicates`` and never replace it, which makes the result
independent of input order and idempotent.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from dnav.config import DedupConfig
from dnav.extract.builder import normalize_quote
from dnav.extract.models import DecisionCandidateDraft, Evidence
from dnav.extract.patterns import DEFAULT_HEURISTICS, HeuristicTables

logger = logging.getLogger(__name__)

NON_ALNUM_PATTERN = re.compile(r"[^a-z0-9]+")


def dedup_tokens(text: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> list[str]:
    """Tokenize text for similarity, dropping stopwords and single characters.

    Examples:
        >>> dedup_tokens("We will expand the Berlin plant.")
        ['expand', 'berlin', 'plant']
    """
    words = NON_ALNUM_PATTERN.sub(" ", text.lower()).split()
    return [w for w in words if len(w) > 1 and w not in heuristics.dedup_stopwords]


def token_set(tokens: Iterable[str]) -> frozenset[str]:
    return frozenset(tokens)


def bigram_set(tokens: Sequence[str]) -> frozenset[tuple[str, str]]:
    """Adjacent token pairs."""
    return frozenset(zip(tokens, tokens[1:]))


def jaccard(a: frozenset, b: frozenset) -> float:
    """Jaccard similarity; 0.0 when either side is empty."""
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


@dataclass(frozen=True)
class _Signature:
    tokens: frozenset[str]
    bigrams: frozenset[tuple[str, str]]
    quote: str


def _signature(candidate: DecisionCandidateDraft, heuristics: HeuristicTables) -> _Signature:
    title_tokens = dedup_tokens(candidate.title, heuristics)
    quote_tokens = dedup_tokens(candidate.evidence.quote, heuristics)
    return _Signature(
        tokens=token_set(title_tokens) | token_set(quote_tokens),
        bigrams=bigram_set(title_tokens) | bigram_set(quote_tokens),
        quote=" ".join(NON_ALNUM_PATTERN.sub(" ", normalize_quote(candidate.evidence.quote)).split()),
    )


def _contains(a: str, b: str) -> bool:
    if not a or not b:
        return False
    return f" {a} " in f" {b} " or f" {b} " in f" {a} "


def _signatures_match(a: _Signature, b: _Signature, dedup: DedupConfig) -> bool:
    if jaccard(a.bigrams, b.bigrams) >= dedup.sentence_threshold:
        return True
    if jaccard(a.tokens, b.tokens) >= dedup.near_identical_threshold:
        return True
    return _contains(a.quote, b.quote)


def is_near_duplicate(
    a: DecisionCandidateDraft,
    b: DecisionCandidateDraft,
    dedup: DedupConfig | None = None,
    heuristics: HeuristicTables = DEFAULT_HEURISTICS,
) -> bool:
    """Check whether two candidates describe the same decision.

    Args:
        a: First candidate.
        b: Second candidate.
        dedup: Similarity thresholds; defaults apply when omitted.
        heuristics: Stopword tables.

    Returns:
        True when bigram overlap, unigram overlap or quote containment
        crosses its threshold.
    """
    dedup = dedup or DedupConfig()
    return _signatures_match(_signature(a, heuristics), _signature(b, heuristics), dedup)


def preference_key(candidate: DecisionCandidateDraft) -> tuple:
    """Sort key that puts the preferred cluster member first.

    Higher score wins, then an explicit page, then the shorter excerpt.
    Page, file and id only break remaining ties deterministically.
    """
    evidence = candidate.evidence
    return (
        -candidate.score,
        evidence.page < 1,
        len(evidence.quote),
        evidence.page,
        evidence.file_name or "",
        candidate.id,
    )


def _merge_duplicates(
    winner: DecisionCandidateDraft,
    incoming: Iterable[Evidence],
) -> DecisionCandidateDraft:
    duplicates = list(winner.duplicates)
    for evidence in incoming:
        if evidence != winner.evidence and evidence not in duplicates:
            duplicates.append(evidence)
    return replace(winner, duplicates=tuple(duplicates))


def deduplicate_candidates(
    candidates: Iterable[DecisionCandidateDraft],
    dedup: DedupConfig | None = None,
    heuristics: HeuristicTables = DEFAULT_HEURISTICS,
) -> list[DecisionCandidateDraft]:
    """Collapse near-duplicate candidates into one winner per cluster.

    Each loser's evidence, together with any duplicates it already carried,
    is appended to the winner's ``duplicates`` so no source citation is lost.

    Args:
        candidates: Candidates in any order.
        dedup: Similarity thresholds; defaults apply when omitted.
        heuristics: Stopword tables.

    Returns:
        Surviving candidates in preference order.
    """
    dedup = dedup or DedupConfig()
    kept: list[DecisionCandidateDraft] = []
    signatures: list[_Signature] = []

    for candidate in sorted(candidates, key=preference_key):
        signature = _signature(candidate, heuristics)
        match = next(
            (i for i, existing in enumerate(signatures) if _signatures_match(signature, existing, dedup)),
            None,
        )
        if match is None:
            kept.append(candidate)
            signatures.append(signature)
            continue

        winner = kept[match]
        logger.debug("Merged %s into %s", candidate.id, winner.id)
        kept[match] = _merge_duplicates(winner, (candidate.evidence, *candidate.duplicates))

    return kept


def rank_candidates(
    candidates: Iterable[DecisionCandidateDraft],
    max_candidates: int = 25,
) -> list[DecisionCandidateDraft]:
    """Sort by score descending, then page ascending, and cap the list.

    Raises:
        ValueError: If max_candidates is not positive.
    """
    if max_candidates < 1:
        raise ValueError("max_candidates must be positive")
    ranked = sorted(
        candidates,
        key=lambda c: (-c.score, c.evidence.page, len(c.evidence.quote), c.id),
    )
    return ranked[:max_candidates]
