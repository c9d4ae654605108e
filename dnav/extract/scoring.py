"""Rule-based scoring of decision segments.

A segment earns points for each decision signal it carries (commitment
verb, time anchor, action noun) and loses points for looking like a table,
a purely retrospective result, or a purely descriptive statement. A
constraint cue ("pending", "subject to") adds a point. Scoring is a pure
function of the text, the weights and the heuristic tables.

``passes_filters`` drops errands, capability-only claims and, for
first-person memos, anything without both a commitment and a constraint.
"""

from __future__ import annotations

from collections.abc import Iterable

from dnav.config import CleaningConfig, ScoringConfig
from dnav.extract.clean import digit_ratio, is_table_like
from dnav.extract.models import DecisionSegment, ScoredSegment, SegmentScore
from dnav.extract.patterns import DEFAULT_HEURISTICS, HeuristicTables

__all__ = [
    "digit_ratio",
    "has_action_noun",
    "has_commitment_verb",
    "has_constraint_cue",
    "has_time_anchor",
    "is_capability_only",
    "is_descriptive_only",
    "is_personal_memo",
    "is_retrospective_only",
    "is_trivial_action",
    "passes_filters",
    "passes_threshold",
    "score_segment",
    "score_segments",
]


def has_commitment_verb(text: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> bool:
    """Check for an intent-to-act phrase such as "will" or "plans to"."""
    return heuristics.commitment.search(text) is not None


def has_time_anchor(text: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> bool:
    """Check for a year, quarter, half-year, fiscal-year or deadline phrase."""
    return any(pattern.search(text) for pattern in heuristics.time_anchors)


def has_action_noun(text: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> bool:
    """Check for an operational noun such as production, launch or factory."""
    return heuristics.action_nouns.search(text) is not None


def is_retrospective_only(text: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> bool:
    """Past-result wording with no commitment and no time anchor."""
    if heuristics.retrospective.search(text) is None:
        return False
    return not has_commitment_verb(text, heuristics) and not has_time_anchor(text, heuristics)


def is_descriptive_only(text: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> bool:
    """Descriptive wording ("includes", "consists of") with no commitment."""
    if heuristics.descriptive.search(text) is None:
        return False
    return not has_commitment_verb(text, heuristics)


def has_constraint_cue(text: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> bool:
    """Check for a dependency or limit such as "pending", "subject to" or "cost"."""
    return heuristics.constraint_cues.search(text) is not None


def is_trivial_action(text: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> bool:
    """Everyday errands (coffee, lunch, meetings) with no operational noun."""
    if heuristics.trivial_actions.search(text) is None:
        return False
    return not has_action_noun(text, heuristics)


def is_capability_only(text: str, heuristics: HeuristicTables = DEFAULT_HEURISTICS) -> bool:
    """Capability wording ("can now", "able to") with nothing about rolling it out."""
    if heuristics.capability.search(text) is None:
        return False
    return heuristics.rollout_cues.search(text) is None


def is_personal_memo(
    text: str,
    weights: ScoringConfig | None = None,
    heuristics: HeuristicTables = DEFAULT_HEURISTICS,
) -> bool:
    """Check whether memo text is written in the first person.

    Examples:
        >>> is_personal_memo("I think I should call Sam, then I will pack.")
        True
        >>> is_personal_memo("We will open the Austin plant in 2026.")
        False
    """
    weights = weights or ScoringConfig()
    mentions = len(heuristics.first_person.findall(text))
    words = len(text.split()) or 1
    return mentions >= weights.personal_memo_min_mentions or mentions / words > weights.personal_memo_ratio


def passes_filters(
    text: str,
    heuristics: HeuristicTables = DEFAULT_HEURISTICS,
    personal_memo: bool = False,
) -> bool:
    """Reject segments that read like errands or capabilities instead of decisions.

    Args:
        text: Segment text.
        heuristics: Keyword tables.
        personal_memo: The text comes from a first-person memo, which then
            needs both a commitment and a constraint to count.

    Returns:
        True when the segment may be scored as a candidate.
    """
    if is_trivial_action(text, heuristics) or is_capability_only(text, heuristics):
        return False
    if personal_memo:
        return has_commitment_verb(text, heuristics) and has_constraint_cue(text, heuristics)
    return True


def score_segment(
    text: str,
    weights: ScoringConfig | None = None,
    heuristics: HeuristicTables = DEFAULT_HEURISTICS,
    cleaning: CleaningConfig | None = None,
) -> SegmentScore:
    """Score a segment.

    Args:
        text: Segment text.
        weights: Signal weights and penalties; defaults apply when omitted.
        heuristics: Keyword tables.
        cleaning: Table-detection thresholds.

    Returns:
        The total score and which signals fired.

    Raises:
        TypeError: If text is not a string.
    """
    if not isinstance(text, str):
        raise TypeError(f"text must be a string, got {type(text).__name__}")
    weights = weights or ScoringConfig()

    commitment = has_commitment_verb(text, heuristics)
    time_anchor = has_time_anchor(text, heuristics)
    action_noun = has_action_noun(text, heuristics)
    constraint = has_constraint_cue(text, heuristics)

    score = 0
    if commitment:
        score += weights.commitment_weight
    if time_anchor:
        score += weights.time_anchor_weight
    if action_noun:
        score += weights.action_noun_weight
    if constraint:
        score += weights.constraint_weight
    if is_table_like(text, cleaning):
        score -= weights.table_penalty
    if is_retrospective_only(text, heuristics):
        score -= weights.retrospective_penalty
    if is_descriptive_only(text, heuristics):
        score -= weights.descriptive_penalty

    return SegmentScore(
        score=score,
        has_commitment=commitment,
        has_time_anchor=time_anchor,
        has_action_noun=action_noun,
        has_constraint=constraint,
    )


def passes_threshold(signals: SegmentScore, min_score: int = 3) -> bool:
    """A segment qualifies with at least one signal and a high enough score."""
    return signals.qualifies and signals.score >= min_score


def score_segments(
    segments: Iterable[DecisionSegment],
    min_score: int = 3,
    weights: ScoringConfig | None = None,
    heuristics: HeuristicTables = DEFAULT_HEURISTICS,
    cleaning: CleaningConfig | None = None,
) -> list[ScoredSegment]:
    """Score segments and keep the ones that pass the threshold, in order."""
    scored: list[ScoredSegment] = []
    for segment in segments:
        signals = score_segment(segment.text, weights, heuristics, cleaning)
        if passes_threshold(signals, min_score):
            scored.append(ScoredSegment(segment=segment, signals=signals))
    return scored
