"""Tests for segment scoring."""

import pytest

from dnav.config import ScoringConfig
from dnav.extract.models import DecisionSegment
from dnav.extract.scoring import (
    has_action_noun,
    has_commitment_verb,
    has_constraint_cue,
    has_time_anchor,
    is_capability_only,
    is_descriptive_only,
    is_personal_memo,
    is_retrospective_only,
    is_trivial_action,
    passes_filters,
    passes_threshold,
    score_segment,
    score_segments,
)

from tests.conftest import COMMITMENT_SENTENCE, TABLE_LINE


class TestSignals:
    """Tests for individual signal detectors."""

    def test_commitment_verbs(self) -> None:
        """Intent phrases are commitments; substrings are not."""
        assert has_commitment_verb("The company will expand")
        assert has_commitment_verb("We plan to hire")
        assert has_commitment_verb("Production is on track")
        assert not has_commitment_verb("The board is willing to discuss options.")
        assert not has_commitment_verb("We launched the model last year.")

    def test_time_anchors(self) -> None:
        """Years, quarters, halves and deadlines are time anchors."""
        assert has_time_anchor("in Q3")
        assert has_time_anchor("during 2026")
        assert has_time_anchor("in the second half")
        assert has_time_anchor("FY2026 guidance")
        assert has_time_anchor("by the end of the year")
        assert has_time_anchor("later this year")
        assert not has_time_anchor("in the coming period")

    def test_action_nouns(self) -> None:
        """Operational nouns are detected."""
        assert has_action_noun("a new production line")
        assert has_action_noun("the Berlin factory")
        assert not has_action_noun("a new marketing slogan")

    def test_retrospective_only(self) -> None:
        """Past results without a plan are retrospective."""
        assert is_retrospective_only("Revenue grew to a record level.")
        assert not is_retrospective_only("Revenue grew and we will expand in 2026.")

    def test_descriptive_only(self) -> None:
        """Descriptions without a commitment are descriptive."""
        assert is_descriptive_only("The platform includes a dashboard.")
        assert not is_descriptive_only("The platform will include a dashboard.")



CONSTRAINED = "We will expand the plant in 2026, pending permit approval."


class TestFilters:
    """Tests for errand, capability and personal memo filters."""

    def test_trivial_actions(self) -> None:
        """Errands are trivial unless an operational noun is involved."""
        assert is_trivial_action("I will grab coffee with the team on Friday.")
        assert not is_trivial_action("We will keep meeting demand by adding capacity at the plant in 2026.")

    def test_capability_only(self) -> None:
        """Capabilities without a rollout are not decisions."""
        assert is_capability_only("The app can now export reports to PDF.")
        assert not is_capability_only("Customers can now order online and we will launch in Europe in 2026.")

    def test_constraint_cues(self) -> None:
        assert has_constraint_cue("Expansion is pending regulatory approval.")
        assert not has_constraint_cue("We will open the Austin plant in 2026.")

    def test_personal_memo(self) -> None:
        """Three or more first-person mentions mark a personal memo."""
        assert is_personal_memo("I need to call Mom. I will pick up supplies. I also want to hire.")
        assert not is_personal_memo(COMMITMENT_SENTENCE)

    def test_personal_memo_needs_commitment_and_constraint(self) -> None:
        assert passes_filters(CONSTRAINED, personal_memo=True)
        assert not passes_filters("We will expand the plant in 2026.", personal_memo=True)
        assert passes_filters("We will expand the plant in 2026.")

    def test_constraint_adds_a_point(self) -> None:
        signals = score_segment(CONSTRAINED)
        assert signals.has_constraint
        assert signals.score == 9

class TestScoreSegment:
    """Tests for segment scores."""

    def test_commitment_sentence(self) -> None:
        """All three signals add up."""
        signals = score_segment(COMMITMENT_SENTENCE)
        assert signals.score == 8
        assert signals.has_commitment
        assert signals.has_time_anchor
        assert signals.has_action_noun
        assert passes_threshold(signals)

    def test_retrospective_penalty(self) -> None:
        """Retrospective statements fall below zero."""
        signals = score_segment("Revenue grew 12% to a record level.")
        assert signals.score == -3
        assert not passes_threshold(signals)

    def test_descriptive_penalty(self) -> None:
        """Descriptive statements are penalized."""
        signals = score_segment("The platform includes a new dashboard.")
        assert signals.score == -2
        assert not signals.qualifies

    def test_table_penalty(self) -> None:
        """Table-like text is penalized."""
        signals = score_segment(TABLE_LINE)
        assert signals.has_time_anchor
        assert signals.score == -2

    def test_custom_weights(self) -> None:
        """Weights come from configuration."""
        signals = score_segment(COMMITMENT_SENTENCE, weights=ScoringConfig(commitment_weight=10))
        assert signals.score == 15

    def test_deterministic(self) -> None:
        """Same input, same score."""
        assert score_segment(COMMITMENT_SENTENCE) == score_segment(COMMITMENT_SENTENCE)

    def test_rejects_none(self) -> None:
        """None is a programming error."""
        with pytest.raises(TypeError):
            score_segment(None)  # type: ignore[arg-type]

    def test_threshold_requires_signal(self) -> None:
        """A high score alone is not enough without a signal."""
        signals = score_segment("Something unrelated happened.")
        assert not passes_threshold(signals, min_score=-10)


class TestScoreSegments:
    """Tests for batch scoring."""

    def test_filters_and_keeps_order(self) -> None:
        """Only qualifying segments survive, in input order."""
        segments = [
            DecisionSegment(text=COMMITMENT_SENTENCE, raw_excerpt=COMMITMENT_SENTENCE, page_number=1),
            DecisionSegment(text="Revenue grew to a record level.", raw_excerpt="", page_number=1),
            DecisionSegment(text="We will open the Austin plant in 2026.", raw_excerpt="", page_number=2),
        ]
        scored = score_segments(segments)
        assert [s.segment.page_number for s in scored] == [1, 2]
        assert all(s.score >= 3 for s in scored)
