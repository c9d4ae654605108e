"""Extract module for rule-based decision candidate detection."""

from dnav.extract.models import (
    Category,
    DecisionCandidateDraft,
    DistilledChunk,
    DistillResult,
    Evidence,
    ExtractionResult,
    ExtractionStats,
    PageText,
    SourceDocument,
    Stage,
)
from dnav.extract.pipeline import (
    distill_sources,
    extract_candidates_from_pages,
    extract_candidates_from_text,
    extract_decision_candidates,
)

__all__ = [
    "Category",
    "DecisionCandidateDraft",
    "DistillResult",
    "DistilledChunk",
    "Evidence",
    "ExtractionResult",
    "ExtractionStats",
    "PageText",
    "SourceDocument",
    "Stage",
    "distill_sources",
    "extract_candidates_from_pages",
    "extract_candidates_from_text",
    "extract_decision_candidates",
]
