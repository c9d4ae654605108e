"""Endpoints for local decision candidate extraction and source distillation."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from dnav.api.schemas import (
    CandidateOut,
    ChunkOut,
    DistillRequest,
    DistillResponse,
    ExtractRequest,
    ExtractResponse,
    StatsOut,
)
from dnav.config import Config, get_config, with_extraction_overrides
from dnav.extract.pipeline import distill_sources, extract_decision_candidates

logger = logging.getLogger(__name__)

router = APIRouter()


def _request_config(request: ExtractRequest) -> Config:
    """Apply per-request extraction limits on top of the global config."""
    return with_extraction_overrides(
        get_config(),
        max_candidates=request.max_candidates,
        min_score=request.min_score,
        per_page_limit=request.per_page_limit,
    )


@router.post("/decision-candidates/extract", response_model=ExtractResponse)
def extract_candidates(request: ExtractRequest) -> ExtractResponse:
    """Detect decision candidates in caller-supplied page text.

    Data problems never fail the request; they come back as warnings.
    """
    result = extract_decision_candidates(
        [doc.to_source() for doc in request.documents],
        request.memo,
        config=_request_config(request),
    )
    logger.debug("Returning %d candidate(s)", len(result.candidates))
    return ExtractResponse(
        candidates=[CandidateOut.from_draft(c) for c in result.candidates],
        warnings=result.warnings,
        stats=StatsOut.from_stats(result.stats),
    )


@router.post("/sources/distill", response_model=DistillResponse)
def distill(request: DistillRequest) -> DistillResponse:
    """Pack cleaned source text into page-ranged chunks."""
    result = distill_sources(
        [doc.to_source() for doc in request.documents],
        request.memo,
        max_chunk_chars=request.max_chunk_chars,
    )
    return DistillResponse(
        chunks=[ChunkOut.from_chunk(c) for c in result.chunks],
        warnings=result.warnings,
    )
