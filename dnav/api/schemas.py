"""Pydantic request/response models for the D-NAV API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from dnav.extract.models import (
    DecisionCandidateDraft,
    DistilledChunk,
    Evidence,
    ExtractionStats,
    PageText,
    SourceDocument,
)


class PageTextIn(BaseModel):
    """Text of one source page."""

    page: int = Field(..., ge=1, description="1-based page number")
    text: str


class DocumentIn(BaseModel):
    """A document whose page text was extracted by the caller."""

    name: str = Field(..., min_length=1)
    pages: list[PageTextIn] = Field(default_factory=list)

    def to_source(self) -> SourceDocument:
        return SourceDocument(
            name=self.name,
            pages=tuple(PageText(page=p.page, text=p.text) for p in self.pages),
        )


class ExtractRequest(BaseModel):
    """Request body for POST /decision-candidates/extract."""

    documents: list[DocumentIn] = Field(default_factory=list)
    memo: str = ""
    max_candidates: int | None = Field(default=None, ge=1, le=500)
    min_score: int | None = None
    per_page_limit: int | None = Field(default=None, ge=1)


class DistillRequest(BaseModel):
    """Request body for POST /sources/distill."""

    documents: list[DocumentIn] = Field(default_factory=list)
    memo: str = ""
    max_chunk_chars: int | None = Field(default=None, ge=100)


class EvidenceOut(BaseModel):
    """Citation back to the source text."""

    page: int
    quote: str
    file_name: str | None = None
    location_hint: str | None = None

    @classmethod
    def from_evidence(cls, evidence: Evidence) -> EvidenceOut:
        return cls(
            page=evidence.page,
            quote=evidence.quote,
            file_name=evidence.file_name,
            location_hint=evidence.location_hint,
        )


class CandidateOut(BaseModel):
    """API representation of a decision candidate draft."""

    id: str
    title: str
    strength: str
    category: str
    decision: str
    evidence: EvidenceOut
    tags: list[str] = Field(default_factory=list)
    score: int
    duplicates: list[EvidenceOut] = Field(default_factory=list)

    @classmethod
    def from_draft(cls, draft: DecisionCandidateDraft) -> CandidateOut:
        return cls(
            id=draft.id,
            title=draft.title,
            strength=draft.strength,
            category=draft.category.value,
            decision=draft.decision,
            evidence=EvidenceOut.from_evidence(draft.evidence),
            tags=list(draft.tags),
            score=draft.score,
            duplicates=[EvidenceOut.from_evidence(e) for e in draft.duplicates],
        )


class StatsOut(BaseModel):
    """Counters from one extraction run."""

    documents_processed: int = 0
    documents_skipped: int = 0
    pages_parsed: int = 0
    low_signal_pages: int = 0
    raw_lines: int = 0
    segments: int = 0
    candidates_before_dedupe: int = 0
    candidates_after_dedupe: int = 0

    @classmethod
    def from_stats(cls, stats: ExtractionStats) -> StatsOut:
        return cls(**vars(stats))


class ExtractResponse(BaseModel):
    """Response for POST /decision-candidates/extract."""

    candidates: list[CandidateOut]
    warnings: list[str] = Field(default_factory=list)
    stats: StatsOut


class ChunkOut(BaseModel):
    """A distilled text chunk."""

    source_id: str
    page_start: int | None = None
    page_end: int | None = None
    text: str

    @classmethod
    def from_chunk(cls, chunk: DistilledChunk) -> ChunkOut:
        return cls(
            source_id=chunk.source_id,
            page_start=chunk.page_start,
            page_end=chunk.page_end,
            text=chunk.text,
        )


class DistillResponse(BaseModel):
    """Response for POST /sources/distill."""

    chunks: list[ChunkOut]
    warnings: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Response for GET /health."""

    status: str
    version: str
