"""Records produced and consumed by the extraction pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

Strength = Literal["hard", "soft"]


class Category(str, Enum):
    """Closed set of decision categories."""

    OPERATIONS = "Operations"
    FINANCE = "Finance"
    PRODUCT = "Product"
    HIRING = "Hiring"
    LEGAL = "Legal"
    STRATEGY = "Strategy"
    SALES = "Sales/Go-to-market"
    OTHER = "Other"


class Stage(str, Enum):
    """Advisory progress stages reported to callers."""

    PARSING = "parsing"
    SCANNING = "scanning"
    CHUNKING = "chunking"


@dataclass(frozen=True)
class PageText:
    """One page of extracted source text."""

    page: int
    text: str

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise TypeError(f"PageText.text must be a string, got {type(self.text).__name__}")
        if isinstance(self.page, bool) or not isinstance(self.page, int) or self.page < 1:
            raise ValueError(f"PageText.page must be an integer >= 1, got {self.page!r}")


@dataclass(frozen=True)
class SourceDocument:
    """An uploaded document.

    Either raw ``data`` to be resolved by a page extractor, or ``pages``
    that were already extracted upstream.
    """

    name: str
    data: bytes = b""
    pages: tuple[PageText, ...] | None = None


@dataclass(frozen=True)
class CleanedPage:
    """Page text after boilerplate, table and header/footer removal."""

    page_number: int
    lines: tuple[str, ...]
    file_name: str | None = None


@dataclass(frozen=True)
class DecisionSegment:
    """A contiguous span of text scored as a unit.

    ``text`` is what gets scored and quoted as evidence. ``raw_excerpt`` is
    the whole sentence it came from, which differs from ``text`` only when a
    long sentence was split on commas; it is kept for callers that want to
    show the surrounding wording.
    """

    text: str
    raw_excerpt: str
    page_number: int
    file_name: str | None = None


@dataclass(frozen=True)
class SegmentScore:
    """Scoring signals for a single segment."""

    score: int
    has_commitment: bool
    has_time_anchor: bool
    has_action_noun: bool
    has_constraint: bool = False

    @property
    def qualifies(self) -> bool:
        """At least one decision signal is present."""
        return self.has_commitment or self.has_time_anchor or self.has_action_noun


@dataclass(frozen=True)
class ScoredSegment:
    """A segment together with its score."""

    segment: DecisionSegment
    signals: SegmentScore

    @property
    def score(self) -> int:
        return self.signals.score


@dataclass(frozen=True)
class Evidence:
    """Traceability anchor back to the source text."""

    page: int
    quote: str
    file_name: str | None = None
    location_hint: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"page": self.page, "quote": self.quote}
        if self.file_name is not None:
            data["file_name"] = self.file_name
        if self.location_hint is not None:
            data["location_hint"] = self.location_hint
        return data


@dataclass(frozen=True)
class DecisionCandidateDraft:
    """A heuristically detected decision with its evidence."""

    id: str
    title: str
    category: Category
    decision: str
    evidence: Evidence
    score: int
    has_commitment: bool
    has_time_anchor: bool
    tags: tuple[str, ...] = ()
    duplicates: tuple[Evidence, ...] = ()

    @property
    def strength(self) -> Strength:
        """Hard when both a commitment verb and a time anchor were found."""
        return "hard" if self.has_commitment and self.has_time_anchor else "soft"

    def to_dict(self) -> dict[str, Any]:
        """Render the JSON shape consumed by the review UI."""
        return {
            "id": self.id,
            "title": self.title,
            "strength": self.strength,
            "category": self.category.value,
            "decision": self.decision,
            "evidence": self.evidence.to_dict(),
            "tags": list(self.tags),
            "score": self.score,
            "duplicates": [dup.to_dict() for dup in self.duplicates],
        }


@dataclass(frozen=True)
class DistilledChunk:
    """A bounded slice of cleaned source text with its page range."""

    source_id: str
    page_start: int | None
    page_end: int | None
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_id": self.source_id,
            "page_start": self.page_start,
            "page_end": self.page_end,
            "text": self.text,
        }


@dataclass
class ExtractionStats:
    """Counters collected during a single extraction run."""

    documents_processed: int = 0
    documents_skipped: int = 0
    pages_parsed: int = 0
    low_signal_pages: int = 0
    raw_lines: int = 0
    segments: int = 0
    candidates_before_dedupe: int = 0
    candidates_after_dedupe: int = 0

    def merge(self, other: ExtractionStats) -> None:
        """Add another run's counters into this one."""
        self.documents_processed += other.documents_processed
        self.documents_skipped += other.documents_skipped
        self.pages_parsed += other.pages_parsed
        self.low_signal_pages += other.low_signal_pages
        self.raw_lines += other.raw_lines
        self.segments += other.segments
        self.candidates_before_dedupe += other.candidates_before_dedupe
        self.candidates_after_dedupe += other.candidates_after_dedupe


@dataclass
class ExtractionResult:
    """Ranked candidates plus human-readable warnings."""

    candidates: list[DecisionCandidateDraft] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    stats: ExtractionStats = field(default_factory=ExtractionStats)


@dataclass
class DistillResult:
    """Distilled chunks plus human-readable warnings."""

    chunks: list[DistilledChunk] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
