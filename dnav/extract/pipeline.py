"""Decision candidate extraction pipeline.

Runs documents and an optional memo through clean, segment, score, build,
deduplicate and rank, and packs cleaned text into bounded chunks for
downstream consumers.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from dnav.config import Config, get_config
from dnav.extract.builder import build_candidate
from dnav.extract.clean import (
    build_header_footer_set,
    clean_page,
    is_boilerplate,
    page_looks_low_signal,
)
from dnav.extract.dedup import deduplicate_candidates, rank_candidates
from dnav.extract.models import (
    DecisionCandidateDraft,
    DistilledChunk,
    DistillResult,
    ExtractionResult,
    ExtractionStats,
    PageText,
    ScoredSegment,
    SourceDocument,
    Stage,
)
from dnav.extract.patterns import DEFAULT_HEURISTICS, HeuristicTables
from dnav.extract.scoring import is_personal_memo, passes_filters, passes_threshold, score_segment
from dnav.extract.segment import segment_page

logger = logging.getLogger(__name__)

MEMO_SOURCE = "memo"
NO_TEXT_WARNING = "No readable text found in the provided sources."
NO_CANDIDATES_WARNING = "No decision candidates detected in the provided sources."

PageResolver = Callable[[SourceDocument], list[PageText]]
StageCallback = Callable[[Stage], None]
ProgressCallback = Callable[[str, int, int], None]
StopCheck = Callable[[], bool]


class _StageReporter:
    """Reports each stage at most once, in order."""

    def __init__(self, callback: StageCallback | None):
        self._callback = callback
        self._reported: set[Stage] = set()

    def __call__(self, stage: Stage) -> None:
        if self._callback is None or stage in self._reported:
            return
        self._reported.add(stage)
        self._callback(stage)


def _default_resolver() -> PageResolver:
    from dnav.ingest import extract_pages

    return extract_pages


def _validate_pages(pages: Sequence[PageText]) -> None:
    if pages is None:
        raise TypeError("pages must be a sequence of PageText, got None")
    for page in pages:
        if not isinstance(page, PageText):
            raise TypeError(f"expected PageText, got {type(page).__name__}")


def _scan_pages(
    pages: Sequence[PageText],
    file_name: str | None,
    config: Config,
    stats: ExtractionStats,
    heuristics: HeuristicTables,
    personal_memo: bool = False,
) -> tuple[list[ScoredSegment], int]:
    """Score the segments of one document's pages.

    Returns:
        Qualifying segments, at most ``per_page_limit`` per page, and the
        number of pages that still had text after cleaning.
    """
    extraction = config.extraction
    frequent = build_header_footer_set(pages, config.cleaning)
    selected: list[ScoredSegment] = []
    readable_pages = 0

    for page in pages:
        stats.pages_parsed += 1
        stats.raw_lines += sum(1 for line in page.text.splitlines() if line.strip())

        if page_looks_low_signal(page.text, config.cleaning):
            stats.low_signal_pages += 1
            logger.debug("Skipping low-signal page %d of %s", page.page, file_name or "document")
            continue

        cleaned = clean_page(page, frequent, file_name, config.cleaning, heuristics)
        if not cleaned.lines:
            stats.low_signal_pages += 1
            logger.debug("No usable text on page %d of %s", page.page, file_name or "document")
            continue
        readable_pages += 1

        segments = segment_page(cleaned, extraction.min_segment_chars, extraction.max_segment_chars)
        stats.segments += len(segments)

        page_scored: list[ScoredSegment] = []
        for segment in segments:
            if is_boilerplate(segment.text, heuristics):
                continue
            if not passes_filters(segment.text, heuristics, personal_memo):
                continue
            signals = score_segment(segment.text, config.scoring, heuristics, config.cleaning)
            if passes_threshold(signals, extraction.min_score):
                page_scored.append(ScoredSegment(segment=segment, signals=signals))

        # Stable sort keeps reading order among equal scores
        page_scored.sort(key=lambda s: -s.score)
        selected.extend(page_scored[: extraction.per_page_limit])

    return selected, readable_pages


def _finalize(
    scored: Sequence[ScoredSegment],
    config: Config,
    stats: ExtractionStats,
    heuristics: HeuristicTables,
) -> list[DecisionCandidateDraft]:
    drafts = [build_candidate(s, config.extraction.summary_max_chars, heuristics) for s in scored]
    stats.candidates_before_dedupe += len(drafts)
    deduped = deduplicate_candidates(drafts, config.dedup, heuristics)
    stats.candidates_after_dedupe += len(deduped)
    return rank_candidates(deduped, config.extraction.max_candidates)


def _empty_result_warnings(
    candidates: Sequence[DecisionCandidateDraft],
    stats: ExtractionStats,
) -> list[str]:
    if candidates:
        return []
    # Text that was read but filtered away is "no candidates", not "no text"
    if stats.raw_lines:
        return [NO_CANDIDATES_WARNING]
    return [NO_TEXT_WARNING]


def extract_candidates_from_pages(
    pages: Sequence[PageText],
    file_name: str | None = None,
    config: Config | None = None,
    heuristics: HeuristicTables = DEFAULT_HEURISTICS,
    *,
    personal_memo: bool = False,
) -> ExtractionResult:
    """Extract decision candidates from the pages of one document.

    Args:
        pages: Page texts.
        file_name: Source name recorded on evidence.
        config: Settings; the global configuration when omitted.
        heuristics: Keyword tables.
        personal_memo: Apply the stricter first-person memo filter.

    Returns:
        Ranked, deduplicated candidates with warnings and stats.

    Raises:
        TypeError: If pages is None or holds something other than PageText.
    """
    _validate_pages(pages)
    config = config or get_config()

    stats = ExtractionStats(documents_processed=1)
    scored, _ = _scan_pages(pages, file_name, config, stats, heuristics, personal_memo)
    candidates = _finalize(scored, config, stats, heuristics)
    return ExtractionResult(candidates=candidates, warnings=_empty_result_warnings(candidates, stats), stats=stats)


def extract_candidates_from_text(
    text: str,
    file_name: str = MEMO_SOURCE,
    config: Config | None = None,
    heuristics: HeuristicTables = DEFAULT_HEURISTICS,
) -> ExtractionResult:
    """Extract decision candidates from free text treated as page 1.

    First-person memos only keep statements with both a commitment and a
    constraint.
    """
    if not isinstance(text, str):
        raise TypeError(f"text must be a string, got {type(text).__name__}")
    config = config or get_config()
    pages = [PageText(page=1, text=text)] if text.strip() else []
    return extract_candidates_from_pages(
        pages,
        file_name,
        config,
        heuristics,
        personal_memo=is_personal_memo(text, config.scoring, heuristics),
    )


def extract_decision_candidates(
    documents: Sequence[SourceDocument],
    memo_text: str = "",
    *,
    config: Config | None = None,
    page_extractor: PageResolver | None = None,
    on_stage: StageCallback | None = None,
    on_progress: ProgressCallback | None = None,
    should_stop: StopCheck | None = None,
    heuristics: HeuristicTables = DEFAULT_HEURISTICS,
) -> ExtractionResult:
    """Extract decision candidates from documents and an optional memo.

    A document whose pages cannot be extracted is skipped with a warning;
    the run carries on with the rest.

    Args:
        documents: Uploaded documents.
        memo_text: Pasted memo text, treated as page 1 of "memo".
        config: Settings; the global configuration when omitted.
        page_extractor: Resolves a document to pages; defaults to the
            registered extractors.
        on_stage: Receives parsing, scanning and chunking stages.
        on_progress: Receives (document name, index, total) per document.
        should_stop: Checked between documents; True stops early.
        heuristics: Keyword tables.

    Returns:
        Ranked, deduplicated candidates with warnings and stats.
    """
    if documents is None:
        raise TypeError("documents must be a sequence, got None")
    if not isinstance(memo_text, str):
        raise TypeError(f"memo_text must be a string, got {type(memo_text).__name__}")

    config = config or get_config()
    resolve = page_extractor or _default_resolver()
    report_stage = _StageReporter(on_stage)
    stats = ExtractionStats()
    warnings: list[str] = []
    scored: list[ScoredSegment] = []
    total = len(documents)

    if documents:
        report_stage(Stage.PARSING)

    for index, document in enumerate(documents, start=1):
        if should_stop is not None and should_stop():
            logger.info("Extraction stopped after %d of %d document(s)", index - 1, total)
            warnings.append(f"Stopped early after {index - 1} of {total} documents.")
            break
        if on_progress is not None:
            on_progress(document.name, index, total)

        try:
            pages = resolve(document)
        except Exception as e:
            logger.warning("Failed to extract %s: %s", document.name, e)
            warnings.append(f"Skipped {document.name}: {e}")
            stats.documents_skipped += 1
            continue

        report_stage(Stage.SCANNING)
        doc_scored, doc_readable = _scan_pages(pages, document.name, config, stats, heuristics)
        if not doc_readable:
            logger.info("No usable text in %s", document.name)
            warnings.append(f"Skipped {document.name}: no usable text after cleaning.")
            stats.documents_skipped += 1
            continue

        stats.documents_processed += 1
        scored.extend(doc_scored)

    if memo_text.strip():
        report_stage(Stage.SCANNING)
        memo_scored, _ = _scan_pages(
            [PageText(page=1, text=memo_text)],
            MEMO_SOURCE,
            config,
            stats,
            heuristics,
            personal_memo=is_personal_memo(memo_text, config.scoring, heuristics),
        )
        scored.extend(memo_scored)

    report_stage(Stage.CHUNKING)
    candidates = _finalize(scored, config, stats, heuristics)
    warnings.extend(_empty_result_warnings(candidates, stats))

    logger.debug(
        "Extracted %d candidate(s) from %d page(s) (%d before dedupe)",
        len(candidates),
        stats.pages_parsed,
        stats.candidates_before_dedupe,
    )
    return ExtractionResult(candidates=candidates, warnings=warnings, stats=stats)


def split_text_into_chunks(
    source_id: str,
    text: str,
    max_chunk_chars: int,
    page_start: int | None = None,
    page_end: int | None = None,
) -> list[DistilledChunk]:
    """Slice text into chunks no longer than ``max_chunk_chars``.

    Slices end at the last whitespace in the second half of the window when
    there is one.

    Raises:
        ValueError: If max_chunk_chars is not positive.
    """
    if max_chunk_chars < 1:
        raise ValueError("max_chunk_chars must be positive")

    chunks: list[DistilledChunk] = []
    remaining = text.strip()
    while remaining:
        if len(remaining) <= max_chunk_chars:
            piece, remaining = remaining, ""
        else:
            cut = remaining.rfind(" ", max_chunk_chars // 2, max_chunk_chars + 1)
            if cut <= 0:
                cut = max_chunk_chars
            piece, remaining = remaining[:cut].rstrip(), remaining[cut:].lstrip()
        chunks.append(DistilledChunk(source_id, page_start, page_end, piece))
    return chunks


def _pack_pages(
    source_id: str,
    pages: Sequence[tuple[int, str]],
    max_chunk_chars: int,
) -> list[DistilledChunk]:
    chunks: list[DistilledChunk] = []
    buffer: list[str] = []
    start: int | None = None
    end: int | None = None
    size = 0

    def flush() -> None:
        nonlocal buffer, start, end, size
        if buffer:
            chunks.append(DistilledChunk(source_id, start, end, "\n\n".join(buffer)))
        buffer, start, end, size = [], None, None, 0

    for page_number, text in pages:
        if len(text) > max_chunk_chars:
            flush()
            chunks.extend(split_text_into_chunks(source_id, text, max_chunk_chars, page_number, page_number))
            continue
        separator = 2 if buffer else 0
        if size + separator + len(text) > max_chunk_chars:
            flush()
            separator = 0
        buffer.append(text)
        start = page_number if start is None else start
        end = page_number
        size += separator + len(text)

    flush()
    return chunks


def distill_sources(
    documents: Sequence[SourceDocument],
    memo_text: str = "",
    *,
    max_chunk_chars: int | None = None,
    config: Config | None = None,
    page_extractor: PageResolver | None = None,
    on_stage: StageCallback | None = None,
    on_progress: ProgressCallback | None = None,
    should_stop: StopCheck | None = None,
    heuristics: HeuristicTables = DEFAULT_HEURISTICS,
) -> DistillResult:
    """Pack cleaned document text into page-ranged chunks.

    Args:
        documents: Uploaded documents.
        memo_text: Pasted memo text; its chunks carry no page range.
        max_chunk_chars: Chunk size limit; from config when omitted.
        config: Settings; the global configuration when omitted.
        page_extractor: Resolves a document to pages.
        on_stage: Receives parsing, scanning and chunking stages.
        on_progress: Receives (document name, index, total) per document.
        should_stop: Checked between documents; True stops early.
        heuristics: Keyword tables.

    Returns:
        Chunks in document order with warnings.
    """
    if documents is None:
        raise TypeError("documents must be a sequence, got None")
    if not isinstance(memo_text, str):
        raise TypeError(f"memo_text must be a string, got {type(memo_text).__name__}")

    config = config or get_config()
    limit = max_chunk_chars if max_chunk_chars is not None else config.extraction.max_chunk_chars
    if limit < 1:
        raise ValueError("max_chunk_chars must be positive")
    resolve = page_extractor or _default_resolver()
    report_stage = _StageReporter(on_stage)
    chunks: list[DistilledChunk] = []
    warnings: list[str] = []
    total = len(documents)

    if documents:
        report_stage(Stage.PARSING)

    for index, document in enumerate(documents, start=1):
        if should_stop is not None and should_stop():
            logger.info("Distillation stopped after %d of %d document(s)", index - 1, total)
            warnings.append(f"Stopped early after {index - 1} of {total} documents.")
            break
        if on_progress is not None:
            on_progress(document.name, index, total)

        try:
            pages = resolve(document)
        except Exception as e:
            logger.warning("Failed to extract %s: %s", document.name, e)
            warnings.append(f"Skipped {document.name}: {e}")
            continue

        report_stage(Stage.SCANNING)
        frequent = build_header_footer_set(pages, config.cleaning)
        cleaned = []
        for page in pages:
            lines = clean_page(page, frequent, document.name, config.cleaning, heuristics).lines
            if lines:
                cleaned.append((page.page, "\n".join(lines)))

        report_stage(Stage.CHUNKING)
        chunks.extend(_pack_pages(document.name, cleaned, limit))

    memo = memo_text.strip()
    if memo:
        report_stage(Stage.SCANNING)
        report_stage(Stage.CHUNKING)
        chunks.extend(split_text_into_chunks(MEMO_SOURCE, memo, limit))

    if not chunks:
        warnings.append(NO_TEXT_WARNING)
    return DistillResult(chunks=chunks, warnings=warnings)
