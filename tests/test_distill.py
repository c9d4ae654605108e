"""Tests for source distillation into chunks."""

import pytest

from dnav.extract.models import SourceDocument, Stage
from dnav.extract.pipeline import (
    MEMO_SOURCE,
    NO_TEXT_WARNING,
    distill_sources,
    split_text_into_chunks,
)

from tests.conftest import TABLE_LINE


class TestSplitTextIntoChunks:
    """Tests for fixed-size text slicing."""

    def test_hard_cut_without_whitespace(self) -> None:
        """Text without spaces is cut at the limit."""
        chunks = split_text_into_chunks("memo", "x" * 250, 100)
        assert [len(c.text) for c in chunks] == [100, 100, 50]

    def test_cuts_on_whitespace(self) -> None:
        """Words are not split when a space is available."""
        text = " ".join(["decision"] * 40)
        chunks = split_text_into_chunks("memo", text, 100)
        assert all(len(c.text) <= 100 for c in chunks)
        assert all(word == "decision" for c in chunks for word in c.text.split())

    def test_page_range_is_carried(self) -> None:
        chunks = split_text_into_chunks("a.pdf", "short text", 100, 4, 4)
        assert (chunks[0].page_start, chunks[0].page_end) == (4, 4)

    def test_empty_text(self) -> None:
        assert split_text_into_chunks("memo", "   ", 100) == []

    def test_rejects_zero_size(self) -> None:
        with pytest.raises(ValueError):
            split_text_into_chunks("memo", "text", 0)


class TestDistillSources:
    """Tests for document and memo distillation."""

    def test_report_fits_one_chunk(self, report_pages, config) -> None:
        """Cleaned pages pack into one chunk spanning every page."""
        documents = [SourceDocument(name="report.pdf", pages=tuple(report_pages))]
        result = distill_sources(documents, max_chunk_chars=9000, config=config)

        assert len(result.chunks) == 1
        chunk = result.chunks[0]
        assert chunk.source_id == "report.pdf"
        assert (chunk.page_start, chunk.page_end) == (1, 3)
        assert "ACME Corp Q4 Update" not in chunk.text
        assert TABLE_LINE not in chunk.text
        assert "cathode plant" in chunk.text
        assert result.warnings == []

    def test_chunk_size_is_respected(self, report_pages, config) -> None:
        """No chunk exceeds the limit."""
        documents = [SourceDocument(name="report.pdf", pages=tuple(report_pages))]
        result = distill_sources(documents, max_chunk_chars=100, config=config)

        assert len(result.chunks) > 1
        assert all(len(c.text) <= 100 for c in result.chunks)
        assert all(c.page_start is not None and c.page_start <= c.page_end for c in result.chunks)

    def test_memo_chunk(self, config) -> None:
        """Memo chunks have no page range."""
        result = distill_sources([], "We will hire two engineers in Q2.", config=config)

        assert len(result.chunks) == 1
        assert result.chunks[0].source_id == MEMO_SOURCE
        assert result.chunks[0].page_start is None
        assert result.chunks[0].to_dict()["page_end"] is None

    def test_empty_input(self, config) -> None:
        result = distill_sources([], "", config=config)
        assert result.chunks == []
        assert result.warnings == [NO_TEXT_WARNING]

    def test_failing_document(self, config) -> None:
        """A document that cannot be read is skipped with a warning."""

        def extractor(document: SourceDocument):
            raise RuntimeError("boom")

        result = distill_sources(
            [SourceDocument(name="bad.pdf")], "memo text", config=config, page_extractor=extractor
        )
        assert result.warnings == ["Skipped bad.pdf: boom"]
        assert [c.source_id for c in result.chunks] == [MEMO_SOURCE]

    def test_stages(self, report_pages, config) -> None:
        stages: list[Stage] = []
        documents = [SourceDocument(name="report.pdf", pages=tuple(report_pages))]
        distill_sources(documents, config=config, on_stage=stages.append)
        assert stages == [Stage.PARSING, Stage.SCANNING, Stage.CHUNKING]

    def test_rejects_zero_limit(self, config) -> None:
        with pytest.raises(ValueError):
            distill_sources([], "memo", max_chunk_chars=0, config=config)
