"""Plain text and Markdown extractor."""

from __future__ import annotations

from dnav.extract.models import PageText, SourceDocument
from dnav.ingest.base import PageExtractor


class TextExtractor(PageExtractor):
    """Extractor for plain text documents, read as a single page."""

    extensions = [".txt", ".md", ".markdown", ".text"]

    def extract(self, document: SourceDocument) -> list[PageText]:
        text = document.data.decode("utf-8", errors="replace")
        if not text.strip():
            return []
        return [PageText(page=1, text=text)]
