"""PDF page text extractor."""

from __future__ import annotations

import io
import logging

from dnav.extract.models import PageText, SourceDocument
from dnav.ingest.base import PageExtractor

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"


class PDFExtractor(PageExtractor):
    """Extractor for PDF documents."""

    extensions = [".pdf"]

    def can_extract(self, document: SourceDocument) -> bool:
        """Accept by extension or by the PDF header bytes."""
        return super().can_extract(document) or document.data.startswith(PDF_MAGIC)

    def extract(self, document: SourceDocument) -> list[PageText]:
        """Extract the text of each PDF page.

        Pages whose text cannot be extracted are logged and skipped.

        Raises:
            pypdf.errors.PdfReadError: If PDF is corrupted or encrypted.
        """
        from pypdf import PdfReader
        from pypdf.errors import PdfReadError

        try:
            reader = PdfReader(io.BytesIO(document.data))
        except PdfReadError as e:
            raise PdfReadError(f"Failed to read PDF {document.name}: {e}") from e

        if reader.is_encrypted:
            raise PdfReadError(f"PDF is encrypted and cannot be parsed: {document.name}")

        pages: list[PageText] = []
        for page_num, page in enumerate(reader.pages, start=1):
            try:
                text = page.extract_text() or ""
            except Exception as e:
                logger.warning("Failed to extract text from page %d of %s: %s", page_num, document.name, e)
                continue
            if text.strip():
                pages.append(PageText(page=page_num, text=text))

        logger.debug("Read %d of %d page(s) from %s", len(pages), len(reader.pages), document.name)
        return pages
