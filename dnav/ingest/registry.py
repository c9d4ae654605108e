"""Extractor registry for document types."""

from __future__ import annotations

from dnav.extract.models import PageText, SourceDocument
from dnav.ingest.base import PageExtractor, UnsupportedDocumentError, document_suffix

# Registry of extractors by extension
_extractors: dict[str, PageExtractor] = {}


def register_extractor(extractor: PageExtractor) -> None:
    """Register an extractor for its extensions.

    Args:
        extractor: Extractor instance to register.
    """
    for ext in extractor.extensions:
        _extractors[ext.lower()] = extractor


def get_extractor(document: SourceDocument) -> PageExtractor | None:
    """Get an extractor for the given document.

    Args:
        document: Document to resolve.

    Returns:
        Extractor instance or None if no extractor found.
    """
    extractor = _extractors.get(document_suffix(document))
    if extractor is not None and extractor.can_extract(document):
        return extractor
    for candidate in _extractors.values():
        if candidate.can_extract(document):
            return candidate
    return None


def extract_pages(document: SourceDocument) -> list[PageText]:
    """Resolve a document to its page texts.

    Documents that already carry pages are returned as-is.

    Args:
        document: Document to resolve.

    Returns:
        Pages with text.

    Raises:
        UnsupportedDocumentError: If no extractor handles the document.
    """
    if document.pages is not None:
        return list(document.pages)
    extractor = get_extractor(document)
    if extractor is None:
        raise UnsupportedDocumentError(f"Unsupported document type: {document.name}")
    return extractor.extract(document)


def init_extractors() -> None:
    """Initialize and register all built-in extractors."""
    from dnav.ingest.pdf import PDFExtractor
    from dnav.ingest.text import TextExtractor

    register_extractor(PDFExtractor())
    register_extractor(TextExtractor())


# Auto-initialize on import
init_extractors()
