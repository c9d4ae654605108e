"""Base classes for page text extraction."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import PurePath

from dnav.extract.models import PageText, SourceDocument


class UnsupportedDocumentError(ValueError):
    """Raised when no extractor can handle a document."""


class PageExtractor(ABC):
    """Base class for page text extractors."""

    # File extensions this extractor handles
    extensions: list[str] = []

    @abstractmethod
    def extract(self, document: SourceDocument) -> list[PageText]:
        """Extract per-page text from a document.

        Args:
            document: Uploaded document.

        Returns:
            Pages with non-blank text, numbered from 1.
        """

    def can_extract(self, document: SourceDocument) -> bool:
        """Check if this extractor can handle the given document.

        Args:
            document: Document to check.

        Returns:
            True if the document's extension is handled here.
        """
        return document_suffix(document) in self.extensions


def document_suffix(document: SourceDocument) -> str:
    """Lowercase file extension of a document name, including the dot."""
    return PurePath(document.name).suffix.lower()
