"""Ingest module for turning uploaded documents into page text."""

from dnav.ingest.base import PageExtractor, UnsupportedDocumentError
from dnav.ingest.registry import extract_pages, get_extractor, register_extractor

__all__ = [
    "PageExtractor",
    "UnsupportedDocumentError",
    "extract_pages",
    "get_extractor",
    "register_extractor",
]
