"""Extraction of cross-document references from raw document text."""

from inkwell.indexing.extractor import REFERENCE_PATTERN, extract_references

__all__ = ["REFERENCE_PATTERN", "extract_references"]
