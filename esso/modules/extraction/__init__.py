"""
Extraction Module - Black Box Interface

Purpose: Find the token candidate on an incoming request
Interface: FieldExtractor.extract(), FieldExtractor.extract_from_request()
Hidden: Source precedence, case handling, empty-value rules

Precedence is fixed: header, then query parameter, then cookie.
"""

from .extractor import ExtractedToken, FieldExtractor, TokenSource

__all__ = ["ExtractedToken", "FieldExtractor", "TokenSource"]
