"""
Document format detection and decoding.
"""

from .formats import DocumentFormat, FormatDetector, file_extension
from .decoder import DocumentDecoder, ParsedDocument, parse_document, split_preamble

__all__ = [
    "DocumentFormat",
    "FormatDetector",
    "file_extension",
    "DocumentDecoder",
    "ParsedDocument",
    "parse_document",
    "split_preamble",
]
