"""
Document decoding.

Turns raw text of a known format into a ParsedDocument. Markdown documents
may start with a ``---`` delimited YAML preamble, which is returned
separately as metadata.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import yaml

from ..errors.exceptions import DecodeError
from .formats import DocumentFormat, FormatDetector, FormatHint

logger = logging.getLogger(__name__)

PREAMBLE_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(?P<preamble>.*?)^---[ \t]*\r?$\n?(?P<body>.*)\Z",
    re.DOTALL | re.MULTILINE
)


@dataclass(frozen=True)
class ParsedDocument:
    """A decoded document"""
    format: DocumentFormat
    content: Any
    raw_content: str
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data: Dict[str, Any] = {
            "format": self.format.value,
            "content": self.content,
        }
        if self.metadata is not None:
            data["metadata"] = self.metadata
        data["raw_content"] = self.raw_content
        return data


def split_preamble(text: str) -> Tuple[Optional[str], str]:
    """
    Split a leading ``---`` delimited preamble from a markdown body.

    Returns:
        (preamble text or None, body)
    """
    match = PREAMBLE_PATTERN.match(text.lstrip("\ufeff \t\r\n"))
    if not match:
        return None, text
    return match.group("preamble"), match.group("body")


class DocumentDecoder:
    """
    Decodes raw text for a given format.

    JSON and YAML decoding is the authoritative check of a detected format:
    text that does not parse raises DecodeError instead of degrading.
    """

    def decode(self, raw_text: str, document_format: DocumentFormat) -> ParsedDocument:
        """
        Decode raw text.

        Args:
            raw_text: Document content
            document_format: Format to decode as

        Returns:
            ParsedDocument

        Raises:
            DecodeError: Content does not conform to the format
        """
        document_format = DocumentFormat(document_format)

        if document_format == DocumentFormat.JSON:
            return self._decode_json(raw_text)
        if document_format == DocumentFormat.YAML:
            return self._decode_yaml(raw_text)
        if document_format == DocumentFormat.MARKDOWN:
            return self._decode_markdown(raw_text)
        return self._decode_text(raw_text)

    def _decode_json(self, raw_text: str) -> ParsedDocument:
        try:
            content = json.loads(raw_text)
        except (ValueError, RecursionError) as e:
            raise DecodeError(f"Failed to parse JSON: {e}") from e

        return ParsedDocument(
            format=DocumentFormat.JSON,
            content=content,
            raw_content=raw_text
        )

    def _decode_yaml(self, raw_text: str) -> ParsedDocument:
        try:
            content = yaml.safe_load(raw_text)
        except (yaml.YAMLError, RecursionError) as e:
            raise DecodeError(f"Failed to parse YAML: {e}") from e

        return ParsedDocument(
            format=DocumentFormat.YAML,
            content=content,
            raw_content=raw_text
        )

    def _decode_markdown(self, raw_text: str) -> ParsedDocument:
        preamble, body = split_preamble(raw_text)

        metadata = None
        if preamble is not None:
            try:
                metadata = yaml.safe_load(preamble)
            except (yaml.YAMLError, RecursionError) as e:
                raise DecodeError(f"Failed to parse Markdown preamble: {e}") from e

            # An empty preamble is still a preamble
            if metadata is None:
                metadata = {}
            if not isinstance(metadata, dict):
                raise DecodeError(
                    f"Markdown preamble must be a mapping, got {type(metadata).__name__}"
                )

        return ParsedDocument(
            format=DocumentFormat.MARKDOWN,
            content=body.strip(),
            raw_content=raw_text,
            metadata=metadata
        )

    def _decode_text(self, raw_text: str) -> ParsedDocument:
        return ParsedDocument(
            format=DocumentFormat.TEXT,
            content=raw_text.strip(),
            raw_content=raw_text
        )


def parse_document(
    raw_text: str,
    file_path: Optional[str] = None,
    explicit_format: FormatHint = None,
    detector: Optional[FormatDetector] = None,
    decoder: Optional[DocumentDecoder] = None
) -> ParsedDocument:
    """
    Detect a document's format and decode it.

    Args:
        raw_text: Document content
        file_path: Optional file name used as a format hint
        explicit_format: Optional override ("auto" or None to detect)

    Returns:
        ParsedDocument
    """
    detector = detector or FormatDetector()
    decoder = decoder or DocumentDecoder()

    document_format = detector.detect(raw_text, file_path, explicit_format)
    logger.debug(f"Decoding {file_path or '<inline>'} as {document_format.value}")
    return decoder.decode(raw_text, document_format)
