"""
Document format detection.

Classifies a raw text blob as JSON, Markdown, YAML or plain text. The
decision is an ordered chain of resolvers: explicit override, file
extension, content sniffing, then the plain-text default.
"""

import json
import logging
import posixpath
from enum import Enum
from typing import Callable, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)


class DocumentFormat(str, Enum):
    """Document formats the decoder understands"""
    JSON = "json"
    MARKDOWN = "markdown"
    YAML = "yaml"
    TEXT = "text"


AUTO = "auto"

FormatHint = Union[DocumentFormat, str, None]

# (raw_text, file_path, explicit_format) -> format or None to fall through
Resolver = Callable[[str, Optional[str], FormatHint], Optional[DocumentFormat]]


def file_extension(file_path: str) -> str:
    """Lowercase extension of the last path component, including the dot."""
    return posixpath.splitext(file_path)[1].lower()


class FormatDetector:
    """
    Detects the format of a document.

    Never raises: at worst the result degrades to ``DocumentFormat.TEXT``.
    """

    # Extension to format mapping
    EXTENSION_FORMATS = {
        ".json": DocumentFormat.JSON,
        ".md": DocumentFormat.MARKDOWN,
        ".markdown": DocumentFormat.MARKDOWN,
        ".yaml": DocumentFormat.YAML,
        ".yml": DocumentFormat.YAML,
        ".txt": DocumentFormat.TEXT,
        ".text": DocumentFormat.TEXT,
    }

    def __init__(self, resolvers: Optional[List[Resolver]] = None):
        self.resolvers: List[Resolver] = list(resolvers) if resolvers is not None else [
            self._from_explicit,
            self._from_extension,
            self._sniff_json,
            self._sniff_preamble,
            self._sniff_yaml,
        ]

    def detect(
        self,
        raw_text: str,
        file_path: Optional[str] = None,
        explicit_format: FormatHint = None
    ) -> DocumentFormat:
        """
        Detect a document's format.

        Args:
            raw_text: Document content
            file_path: Optional file name or path used as a hint
            explicit_format: Optional caller override ("auto" means detect)

        Returns:
            The first format a resolver claims, or TEXT
        """
        for resolver in self.resolvers:
            detected = resolver(raw_text, file_path, explicit_format)
            if detected is not None:
                name = getattr(resolver, "__name__", repr(resolver))
                logger.debug(f"Detected format {detected.value} via {name}")
                return detected
        return DocumentFormat.TEXT

    # ========================================================================
    # Resolvers
    # ========================================================================

    @staticmethod
    def _from_explicit(raw_text: str, file_path: Optional[str], explicit_format: FormatHint) -> Optional[DocumentFormat]:
        if explicit_format is None:
            return None
        if isinstance(explicit_format, DocumentFormat):
            return explicit_format
        value = explicit_format.strip().lower()
        if not value or value == AUTO:
            return None
        try:
            return DocumentFormat(value)
        except ValueError:
            logger.debug(f"Ignoring unknown explicit format: {explicit_format}")
            return None

    @classmethod
    def _from_extension(cls, raw_text: str, file_path: Optional[str], explicit_format: FormatHint) -> Optional[DocumentFormat]:
        if not file_path:
            return None
        return cls.EXTENSION_FORMATS.get(file_extension(file_path))

    @staticmethod
    def _sniff_json(raw_text: str, file_path: Optional[str], explicit_format: FormatHint) -> Optional[DocumentFormat]:
        trimmed = raw_text.strip()
        if not trimmed.startswith(("{", "[")):
            return None
        try:
            json.loads(trimmed)
        except (ValueError, RecursionError):
            return None
        return DocumentFormat.JSON

    @staticmethod
    def _sniff_preamble(raw_text: str, file_path: Optional[str], explicit_format: FormatHint) -> Optional[DocumentFormat]:
        if raw_text.strip().startswith("---"):
            return DocumentFormat.MARKDOWN
        return None

    @staticmethod
    def _sniff_yaml(raw_text: str, file_path: Optional[str], explicit_format: FormatHint) -> Optional[DocumentFormat]:
        trimmed = raw_text.strip()
        if ":" not in trimmed or "{" in trimmed:
            return None
        try:
            yaml.safe_load(trimmed)
        except (yaml.YAMLError, RecursionError):
            return None
        return DocumentFormat.YAML
