"""
Pass-through formatting of parsed documents for the calling agent.

No extraction happens here. The content is merged with its source and
metadata and handed back; reading incidents out of it is the caller's job.
"""

from typing import Any, Dict, Mapping, Optional


def format_content_for_extraction(
    content: Any,
    metadata: Optional[Mapping[str, Any]],
    source_file: str
) -> Dict[str, Any]:
    """
    Combine parsed content, metadata and its source into one object.

    Mapping content is merged at the top level, string content is stored
    under ``content`` and anything else under ``data``.

    Args:
        content: ``content`` of a parsed document
        metadata: Optional preamble metadata
        source_file: File path or identifier the content came from

    Returns:
        Combined object
    """
    combined: Dict[str, Any] = {"source_file": source_file}
    combined.update(metadata or {})

    if isinstance(content, Mapping):
        combined.update(content)
    elif isinstance(content, str):
        combined["content"] = content
    else:
        combined["data"] = content

    return combined
