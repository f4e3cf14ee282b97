"""
Repository tool handlers.

These tools let the agent discover and read files:
- Scan a repository for files by extension
- Download and parse a file from its download URL
"""

import logging
import posixpath
from typing import Dict, Any
from urllib.parse import unquote, urlsplit

from .base import BaseToolHandler, ToolContext, ToolDefinition, ToolResponse, ToolCategory, parse_repository
from ..documents import DocumentFormat, parse_document
from ..repository import ContentFetcher, FileScanner, RepositoryAccessGuard

logger = logging.getLogger(__name__)

FILE_TYPE_CHOICES = [fmt.value for fmt in DocumentFormat] + ["auto"]


class ScanRepositoryHandler(BaseToolHandler):
    """Tool to list files of a repository matching an extension allow-list"""

    @property
    def name(self) -> str:
        return "scan_repository"

    @property
    def category(self) -> ToolCategory:
        return ToolCategory.REPOSITORY

    def get_definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=(
                "Scan a GitHub repository for files matching the given extensions. Returns each "
                "file's path, size, sha and download_url. Pass a download_url to parse_document "
                "to read the file. last_modified is the scan time, not the commit time."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "repository": {
                        "type": "string",
                        "description": 'Repository in format "owner/repo" (e.g., "octocat/Hello-World")'
                    },
                    "path": {
                        "type": "string",
                        "description": "Optional directory or file inside the repository. Scans the whole repository when empty."
                    },
                    "file_extensions": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": 'Extensions to include (default: [".json", ".md", ".txt", ".yaml", ".yml"])'
                    }
                },
                "required": ["repository"]
            },
            category=self.category
        )

    def validate_input(self, input_data: Dict[str, Any]) -> None:
        self._require(input_data, "repository")
        parse_repository(input_data["repository"])

        extensions = input_data.get("file_extensions")
        if extensions is not None:
            if not isinstance(extensions, list) or not all(isinstance(e, str) for e in extensions):
                raise ValueError("file_extensions must be a list of strings")

        path = input_data.get("path")
        if path is not None and not isinstance(path, str):
            raise ValueError("path must be a string")

    async def execute(self, input_data: Dict[str, Any], context: ToolContext) -> ToolResponse:
        """Execute: Scan a repository"""
        try:
            owner, repo = parse_repository(input_data["repository"])
            extensions = input_data.get("file_extensions") or context.settings.default_extensions

            async with context.github_client() as github:
                scanner = FileScanner(github)
                files = await scanner.scan(owner, repo, input_data.get("path") or "", extensions)

            return self._success_response(
                {"files": [file.to_dict() for file in files]},
                metadata={"repository": f"{owner}/{repo}", "count": len(files)}
            )

        except Exception as e:
            logger.error(f"scan_repository failed for {input_data.get('repository')}: {e}",
                         extra={"tool": self.name, "repository": input_data.get("repository")})
            return self._error_response(e)


class ParseDocumentHandler(BaseToolHandler):
    """Tool to download a file and parse it as JSON, Markdown, YAML or text"""

    @property
    def name(self) -> str:
        return "parse_document"

    @property
    def category(self) -> ToolCategory:
        return ToolCategory.DOCUMENT

    def get_definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=(
                "Download a file and parse it. Use a download_url from scan_repository; private "
                "repositories are read through the authenticated GitHub API. The format is taken "
                "from file_type, else the file name, else the content. Returns format, content, "
                "metadata (Markdown preamble only) and raw_content."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "download_url": {
                        "type": "string",
                        "description": "URL of the file, usually the download_url from scan_repository"
                    },
                    "file_type": {
                        "type": "string",
                        "enum": FILE_TYPE_CHOICES,
                        "description": "Explicit format. Auto-detected when omitted or 'auto'."
                    }
                },
                "required": ["download_url"]
            },
            category=self.category
        )

    def validate_input(self, input_data: Dict[str, Any]) -> None:
        self._require(input_data, "download_url")
        if not isinstance(input_data["download_url"], str):
            raise ValueError("download_url must be a string")

        file_type = input_data.get("file_type")
        if file_type is not None and file_type not in FILE_TYPE_CHOICES:
            raise ValueError(f"file_type must be one of: {', '.join(FILE_TYPE_CHOICES)}")

    async def execute(self, input_data: Dict[str, Any], context: ToolContext) -> ToolResponse:
        """Execute: Download and parse a document"""
        download_url = input_data["download_url"]

        settings = context.settings

        try:
            fetcher = ContentFetcher(
                transport=context.transport,
                raw_host=settings.github_raw_host,
                timeout=settings.github_timeout
            )
            location = fetcher.resolve(download_url)

            # Only repository locators need the token
            if location is None:
                raw_text = await fetcher.fetch_plain(download_url)
            else:
                async with context.github_client() as github:
                    fetcher = ContentFetcher(github, RepositoryAccessGuard(github), transport=context.transport)
                    raw_text = await fetcher.fetch_location(location)

            parsed = parse_document(
                raw_text,
                file_path=_file_name_from_url(download_url),
                explicit_format=input_data.get("file_type")
            )

            return self._success_response(
                parsed.to_dict(),
                metadata={"format": parsed.format.value, "length": len(raw_text)}
            )

        except Exception as e:
            return self._error_response(e)


def _file_name_from_url(url: str) -> str:
    """Last path segment of a URL, used as the format hint."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return ""
    return posixpath.basename(unquote(path))
