"""
Repository file scanning.

Filters the files a TreeWalker finds by extension and attaches the
raw-content URL the ContentFetcher resolves later.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

from ..documents.formats import file_extension
from ..errors.exceptions import AuthError
from ..github import GitHubClient
from .access import RepositoryAccessGuard
from .walker import TreeWalker

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".json", ".md", ".txt", ".yaml", ".yml")


@dataclass(frozen=True)
class RepositoryFile:
    """A file found by a scan"""
    path: str
    size: int
    last_modified: datetime  # scan time, the tree API has no modification dates
    sha: str
    download_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        data: Dict[str, Any] = {
            "path": self.path,
            "size": self.size,
            "last_modified": self.last_modified.isoformat(),
            "sha": self.sha,
        }
        if self.download_url is not None:
            data["download_url"] = self.download_url
        return data


def normalize_extensions(extensions: Optional[Iterable[str]]) -> List[str]:
    """Lowercase extensions with a leading dot; defaults when none are given."""
    if not extensions:
        return list(DEFAULT_EXTENSIONS)

    normalized = []
    for extension in extensions:
        extension = extension.strip().lower()
        if not extension:
            continue
        if not extension.startswith("."):
            extension = "." + extension
        normalized.append(extension)
    return normalized or list(DEFAULT_EXTENSIONS)


def build_raw_url(raw_host: str, owner: str, repo: str, branch: str, path: str) -> str:
    """Compose https://{raw_host}/{owner}/{repo}/{branch}/{path}."""
    return "https://{}/{}/{}/{}/{}".format(
        raw_host,
        quote(owner, safe=""),
        quote(repo, safe=""),
        quote(branch, safe="/"),
        quote(path, safe="/")
    )


class FileScanner:
    """
    Scans a repository for files with allowed extensions.
    """

    def __init__(
        self,
        github_client: GitHubClient,
        walker: Optional[TreeWalker] = None,
        access_guard: Optional[RepositoryAccessGuard] = None
    ):
        self.github = github_client
        self.access_guard = access_guard or RepositoryAccessGuard(github_client)
        self.walker = walker or TreeWalker(github_client, self.access_guard)

    async def scan(
        self,
        owner: str,
        repo: str,
        root_path: str = "",
        extensions: Optional[Iterable[str]] = None
    ) -> List[RepositoryFile]:
        """
        Scan a repository.

        Args:
            owner: Repository owner
            repo: Repository name
            root_path: Optional directory or file to scan from
            extensions: Extension allow-list (default: .json .md .txt .yaml .yml)

        Returns:
            Matching files

        Raises:
            AuthError: The token is invalid or expired
            AccessError: The repository or path is unreachable
        """
        credential = await self.access_guard.verify_credential()
        if not credential.valid:
            raise AuthError(
                "GitHub token is invalid or expired. Please check your GITHUB_TOKEN."
            )

        allowed = set(normalize_extensions(extensions))
        scanned_at = datetime.now(timezone.utc)

        entries, branch = await self.walker.walk(owner, repo, root_path)

        files = [
            RepositoryFile(
                path=entry.path,
                size=entry.size,
                last_modified=scanned_at,
                sha=entry.sha,
                download_url=build_raw_url(
                    self.github.config.raw_host, owner, repo, branch, entry.path
                )
            )
            for entry in entries
            if file_extension(entry.path) in allowed
        ]

        logger.info(
            f"Scan of {owner}/{repo} matched {len(files)} of {len(entries)} files "
            f"({', '.join(sorted(allowed))})"
        )
        return files
