"""
Repository tree walking.

Enumerates every file under a root path on a repository's default branch.
The repository root is listed with a single recursive Git Trees call;
a sub-directory is walked through the Contents API with an explicit
stack of pending directories.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from ..errors.exceptions import AccessError, AuthError
from ..github import GitHubClient, GitHubAPIError, GitHubAuthenticationError, GitHubNotFoundError
from .access import RepositoryAccessGuard

logger = logging.getLogger(__name__)


class EntryKind(str, Enum):
    """Kind of a tree entry"""
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class TreeEntry:
    """A file or directory met during traversal"""
    path: str
    sha: str
    size: int
    kind: EntryKind

    @classmethod
    def from_content_item(cls, item: Dict[str, Any]) -> Optional["TreeEntry"]:
        """Build from a Contents API item; None for symlinks and submodules."""
        kinds = {"file": EntryKind.FILE, "dir": EntryKind.DIRECTORY}
        kind = kinds.get(item.get("type"))
        if kind is None:
            return None
        return cls(
            path=item["path"],
            sha=item.get("sha") or "",
            size=item.get("size") or 0,
            kind=kind
        )

    @classmethod
    def from_tree_item(cls, item: Dict[str, Any]) -> Optional["TreeEntry"]:
        """Build from a Git Trees API item; None for submodule commits."""
        kinds = {"blob": EntryKind.FILE, "tree": EntryKind.DIRECTORY}
        kind = kinds.get(item.get("type"))
        if kind is None:
            return None
        return cls(
            path=item["path"],
            sha=item.get("sha") or "",
            size=item.get("size") or 0,
            kind=kind
        )


class TreeWalker:
    """
    Lists the files of a repository.

    The root access check fails hard; a nested directory that cannot be
    listed is logged and skipped so the rest of the walk still completes.
    """

    def __init__(
        self,
        github_client: GitHubClient,
        access_guard: Optional[RepositoryAccessGuard] = None
    ):
        self.github = github_client
        self.access_guard = access_guard or RepositoryAccessGuard(github_client)

    async def walk(
        self,
        owner: str,
        repo: str,
        root_path: str = ""
    ) -> Tuple[List[TreeEntry], str]:
        """
        Enumerate the files under a root path.

        Args:
            owner: Repository owner
            repo: Repository name
            root_path: Directory or file path; empty for the whole repository

        Returns:
            (file entries in no particular order, default branch)

        Raises:
            AccessError: Repository or root path unreachable
            AuthError: Token rejected while listing
        """
        try:
            access = await self.access_guard.check_access(owner, repo)
        except GitHubAPIError as e:
            raise AccessError(f"Failed to check access to {owner}/{repo}: {e}") from e

        if not access.accessible:
            reason = access.reason or f"Cannot access repository {owner}/{repo}"
            raise AccessError(reason, reason=reason)

        root_path = (root_path or "").strip("/")

        try:
            default_branch = await self.github.get_default_branch(owner, repo)

            if not root_path:
                entries = await self._walk_full_tree(owner, repo, default_branch)
            else:
                entries = await self._walk_path(owner, repo, root_path, default_branch)

        except GitHubNotFoundError as e:
            identity = await self._token_user()
            target = f"{owner}/{repo}" + (f" path '{root_path}'" if root_path else "")
            message = (
                f"Repository {target} not found or access denied. For private repositories "
                f"ensure the token has 'repo' scope and access to this repository. "
                f"Current token user: {identity or 'unknown'}"
            )
            raise AccessError(message) from e
        except GitHubAuthenticationError as e:
            raise AuthError(
                "Authentication failed while listing the repository tree. "
                "Check that GITHUB_TOKEN is valid."
            ) from e
        except GitHubAPIError as e:
            if e.status_code == 403:
                raise AccessError(
                    f"Access to {owner}/{repo} forbidden. The token may lack 'repo' scope "
                    f"or the rate limit was hit."
                ) from e
            raise AccessError(f"Failed to get repository tree for {owner}/{repo}: {e}") from e

        logger.info(f"Walked {owner}/{repo}/{root_path}: {len(entries)} files on {default_branch}")
        return entries, default_branch

    async def _walk_full_tree(self, owner: str, repo: str, branch: str) -> List[TreeEntry]:
        """List every file on a branch with one recursive tree call."""
        commit_sha = await self.github.get_branch_sha(owner, repo, branch)
        tree = await self.github.get_git_tree(owner, repo, commit_sha, recursive=True)

        if tree.get("truncated"):
            logger.warning(
                f"Tree listing for {owner}/{repo}@{branch} was truncated by GitHub; "
                f"scan a sub-directory to see the remaining files"
            )

        entries = []
        for item in tree.get("tree", []):
            entry = TreeEntry.from_tree_item(item)
            if entry is not None and entry.kind == EntryKind.FILE:
                entries.append(entry)
        return entries

    async def _walk_path(self, owner: str, repo: str, root_path: str, branch: str) -> List[TreeEntry]:
        """List a single file, or every file below a directory."""
        root_listing = await self.github.get_content(owner, repo, root_path, ref=branch)

        if not isinstance(root_listing, list):
            entry = TreeEntry.from_content_item(root_listing)
            return [entry] if entry is not None else []

        files: List[TreeEntry] = []
        visited: Set[str] = {root_path}
        pending: List[str] = []

        self._collect(root_listing, files, pending, visited)

        while pending:
            dir_path = pending.pop()
            try:
                listing = await self.github.get_content(owner, repo, dir_path, ref=branch)
            except GitHubAPIError as e:
                logger.warning(f"Skipping directory {dir_path} in {owner}/{repo}: {e}")
                continue

            if not isinstance(listing, list):
                logger.warning(f"Skipping {dir_path} in {owner}/{repo}: not a directory listing")
                continue

            self._collect(listing, files, pending, visited)

        return files

    @staticmethod
    def _collect(
        listing: List[Dict[str, Any]],
        files: List[TreeEntry],
        pending: List[str],
        visited: Set[str]
    ) -> None:
        """Emit files from a listing and queue its unseen sub-directories."""
        for item in listing:
            entry = TreeEntry.from_content_item(item)
            if entry is None:
                continue
            if entry.kind == EntryKind.FILE:
                files.append(entry)
            elif entry.path not in visited:
                visited.add(entry.path)
                pending.append(entry.path)

    async def _token_user(self) -> Optional[str]:
        """Token identity for error messages; None if it cannot be resolved."""
        try:
            status = await self.access_guard.verify_credential()
        except GitHubAPIError as e:
            logger.debug(f"Could not resolve token user: {e}")
            return None
        return status.identity
