"""
GitHub API client for Vigil.

Provides async access to the narrow set of GitHub API operations the
repository tools need: identity lookup, repository lookup, contents,
refs, trees and issue creation.
"""

import httpx
import logging
from typing import Optional, Dict, Any, List
from urllib.parse import quote
from dataclasses import dataclass

from ..errors.exceptions import AuthError
from ..utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)


@dataclass
class GitHubConfig:
    """GitHub API configuration"""
    token: str
    api_url: str = "https://api.github.com"
    api_version: str = "2022-11-28"
    raw_host: str = "raw.githubusercontent.com"
    timeout: float = 30.0


@dataclass
class IssueDetails:
    """Created GitHub issue details"""
    number: int
    url: str
    html_url: str


class GitHubAPIError(Exception):
    """Base exception for GitHub API errors"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GitHubNotFoundError(GitHubAPIError):
    """Resource not found (404)"""
    pass


class GitHubAuthenticationError(GitHubAPIError):
    """Credential rejected (401)"""
    pass


class GitHubClient:
    """
    Async GitHub API client.

    The client is not bound to a single repository: every repository
    operation takes the owner and repository name explicitly. Open it with
    ``async with`` for the duration of one tool invocation.
    """

    def __init__(
        self,
        config: GitHubConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize GitHub client.

        Args:
            config: GitHub configuration
            transport: Optional httpx transport (used by tests)

        Raises:
            AuthError: No token configured
        """
        token = (config.token or "").strip()
        if not token:
            raise AuthError(
                "GitHub token is required. Set the GITHUB_TOKEN environment variable."
            )

        self.config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        self._headers = {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": config.api_version
        }

    async def __aenter__(self):
        """Context manager entry"""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        await self.close()

    async def connect(self):
        """Initialize HTTP client"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                follow_redirects=True,
                transport=self._transport
            )

    async def close(self):
        """Close HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get HTTP client, raising if not connected"""
        if self._client is None:
            raise RuntimeError("GitHubClient not connected. Use async with or call connect()")
        return self._client

    def _build_url(self, path: str) -> str:
        """Build full API URL"""
        return f"{self.config.api_url.rstrip('/')}/{path.lstrip('/')}"

    @staticmethod
    def _repo_path(owner: str, repo: str) -> str:
        return f"repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    @retry_with_backoff()
    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """Idempotent API request, retried on transient failures."""
        return await self._send(method, path, **kwargs)

    async def _send(
        self,
        method: str,
        path: str,
        **kwargs
    ) -> Any:
        """
        Make one authenticated API request, without retries.

        Non-idempotent calls (issue creation) go through here directly
        and are never retried.

        Args:
            method: HTTP method
            path: API path (relative to the API root)
            **kwargs: Additional request arguments

        Returns:
            Response JSON

        Raises:
            GitHubNotFoundError: Resource not found
            GitHubAuthenticationError: Credential rejected
            GitHubAPIError: Other API errors
        """
        client = self._get_client()
        url = self._build_url(path)

        try:
            response = await client.request(
                method,
                url,
                headers=self._headers,
                **kwargs
            )
            response.raise_for_status()
            return response.json() if response.content else {}

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise GitHubNotFoundError(f"Resource not found: {path}", status) from e
            if status == 401:
                raise GitHubAuthenticationError(
                    f"Bad credentials (401) for {path}", status
                ) from e
            raise GitHubAPIError(
                f"GitHub API error ({status}): {e.response.text}", status
            ) from e
        except httpx.RequestError as e:
            raise GitHubAPIError(f"Request failed: {str(e)}") from e

    # ========================================================================
    # Identity & Repository Operations
    # ========================================================================

    async def get_authenticated_user(self) -> Dict[str, Any]:
        """
        Get the user the token belongs to.

        Returns:
            User data (``login``, ``id``, ...)
        """
        return await self._request("GET", "user")

    async def get_repository(self, owner: str, repo: str) -> Dict[str, Any]:
        """
        Get repository metadata.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            Repository data
        """
        return await self._request("GET", self._repo_path(owner, repo))

    async def get_default_branch(self, owner: str, repo: str) -> str:
        """
        Get the repository's default branch name.

        Returns:
            Branch name (e.g., 'main', 'master')
        """
        data = await self.get_repository(owner, repo)
        return data["default_branch"]

    # ========================================================================
    # Content Operations
    # ========================================================================

    async def get_content(
        self,
        owner: str,
        repo: str,
        path: str,
        ref: Optional[str] = None
    ) -> Any:
        """
        Get a file or directory listing.

        Args:
            owner: Repository owner
            repo: Repository name
            path: Path inside the repository
            ref: Branch, tag, or commit SHA (default branch when omitted)

        Returns:
            A dict for a file (base64 ``content``), a list for a directory
        """
        api_path = f"{self._repo_path(owner, repo)}/contents/{quote(path.strip('/'), safe='/')}"
        params = {"ref": ref} if ref else None
        return await self._request("GET", api_path, params=params)

    # ========================================================================
    # Git Operations (Low-level)
    # ========================================================================

    async def get_branch_sha(self, owner: str, repo: str, branch: str) -> str:
        """
        Get SHA of the latest commit on a branch.

        Args:
            owner: Repository owner
            repo: Repository name
            branch: Branch name

        Returns:
            Commit SHA
        """
        data = await self._request(
            "GET",
            f"{self._repo_path(owner, repo)}/git/ref/heads/{quote(branch, safe='/')}"
        )
        return data["object"]["sha"]

    async def get_git_tree(
        self,
        owner: str,
        repo: str,
        tree_sha: str,
        recursive: bool = False
    ) -> Dict[str, Any]:
        """
        Get a Git tree.

        Args:
            owner: Repository owner
            repo: Repository name
            tree_sha: Tree SHA or commit SHA
            recursive: If True, fetch tree recursively

        Returns:
            Tree data with file/directory entries
        """
        params = {"recursive": "1"} if recursive else None
        return await self._request(
            "GET",
            f"{self._repo_path(owner, repo)}/git/trees/{tree_sha}",
            params=params
        )

    # ========================================================================
    # Issue Operations
    # ========================================================================

    async def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str,
        labels: Optional[List[str]] = None
    ) -> IssueDetails:
        """
        Create an issue.

        Args:
            owner: Repository owner
            repo: Repository name
            title: Issue title
            body: Issue body (Markdown)
            labels: Optional labels

        Returns:
            Created issue details
        """
        payload: Dict[str, Any] = {"title": title, "body": body}
        if labels:
            payload["labels"] = labels

        data = await self._send(
            "POST",
            f"{self._repo_path(owner, repo)}/issues",
            json=payload
        )

        return IssueDetails(
            number=data["number"],
            url=data["url"],
            html_url=data["html_url"]
        )
