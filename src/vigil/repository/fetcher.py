"""
Content retrieval for download locators.

Raw-content URLs of private repositories cannot be fetched anonymously,
so locators on the raw-content host are mapped back to owner, repository,
branch and path and read through the authenticated Contents API. Any
other URL is fetched with a plain unauthenticated GET.
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlsplit

import httpx

from ..errors.exceptions import AuthError, FetchError
from ..github import GitHubClient, GitHubAPIError, GitHubNotFoundError
from .access import RepositoryAccessGuard

logger = logging.getLogger(__name__)

DEFAULT_RAW_HOST = "raw.githubusercontent.com"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class RawLocation:
    """A raw-content URL split into its parts"""
    owner: str
    repo: str
    branch: str
    path: str


class ContentFetcher:
    """
    Resolves download locators into text.

    A GitHub client is only needed for raw-host locators; plain URLs are
    fetched without one.
    """

    def __init__(
        self,
        github_client: Optional[GitHubClient] = None,
        access_guard: Optional[RepositoryAccessGuard] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        raw_host: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        """
        Args:
            github_client: Connected GitHub client for raw-host locators
            access_guard: Guard used to explain failed lookups
            transport: Optional httpx transport for plain fetches (used by tests)
            raw_host: Raw-content host (default: the client's, else GitHub's)
            timeout: Plain fetch timeout (default: the client's, else 30s)
        """
        config = github_client.config if github_client is not None else None

        self.github = github_client
        self.access_guard = access_guard
        if access_guard is None and github_client is not None:
            self.access_guard = RepositoryAccessGuard(github_client)
        self.raw_host = raw_host or (config.raw_host if config else DEFAULT_RAW_HOST)
        self.timeout = timeout or (config.timeout if config else DEFAULT_TIMEOUT)
        self._transport = transport

    def parse_raw_locator(self, locator: str) -> RawLocation:
        """
        Split a raw-content URL into owner, repo, branch and path.

        Raises:
            FetchError: Fewer than four path segments
        """
        segments = [unquote(part) for part in urlsplit(locator).path.split("/") if part]
        if len(segments) < 4:
            raise FetchError(
                f"Invalid {self.raw_host} URL format (expected /owner/repo/branch/path): {locator}"
            )
        return RawLocation(
            owner=segments[0],
            repo=segments[1],
            branch=segments[2],
            path="/".join(segments[3:])
        )

    def resolve(self, locator: str) -> Optional[RawLocation]:
        """
        Validate a locator and map raw-host URLs to their repository location.

        Returns:
            RawLocation for the raw-content host, None for any other host

        Raises:
            FetchError: Not a well-formed http(s) URL, or a short raw-host path
        """
        try:
            parts = urlsplit((locator or "").strip())
            hostname = parts.hostname
        except ValueError as e:
            raise FetchError(f"Invalid download_url format: {locator}") from e

        if parts.scheme not in ("http", "https") or not hostname:
            raise FetchError(f"Invalid download_url format: {locator}")

        if hostname.lower() == self.raw_host.lower():
            return self.parse_raw_locator(locator)
        return None

    async def fetch(self, locator: str) -> str:
        """
        Fetch the text a locator points to.

        Args:
            locator: download URL

        Returns:
            Decoded text content

        Raises:
            FetchError: Malformed locator, failed request or unsupported encoding
            AuthError: Raw-host locator but no GitHub client
        """
        location = self.resolve(locator)
        if location is None:
            return await self.fetch_plain(locator)
        return await self.fetch_location(location)

    async def fetch_location(self, location: RawLocation) -> str:
        """Read a repository file through the authenticated Contents API."""
        if self.github is None:
            raise AuthError(
                "GitHub token is required to read repository content. "
                "Set the GITHUB_TOKEN environment variable."
            )

        target = f"{location.owner}/{location.repo}/{location.path}@{location.branch}"
        logger.debug(f"Fetching {target} through the Contents API")

        try:
            data = await self.github.get_content(
                location.owner, location.repo, location.path, ref=location.branch
            )
        except GitHubNotFoundError as e:
            raise FetchError(
                f"Failed to get file content for {target}: {await self._explain_not_found(location)}"
            ) from e
        except GitHubAPIError as e:
            raise FetchError(f"Failed to get file content for {target}: {e}") from e

        if isinstance(data, list):
            raise FetchError(f"Failed to get file content for {target}: path points to a directory")
        if data.get("type") != "file":
            raise FetchError(f"Failed to get file content for {target}: path does not point to a file")
        if data.get("encoding") != "base64" or "content" not in data:
            raise FetchError(
                f"Failed to get file content for {target}: "
                f"unsupported encoding {data.get('encoding')!r}"
            )

        try:
            return base64.b64decode(data["content"]).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise FetchError(f"Failed to decode content of {target}: {e}") from e

    async def _explain_not_found(self, location: RawLocation) -> str:
        try:
            access = await self.access_guard.check_access(location.owner, location.repo)
        except GitHubAPIError as e:
            logger.debug(f"Access diagnosis failed for {location.owner}/{location.repo}: {e}")
            return "file not found"
        if access.accessible:
            return "file not found"
        return access.reason or "repository not accessible"

    async def fetch_plain(self, locator: str) -> str:
        """Unauthenticated GET of any other URL."""
        logger.debug(f"Fetching {locator} without authentication")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport
            ) as client:
                response = await client.get(locator)
        except httpx.RequestError as e:
            raise FetchError(f"Failed to download file from URL {locator}: {e}") from e

        if not response.is_success:
            raise FetchError(
                f"Failed to download file from URL {locator}: "
                f"{response.status_code} {response.reason_phrase}"
            )
        return response.text
