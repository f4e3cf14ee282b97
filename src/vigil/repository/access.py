"""
Repository access checks.

A bare 404 from the GitHub API is ambiguous: the repository may not exist,
it may be private and invisible to the token, or the token itself may be
dead. The guard resolves that ambiguity with a second identity lookup so
operators get an actionable reason.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..github import GitHubClient, GitHubAuthenticationError, GitHubNotFoundError, GitHubAPIError

logger = logging.getLogger(__name__)

INVALID_CREDENTIAL_REASON = "GitHub token is invalid or expired"


@dataclass(frozen=True)
class CredentialStatus:
    """Result of a credential check"""
    valid: bool
    identity: Optional[str] = None


@dataclass(frozen=True)
class AccessResult:
    """Result of a repository access check"""
    accessible: bool
    reason: Optional[str] = None


class RepositoryAccessGuard:
    """
    Verifies the credential and repository reachability.

    Results are never cached: every call reflects the token's current state.
    """

    def __init__(self, github_client: GitHubClient):
        self.github = github_client

    async def verify_credential(self) -> CredentialStatus:
        """
        Look up the identity behind the token.

        Returns:
            CredentialStatus with ``valid=False`` when GitHub rejects the token

        Raises:
            GitHubAPIError: Any failure other than a credential rejection
        """
        try:
            user = await self.github.get_authenticated_user()
        except GitHubAuthenticationError:
            logger.warning("GitHub rejected the configured token")
            return CredentialStatus(valid=False)

        return CredentialStatus(valid=True, identity=user.get("login"))

    async def check_access(self, owner: str, repo: str) -> AccessResult:
        """
        Check whether a repository is reachable with the token.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            AccessResult with a diagnostic reason when not accessible
        """
        try:
            await self.github.get_repository(owner, repo)
            return AccessResult(accessible=True)

        except GitHubNotFoundError:
            credential = await self.verify_credential()
            if not credential.valid:
                return AccessResult(accessible=False, reason=INVALID_CREDENTIAL_REASON)

            reason = (
                f"Repository {owner}/{repo} not found or the token has insufficient scope "
                f"for it. Token user: {credential.identity or 'unknown'}. "
                f"Ensure the token has 'repo' scope for private repositories."
            )
            logger.info(f"Access check failed for {owner}/{repo}: not found for {credential.identity}")
            return AccessResult(accessible=False, reason=reason)

        except GitHubAuthenticationError:
            return AccessResult(accessible=False, reason=INVALID_CREDENTIAL_REASON)

        except GitHubAPIError as e:
            return AccessResult(accessible=False, reason=str(e))
