"""
GitHub API integration for Vigil.

Provides a narrow interface to the GitHub operations the repository tools need.
"""

from .client import (
    GitHubClient,
    GitHubConfig,
    IssueDetails,
    GitHubAPIError,
    GitHubNotFoundError,
    GitHubAuthenticationError
)

__all__ = [
    "GitHubClient",
    "GitHubConfig",
    "IssueDetails",
    "GitHubAPIError",
    "GitHubNotFoundError",
    "GitHubAuthenticationError"
]
