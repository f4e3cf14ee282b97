"""
GitHub issue creation for high severity incidents.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Sequence

from ..errors.exceptions import AccessError
from ..github import GitHubClient, GitHubAPIError
from ..repository.access import RepositoryAccessGuard
from .models import Incident, Severity

logger = logging.getLogger(__name__)

DEFAULT_LABELS = ["security-incident", "high-severity"]


@dataclass(frozen=True)
class IssueResult:
    """Outcome of creating one issue"""
    incident_type: str
    issue_number: int
    issue_url: str
    status: str  # "created" or "failed"
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.error is None:
            data.pop("error")
        return data


def render_issue_title(incident: Incident) -> str:
    return f"[{incident.severity.value.upper()}] {incident.incident_type}"


def _bullets(values: Sequence[str]) -> str:
    if not values:
        return "N/A"
    return "\n".join(f"- {value}" for value in values)


def render_issue_body(incident: Incident) -> str:
    """Markdown body for an incident issue."""
    return "\n".join([
        "## Security Incident Details",
        "",
        f"**Severity:** {incident.severity.value.upper()}",
        f"**Incident Type:** {incident.incident_type}",
        f"**Timestamp:** {incident.timestamp}",
        f"**Source File:** {incident.source_file}",
        "",
        "### Affected Systems",
        _bullets(incident.affected_systems),
        "",
        "### Description",
        incident.description,
        "",
        "### Stakeholders",
        _bullets(incident.stakeholders),
        "",
        "---",
        f"*This issue was automatically created from security incident report: {incident.source_file}*",
    ])


class IssueCreator:
    """
    Creates one GitHub issue per high severity incident.
    """

    def __init__(
        self,
        github_client: GitHubClient,
        access_guard: Optional[RepositoryAccessGuard] = None
    ):
        self.github = github_client
        self.access_guard = access_guard or RepositoryAccessGuard(github_client)

    async def create_issues(
        self,
        owner: str,
        repo: str,
        incidents: Sequence[Incident],
        labels: Optional[List[str]] = None
    ) -> List[IssueResult]:
        """
        Create issues for the high severity incidents.

        Incidents of other severities are ignored.

        Args:
            owner: Repository owner
            repo: Repository name
            incidents: Incidents from the caller
            labels: Issue labels (default: security-incident, high-severity)

        Returns:
            One IssueResult per high severity incident

        Raises:
            AccessError: The repository is not accessible
        """
        high = [incident for incident in incidents if incident.severity == Severity.HIGH]
        if not high:
            return []

        try:
            access = await self.access_guard.check_access(owner, repo)
        except GitHubAPIError as e:
            raise AccessError(f"Failed to check access to {owner}/{repo}: {e}") from e

        if not access.accessible:
            raise AccessError(
                access.reason or f"Cannot access repository {owner}/{repo}",
                reason=access.reason
            )

        labels = labels or DEFAULT_LABELS
        results = []

        for incident in high:
            try:
                issue = await self.github.create_issue(
                    owner,
                    repo,
                    render_issue_title(incident),
                    render_issue_body(incident),
                    labels
                )
            except GitHubAPIError as e:
                logger.error(f"Failed to create issue for {incident.incident_type} in {owner}/{repo}: {e}")
                results.append(IssueResult(
                    incident_type=incident.incident_type,
                    issue_number=0,
                    issue_url="",
                    status="failed",
                    error=str(e)
                ))
                continue

            logger.info(f"Created issue #{issue.number} in {owner}/{repo} for {incident.incident_type}")
            results.append(IssueResult(
                incident_type=incident.incident_type,
                issue_number=issue.number,
                issue_url=issue.html_url,
                status="created"
            ))

        return results
