import base64
import os
from typing import Any, Dict, List, Optional, Tuple

# Retries must not sleep in tests; set before vigil decorates its client
os.environ.setdefault("RETRY_BASE_DELAY", "0")
os.environ.setdefault("MAX_RETRIES", "1")

import httpx
import pytest

from vigil.config import Settings
from vigil.github import GitHubClient, GitHubConfig

API_HOST = "api.github.com"


class FakeService:
    """Canned HTTP responses keyed by method, host and path. Unknown routes answer 404."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str, str], Any] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        body: Any = None,
        status: int = 200,
        host: str = API_HOST,
        text: Optional[str] = None,
    ) -> None:
        self.routes[(method, host, path)] = (status, body, text)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.host, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        status, body, text = route
        if callable(body):
            return body(request)
        if text is not None:
            return httpx.Response(status, text=text)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self, host: str = API_HOST) -> List[str]:
        return [request.url.path for request in self.requests if request.url.host == host]

    # GitHub helpers

    def add_user(self, login: str = "octocat") -> None:
        self.add("GET", "/user", {"login": login, "id": 1})

    def reject_token(self) -> None:
        self.add("GET", "/user", {"message": "Bad credentials"}, status=401)

    def add_repository(self, owner: str, repo: str, default_branch: str = "main") -> None:
        self.add(
            "GET",
            f"/repos/{owner}/{repo}",
            {"full_name": f"{owner}/{repo}", "default_branch": default_branch, "private": True},
        )

    def add_directory(self, owner: str, repo: str, path: str, items: List[Dict[str, Any]]) -> None:
        self.add("GET", f"/repos/{owner}/{repo}/contents/{path}", items)

    def add_file(self, owner: str, repo: str, path: str, text: str) -> None:
        self.add(
            "GET",
            f"/repos/{owner}/{repo}/contents/{path}",
            file_item(path, text),
        )

    def add_tree(self, owner: str, repo: str, branch: str, items: List[Dict[str, Any]], truncated: bool = False) -> None:
        self.add("GET", f"/repos/{owner}/{repo}/git/ref/heads/{branch}", {"object": {"sha": "commit-sha"}})
        self.add(
            "GET",
            f"/repos/{owner}/{repo}/git/trees/commit-sha",
            {"sha": "commit-sha", "tree": items, "truncated": truncated},
        )


def file_item(path: str, text: str = "") -> Dict[str, Any]:
    """Contents API item for a file, with base64 content."""
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return {
        "type": "file",
        "path": path,
        "name": path.rsplit("/", 1)[-1],
        "sha": f"sha-{path}",
        "size": len(text),
        "encoding": "base64",
        "content": encoded,
    }


def dir_item(path: str) -> Dict[str, Any]:
    return {"type": "dir", "path": path, "name": path.rsplit("/", 1)[-1], "sha": f"sha-{path}", "size": 0}


def incident(severity: str = "high", incident_type: str = "Data Breach", **overrides: Any) -> Dict[str, Any]:
    data = {
        "severity": severity,
        "incident_type": incident_type,
        "affected_systems": ["api-gateway"],
        "timestamp": "2024-03-01T10:00:00Z",
        "description": "Unauthorized access to customer records",
        "stakeholders": ["security-team"],
        "source_file": "reports/incident.md",
    }
    data.update(overrides)
    return data


@pytest.fixture
def fake() -> FakeService:
    return FakeService()


@pytest.fixture
def github(fake: FakeService) -> GitHubClient:
    """Unconnected client; open it with ``async with`` in the test."""
    return GitHubClient(GitHubConfig(token="test-token"), transport=fake.transport)


@pytest.fixture
def settings() -> Settings:
    return Settings(github_token="test-token", resend_api_key="re_test", resend_from_email="alerts@example.com")
