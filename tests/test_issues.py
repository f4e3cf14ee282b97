import json

import pytest

from conftest import FakeService, incident
from vigil.errors import AccessError
from vigil.github import GitHubClient
from vigil.incidents import DEFAULT_LABELS, Incident, IssueCreator, render_issue_body, render_issue_title


def created_issue(number: int = 12) -> dict:
    return {
        "number": number,
        "url": f"https://api.github.com/repos/acme/widgets/issues/{number}",
        "html_url": f"https://github.com/acme/widgets/issues/{number}",
    }


def test_title_and_body() -> None:
    parsed = Incident.from_dict(incident(stakeholders=[]))
    assert render_issue_title(parsed) == "[HIGH] Data Breach"

    body = render_issue_body(parsed)
    assert "**Severity:** HIGH" in body
    assert "- api-gateway" in body
    assert "### Stakeholders\nN/A" in body
    assert body.endswith("reports/incident.md*")


@pytest.mark.asyncio
async def test_only_high_incidents_become_issues(fake: FakeService, github: GitHubClient) -> None:
    fake.add_repository("acme", "widgets")
    fake.add("POST", "/repos/acme/widgets/issues", created_issue(), status=201)
    incidents = [
        Incident.from_dict(incident("high")),
        Incident.from_dict(incident("critical", "Ransomware")),
        Incident.from_dict(incident("low", "Typo")),
    ]

    async with github:
        results = await IssueCreator(github).create_issues("acme", "widgets", incidents)

    assert len(results) == 1
    assert results[0].status == "created"
    assert results[0].issue_number == 12
    assert results[0].to_dict() == {
        "incident_type": "Data Breach",
        "issue_number": 12,
        "issue_url": "https://github.com/acme/widgets/issues/12",
        "status": "created",
    }

    posts = [request for request in fake.requests if request.method == "POST"]
    assert len(posts) == 1
    payload = json.loads(posts[0].content)
    assert payload["title"] == "[HIGH] Data Breach"
    assert payload["labels"] == DEFAULT_LABELS


@pytest.mark.asyncio
async def test_no_high_incidents_makes_no_requests(fake: FakeService, github: GitHubClient) -> None:
    async with github:
        results = await IssueCreator(github).create_issues(
            "acme", "widgets", [Incident.from_dict(incident("medium"))]
        )

    assert results == []
    assert fake.requests == []


@pytest.mark.asyncio
async def test_inaccessible_repository_raises(fake: FakeService, github: GitHubClient) -> None:
    fake.add_user("octocat")

    async with github:
        with pytest.raises(AccessError, match="octocat"):
            await IssueCreator(github).create_issues("acme", "secret", [Incident.from_dict(incident())])


@pytest.mark.asyncio
async def test_failed_creation_is_recorded(fake: FakeService, github: GitHubClient) -> None:
    fake.add_repository("acme", "widgets")
    fake.add("POST", "/repos/acme/widgets/issues", {"message": "Validation Failed"}, status=422)

    async with github:
        results = await IssueCreator(github).create_issues(
            "acme", "widgets", [Incident.from_dict(incident())], labels=["custom"]
        )

    assert results[0].status == "failed"
    assert results[0].issue_number == 0
    assert "422" in results[0].to_dict()["error"]
    assert json.loads(fake.requests[-1].content)["labels"] == ["custom"]


@pytest.mark.asyncio
async def test_failed_credential_check_raises_access_error(fake: FakeService, github: GitHubClient) -> None:
    fake.add("GET", "/user", {"message": "Forbidden"}, status=403)

    async with github:
        with pytest.raises(AccessError, match="acme/secret"):
            await IssueCreator(github).create_issues("acme", "secret", [Incident.from_dict(incident())])

    assert all(request.method == "GET" for request in fake.requests)


@pytest.mark.asyncio
async def test_issue_creation_is_attempted_once_on_server_error(fake: FakeService, github: GitHubClient) -> None:
    fake.add_repository("acme", "widgets")
    fake.add("POST", "/repos/acme/widgets/issues", {"message": "Bad Gateway"}, status=502)

    async with github:
        results = await IssueCreator(github).create_issues("acme", "widgets", [Incident.from_dict(incident())])

    assert results[0].status == "failed"
    assert [request.method for request in fake.requests].count("POST") == 1
