import json

import httpx
import pytest

from conftest import FakeService
from vigil.errors import AuthError
from vigil.github import (
    GitHubAPIError,
    GitHubAuthenticationError,
    GitHubClient,
    GitHubConfig,
    GitHubNotFoundError,
)


def test_empty_token_is_rejected() -> None:
    with pytest.raises(AuthError):
        GitHubClient(GitHubConfig(token="  "))


@pytest.mark.asyncio
async def test_requests_require_connection(github: GitHubClient) -> None:
    with pytest.raises(RuntimeError):
        await github.get_authenticated_user()


@pytest.mark.asyncio
async def test_status_codes_map_to_errors(fake: FakeService, github: GitHubClient) -> None:
    fake.reject_token()
    fake.add("GET", "/repos/acme/widgets", {"message": "Validation Failed"}, status=422)

    async with github:
        with pytest.raises(GitHubAuthenticationError):
            await github.get_authenticated_user()
        with pytest.raises(GitHubNotFoundError) as not_found:
            await github.get_repository("acme", "missing")
        with pytest.raises(GitHubAPIError) as invalid:
            await github.get_repository("acme", "widgets")

    assert not_found.value.status_code == 404
    assert invalid.value.status_code == 422


@pytest.mark.asyncio
async def test_server_errors_are_retried(fake: FakeService, github: GitHubClient) -> None:
    calls = []

    def flaky(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(502, text="bad gateway")
        return httpx.Response(200, json={"login": "octocat"})

    fake.add("GET", "/user", flaky)

    async with github:
        user = await github.get_authenticated_user()

    assert user["login"] == "octocat"
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_client_errors_are_not_retried(fake: FakeService, github: GitHubClient) -> None:
    fake.add("GET", "/user", {"message": "Forbidden"}, status=403)

    async with github:
        with pytest.raises(GitHubAPIError):
            await github.get_authenticated_user()

    assert fake.paths() == ["/user"]


@pytest.mark.asyncio
async def test_transport_failure_becomes_api_error() -> None:
    def broken(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = GitHubClient(GitHubConfig(token="t"), transport=httpx.MockTransport(broken))
    async with client:
        with pytest.raises(GitHubAPIError, match="Request failed"):
            await client.get_authenticated_user()


@pytest.mark.asyncio
async def test_owner_and_repo_are_quoted(fake: FakeService, github: GitHubClient) -> None:
    async with github:
        with pytest.raises(GitHubNotFoundError):
            await github.get_repository("acme", "a/b")

    assert fake.requests[0].url.raw_path == b"/repos/acme/a%2Fb"


@pytest.mark.asyncio
async def test_branch_sha_and_recursive_tree(fake: FakeService, github: GitHubClient) -> None:
    fake.add_tree("acme", "widgets", "main", [])

    async with github:
        sha = await github.get_branch_sha("acme", "widgets", "main")
        tree = await github.get_git_tree("acme", "widgets", sha, recursive=True)

    assert sha == "commit-sha"
    assert tree["tree"] == []
    assert fake.requests[1].url.params["recursive"] == "1"


@pytest.mark.asyncio
async def test_create_issue_posts_title_body_and_labels(fake: FakeService, github: GitHubClient) -> None:
    fake.add(
        "POST",
        "/repos/acme/widgets/issues",
        {"number": 7, "url": "https://api.github.com/repos/acme/widgets/issues/7",
         "html_url": "https://github.com/acme/widgets/issues/7"},
        status=201,
    )

    async with github:
        issue = await github.create_issue("acme", "widgets", "[HIGH] Breach", "body", ["security-incident"])

    assert issue.number == 7
    assert issue.html_url == "https://github.com/acme/widgets/issues/7"
    payload = json.loads(fake.requests[0].content)
    assert payload == {"title": "[HIGH] Breach", "body": "body", "labels": ["security-incident"]}


@pytest.mark.asyncio
async def test_create_issue_is_not_retried(fake: FakeService, github: GitHubClient) -> None:
    fake.add("POST", "/repos/acme/widgets/issues", {"message": "Bad Gateway"}, status=502)

    async with github:
        with pytest.raises(GitHubAPIError) as exc_info:
            await github.create_issue("acme", "widgets", "[HIGH] Breach", "body", ["security-incident"])

    assert exc_info.value.status_code == 502
    assert [request.method for request in fake.requests] == ["POST"]


@pytest.mark.asyncio
async def test_custom_api_url(fake: FakeService) -> None:
    fake.add("GET", "/api/v3/user", {"login": "enterprise"}, host="ghe.example.com")
    config = GitHubConfig(token="t", api_url="https://ghe.example.com/api/v3/")

    async with GitHubClient(config, transport=fake.transport) as client:
        user = await client.get_authenticated_user()

    assert user["login"] == "enterprise"
