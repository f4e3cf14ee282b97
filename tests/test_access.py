import pytest

from conftest import FakeService
from vigil.github import GitHubAPIError, GitHubClient
from vigil.repository import RepositoryAccessGuard
from vigil.repository.access import INVALID_CREDENTIAL_REASON


@pytest.mark.asyncio
async def test_verify_credential_returns_identity(fake: FakeService, github: GitHubClient) -> None:
    fake.add_user("octocat")
    async with github:
        status = await RepositoryAccessGuard(github).verify_credential()
    assert status.valid is True
    assert status.identity == "octocat"


@pytest.mark.asyncio
async def test_verify_credential_rejected_token(fake: FakeService, github: GitHubClient) -> None:
    fake.reject_token()
    async with github:
        status = await RepositoryAccessGuard(github).verify_credential()
    assert status.valid is False
    assert status.identity is None


@pytest.mark.asyncio
async def test_verify_credential_propagates_other_failures(fake: FakeService, github: GitHubClient) -> None:
    fake.add("GET", "/user", {"message": "rate limited"}, status=403)
    async with github:
        with pytest.raises(GitHubAPIError):
            await RepositoryAccessGuard(github).verify_credential()


@pytest.mark.asyncio
async def test_accessible_repository(fake: FakeService, github: GitHubClient) -> None:
    fake.add_repository("acme", "widgets")
    async with github:
        result = await RepositoryAccessGuard(github).check_access("acme", "widgets")
    assert result.accessible is True
    assert result.reason is None


@pytest.mark.asyncio
async def test_not_found_reason_names_token_user(fake: FakeService, github: GitHubClient) -> None:
    fake.add_user("octocat")
    async with github:
        result = await RepositoryAccessGuard(github).check_access("acme", "secret")
    assert result.accessible is False
    assert "not found" in result.reason
    assert "octocat" in result.reason
    assert "acme/secret" in result.reason


@pytest.mark.asyncio
async def test_not_found_with_dead_token(fake: FakeService, github: GitHubClient) -> None:
    fake.reject_token()
    async with github:
        result = await RepositoryAccessGuard(github).check_access("acme", "secret")
    assert result.accessible is False
    assert result.reason == INVALID_CREDENTIAL_REASON


@pytest.mark.asyncio
async def test_other_failure_surfaces_raw_message(fake: FakeService, github: GitHubClient) -> None:
    fake.add("GET", "/repos/acme/widgets", {"message": "Forbidden"}, status=403)
    async with github:
        result = await RepositoryAccessGuard(github).check_access("acme", "widgets")
    assert result.accessible is False
    assert "403" in result.reason


@pytest.mark.asyncio
async def test_check_access_is_idempotent(fake: FakeService, github: GitHubClient) -> None:
    fake.add_user("octocat")
    async with github:
        guard = RepositoryAccessGuard(github)
        first = await guard.check_access("acme", "secret")
        second = await guard.check_access("acme", "secret")
    assert first == second
    # No caching: each check hits the API again
    assert fake.paths().count("/repos/acme/secret") == 2
