import base64

import pytest

from conftest import FakeService, dir_item, file_item
from vigil.errors import AuthError, FetchError
from vigil.github import GitHubClient
from vigil.repository import ContentFetcher

RAW = "https://raw.githubusercontent.com"


@pytest.mark.asyncio
async def test_raw_locator_reads_through_contents_api(fake: FakeService, github: GitHubClient) -> None:
    text = "---\ntitle: Breach\n---\nBody\n"
    fake.add_file("acme", "private", "reports/2024/breach.md", text)

    async with github:
        fetched = await ContentFetcher(github).fetch(f"{RAW}/acme/private/release/reports/2024/breach.md")
        direct = await github.get_content("acme", "private", "reports/2024/breach.md", ref="release")

    assert fetched == text
    assert fetched == base64.b64decode(direct["content"]).decode("utf-8")

    request = fake.requests[0]
    assert request.url.host == "api.github.com"
    assert request.url.params["ref"] == "release"
    assert request.headers["Authorization"] == "token test-token"


@pytest.mark.asyncio
async def test_raw_locator_is_percent_decoded(fake: FakeService, github: GitHubClient) -> None:
    fake.add_file("acme", "widgets", "docs/my report.md", "hello")

    async with github:
        fetched = await ContentFetcher(github).fetch(f"{RAW}/acme/widgets/main/docs/my%20report.md")

    assert fetched == "hello"


@pytest.mark.asyncio
async def test_short_raw_locator_fails_without_network(fake: FakeService, github: GitHubClient) -> None:
    async with github:
        with pytest.raises(FetchError, match="owner/repo/branch/path"):
            await ContentFetcher(github).fetch(f"{RAW}/acme/widgets")

    assert fake.requests == []


@pytest.mark.parametrize("locator", ["not a url", "ftp://example.com/a.md", "", "https:///a.md"])
@pytest.mark.asyncio
async def test_malformed_locator(fake: FakeService, github: GitHubClient, locator: str) -> None:
    async with github:
        with pytest.raises(FetchError):
            await ContentFetcher(github).fetch(locator)

    assert fake.requests == []


@pytest.mark.asyncio
async def test_missing_file_in_accessible_repository(fake: FakeService, github: GitHubClient) -> None:
    fake.add_repository("acme", "widgets")

    async with github:
        with pytest.raises(FetchError, match="file not found"):
            await ContentFetcher(github).fetch(f"{RAW}/acme/widgets/main/nope.md")


@pytest.mark.asyncio
async def test_missing_repository_reason_is_included(fake: FakeService, github: GitHubClient) -> None:
    fake.add_user("octocat")

    async with github:
        with pytest.raises(FetchError) as exc_info:
            await ContentFetcher(github).fetch(f"{RAW}/acme/secret/main/a.md")

    assert "octocat" in str(exc_info.value)


@pytest.mark.asyncio
async def test_directory_locator_is_rejected(fake: FakeService, github: GitHubClient) -> None:
    fake.add_directory("acme", "widgets", "docs", [file_item("docs/a.md"), dir_item("docs/sub")])

    async with github:
        with pytest.raises(FetchError, match="directory"):
            await ContentFetcher(github).fetch(f"{RAW}/acme/widgets/main/docs")


@pytest.mark.asyncio
async def test_unsupported_encoding_is_rejected(fake: FakeService, github: GitHubClient) -> None:
    item = file_item("big.json", "{}")
    item.update(encoding="none", content="")
    fake.add("GET", "/repos/acme/widgets/contents/big.json", item)

    async with github:
        with pytest.raises(FetchError, match="encoding"):
            await ContentFetcher(github).fetch(f"{RAW}/acme/widgets/main/big.json")


@pytest.mark.asyncio
async def test_other_hosts_use_plain_get(fake: FakeService, github: GitHubClient) -> None:
    fake.add("GET", "/exports/report.txt", host="files.example.com", text="plain report")

    async with github:
        fetcher = ContentFetcher(github, transport=fake.transport)
        fetched = await fetcher.fetch("https://files.example.com/exports/report.txt")

    assert fetched == "plain report"
    assert "Authorization" not in fake.requests[0].headers


@pytest.mark.asyncio
async def test_plain_get_failure_reports_status(fake: FakeService, github: GitHubClient) -> None:
    async with github:
        fetcher = ContentFetcher(github, transport=fake.transport)
        with pytest.raises(FetchError, match="404"):
            await fetcher.fetch("https://files.example.com/missing.txt")


def test_parse_raw_locator(github: GitHubClient) -> None:
    location = ContentFetcher(github).parse_raw_locator(f"{RAW}/acme/widgets/main/a/b/c.md")
    assert (location.owner, location.repo, location.branch, location.path) == ("acme", "widgets", "main", "a/b/c.md")


@pytest.mark.asyncio
async def test_plain_fetch_needs_no_github_client(fake: FakeService) -> None:
    fake.add("GET", "/exports/report.txt", host="files.example.com", text="plain report")

    fetcher = ContentFetcher(transport=fake.transport)

    assert fetcher.resolve("https://files.example.com/exports/report.txt") is None
    assert await fetcher.fetch("https://files.example.com/exports/report.txt") == "plain report"


@pytest.mark.asyncio
async def test_raw_locator_without_github_client_is_an_auth_error(fake: FakeService) -> None:
    fetcher = ContentFetcher(transport=fake.transport)

    with pytest.raises(AuthError):
        await fetcher.fetch(f"{RAW}/acme/widgets/main/a.md")

    assert fake.requests == []


def test_resolve_uses_configured_raw_host() -> None:
    fetcher = ContentFetcher(raw_host="raw.ghe.example.com")

    location = fetcher.resolve("https://raw.ghe.example.com/acme/widgets/main/a.md")
    assert location is not None
    assert location.path == "a.md"
    assert fetcher.resolve(f"{RAW}/acme/widgets/main/a.md") is None
