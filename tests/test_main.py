import pytest
from fastapi.testclient import TestClient

from conftest import FakeService
from vigil.config import Settings
from vigil.main import app, get_tool_context
from vigil.tools import ToolContext


@pytest.fixture
def client(settings: Settings, fake: FakeService):
    app.dependency_overrides[get_tool_context] = lambda: ToolContext(settings=settings, transport=fake.transport)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "vigil", "tools": 5}


def test_root_lists_tools(client: TestClient) -> None:
    body = client.get("/").json()
    assert body["name"] == "Vigil"
    assert "scan_repository" in body["tools"]


def test_list_tools(client: TestClient) -> None:
    tools = client.get("/tools").json()["tools"]
    by_name = {tool["name"]: tool for tool in tools}
    assert set(by_name) == {
        "scan_repository",
        "parse_document",
        "extract_incident_data",
        "send_notification",
        "create_github_issues",
    }
    assert by_name["parse_document"]["category"] == "document"
    assert by_name["scan_repository"]["input_schema"]["required"] == ["repository"]


def test_unknown_tool_is_404(client: TestClient) -> None:
    response = client.post("/tools/delete_everything", json={})
    assert response.status_code == 404
    assert "Unknown tool" in response.json()["detail"]


def test_invalid_input_is_400(client: TestClient, fake: FakeService) -> None:
    response = client.post("/tools/scan_repository", json={"repository": "not-a-repo"})
    assert response.status_code == 400
    assert "owner/repo" in response.json()["detail"]
    assert fake.requests == []


def test_non_object_body_is_400(client: TestClient) -> None:
    assert client.post("/tools/extract_incident_data", json=["a"]).status_code == 400
    assert client.post(
        "/tools/extract_incident_data",
        content="{oops",
        headers={"Content-Type": "application/json"},
    ).status_code == 400


def test_tool_call(client: TestClient) -> None:
    response = client.post(
        "/tools/extract_incident_data",
        json={"parsed_content": {"title": "Breach"}, "source_file": "a.json"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["is_error"] is False
    assert body["content"]["formatted_content"] == {"source_file": "a.json", "title": "Breach"}


def test_tool_failure_is_reported_in_body(client: TestClient, fake: FakeService) -> None:
    fake.reject_token()
    response = client.post("/tools/scan_repository", json={"repository": "acme/widgets"})
    assert response.status_code == 200
    body = response.json()
    assert body["is_error"] is True
    assert "[authentication]" in body["content"]
