"""
Integration tests for MCP tool endpoints.

Collectors are patched so tests do not need an embeddings backend or network.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from conftest import WIKI_HOST, json_transport
from evidence_agent.main import app
from evidence_agent.services.approval import ApprovalGate, ApprovalMode, deny_prompter
from evidence_agent.services.docs_collector import DocumentCollector
from evidence_agent.services.sql_collector import SqliteDataService
from evidence_agent.services.web_collector import NO_WEB_RESULTS, WebCollector


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_mcp_tools_lists_every_tool(client: TestClient) -> None:
    response = client.get("/mcp/tools")
    assert response.status_code == 200
    names = [t["name"] for t in response.json()["tools"]]
    assert names == ["search_documents", "list_containers", "read_relation", "web_search"]


def test_mcp_search_documents_returns_snippets(client: TestClient, docs_index) -> None:
    with patch("evidence_agent.mcp.server.get_document_collector", return_value=DocumentCollector(docs_index)):
        response = client.post("/mcp/tools/search_documents", json={"query": "paid leave days", "k": 1})
    assert response.status_code == 200
    snippets = response.json()["snippets"]
    assert len(snippets) == 1
    assert "paid leave" in snippets[0]


def test_mcp_search_documents_empty_query_returns_empty(client: TestClient) -> None:
    with patch("evidence_agent.mcp.server.get_document_collector") as get_collector:
        response = client.post("/mcp/tools/search_documents", json={"query": "   "})
    assert response.status_code == 200
    assert response.json() == {"snippets": []}
    get_collector.assert_not_called()


def test_mcp_list_containers(client: TestClient, sqlite_dir) -> None:
    (sqlite_dir / "broken.db").write_bytes(b"this is not a sqlite file at all, just bytes")
    with patch("evidence_agent.mcp.server._sql_service", return_value=SqliteDataService(sqlite_dir)):
        response = client.post("/mcp/tools/list_containers")
    assert response.status_code == 200
    containers = response.json()["containers"]
    assert [c["name"] for c in containers] == ["broken.db", "music.db", "sales.db"]
    assert "error" in containers[0]
    assert containers[1] == {"name": "music.db", "relations": ["albums", "artists"]}


def test_mcp_read_relation_caps_rows(client: TestClient, sqlite_dir) -> None:
    with patch("evidence_agent.mcp.server._sql_service", return_value=SqliteDataService(sqlite_dir)):
        response = client.post("/mcp/tools/read_relation", json={"container": "music.db", "relation": "artists"})
    assert response.status_code == 200
    assert len(response.json()["rows"]) == 10


def test_mcp_read_relation_reports_errors(client: TestClient, sqlite_dir) -> None:
    with patch("evidence_agent.mcp.server._sql_service", return_value=SqliteDataService(sqlite_dir)):
        response = client.post("/mcp/tools/read_relation", json={"container": "music.db", "relation": "nope"})
    assert response.status_code == 200
    data = response.json()
    assert data["rows"] == []
    assert "nope" in data["error"]


def test_mcp_web_search_auto_approved(client: TestClient) -> None:
    collector = WebCollector(
        ApprovalGate(mode=ApprovalMode.AUTO_APPROVE),
        transport=json_transport({WIKI_HOST: (200, {"extract": "Aerosmith is an American rock band."})}),
    )
    with patch("evidence_agent.mcp.server._web_collector", return_value=collector):
        response = client.post("/mcp/tools/web_search", json={"query": "Who is Aerosmith?"})
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["sources_used"] == ["Wikipedia"]
    assert data["keywords"] == ["Aerosmith"]


def test_mcp_web_search_without_approval(client: TestClient) -> None:
    collector = WebCollector(ApprovalGate(prompter=deny_prompter), transport=json_transport({}))
    with patch("evidence_agent.mcp.server._web_collector", return_value=collector):
        response = client.post("/mcp/tools/web_search", json={"query": "Who is Aerosmith?"})
    data = response.json()
    assert data["success"] is False
    assert data["data"] == NO_WEB_RESULTS


def test_mcp_web_search_empty_query(client: TestClient) -> None:
    response = client.post("/mcp/tools/web_search", json={"query": ""})
    assert response.status_code == 200
    assert response.json() == {"success": False, "data": "", "error": "query is required"}
