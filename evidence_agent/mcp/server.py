"""
Minimal MCP-style tool server: exposes each evidence source as a standardized
tool so external agents can call document search, structured-data reads and
web search directly.
"""

import logging
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from evidence_agent.core.config import DOCS_TOP_K, SQL_ROW_LIMIT, SQLITE_DIR, WEB_AUTO_APPROVE
from evidence_agent.services.approval import ApprovalGate, ApprovalMode, deny_prompter
from evidence_agent.services.docs_collector import get_document_collector
from evidence_agent.services.sql_collector import SqliteDataService
from evidence_agent.services.web_collector import WebCollector

logger = logging.getLogger(__name__)

# MCP tool schema for discovery / documentation
tools = [
    {
        "name": "search_documents",
        "description": "Search internal documents using semantic retrieval",
        "input_schema": {"query": "string", "k": "integer (optional, default 3)"},
    },
    {
        "name": "list_containers",
        "description": "List structured-data containers (SQLite files) and their tables",
        "input_schema": {},
    },
    {
        "name": "read_relation",
        "description": f"Read up to {SQL_ROW_LIMIT} rows from one table of a container",
        "input_schema": {"container": "string", "relation": "string"},
    },
    {
        "name": "web_search",
        "description": "Search the web providers; runs only when web access is auto-approved",
        "input_schema": {"query": "string"},
    },
]

mcp_router = APIRouter(tags=["mcp"])


def _sql_service() -> SqliteDataService:
    return SqliteDataService(SQLITE_DIR)


def _web_collector() -> WebCollector:
    mode = ApprovalMode.AUTO_APPROVE if WEB_AUTO_APPROVE else ApprovalMode.INTERACTIVE
    return WebCollector(ApprovalGate(mode=mode, prompter=deny_prompter))


@mcp_router.get("/tools", summary="MCP tool discovery")
def mcp_tools() -> dict[str, list[dict[str, Any]]]:
    return {"tools": tools}


class SearchDocumentsRequest(BaseModel):
    """Request body for MCP tool search_documents."""
    query: str = ""
    k: int = DOCS_TOP_K


@mcp_router.post("/tools/search_documents", summary="MCP tool: search_documents")
def mcp_search_documents(body: SearchDocumentsRequest) -> dict[str, list[str]]:
    logger.info("MCP tool called: search_documents")
    query = (body.query or "").strip()
    if not query:
        return {"snippets": []}
    return {"snippets": get_document_collector().search(query, max(1, body.k))}


@mcp_router.post("/tools/list_containers", summary="MCP tool: list_containers")
def mcp_list_containers() -> dict[str, Any]:
    """List containers and, per container, its tables (or the error that prevented listing them)."""
    logger.info("MCP tool called: list_containers")
    service = _sql_service()
    containers = []
    for name in service.list_containers():
        try:
            containers.append({"name": name, "relations": service.list_relations(name)})
        except Exception as e:
            logger.warning("list_containers: %s unreadable: %s", name, e)
            containers.append({"name": name, "relations": [], "error": str(e)})
    return {"containers": containers}


class ReadRelationRequest(BaseModel):
    """Request body for MCP tool read_relation."""
    container: str
    relation: str


@mcp_router.post("/tools/read_relation", summary="MCP tool: read_relation")
def mcp_read_relation(body: ReadRelationRequest) -> dict[str, Any]:
    logger.info("MCP tool called: read_relation")
    try:
        rows = _sql_service().read_rows(body.container, body.relation, SQL_ROW_LIMIT)
    except Exception as e:
        logger.warning("read_relation failed: %s", e)
        return {"rows": [], "error": str(e)}
    return {"rows": rows[:SQL_ROW_LIMIT]}


class WebSearchRequest(BaseModel):
    """Request body for MCP tool web_search."""
    query: str = ""


@mcp_router.post("/tools/web_search", summary="MCP tool: web_search")
def mcp_web_search(body: WebSearchRequest) -> dict[str, Any]:
    logger.info("MCP tool called: web_search")
    query = (body.query or "").strip()
    if not query:
        return {"success": False, "data": "", "error": "query is required"}
    return asdict(_web_collector().run_report(query))
