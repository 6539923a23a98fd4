"""
API route aggregator: register endpoints and delegate to handlers and services.
"""

import json
import logging

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from evidence_agent.agent.graph import build_pipeline, run_agent_stream
from evidence_agent.api.handlers import handle_query
from evidence_agent.core.config import SQLITE_DIR
from evidence_agent.core.session_store import get_gate, reset_gate
from evidence_agent.schemas.query import ApprovalStatus, QueryRequest, QueryResponse
from evidence_agent.services.docs_collector import get_document_collector
from evidence_agent.services.sql_collector import SqliteDataService

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Evidence agent running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


@router.get("/sources", tags=["system"], summary="List structured-data containers and indexed documents")
def get_sources() -> dict:
    """Return SQLite container names and document names in the semantic index."""
    try:
        containers = SqliteDataService(SQLITE_DIR).list_containers()
    except OSError as e:
        logger.warning("Failed to list containers: %s", e)
        containers = []
    return {"containers": containers, "documents": get_document_collector().sources()}


# --- Query (HTTP) ---

@router.post(
    "/query",
    response_model=QueryResponse,
    tags=["query"],
    summary="Ask the evidence agent (sync)",
    description="Route the question, collect SQL/DOCS/WEB evidence and return a cited answer. 400 on invalid input, 503 if no model is configured, 500 on agent failure.",
)
def post_query(body: QueryRequest) -> QueryResponse:
    logger.info("[api:post_query] IN  question=%r session_id=%s", body.question, body.session_id)
    response = handle_query(body)
    logger.info("[api:post_query] OUT routes=%s citations=%s answer_len=%d", response.routes, response.citations, len(response.answer))
    return response


def _sse_generator(question: str, session_id: str):
    """Yield Server-Sent Events for one agent run."""
    pipeline = build_pipeline(gate=get_gate(session_id))
    for evt in run_agent_stream(question, pipeline):
        yield f"event: {evt['event']}\ndata: {json.dumps({'data': evt.get('data')})}\n\n"


@router.post(
    "/query/stream",
    tags=["query"],
    summary="Ask the evidence agent (SSE stream)",
    description="Stream pipeline progress via Server-Sent Events. Events: routes, evidence, answer, error.",
)
def post_query_stream(body: QueryRequest) -> StreamingResponse:
    logger.info("[api:post_query_stream] IN  question=%r session_id=%s", body.question, body.session_id)
    return StreamingResponse(
        _sse_generator(body.question, body.session_id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


# --- Web approval ---

@router.get("/sessions/{session_id}/approval", response_model=ApprovalStatus, tags=["approval"])
def get_approval(session_id: str) -> ApprovalStatus:
    return ApprovalStatus(session_id=session_id, state=get_gate(session_id).state)


@router.post(
    "/sessions/{session_id}/approval",
    response_model=ApprovalStatus,
    tags=["approval"],
    summary="Approve outbound web commands for this session",
)
def approve_session(session_id: str) -> ApprovalStatus:
    gate = get_gate(session_id)
    gate.approve_session()
    return ApprovalStatus(session_id=session_id, state=gate.state)


@router.delete(
    "/sessions/{session_id}/approval",
    response_model=ApprovalStatus,
    tags=["approval"],
    summary="Reset web approval so the next command needs consent again",
)
def reset_approval(session_id: str) -> ApprovalStatus:
    gate = reset_gate(session_id)
    return ApprovalStatus(session_id=session_id, state=gate.state)
