"""
API handlers: build the session's pipeline, run it, map results/errors to HTTP.

Responsibility: Bridge HTTP types and the agent. Exception-to-HTTP mapping lives
here so the agent and services stay free of FastAPI types.
"""

import logging

from fastapi import HTTPException

from evidence_agent.agent.graph import build_pipeline, run_agent
from evidence_agent.core.errors import InvalidRequestError, ServiceUnavailableError
from evidence_agent.core.session_store import get_gate
from evidence_agent.schemas.query import QueryRequest, QueryResponse

logger = logging.getLogger(__name__)


def handle_query(body: QueryRequest) -> QueryResponse:
    """
    Run one question with the session's approval gate. 400 on invalid input,
    503 when the model backend is not configured, 500 on any other failure.
    Rejected web commands are those of this run only.
    """
    try:
        gate = get_gate(body.session_id)
        result = run_agent(body.question, build_pipeline(gate=gate))
    except ServiceUnavailableError as e:
        raise HTTPException(status_code=503, detail=e.message) from e
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.exception("Agent failed")
        raise HTTPException(status_code=500, detail=str(e)) from e
    rejected = result["rejected_commands"]
    if rejected:
        logger.info("[api:handle_query] session_id=%s rejected_commands=%d", body.session_id[:16], len(rejected))
    return QueryResponse(
        answer=result["answer"],
        routes=result["routes"],
        citations=result["citations"],
        evidence_count=result["evidence_count"],
        rejected_commands=rejected,
    )
