"""Schemas for the query and approval endpoints."""

from pydantic import BaseModel, Field

from evidence_agent.schemas.evidence import Route


class QueryRequest(BaseModel):
    """Request body for POST /query and POST /query/stream. Web approval is tracked per session_id."""

    question: str = Field(..., min_length=1, description="User question for the agent.")
    session_id: str = Field(..., min_length=1, description="Session ID; the web approval gate is kept on the server for this session.")


class QueryResponse(BaseModel):
    """Response for POST /query."""

    answer: str = Field(..., description="Final answer from the agent.")
    routes: list[Route] = Field(default_factory=list, description="Sources selected by the router (SQL, DOCS, WEB).")
    citations: list[str] = Field(default_factory=list, description="Provenance strings, e.g. sqlite:music.db, docs:local, Wikipedia.")
    evidence_count: int = Field(0, description="Number of evidence items passed to the answer step.")
    rejected_commands: list[str] = Field(
        default_factory=list,
        description="Outbound web commands skipped because the session has not approved web access.",
    )


class ApprovalStatus(BaseModel):
    """State of a session's approval gate."""

    session_id: str
    state: str = Field(..., description="locked, session_approved or auto_approve.")
