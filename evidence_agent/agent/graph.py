"""
LangGraph agent: route → collect evidence → answer.

Strictly sequential per question. Each node returns only what it adds to the
state; LangGraph produces the next snapshot. Router and answer model failures
are not caught here and reach the caller unchanged.
"""

import logging
from typing import TypedDict

from langgraph.graph import END, StateGraph

from evidence_agent.agent.llm import ChatModel, chat
from evidence_agent.agent.router import route_question
from evidence_agent.agent.synthesizer import synthesize_answer
from evidence_agent.core.config import SQLITE_DIR, WEB_AUTO_APPROVE
from evidence_agent.core.errors import InvalidRequestError
from evidence_agent.schemas.evidence import Evidence, Route
from evidence_agent.services.approval import ApprovalGate, ApprovalMode, Prompter
from evidence_agent.services.docs_collector import DocumentCollector, get_document_collector
from evidence_agent.services.evidence_collector import EvidenceCollector
from evidence_agent.services.sql_collector import DataService, SqliteDataService
from evidence_agent.services.web_collector import WebCollector

logger = logging.getLogger(__name__)


class AgentState(TypedDict, total=False):
    question: str
    routes: list[Route]
    evidences: list[Evidence]
    citations: list[str]
    rejected_commands: list[str]
    final_answer: str


def build_graph(model: ChatModel, collector: EvidenceCollector):
    """
    Build and compile the agent graph.
    router → tools → answer → END.
    """

    def _route_node(state: AgentState) -> dict:
        """Node 1: classify the question into source routes."""
        routes = route_question(state["question"], model)
        logger.info("[graph:router] OUT routes=%s", [r.value for r in routes])
        return {"routes": routes}

    def _tools_node(state: AgentState) -> dict:
        """Node 2: collect evidence from the routed sources (with enrichment)."""
        collected = collector.collect(state["question"], state.get("routes") or [])
        logger.info(
            "[graph:tools] OUT evidences=%d citations=%s", len(collected.evidences), collected.citations
        )
        return {
            "evidences": list(state.get("evidences") or []) + collected.evidences,
            "citations": list(state.get("citations") or []) + collected.citations,
            "rejected_commands": list(state.get("rejected_commands") or []) + collected.rejected_commands,
        }

    def _answer_node(state: AgentState) -> dict:
        """Node 3: synthesize the cited final answer."""
        answer = synthesize_answer(
            state["question"],
            state.get("evidences") or [],
            state.get("citations") or [],
            model,
        )
        logger.info("[graph:answer] OUT answer_len=%d", len(answer))
        return {"final_answer": answer}

    graph = StateGraph(AgentState)

    graph.add_node("router", _route_node)
    graph.add_node("tools", _tools_node)
    graph.add_node("answer", _answer_node)

    graph.set_entry_point("router")
    graph.add_edge("router", "tools")
    graph.add_edge("tools", "answer")
    graph.add_edge("answer", END)

    return graph.compile()


class EvidencePipeline:
    """One compiled graph plus its collaborators. Safe to reuse across questions of one session."""

    def __init__(self, model: ChatModel, collector: EvidenceCollector) -> None:
        self.model = model
        self.collector = collector
        self.graph = build_graph(model, collector)

    @property
    def gate(self) -> ApprovalGate:
        return self.collector.web_collector.gate

    def ask(self, question: str) -> AgentState:
        """Run one question through the graph. Blank questions raise InvalidRequestError."""
        if not question or not str(question).strip():
            raise InvalidRequestError("question is required")
        q = str(question).strip()
        logger.info("[pipeline:ask] START question=%r", q)
        final: AgentState = self.graph.invoke({"question": q})
        logger.info(
            "[pipeline:ask] END routes=%s evidences=%d citations=%s",
            [r.value for r in final.get("routes") or []],
            len(final.get("evidences") or []),
            final.get("citations") or [],
        )
        return final

    def stream(self, question: str):
        """Yield (node name, state update) pairs as the graph runs."""
        if not question or not str(question).strip():
            raise InvalidRequestError("question is required")
        for event in self.graph.stream({"question": str(question).strip()}):
            for node_name, update in event.items():
                yield node_name, update


def build_pipeline(
    gate: ApprovalGate | None = None,
    model: ChatModel | None = None,
    sql_service: DataService | None = None,
    doc_collector: DocumentCollector | None = None,
    web_collector: WebCollector | None = None,
    prompter: Prompter | None = None,
    concurrent: bool | None = None,
) -> EvidencePipeline:
    """
    Wire a pipeline from config defaults. The gate defaults to auto-approve
    when WEB_AUTO_APPROVE is set, else an interactive gate using prompter.
    """
    if gate is None:
        mode = ApprovalMode.AUTO_APPROVE if WEB_AUTO_APPROVE else ApprovalMode.INTERACTIVE
        gate = ApprovalGate(mode=mode, prompter=prompter)
    collector_kwargs = {} if concurrent is None else {"concurrent": concurrent}
    collector = EvidenceCollector(
        sql_service=sql_service or SqliteDataService(SQLITE_DIR),
        doc_collector=doc_collector or get_document_collector(),
        web_collector=web_collector or WebCollector(gate),
        **collector_kwargs,
    )
    return EvidencePipeline(model or chat, collector)


def run_agent(question: str, pipeline: EvidencePipeline | None = None) -> dict:
    """
    Run the agent synchronously. Returns answer, routes, citations, evidence_count and the
    web commands the gate rejected during this run.
    Fatal errors (model failures) propagate.
    """
    pipeline = pipeline or build_pipeline()
    final = pipeline.ask(question)
    return {
        "answer": (final.get("final_answer") or "").strip(),
        "routes": list(final.get("routes") or []),
        "citations": list(final.get("citations") or []),
        "evidence_count": len(final.get("evidences") or []),
        "rejected_commands": list(final.get("rejected_commands") or []),
    }


def run_agent_stream(question: str, pipeline: EvidencePipeline | None = None):
    """
    Run the agent and yield streaming events: routes → evidence → answer.
    Each yield is {"event": str, "data": ...}; a failure yields one "error" event.
    """
    pipeline = pipeline or build_pipeline()
    logger.info("[run_agent_stream] START question=%r", question)
    try:
        for node_name, update in pipeline.stream(question):
            if node_name == "router":
                yield {"event": "routes", "data": [r.value for r in update.get("routes") or []]}
            elif node_name == "tools":
                yield {
                    "event": "evidence",
                    "data": {
                        "count": len(update.get("evidences") or []),
                        "citations": update.get("citations") or [],
                        "rejected_commands": update.get("rejected_commands") or [],
                    },
                }
            elif node_name == "answer":
                yield {"event": "answer", "data": update.get("final_answer", "")}
    except Exception as e:
        logger.exception("[run_agent_stream] Agent stream failed")
        yield {"event": "error", "data": str(e)}
    logger.info("[run_agent_stream] END")
