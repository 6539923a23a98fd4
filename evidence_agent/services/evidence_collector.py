"""
Evidence collection across the three sources.

Enrichment rule: WEB never runs alone. Whenever web evidence is used it is
corroborated by internal sources, so a WEB route also turns on SQL and DOCS.
Output order is always SQL, DOCS, WEB (evidence and citations alike).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Sequence

from evidence_agent.core.config import COLLECT_CONCURRENTLY, DOCS_TOP_K
from evidence_agent.schemas.evidence import (
    DOCS_CITATION,
    WEB_FALLBACK_CITATION,
    DocsEvidence,
    Evidence,
    Route,
    SqlEvidence,
    WebEvidence,
)
from evidence_agent.services.docs_collector import DocumentCollector
from evidence_agent.services.sql_collector import DataService, collect_sql
from evidence_agent.services.web_collector import WebCollector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectedEvidence:
    """Outcome of one collect() call, including the outbound commands the gate refused during it."""

    evidences: list[Evidence]
    citations: list[str]
    rejected_commands: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SourcePlan:
    use_sql: bool
    use_docs: bool
    use_web: bool


def plan_sources(routes: Sequence[Route]) -> SourcePlan:
    web = Route.WEB in routes
    return SourcePlan(
        use_sql=Route.SQL in routes or web,
        use_docs=Route.DOCS in routes or web,
        use_web=web,
    )


class EvidenceCollector:
    """
    Runs the collectors selected by plan_sources(). With concurrent=True the
    SQL and DOCS collectors run on two worker threads (they touch disjoint
    services); WEB always starts after both have finished.
    """

    def __init__(
        self,
        sql_service: DataService,
        doc_collector: DocumentCollector,
        web_collector: WebCollector,
        concurrent: bool = COLLECT_CONCURRENTLY,
        docs_top_k: int = DOCS_TOP_K,
    ) -> None:
        self.sql_service = sql_service
        self.doc_collector = doc_collector
        self.web_collector = web_collector
        self.concurrent = concurrent
        self.docs_top_k = docs_top_k

    def _sql(self) -> tuple[list[SqlEvidence], list[str]]:
        return collect_sql(self.sql_service)

    def _docs(self, question: str) -> list[str]:
        return self.doc_collector.search(question, self.docs_top_k)

    def collect(self, question: str, routes: Sequence[Route]) -> CollectedEvidence:
        plan = plan_sources(routes)
        logger.info("[collector] IN  routes=%s plan=%s concurrent=%s", [r.value for r in routes], plan, self.concurrent)
        evidences: list[Evidence] = []
        citations: list[str] = []
        rejected: list[str] = []

        sql_out: tuple[list[SqlEvidence], list[str]] | None = None
        snippets: list[str] | None = None
        if self.concurrent and plan.use_sql and plan.use_docs:
            with ThreadPoolExecutor(max_workers=2) as pool:
                sql_future = pool.submit(self._sql)
                docs_future = pool.submit(self._docs, question)
                sql_out, snippets = sql_future.result(), docs_future.result()
        else:
            if plan.use_sql:
                sql_out = self._sql()
            if plan.use_docs:
                snippets = self._docs(question)

        if sql_out is not None:
            evidences.extend(sql_out[0])
            citations.extend(sql_out[1])
        if snippets is not None:
            evidences.append(DocsEvidence(snippets=snippets))
            citations.append(DOCS_CITATION)
        if plan.use_web:
            web = self.web_collector.search(question)
            evidences.append(WebEvidence(text=web.text, provider_names=list(web.sources)))
            citations.extend(web.sources or [WEB_FALLBACK_CITATION])
            rejected.extend(web.rejected_commands)

        logger.info("[collector] OUT evidences=%d citations=%s rejected=%d", len(evidences), citations, len(rejected))
        return CollectedEvidence(evidences=evidences, citations=citations, rejected_commands=rejected)
