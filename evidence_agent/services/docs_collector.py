"""
Document collection: top-k snippets from the internal document index.

The index is built once per process from the documents folder. Searching an
unbuilt or empty index, or any failure while querying it, yields [].
"""

import logging
from functools import lru_cache
from pathlib import Path

from evidence_agent.core.config import DOCS_DIR, DOCS_TOP_K
from evidence_agent.ingest.loader import load_corpus
from evidence_agent.services.vector_store import Embedder, InMemoryVectorIndex, embed_texts

logger = logging.getLogger(__name__)


class DocumentCollector:
    def __init__(self, index: InMemoryVectorIndex | None = None) -> None:
        self.index = index

    @property
    def is_ready(self) -> bool:
        return self.index is not None and not self.index.is_empty

    def search(self, query: str, k: int = DOCS_TOP_K) -> list[str]:
        """Return up to k snippet texts for the query; never raises."""
        logger.info("[docs:search] IN  query=%r k=%d", query, k)
        if not self.is_ready:
            logger.warning("[docs:search] no document index loaded; returning []")
            return []
        try:
            hits = self.index.query(query, k)
            snippets = [str(h["snippet"]) for h in hits[:k]]
        except Exception as e:
            logger.warning("[docs:search] query failed: %s", e)
            return []
        logger.info("[docs:search] OUT snippets=%d", len(snippets))
        return snippets

    def sources(self) -> list[str]:
        return self.index.sources() if self.index is not None else []


def build_document_collector(docs_dir: str | Path = DOCS_DIR, embedder: Embedder = embed_texts) -> DocumentCollector:
    """
    Load the corpus and build the index. Missing folder, empty corpus or a
    failing embeddings backend are logged and leave the collector unbuilt.
    """
    documents = load_corpus(docs_dir)
    if not documents:
        logger.warning("[docs:build] no documents found in %s; document search disabled", docs_dir)
        return DocumentCollector()
    index = InMemoryVectorIndex(embedder)
    try:
        index.build(documents)
    except Exception as e:
        logger.error("[docs:build] index build failed: %s", e)
        return DocumentCollector()
    logger.info("[docs:build] document index ready documents=%d", len(documents))
    return DocumentCollector(index)


@lru_cache(maxsize=1)
def get_document_collector() -> DocumentCollector:
    """Process-wide collector over DOCS_DIR, built on first use."""
    return build_document_collector(DOCS_DIR)
