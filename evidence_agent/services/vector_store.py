"""
Semantic index: embeddings (OpenAI or HF Inference API) and an in-memory cosine index.

Responsibility: Embed chunk texts once at build time, keep them in memory, and
answer top-k similarity queries. The index is read-only after build().
"""

import logging
from typing import Callable

import httpx
from openai import OpenAI

from evidence_agent.core.config import (
    CHUNK_OVERLAP,
    CHUNK_SIZE,
    EMBED_API_TIMEOUT,
    EMBED_BATCH_SIZE,
    HF_API_KEY,
    HF_EMBED_MODEL,
    OPENAI_API_KEY,
    OPENAI_EMBED_MODEL,
    SNIPPET_MAX_CHARS,
)
from evidence_agent.core.errors import ServiceUnavailableError
from evidence_agent.services.text_processing import chunk_text, clean_text

logger = logging.getLogger(__name__)

HF_API_URL_ROUTER = (
    "https://router.huggingface.co/hf-inference/models/"
    f"{HF_EMBED_MODEL}/pipeline/feature-extraction"
)

Embedder = Callable[[list[str]], list[list[float]]]


def _normalize(vec: list[float]) -> list[float]:
    norm = sum(x * x for x in vec) ** 0.5
    if norm == 0:
        norm = 1.0
    return [x / norm for x in vec]


def _embed_openai(texts: list[str], batch_size: int) -> list[list[float]]:
    client = OpenAI(api_key=OPENAI_API_KEY)
    out: list[list[float]] = []
    for i in range(0, len(texts), batch_size):
        response = client.embeddings.create(model=OPENAI_EMBED_MODEL, input=texts[i : i + batch_size])
        out.extend(item.embedding for item in sorted(response.data, key=lambda d: d.index))
    return out


def _embed_hf(texts: list[str], batch_size: int) -> list[list[float]]:
    headers = {
        "Authorization": f"Bearer {HF_API_KEY}",
        "Content-Type": "application/json",
    }
    out: list[list[float]] = []
    with httpx.Client(timeout=EMBED_API_TIMEOUT) as client:
        for i in range(0, len(texts), batch_size):
            payload = {"inputs": texts[i : i + batch_size], "options": {"wait_for_model": True}}
            response = client.post(HF_API_URL_ROUTER, json=payload, headers=headers)
            if response.status_code == 503:
                raise RuntimeError(f"HF model is loading. Retry later. {response.text[:200]}")
            if response.status_code == 401:
                raise ValueError("Invalid HF API key. Check HF_API_KEY at https://huggingface.co/settings/tokens")
            if response.status_code != 200:
                raise RuntimeError(f"HF API error {response.status_code}: {response.text[:200]}")
            result = response.json()
            if isinstance(result, list) and result and isinstance(result[0], list):
                out.extend(result)
            else:
                out.append(result if isinstance(result, list) else [result])
    return out


def embed_texts(texts: list[str], batch_size: int | None = None) -> list[list[float]]:
    """
    Batch embed texts. Uses OpenAI embeddings when OPENAI_API_KEY is set, else
    the HF feature-extraction endpoint. Returns unit-length vectors.
    """
    batch_size = batch_size if batch_size is not None else EMBED_BATCH_SIZE
    if not texts:
        return []
    if OPENAI_API_KEY:
        vectors = _embed_openai(texts, batch_size)
    elif HF_API_KEY:
        vectors = _embed_hf(texts, batch_size)
    else:
        raise ServiceUnavailableError("embeddings", "set OPENAI_API_KEY or HF_API_KEY in .env")
    logger.info("[vector_store:embed_texts] OUT vectors=%d", len(vectors))
    return [_normalize(v) for v in vectors]


class InMemoryVectorIndex:
    """Chunked documents with their embeddings; cosine similarity via dot product of unit vectors."""

    def __init__(self, embedder: Embedder = embed_texts) -> None:
        self._embedder = embedder
        self._chunks: list[dict] = []
        self._vectors: list[list[float]] = []

    @property
    def is_empty(self) -> bool:
        return not self._chunks

    def build(
        self,
        documents: list[tuple[str, str]],
        chunk_size: int = CHUNK_SIZE,
        overlap: int = CHUNK_OVERLAP,
    ) -> int:
        """Clean, chunk and embed (source, text) pairs. Returns the number of chunks indexed."""
        chunks: list[dict] = []
        for source, text in documents:
            for i, piece in enumerate(chunk_text(clean_text(text), chunk_size=chunk_size, overlap=overlap)):
                chunks.append({"text": piece, "source": source, "chunk_id": i})
        vectors = [_normalize(v) for v in self._embedder([c["text"] for c in chunks])] if chunks else []
        if len(vectors) != len(chunks):
            raise RuntimeError(f"embedder returned {len(vectors)} vectors for {len(chunks)} chunks")
        self._chunks = chunks
        self._vectors = vectors
        logger.info("[vector_store:build] indexed chunks=%d documents=%d", len(chunks), len(documents))
        return len(chunks)

    def query(self, text: str, k: int) -> list[dict]:
        """Return up to k hits ordered by similarity: [{"snippet", "source", "score"}]."""
        if self.is_empty or k <= 0 or not text or not text.strip():
            return []
        query_vec = _normalize(self._embedder([text.strip()])[0])
        scored = [
            (sum(a * b for a, b in zip(query_vec, vec)), i)
            for i, vec in enumerate(self._vectors)
        ]
        scored.sort(key=lambda x: -x[0])
        hits = []
        for score, i in scored[:k]:
            chunk = self._chunks[i]
            hits.append({
                "snippet": chunk["text"][:SNIPPET_MAX_CHARS],
                "source": chunk["source"],
                "score": score,
            })
        logger.info("[vector_store:query] OUT hits=%d sources=%s", len(hits), [h["source"] for h in hits])
        return hits

    def sources(self) -> list[str]:
        """Distinct document names in the index, sorted."""
        return sorted({c["source"] for c in self._chunks})
