"""
Tests for document collection and the in-memory index: empty corpus, failures, top-k.
"""

from pathlib import Path

import pytest

from conftest import hashing_embedder
from evidence_agent.services.docs_collector import DocumentCollector, build_document_collector
from evidence_agent.services.vector_store import InMemoryVectorIndex


class TestDocumentCollector:
    def test_unbuilt_index_returns_empty(self) -> None:
        assert DocumentCollector().search("anything") == []

    def test_empty_index_returns_empty(self) -> None:
        index = InMemoryVectorIndex(hashing_embedder)
        index.build([])
        assert DocumentCollector(index).search("anything") == []

    def test_returns_at_most_k_snippets(self, docs_index: InMemoryVectorIndex) -> None:
        collector = DocumentCollector(docs_index)
        assert len(collector.search("paid leave days", k=1)) == 1
        assert len(collector.search("paid leave days", k=3)) == 2

    def test_best_match_comes_first(self, docs_index: InMemoryVectorIndex) -> None:
        snippets = DocumentCollector(docs_index).search("music catalog albums artists")
        assert "music catalog" in snippets[0]

    def test_query_failure_returns_empty(self, docs_index: InMemoryVectorIndex) -> None:
        class Exploding(InMemoryVectorIndex):
            def query(self, text, k):
                raise ValueError("malformed index payload")

        index = Exploding(hashing_embedder)
        index.build([("a.txt", "some text")])
        assert DocumentCollector(index).search("text") == []

    def test_sources(self, docs_index: InMemoryVectorIndex) -> None:
        assert DocumentCollector(docs_index).sources() == ["catalog.txt", "leave_policy.txt"]
        assert DocumentCollector().sources() == []


class TestBuildDocumentCollector:
    def test_missing_folder_gives_unbuilt_collector(self, tmp_path: Path) -> None:
        collector = build_document_collector(tmp_path / "missing", embedder=hashing_embedder)
        assert not collector.is_ready
        assert collector.search("q") == []

    def test_empty_corpus_gives_unbuilt_collector(self, tmp_path: Path) -> None:
        (tmp_path / "ignored.csv").write_text("a,b")
        collector = build_document_collector(tmp_path, embedder=hashing_embedder)
        assert not collector.is_ready
        assert collector.search("q") == []

    def test_embedding_failure_gives_unbuilt_collector(self, tmp_path: Path) -> None:
        (tmp_path / "doc.txt").write_text("hello world")

        def broken(texts):
            raise RuntimeError("embeddings backend down")

        collector = build_document_collector(tmp_path, embedder=broken)
        assert not collector.is_ready

    def test_builds_from_text_files(self, tmp_path: Path) -> None:
        (tmp_path / "a.txt").write_text("Refunds are processed within five business days.")
        (tmp_path / "b.md").write_text("# Shipping\nOrders ship from the main warehouse.")
        collector = build_document_collector(tmp_path, embedder=hashing_embedder)
        assert collector.is_ready
        assert collector.sources() == ["a.txt", "b.md"]
        assert "Refunds" in collector.search("refunds processed business days", k=1)[0]


class TestInMemoryVectorIndex:
    def test_snippets_are_truncated(self) -> None:
        index = InMemoryVectorIndex(hashing_embedder)
        index.build([("long.txt", "word " * 150)])
        hits = index.query("word", 3)
        assert hits and all(len(h["snippet"]) <= 400 for h in hits)

    def test_blank_query_returns_nothing(self, docs_index: InMemoryVectorIndex) -> None:
        assert docs_index.query("   ", 3) == []

    def test_mismatched_embedder_is_an_error(self) -> None:
        index = InMemoryVectorIndex(lambda texts: [])
        with pytest.raises(RuntimeError):
            index.build([("a.txt", "text")])
