"""
Unit tests for text processing: clean_text and chunk_text.
"""

import pytest

from evidence_agent.services.text_processing import chunk_text, clean_text


class TestCleanText:
    """Tests for clean_text()."""

    @pytest.mark.parametrize("text", ["", "   ", "\n\n"])
    def test_empty_returns_empty(self, text: str) -> None:
        assert clean_text(text) == ""

    def test_strips_outer_whitespace(self) -> None:
        assert clean_text("\n  hello  \n") == "hello"

    def test_normalizes_inner_lines_and_dedupes(self) -> None:
        assert clean_text("  hello   \n\n  world  ") == "hello\n\nworld"
        assert clean_text("line1\n  line1  \nline2") == "line1\nline2"

    def test_collapses_blank_runs(self) -> None:
        assert clean_text("First para.\n\n\n\n\nSecond para.") == "First para.\n\nSecond para."

    def test_nfkc_normalization(self) -> None:
        assert clean_text("ｈｅｌｌｏ") == "hello"

    def test_drops_control_artifacts(self) -> None:
        assert clean_text("a\x00b\x7fc") == "a b c"


class TestChunkText:
    """Tests for chunk_text()."""

    def test_empty_returns_empty_list(self) -> None:
        assert chunk_text("") == []
        assert chunk_text("   ") == []

    def test_short_text_returns_single_chunk(self) -> None:
        short = "This is a short paragraph."
        assert chunk_text(short, chunk_size=500, overlap=50) == [short]

    def test_defaults_keep_short_documents_whole(self) -> None:
        text = "word " * 150
        assert chunk_text(text) == [text.strip()]

    def test_splits_on_paragraphs_first(self) -> None:
        text = "A" * 500 + "\n\n" + "B" * 500
        assert chunk_text(text) == ["A" * 500, "B" * 500]

    def test_chunks_never_exceed_size(self) -> None:
        text = " ".join(f"word{i}" for i in range(300))
        chunks = chunk_text(text, chunk_size=100, overlap=20)
        assert len(chunks) > 1
        assert all(0 < len(c) <= 100 for c in chunks)
        assert all(c.strip() == c for c in chunks)

    def test_consecutive_chunks_overlap(self) -> None:
        text = " ".join(f"word{i}" for i in range(300))
        chunks = chunk_text(text, chunk_size=100, overlap=20)
        for prev, nxt in zip(chunks, chunks[1:]):
            assert nxt.split()[0] in prev.split()

    def test_every_word_is_kept(self) -> None:
        words = [f"word{i}" for i in range(300)]
        chunks = chunk_text(" ".join(words), chunk_size=100, overlap=20)
        seen = {w for c in chunks for w in c.split()}
        assert seen == set(words)

    def test_hard_cut_without_separators(self) -> None:
        assert chunk_text("x" * 250, chunk_size=100, overlap=0) == ["x" * 100, "x" * 100, "x" * 50]
