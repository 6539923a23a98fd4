"""
Tests for the document corpus loader.
"""

from pathlib import Path

from evidence_agent.ingest.loader import bytes_to_text, load_corpus


def test_load_corpus_reads_supported_files_sorted(tmp_path: Path) -> None:
    (tmp_path / "b.md").write_text("# Second")
    (tmp_path / "a.txt").write_text("First")
    (tmp_path / "data.csv").write_text("x,y")
    (tmp_path / "empty.txt").write_text("   ")
    (tmp_path / "sub").mkdir()
    assert load_corpus(tmp_path) == [("a.txt", "First"), ("b.md", "# Second")]


def test_load_corpus_missing_folder(tmp_path: Path) -> None:
    assert load_corpus(tmp_path / "missing") == []


def test_unreadable_pdf_is_skipped(tmp_path: Path) -> None:
    (tmp_path / "broken.pdf").write_bytes(b"not really a pdf")
    (tmp_path / "ok.txt").write_text("fine")
    assert load_corpus(tmp_path) == [("ok.txt", "fine")]


def test_bytes_to_text_replaces_invalid_utf8() -> None:
    assert bytes_to_text(b"caf\xe9", "menu.txt") == "caf�"
