# Document corpus loader. Reads the documents folder into (source, text) pairs.
# Supports .txt, .md, .pdf. Single place for "file/bytes -> text".

import io
import logging
from pathlib import Path

from pypdf import PdfReader

from evidence_agent.core.config import DOC_EXTENSIONS

logger = logging.getLogger(__name__)


def bytes_to_text(raw: bytes, filename: str) -> str:
    """Convert raw file bytes to text by extension (.pdf via pypdf, everything else as UTF-8)."""
    ext = Path(filename).suffix.lower() if filename else ""
    if ext == ".pdf":
        reader = PdfReader(io.BytesIO(raw))
        return "\n".join(page.extract_text() or "" for page in reader.pages)
    return raw.decode("utf-8", errors="replace")


def load_corpus(docs_dir: str | Path) -> list[tuple[str, str]]:
    """
    Read every supported file in docs_dir (non-recursive, sorted by name).
    Returns [(file name, text)]; unreadable files are logged and skipped.
    """
    folder = Path(docs_dir)
    if not folder.is_dir():
        logger.warning("[loader] documents folder does not exist: %s", folder)
        return []
    documents: list[tuple[str, str]] = []
    for path in sorted(folder.iterdir()):
        if not path.is_file() or path.suffix.lower() not in DOC_EXTENSIONS:
            continue
        try:
            text = bytes_to_text(path.read_bytes(), path.name)
        except Exception as e:
            logger.warning("[loader] failed to read %s: %s", path.name, e)
            continue
        if text.strip():
            documents.append((path.name, text))
    logger.info("[loader] loaded %d documents from %s", len(documents), folder)
    return documents
