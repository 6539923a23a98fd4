"""
Text processing for the document index: cleaning and chunking.

Cleaning reduces noise (extract artifacts, duplicate lines, mixed unicode) so
embeddings focus on content. Chunking splits on the coarsest separator that
fits (paragraph, line, sentence, word) and carries an overlap between chunks.
"""

import re
import unicodedata

_SEPARATORS = ("\n\n", "\n", ". ", " ")


def clean_text(text: str) -> str:
    """Normalize unicode, drop control artifacts, trim lines and collapse repeated/blank lines."""
    if not text or not text.strip():
        return ""
    text = unicodedata.normalize("NFKC", text)
    text = text.replace("\x7f", " ").replace("\x00", " ")
    out: list[str] = []
    for raw in text.splitlines():
        line = re.sub(r"[ \t]+", " ", raw).strip()
        if out and out[-1] == line:
            continue
        out.append(line)
    return re.sub(r"\n{3,}", "\n\n", "\n".join(out)).strip()


def _split(text: str, chunk_size: int, separators: tuple[str, ...]) -> list[str]:
    """Break text into pieces no longer than chunk_size, keeping separators attached."""
    if len(text) <= chunk_size:
        return [text]
    if not separators:
        return [text[i : i + chunk_size] for i in range(0, len(text), chunk_size)]
    sep, rest = separators[0], separators[1:]
    if sep not in text:
        return _split(text, chunk_size, rest)
    parts = text.split(sep)
    pieces: list[str] = []
    for i, part in enumerate(parts):
        piece = part + sep if i < len(parts) - 1 else part
        if not piece:
            continue
        pieces.extend(_split(piece, chunk_size, rest))
    return pieces


def chunk_text(text: str, chunk_size: int = 800, overlap: int = 150) -> list[str]:
    """
    Split text into chunks of at most chunk_size characters. Each new chunk
    starts with the trailing pieces of the previous one, up to overlap chars.
    """
    if not text or not text.strip():
        return []
    text = text.strip()
    if len(text) <= chunk_size:
        return [text]

    chunks: list[str] = []
    current: list[str] = []
    length = 0
    for piece in _split(text, chunk_size, _SEPARATORS):
        if current and length + len(piece) > chunk_size:
            chunks.append("".join(current).strip())
            carried: list[str] = []
            carried_len = 0
            for prev in reversed(current):
                if carried_len + len(prev) > overlap or carried_len + len(prev) + len(piece) > chunk_size:
                    break
                carried.insert(0, prev)
                carried_len += len(prev)
            current, length = carried, carried_len
        current.append(piece)
        length += len(piece)
    if current:
        chunks.append("".join(current).strip())
    return [c for c in chunks if c]
