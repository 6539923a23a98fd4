"""
Shared fakes and fixtures. Nothing here touches the network or a real model.
"""

import sqlite3
import zlib
from pathlib import Path

import httpx
import pytest

from evidence_agent.services.vector_store import InMemoryVectorIndex


class FakeModel:
    """Chat model stand-in: returns scripted responses in order and records the messages."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[list[dict]] = []

    def __call__(self, messages):
        self.calls.append(messages)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeDataService:
    """
    containers: {name: {relation: rows | Exception} | Exception}.
    An Exception in place of the relation dict fails list_relations for that container.
    """

    def __init__(self, containers):
        self.containers = containers
        self.read_calls: list[tuple[str, str, int]] = []

    def list_containers(self):
        return list(self.containers)

    def list_relations(self, container):
        relations = self.containers[container]
        if isinstance(relations, Exception):
            raise relations
        return list(relations)

    def read_rows(self, container, relation, limit=10):
        self.read_calls.append((container, relation, limit))
        rows = self.containers[container][relation]
        if isinstance(rows, Exception):
            raise rows
        return rows


class RecordingPrompter:
    """Prompter that answers from a script (last answer repeats) and records every command."""

    def __init__(self, *answers: bool):
        self.answers = list(answers) or [False]
        self.commands: list[str] = []

    def __call__(self, command: str) -> bool:
        self.commands.append(command)
        if len(self.answers) > 1:
            return self.answers.pop(0)
        return self.answers[0]


def hashing_embedder(texts: list[str]) -> list[list[float]]:
    """Deterministic bag-of-words embedding over 64 buckets."""
    vectors = []
    for text in texts:
        vec = [0.0] * 64
        for word in text.lower().split():
            vec[zlib.crc32(word.strip(".,?!").encode()) % 64] += 1.0
        vectors.append(vec)
    return vectors


def json_transport(routes: dict[str, tuple[int, object]]) -> httpx.MockTransport:
    """
    MockTransport answering by host. A value of (status, payload) where payload
    is a dict/list (sent as JSON) or a str (sent as raw body).
    Unknown hosts get 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        status, payload = routes.get(request.url.host, (404, {}))
        if isinstance(payload, str):
            return httpx.Response(status, text=payload)
        return httpx.Response(status, json=payload)

    return httpx.MockTransport(handler)


SEARX_HOST = "searx.perennialte.ch"
DDG_HOST = "api.duckduckgo.com"
WIKI_HOST = "en.wikipedia.org"


@pytest.fixture
def fake_model_cls():
    return FakeModel


@pytest.fixture
def sqlite_dir(tmp_path: Path) -> Path:
    """Folder with music.db (artists: 15 rows, albums: 2 rows) and sales.db (orders: 3 rows)."""
    folder = tmp_path / "sqlite"
    folder.mkdir()
    conn = sqlite3.connect(str(folder / "music.db"))
    try:
        conn.execute("CREATE TABLE artists (id INTEGER PRIMARY KEY, name TEXT)")
        conn.executemany("INSERT INTO artists VALUES (?, ?)", [(i, f"Artist {i}") for i in range(1, 16)])
        conn.execute("CREATE TABLE albums (id INTEGER PRIMARY KEY, title TEXT, cover BLOB)")
        conn.executemany(
            "INSERT INTO albums VALUES (?, ?, ?)",
            [(1, "First", b"\x00\x01\x02"), (2, "Second", None)],
        )
        conn.commit()
    finally:
        conn.close()
    conn = sqlite3.connect(str(folder / "sales.db"))
    try:
        conn.execute("CREATE TABLE orders (id INTEGER PRIMARY KEY, total REAL)")
        conn.executemany("INSERT INTO orders VALUES (?, ?)", [(1, 9.9), (2, 19.9), (3, 5.0)])
        conn.commit()
    finally:
        conn.close()
    (folder / "notes.txt").write_text("not a database")
    return folder


@pytest.fixture
def docs_index() -> InMemoryVectorIndex:
    index = InMemoryVectorIndex(hashing_embedder)
    index.build([
        ("leave_policy.txt", "Employees get twenty days of paid leave per year. Leave requests go to the manager."),
        ("catalog.txt", "The music catalog lists artists and albums. New albums are added every Monday."),
    ])
    return index


@pytest.fixture(autouse=True)
def no_tagger_data(monkeypatch):
    """Run keyword extraction as if the nltk tagger data were not installed (no downloads in tests)."""

    def missing(tokens):
        raise LookupError("Resource averaged_perceptron_tagger_eng not found.")

    monkeypatch.setattr("evidence_agent.services.web_collector._nltk_tagger", missing)


def fake_tagger(tags: dict[str, str]):
    """POS tagger stand-in: tags from the mapping, "NN" for anything unlisted."""
    return lambda tokens: [(t, tags.get(t, "NN")) for t in tokens]
