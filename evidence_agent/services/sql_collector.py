"""
Structured-data collection from SQLite files.

Every *.db file in the SQLite folder is a container; every table in it is a
relation. Each read opens its own read-only connection and closes it before
returning, so no handle outlives a single call.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Any, Protocol

from evidence_agent.core.config import SQL_ROW_LIMIT, SQLITE_DIR
from evidence_agent.schemas.evidence import SqlEvidence, sql_citation

logger = logging.getLogger(__name__)


class DataService(Protocol):
    def list_containers(self) -> list[str]: ...

    def list_relations(self, container: str) -> list[str]: ...

    def read_rows(self, container: str, relation: str, limit: int = SQL_ROW_LIMIT) -> list[dict[str, Any]]: ...


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<blob {len(bytes(value))} bytes>"
    return value


class SqliteDataService:
    """Read-only access to the SQLite files of one folder."""

    def __init__(self, directory: str | Path = SQLITE_DIR) -> None:
        self.directory = Path(directory)

    def _path(self, container: str) -> Path:
        path = self.directory / container
        if path.parent != self.directory or not path.is_file():
            raise FileNotFoundError(f"container not found: {container}")
        return path

    def _connect(self, container: str) -> sqlite3.Connection:
        uri = self._path(container).resolve().as_uri() + "?mode=ro"
        return sqlite3.connect(uri, uri=True)

    def list_containers(self) -> list[str]:
        """Return the .db file names in the folder, sorted. Missing folder -> []."""
        if not self.directory.is_dir():
            logger.warning("[sql:list_containers] folder does not exist: %s", self.directory)
            return []
        return sorted(p.name for p in self.directory.iterdir() if p.is_file() and p.suffix == ".db")

    def list_relations(self, container: str) -> list[str]:
        conn = self._connect(container)
        try:
            cur = conn.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
            return [row[0] for row in cur.fetchall()]
        finally:
            conn.close()

    def read_rows(self, container: str, relation: str, limit: int = SQL_ROW_LIMIT) -> list[dict[str, Any]]:
        """Read up to min(limit, SQL_ROW_LIMIT) rows as column->value dicts."""
        limit = max(0, min(limit, SQL_ROW_LIMIT))
        conn = self._connect(container)
        try:
            conn.row_factory = sqlite3.Row
            cur = conn.execute(f"SELECT * FROM {_quote_identifier(relation)} LIMIT ?", (limit,))
            return [{k: _jsonable(row[k]) for k in row.keys()} for row in cur.fetchall()]
        finally:
            conn.close()


def collect_sql(service: DataService) -> tuple[list[SqlEvidence], list[str]]:
    """
    Read every relation of every container (capped at SQL_ROW_LIMIT rows each).

    A failing relation yields an error-tagged entry for that relation only; a
    failing container yields one entry with relation=None. Collection of the
    remaining relations and containers continues. One citation per container.
    """
    evidences: list[SqlEvidence] = []
    citations: list[str] = []
    try:
        containers = service.list_containers()
    except Exception as e:
        logger.warning("[sql:collect] could not list containers: %s", e)
        return evidences, citations
    logger.info("[sql:collect] IN  containers=%s", containers)

    for container in containers:
        citation = sql_citation(container)
        if citation not in citations:
            citations.append(citation)
        try:
            relations = service.list_relations(container)
        except Exception as e:
            logger.warning("[sql:collect] container=%s unreadable: %s", container, e)
            evidences.append(SqlEvidence(container=container, error=str(e) or type(e).__name__))
            continue
        for relation in relations:
            try:
                rows = service.read_rows(container, relation, SQL_ROW_LIMIT)
            except Exception as e:
                logger.warning("[sql:collect] container=%s relation=%s read failed: %s", container, relation, e)
                evidences.append(
                    SqlEvidence(container=container, relation=relation, error=str(e) or type(e).__name__)
                )
                continue
            evidences.append(SqlEvidence(container=container, relation=relation, rows=list(rows)[:SQL_ROW_LIMIT]))
        logger.info("[sql:collect] container=%s relations=%d", container, len(relations))

    logger.info("[sql:collect] OUT evidences=%d citations=%s", len(evidences), citations)
    return evidences, citations
