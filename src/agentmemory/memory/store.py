"""SQLite chunk store with exhaustive vector scan and substring keyword search."""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

import numpy as np

from agentmemory.memory.db import connect, get_db_path, init_db, transaction
from agentmemory.memory.errors import DimensionMismatchError
from agentmemory.memory.models import MemoryChunk, MemorySearchResult, MemoryStats, SourceInfo

LOG = logging.getLogger("agentmemory.store")

MIN_KEYWORD_LENGTH = 3
MAX_KEYWORDS = 5

_INSERT_SQL = """
    INSERT INTO memory_chunks
        (content, source_path, source_type, title, chunk_index, overlap_chars, indexed_at, embedding)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""


def extract_keywords(query: str) -> list[str]:
    """Whitespace tokens longer than two characters, first five only."""
    tokens = [t.strip() for t in query.split()]
    return [t for t in tokens if len(t) >= MIN_KEYWORD_LENGTH][:MAX_KEYWORDS]


def _like_pattern(keyword: str) -> str:
    escaped = keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def cosine_distances(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Cosine distance of each row to query, in [0, 2]. Zero vectors sit at 1."""
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    with np.errstate(divide="ignore", invalid="ignore"):
        sims = np.where(norms > 0, dots / norms, 0.0)
    return np.clip(1.0 - sims, 0.0, 2.0)


class ChunkStore:
    """Durable table of memory chunks keyed by auto-increment id."""

    def __init__(self, db_path: Path | None = None, dimensions: int = 384):
        if dimensions <= 0:
            raise ValueError(f"dimensions must be positive, got {dimensions}")
        self.db_path = db_path or get_db_path()
        self.dimensions = dimensions
        self._initialized = False
        self._init_lock = threading.Lock()

    def ensure_initialized(self) -> None:
        if self._initialized:
            return
        with self._init_lock:
            if self._initialized:
                return
            init_db(self.db_path, self.dimensions).close()
            self._initialized = True
        LOG.info("Chunk store initialized at %s (dimensions=%d)", self.db_path, self.dimensions)

    def _connect(self) -> sqlite3.Connection:
        self.ensure_initialized()
        return connect(self.db_path)

    def _check_dimensions(self, vector: Sequence[float], what: str) -> None:
        if len(vector) != self.dimensions:
            raise DimensionMismatchError(self.dimensions, len(vector), what=what)

    def _row_params(self, chunk: MemoryChunk) -> tuple:
        if not chunk.content:
            raise ValueError(f"chunk {chunk.chunk_index} of {chunk.source_path!r} has empty content")
        self._check_dimensions(chunk.embedding, f"embedding of {chunk.source_path}#{chunk.chunk_index}")
        indexed_at = chunk.indexed_at or datetime.now(timezone.utc)
        return (
            chunk.content,
            chunk.source_path,
            chunk.source_type,
            chunk.title,
            chunk.chunk_index,
            chunk.overlap_chars,
            indexed_at.isoformat(),
            json.dumps([float(x) for x in chunk.embedding]),
        )

    # -- writes ---------------------------------------------------------

    def write(self, chunk: MemoryChunk) -> int:
        """Insert one chunk and return its id."""
        params = self._row_params(chunk)
        conn = self._connect()
        try:
            with transaction(conn):
                cur = conn.execute(_INSERT_SQL, params)
            return int(cur.lastrowid)
        finally:
            conn.close()

    def write_batch(self, chunks: Sequence[MemoryChunk]) -> None:
        """Insert all chunks in one transaction; nothing is kept if any row fails."""
        if not chunks:
            return
        rows = [self._row_params(c) for c in chunks]
        conn = self._connect()
        try:
            with transaction(conn):
                conn.executemany(_INSERT_SQL, rows)
        finally:
            conn.close()

    def delete_by_source(self, source_path: str) -> int:
        conn = self._connect()
        try:
            with transaction(conn):
                deleted = conn.execute(
                    "DELETE FROM memory_chunks WHERE source_path = ?", (source_path,)
                ).rowcount
        finally:
            conn.close()
        LOG.info("Deleted %d chunks for source: %s", deleted, source_path)
        return deleted

    def replace_source(self, source_path: str, chunks: Sequence[MemoryChunk]) -> int:
        """
        Delete every chunk of source_path and insert chunks, atomically.
        Returns the number of rows deleted. Readers see either the old or
        the new content, never a mix or an empty source in between.
        """
        for chunk in chunks:
            if chunk.source_path != source_path:
                raise ValueError(f"chunk for {chunk.source_path!r} passed to replace_source({source_path!r})")
        rows = [self._row_params(c) for c in chunks]
        conn = self._connect()
        try:
            with transaction(conn):
                deleted = conn.execute(
                    "DELETE FROM memory_chunks WHERE source_path = ?", (source_path,)
                ).rowcount
                conn.executemany(_INSERT_SQL, rows)
        finally:
            conn.close()
        LOG.info("Replaced source %s: %d chunks deleted, %d written", source_path, deleted, len(rows))
        return deleted

    # -- reads ----------------------------------------------------------

    def get_by_source(self, source_path: str) -> list[MemoryChunk]:
        """All chunks of a source ordered by chunk_index."""
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                SELECT id, content, source_path, source_type, title, chunk_index,
                       overlap_chars, indexed_at, embedding
                FROM memory_chunks
                WHERE source_path = ?
                ORDER BY chunk_index
                """,
                (source_path,),
            ).fetchall()
        finally:
            conn.close()
        return [
            MemoryChunk(
                id=r["id"],
                content=r["content"],
                source_path=r["source_path"],
                source_type=r["source_type"],
                title=r["title"],
                chunk_index=r["chunk_index"],
                overlap_chars=r["overlap_chars"],
                indexed_at=datetime.fromisoformat(r["indexed_at"]),
                embedding=json.loads(r["embedding"]),
            )
            for r in rows
        ]

    def vector_search(self, query_embedding: Sequence[float], max_results: int) -> list[MemorySearchResult]:
        """
        Rank every stored chunk by cosine distance to the query.

        This is a full scan: each call loads all embeddings. Ties are broken
        by id so the order is stable. Score is 1 - distance / 2.
        """
        self._check_dimensions(query_embedding, "query embedding")
        if max_results <= 0:
            return []
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT id, content, source_path, title, chunk_index, embedding FROM memory_chunks ORDER BY id"
            ).fetchall()
        finally:
            conn.close()
        if not rows:
            return []

        matrix = np.array([json.loads(r["embedding"]) for r in rows], dtype=np.float64)
        query = np.asarray(query_embedding, dtype=np.float64)
        distances = cosine_distances(matrix, query)
        # Rows are in id order, so a stable sort keeps the id tie-break.
        order = np.argsort(distances, kind="stable")[:max_results]
        return [
            MemorySearchResult(
                content=rows[i]["content"],
                source_path=rows[i]["source_path"],
                title=rows[i]["title"],
                chunk_index=rows[i]["chunk_index"],
                score=float(1.0 - distances[i] / 2.0),
            )
            for i in order
        ]

    def keyword_search(self, query_text: str, max_results: int) -> list[MemorySearchResult]:
        """
        Rank chunks by the share of query keywords they contain.

        Matching is SQL LIKE containment (case-insensitive for ASCII), with
        no stemming or tokenization. Chunks matching no keyword are left out.
        """
        keywords = extract_keywords(query_text)
        if not keywords or max_results <= 0:
            return []
        patterns = [_like_pattern(k) for k in keywords]
        match_count = " + ".join("(content LIKE ? ESCAPE '\\')" for _ in patterns)
        any_match = " OR ".join("content LIKE ? ESCAPE '\\'" for _ in patterns)
        sql = f"""
            SELECT content, source_path, title, chunk_index, ({match_count}) AS match_count
            FROM memory_chunks
            WHERE {any_match}
            ORDER BY match_count DESC, id ASC
            LIMIT ?
        """
        conn = self._connect()
        try:
            rows = conn.execute(sql, [*patterns, *patterns, max_results]).fetchall()
        finally:
            conn.close()
        return [
            MemorySearchResult(
                content=r["content"],
                source_path=r["source_path"],
                title=r["title"],
                chunk_index=r["chunk_index"],
                score=r["match_count"] / len(keywords),
            )
            for r in rows
        ]

    def get_stats(self) -> MemoryStats:
        conn = self._connect()
        try:
            row = conn.execute("SELECT COUNT(*), COUNT(DISTINCT source_path) FROM memory_chunks").fetchone()
        finally:
            conn.close()
        return MemoryStats(total_chunks=row[0], unique_sources=row[1])

    def list_sources(self) -> list[SourceInfo]:
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                SELECT source_path, MAX(source_type) AS source_type, COUNT(*) AS chunk_count
                FROM memory_chunks
                GROUP BY source_path
                ORDER BY source_path
                """
            ).fetchall()
        finally:
            conn.close()
        return [
            SourceInfo(source_path=r["source_path"], source_type=r["source_type"], chunk_count=r["chunk_count"])
            for r in rows
        ]
