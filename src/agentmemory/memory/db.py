"""SQLite schema, path and transaction helper for the memory store."""

from __future__ import annotations

import os
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from agentmemory.memory.errors import DimensionMismatchError


def get_db_path() -> Path:
    path = os.environ.get("AGENTMEMORY_DB_PATH", "")
    if path:
        return Path(path)
    # Default: project root / data / agentmemory.db
    root = Path(__file__).resolve().parents[3]
    return root / "data" / "agentmemory.db"


def connect(db_path: Path) -> sqlite3.Connection:
    """Open a connection in autocommit mode; writers use transaction()."""
    conn = sqlite3.connect(str(db_path), timeout=30.0, isolation_level=None, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run the block in one write transaction, rolling back on any exception."""
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")


def init_db(db_path: Path | None = None, dimensions: int = 384) -> sqlite3.Connection:
    path = db_path or get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = connect(path)
    try:
        with transaction(conn):
            conn.execute("""
                CREATE TABLE IF NOT EXISTS memory_chunks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    content TEXT NOT NULL,
                    source_path TEXT NOT NULL,
                    source_type TEXT,
                    title TEXT,
                    chunk_index INTEGER NOT NULL DEFAULT 0,
                    overlap_chars INTEGER NOT NULL DEFAULT 0,
                    indexed_at TEXT NOT NULL,
                    embedding TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE UNIQUE INDEX IF NOT EXISTS idx_memory_chunks_source
                ON memory_chunks (source_path, chunk_index)
            """)
            # Dimensionality is fixed when the database is created.
            conn.execute("""
                CREATE TABLE IF NOT EXISTS memory_meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.execute(
                "INSERT OR IGNORE INTO memory_meta (key, value) VALUES ('dimensions', ?)",
                (str(dimensions),),
            )
            row = conn.execute("SELECT value FROM memory_meta WHERE key = 'dimensions'").fetchone()
            stored = int(row["value"])
            if stored != dimensions:
                raise DimensionMismatchError(stored, dimensions, what=f"configuration for database {path}")
    except BaseException:
        conn.close()
        raise
    return conn
