from __future__ import annotations

from pathlib import Path

import pytest

from agentmemory.memory.db import get_db_path, init_db, transaction
from agentmemory.memory.errors import DimensionMismatchError


def test_db_path_from_env(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("AGENTMEMORY_DB_PATH", str(tmp_path / "x.db"))
    assert get_db_path() == tmp_path / "x.db"


def test_init_db_creates_tables_and_records_dimensions(tmp_path: Path):
    conn = init_db(tmp_path / "nested" / "schema.db", dimensions=16)
    try:
        names = {row["name"] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()}
        assert {"memory_chunks", "memory_meta"} <= names
        row = conn.execute("SELECT value FROM memory_meta WHERE key = 'dimensions'").fetchone()
        assert row["value"] == "16"
    finally:
        conn.close()

    init_db(tmp_path / "nested" / "schema.db", dimensions=16).close()
    with pytest.raises(DimensionMismatchError):
        init_db(tmp_path / "nested" / "schema.db", dimensions=32)


def test_transaction_rolls_back_on_error(tmp_path: Path):
    conn = init_db(tmp_path / "tx.db", dimensions=4)
    try:
        with pytest.raises(RuntimeError):
            with transaction(conn):
                conn.execute(
                    "INSERT INTO memory_chunks (content, source_path, indexed_at, embedding) VALUES (?, ?, ?, ?)",
                    ("x", "a.md", "2026-01-01T00:00:00+00:00", "[0, 0, 0, 0]"),
                )
                raise RuntimeError("cancelled mid-batch")
        assert conn.execute("SELECT COUNT(*) FROM memory_chunks").fetchone()[0] == 0
        assert not conn.in_transaction
    finally:
        conn.close()
