"""Configuration for the memory store, read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from agentmemory.memory.db import get_db_path

FASTEMBED_DEFAULT_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
OPENAI_DEFAULT_MODEL = "text-embedding-3-small"
_DEFAULT_DIMENSIONS = {"fastembed": 384, "openai": 1536}

LOG = logging.getLogger("agentmemory.config")


def _get_str(name: str, default: str = "") -> str:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip() or default


def _get_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        LOG.warning("Ignoring non-integer %s=%r", name, raw)
        return default


def _get_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        LOG.warning("Ignoring non-numeric %s=%r", name, raw)
        return default


@dataclass(frozen=True)
class MemoryConfig:
    db_path: Path = field(default_factory=get_db_path)
    embedding_backend: str = "fastembed"
    embedding_model: str = FASTEMBED_DEFAULT_MODEL
    dimensions: int = 384
    chunk_size: int = 500
    chunk_overlap: int = 64
    vector_weight: float = 0.7
    keyword_weight: float = 0.3
    rrf_k: int = 60
    # Each channel fetches this many times the requested results before fusion.
    candidate_multiplier: int = 2

    @classmethod
    def from_env(cls) -> "MemoryConfig":
        backend = _get_str("AGENTMEMORY_EMBEDDING_BACKEND", "fastembed").lower()
        if backend not in _DEFAULT_DIMENSIONS:
            raise ValueError(f"Unknown embedding backend: {backend!r} (expected fastembed or openai)")
        default_model = OPENAI_DEFAULT_MODEL if backend == "openai" else FASTEMBED_DEFAULT_MODEL

        return cls(
            db_path=get_db_path(),
            embedding_backend=backend,
            embedding_model=_get_str("AGENTMEMORY_EMBEDDING_MODEL", default_model),
            dimensions=_get_int("AGENTMEMORY_DIMENSIONS", _DEFAULT_DIMENSIONS[backend]),
            chunk_size=_get_int("AGENTMEMORY_CHUNK_SIZE", 500),
            chunk_overlap=_get_int("AGENTMEMORY_CHUNK_OVERLAP", 64),
            vector_weight=_get_float("AGENTMEMORY_VECTOR_WEIGHT", 0.7),
            keyword_weight=_get_float("AGENTMEMORY_KEYWORD_WEIGHT", 0.3),
            rrf_k=_get_int("AGENTMEMORY_RRF_K", 60),
            candidate_multiplier=_get_int("AGENTMEMORY_CANDIDATE_MULTIPLIER", 2),
        )
