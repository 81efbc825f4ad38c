from __future__ import annotations

import hashlib
import math
import re
from pathlib import Path

import pytest

from agentmemory.memory.config import MemoryConfig
from agentmemory.memory.embeddings import EmbeddingProvider
from agentmemory.memory.service import MemoryService
from agentmemory.memory.store import ChunkStore

DIMENSIONS = 32


class HashingEmbedder(EmbeddingProvider):
    """Deterministic bag-of-words vectors; shared words give high cosine similarity."""

    def __init__(self, dimensions: int = DIMENSIONS):
        super().__init__(dimensions)
        self.calls: list[list[str]] = []

    def _embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        out = []
        for text in texts:
            vec = [0.0] * self.dimensions
            for word in re.findall(r"\w+", text.lower()):
                bucket = int(hashlib.sha1(word.encode("utf-8")).hexdigest(), 16) % self.dimensions
                vec[bucket] += 1.0
            norm = math.sqrt(sum(x * x for x in vec)) or 1.0
            out.append([x / norm for x in vec])
        return out


class FailingEmbedder(EmbeddingProvider):
    def __init__(self, dimensions: int = DIMENSIONS):
        super().__init__(dimensions)

    def _embed(self, texts: list[str]) -> list[list[float]]:
        raise ConnectionError("embedding service unavailable")


@pytest.fixture()
def memory_config(tmp_path: Path) -> MemoryConfig:
    return MemoryConfig(
        db_path=tmp_path / "memory.db",
        dimensions=DIMENSIONS,
        chunk_size=60,
        chunk_overlap=10,
    )


@pytest.fixture()
def store(memory_config: MemoryConfig) -> ChunkStore:
    return ChunkStore(db_path=memory_config.db_path, dimensions=DIMENSIONS)


@pytest.fixture()
def embedder() -> HashingEmbedder:
    return HashingEmbedder()


@pytest.fixture()
def service(memory_config: MemoryConfig, store: ChunkStore, embedder: HashingEmbedder) -> MemoryService:
    return MemoryService(config=memory_config, store=store, embedder=embedder)
