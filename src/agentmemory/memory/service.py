"""Memory facade: search, write (overwrite by source) and read back."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from agentmemory.memory.chunker import chunk_text, merge_chunks
from agentmemory.memory.config import MemoryConfig
from agentmemory.memory.embeddings import EmbeddingProvider, get_embedding_provider
from agentmemory.memory.errors import DimensionMismatchError
from agentmemory.memory.fusion import fuse
from agentmemory.memory.models import MemoryChunk, MemorySearchResult, MemoryStats, SourceInfo, WriteResult
from agentmemory.memory.store import ChunkStore

LOG = logging.getLogger("agentmemory.service")

LONGTERM_MARKER = "MEMORY.md"


def default_source(now: datetime | None = None) -> str:
    """Daily log path for the given (default: current) UTC date."""
    now = now or datetime.now(timezone.utc)
    return f"memory/{now:%Y-%m-%d}.md"


def classify_source(source: str) -> str:
    return "longterm" if LONGTERM_MARKER.lower() in source.lower() else "daily"


class MemoryService:
    """Chunk, embed and store content; retrieve it by hybrid search or by source."""

    def __init__(
        self,
        config: MemoryConfig | None = None,
        store: ChunkStore | None = None,
        embedder: EmbeddingProvider | None = None,
    ):
        self.config = config or MemoryConfig.from_env()
        self.store = store or ChunkStore(db_path=self.config.db_path, dimensions=self.config.dimensions)
        self.embedder = embedder or get_embedding_provider(self.config)
        if self.embedder.dimensions != self.store.dimensions:
            raise DimensionMismatchError(self.store.dimensions, self.embedder.dimensions, what="embedding provider")
        # source -> [lock, callers holding or waiting]; entries go away when unused.
        self._source_locks: dict[str, list] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _source_lock(self, source: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._source_locks.get(source)
            if entry is None:
                entry = self._source_locks[source] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._source_locks[source]

    def search(self, query: str, max_results: int = 6) -> list[MemorySearchResult]:
        """
        Hybrid search. Both channels fetch candidate_multiplier * max_results
        candidates, then RRF picks the final max_results. An empty list
        means nothing relevant was found.
        """
        if max_results < 1:
            raise ValueError(f"max_results must be at least 1, got {max_results}")
        LOG.debug("memory search: query=%r max_results=%d", query, max_results)
        query = query.strip()
        if not query:
            return []

        query_embedding = self.embedder.embed_one(query)
        candidates = max_results * self.config.candidate_multiplier
        vector_ranked = self.store.vector_search(query_embedding, candidates)
        keyword_ranked = self.store.keyword_search(query, candidates)
        return fuse(
            vector_ranked,
            keyword_ranked,
            vector_weight=self.config.vector_weight,
            keyword_weight=self.config.keyword_weight,
            rrf_k=self.config.rrf_k,
            max_results=max_results,
        )

    def write(self, content: str, source: str | None = None, title: str | None = None) -> WriteResult:
        """
        Replace everything stored under source with content.

        The delete and the insert share one transaction, and writes to the
        same source are serialized, so a failed write leaves the previous
        content in place.
        """
        if not content or not content.strip():
            raise ValueError("content must not be empty")
        source = (source or "").strip() or default_source()
        LOG.debug("memory write: source=%r title=%r length=%d", source, title, len(content))

        with self._source_lock(source):
            pieces = chunk_text(content, self.config.chunk_size, self.config.chunk_overlap)
            embeddings = self.embedder.embed(pieces)
            source_type = classify_source(source)
            indexed_at = datetime.now(timezone.utc)
            records = [
                MemoryChunk(
                    content=piece,
                    source_path=source,
                    source_type=source_type,
                    title=title,
                    chunk_index=i,
                    overlap_chars=0 if i == 0 else self.config.chunk_overlap,
                    indexed_at=indexed_at,
                    embedding=embedding,
                )
                for i, (piece, embedding) in enumerate(zip(pieces, embeddings))
            ]
            self.store.replace_source(source, records)

        LOG.info("Wrote %d chunks to memory source '%s'", len(records), source)
        return WriteResult(chunks_written=len(records), source=source)

    def get(self, source: str) -> str | None:
        """Reassembled content of source, or None if nothing is stored there."""
        LOG.debug("memory get: source=%r", source)
        chunks = self.store.get_by_source(source)
        if not chunks:
            return None
        return merge_chunks([c.content for c in chunks], [c.overlap_chars for c in chunks])

    def delete(self, source: str) -> int:
        with self._source_lock(source):
            return self.store.delete_by_source(source)

    def stats(self) -> MemoryStats:
        return self.store.get_stats()

    def sources(self) -> list[SourceInfo]:
        return self.store.list_sources()
