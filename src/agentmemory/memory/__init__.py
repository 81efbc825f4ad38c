"""Memory: SQLite-backed chunk store with vector + keyword search fused by RRF."""

from agentmemory.memory.chunker import chunk_text, merge_chunks
from agentmemory.memory.config import MemoryConfig
from agentmemory.memory.db import get_db_path, init_db
from agentmemory.memory.embeddings import EmbeddingProvider, FastEmbedProvider, OpenAIEmbeddingProvider
from agentmemory.memory.errors import DimensionMismatchError, EmbeddingError, MemoryStoreError
from agentmemory.memory.fusion import fuse
from agentmemory.memory.models import MemoryChunk, MemorySearchResult, MemoryStats, SourceInfo, WriteResult
from agentmemory.memory.service import MemoryService
from agentmemory.memory.store import ChunkStore
from agentmemory.memory.tools import MemoryToolDispatcher

__all__ = [
    "chunk_text",
    "merge_chunks",
    "get_db_path",
    "init_db",
    "fuse",
    "ChunkStore",
    "DimensionMismatchError",
    "EmbeddingError",
    "EmbeddingProvider",
    "FastEmbedProvider",
    "MemoryChunk",
    "MemoryConfig",
    "MemorySearchResult",
    "MemoryService",
    "MemoryStats",
    "MemoryStoreError",
    "MemoryToolDispatcher",
    "OpenAIEmbeddingProvider",
    "SourceInfo",
    "WriteResult",
]
