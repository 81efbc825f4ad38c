"""Records passed between the store, the search channels and the facade."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class MemoryChunk:
    """A stored slice of a source document with its embedding."""

    content: str
    source_path: str
    embedding: list[float] = field(default_factory=list, repr=False)
    chunk_index: int = 0
    source_type: str | None = None
    title: str | None = None
    # Leading characters shared with the previous chunk of the same source.
    overlap_chars: int = 0
    indexed_at: datetime | None = None
    id: int | None = None


@dataclass
class MemorySearchResult:
    content: str
    source_path: str
    title: str | None
    chunk_index: int
    score: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class WriteResult:
    chunks_written: int
    source: str


@dataclass(frozen=True)
class MemoryStats:
    total_chunks: int
    unique_sources: int


@dataclass(frozen=True)
class SourceInfo:
    source_path: str
    source_type: str | None
    chunk_count: int
