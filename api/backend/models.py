from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SearchRequest(BaseModel):
    query: str = Field(min_length=1)
    max_results: int = Field(default=6, ge=1)


class SearchHit(BaseModel):
    content: str
    source_path: str
    title: str | None = None
    chunk_index: int
    score: float


class SearchResponse(BaseModel):
    query: str
    results: list[SearchHit]


class WriteRequest(BaseModel):
    content: str = Field(min_length=1)
    source: str | None = None
    title: str | None = None


class WriteResponse(BaseModel):
    chunks_written: int
    source: str


class SourceContent(BaseModel):
    source: str
    content: str


class DeleteResponse(BaseModel):
    source: str
    deleted: int


class StatsResponse(BaseModel):
    total_chunks: int
    unique_sources: int


class SourceSummary(BaseModel):
    source_path: str
    source_type: str | None = None
    chunk_count: int


class ToolCallRequest(BaseModel):
    arguments: dict[str, Any] = Field(default_factory=dict)
