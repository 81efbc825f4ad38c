"""Weighted Reciprocal Rank Fusion of the vector and keyword rankings."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from agentmemory.memory.models import MemorySearchResult

VECTOR_WEIGHT = 0.7
KEYWORD_WEIGHT = 0.3
RRF_K = 60


def fuse(
    vector_ranked: Sequence[MemorySearchResult],
    keyword_ranked: Sequence[MemorySearchResult],
    vector_weight: float = VECTOR_WEIGHT,
    keyword_weight: float = KEYWORD_WEIGHT,
    rrf_k: int = RRF_K,
    max_results: int = 6,
) -> list[MemorySearchResult]:
    """
    Merge two ranked lists by rank position, not by their native scores.

    The item at zero-based rank i of a list contributes weight / (rrf_k + i + 1).
    Items are keyed by (source_path, chunk_index); an item found by both
    channels gets the sum. Returned results are copies whose score is the
    fused score, highest first. Equal scores keep first-seen order.
    """
    if rrf_k < 0:
        raise ValueError(f"rrf_k must be non-negative, got {rrf_k}")
    if max_results <= 0:
        return []

    fused: dict[tuple[str, int], tuple[MemorySearchResult, float]] = {}
    for weight, ranked in ((vector_weight, vector_ranked), (keyword_weight, keyword_ranked)):
        for i, result in enumerate(ranked):
            key = (result.source_path, result.chunk_index)
            partial = weight / (rrf_k + i + 1)
            if key in fused:
                first, score = fused[key]
                fused[key] = (first, score + partial)
            else:
                fused[key] = (result, partial)

    ordered = sorted(fused.values(), key=lambda item: item[1], reverse=True)
    return [replace(result, score=score) for result, score in ordered[:max_results]]
