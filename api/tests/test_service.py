from __future__ import annotations

import threading
from datetime import datetime, timezone

import pytest

from agentmemory.memory.errors import DimensionMismatchError, EmbeddingError
from agentmemory.memory.service import MemoryService, classify_source, default_source

from conftest import FailingEmbedder, HashingEmbedder

LONG_TEXT = (
    "Project kickoff notes. The team agreed to ship the parser first.\n\n"
    "Alice prefers tabs over spaces and wants strict type checking.\n\n"
    "Deployment happens every Thursday after the standup meeting.\n\n"
    "The cache layer uses SQLite with write-ahead logging enabled.\n"
)


def test_write_then_get_round_trips(service: MemoryService):
    result = service.write(LONG_TEXT, source="notes/project.md", title="Kickoff")
    assert result.source == "notes/project.md"
    assert result.chunks_written > 1
    assert service.get("notes/project.md") == LONG_TEXT


def test_chunk_indexes_are_contiguous(service: MemoryService):
    result = service.write(LONG_TEXT, source="notes/project.md")
    chunks = service.store.get_by_source("notes/project.md")
    assert [c.chunk_index for c in chunks] == list(range(result.chunks_written))
    assert {c.title for c in chunks} == {None}


def test_overwrite_replaces_content(service: MemoryService):
    service.write(LONG_TEXT, source="notes/project.md")
    service.write("Short replacement.", source="notes/project.md")
    assert service.get("notes/project.md") == "Short replacement."
    assert [c.chunk_index for c in service.store.get_by_source("notes/project.md")] == [0]


def test_get_missing_source_returns_none(service: MemoryService):
    assert service.get("missing.md") is None


def test_default_source_is_daily_log(service: MemoryService):
    result = service.write("remember the milk")
    assert result.source == default_source()
    (chunk,) = service.store.get_by_source(result.source)
    assert chunk.source_type == "daily"


def test_default_source_format():
    assert default_source(datetime(2026, 2, 14, 23, 59, tzinfo=timezone.utc)) == "memory/2026-02-14.md"


@pytest.mark.parametrize(
    "source,expected",
    [("MEMORY.md", "longterm"), ("agents/x/memory.md", "longterm"), ("memory/2026-01-01.md", "daily"), ("notes.md", "daily")],
)
def test_classify_source(source: str, expected: str):
    assert classify_source(source) == expected


def test_longterm_source_type_stored(service: MemoryService):
    service.write("User's name is Sam.", source="MEMORY.md")
    (chunk,) = service.store.get_by_source("MEMORY.md")
    assert chunk.source_type == "longterm"


def test_empty_content_rejected_and_prior_content_kept(service: MemoryService):
    service.write("keep me", source="a.md")
    with pytest.raises(ValueError):
        service.write("   ", source="a.md")
    assert service.get("a.md") == "keep me"


def test_embedding_failure_leaves_prior_content(memory_config, store, embedder):
    MemoryService(config=memory_config, store=store, embedder=embedder).write("original", source="a.md")
    broken = MemoryService(config=memory_config, store=store, embedder=FailingEmbedder())
    with pytest.raises(EmbeddingError):
        broken.write("replacement", source="a.md")
    with pytest.raises(EmbeddingError):
        broken.search("original content")
    assert broken.get("a.md") == "original"


def test_embedder_dimension_mismatch(memory_config, store):
    with pytest.raises(DimensionMismatchError):
        MemoryService(config=memory_config, store=store, embedder=HashingEmbedder(dimensions=8))


def test_chunks_embedded_in_order(service: MemoryService, embedder: HashingEmbedder):
    service.write(LONG_TEXT, source="notes/project.md")
    chunks = service.store.get_by_source("notes/project.md")
    assert embedder.calls[-1] == [c.content for c in chunks]
    for chunk, vector in zip(chunks, embedder.embed([c.content for c in chunks])):
        assert chunk.embedding == pytest.approx(vector)


def test_search_finds_relevant_chunk(service: MemoryService):
    service.write("The cat likes tuna and salmon.", source="pets/cat.md")
    service.write("Our dog plays fetch in the park.", source="pets/dog.md")
    service.write("Quarterly revenue grew eight percent.", source="work/finance.md")
    results = service.search("dog park fetch", max_results=2)
    assert results[0].source_path == "pets/dog.md"
    assert len(results) <= 2
    scores = [r.score for r in results]
    assert scores == sorted(scores, reverse=True)


def test_search_uses_vector_channel_without_keywords(service: MemoryService):
    service.write("ox is in it", source="short.md")
    results = service.search("ox is", max_results=3)
    assert [r.source_path for r in results] == ["short.md"]
    assert results[0].score == pytest.approx(service.config.vector_weight / (service.config.rrf_k + 1))


def test_search_blank_query_and_empty_store(service: MemoryService, embedder: HashingEmbedder):
    assert service.search("   ") == []
    assert embedder.calls == []
    assert service.search("anything at all") == []


def test_search_rejects_bad_max_results(service: MemoryService):
    with pytest.raises(ValueError):
        service.search("query", max_results=0)


def test_delete_and_stats(service: MemoryService):
    service.write(LONG_TEXT, source="a.md")
    service.write("tiny", source="b.md")
    stats = service.stats()
    assert stats.unique_sources == 2
    deleted = service.delete("a.md")
    assert deleted == stats.total_chunks - 1
    assert service.get("a.md") is None
    assert [s.source_path for s in service.sources()] == ["b.md"]


def test_source_locks_released_after_use(service: MemoryService):
    for i in range(20):
        service.delete(f"never-written-{i}.md")
    service.write("some content", source="a.md")
    assert service._source_locks == {}


def test_source_lock_shared_while_held(service: MemoryService):
    with service._source_lock("a.md"):
        assert list(service._source_locks) == ["a.md"]
        service.write("other source is not blocked", source="b.md")
        assert list(service._source_locks) == ["a.md"]
    assert service._source_locks == {}


def test_concurrent_writes_to_one_source(service: MemoryService):
    threads = [
        threading.Thread(target=service.write, args=(f"version {i} " * 20,), kwargs={"source": "shared.md"})
        for i in range(8)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    text = service.get("shared.md")
    assert text in {f"version {i} " * 20 for i in range(8)}
    chunks = service.store.get_by_source("shared.md")
    assert [c.chunk_index for c in chunks] == list(range(len(chunks)))
    assert service._source_locks == {}
