from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Request

from ..models import (
    DeleteResponse,
    SearchHit,
    SearchRequest,
    SearchResponse,
    SourceContent,
    SourceSummary,
    StatsResponse,
    ToolCallRequest,
    WriteRequest,
    WriteResponse,
)

router = APIRouter(prefix="/memory", tags=["memory"])


@router.post("/search")
def memory_search(body: SearchRequest, request: Request) -> SearchResponse:
    container = request.app.state.container
    max_results = min(body.max_results, container.config.max_search_results)
    try:
        hits = container.memory.search(body.query, max_results=max_results)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return SearchResponse(query=body.query, results=[SearchHit(**h.to_dict()) for h in hits])


@router.post("/write")
def memory_write(body: WriteRequest, request: Request) -> WriteResponse:
    try:
        result = request.app.state.container.memory.write(body.content, source=body.source, title=body.title)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return WriteResponse(chunks_written=result.chunks_written, source=result.source)


@router.get("/source")
def memory_get(request: Request, source: str = Query(min_length=1)) -> SourceContent:
    content = request.app.state.container.memory.get(source)
    if content is None:
        raise HTTPException(status_code=404, detail=f"No memory found at source '{source}'.")
    return SourceContent(source=source, content=content)


@router.delete("/source")
def memory_delete(request: Request, source: str = Query(min_length=1)) -> DeleteResponse:
    deleted = request.app.state.container.memory.delete(source)
    return DeleteResponse(source=source, deleted=deleted)


@router.get("/stats")
def memory_stats(request: Request) -> StatsResponse:
    stats = request.app.state.container.memory.stats()
    return StatsResponse(total_chunks=stats.total_chunks, unique_sources=stats.unique_sources)


@router.get("/sources")
def memory_sources(request: Request) -> list[SourceSummary]:
    return [
        SourceSummary(source_path=s.source_path, source_type=s.source_type, chunk_count=s.chunk_count)
        for s in request.app.state.container.memory.sources()
    ]


@router.get("/tools")
def memory_tools(request: Request) -> list[dict[str, object]]:
    return request.app.state.container.tools.definitions()


@router.post("/tools/{name}")
def memory_tool_call(name: str, body: ToolCallRequest, request: Request) -> dict[str, object]:
    return request.app.state.container.tools.execute(name, body.arguments)
