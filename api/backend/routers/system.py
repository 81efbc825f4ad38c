from __future__ import annotations

from fastapi import APIRouter, Request


router = APIRouter()


@router.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/config/public")
def config_public(request: Request) -> dict[str, object]:
    mem = request.app.state.container.memory_config
    return {
        "auth": "disabled_dev_only",
        "cors_origin": request.app.state.container.config.cors_origin,
        "embedding_backend": mem.embedding_backend,
        "embedding_model": mem.embedding_model,
        "dimensions": mem.dimensions,
        "chunk_size": mem.chunk_size,
        "chunk_overlap": mem.chunk_overlap,
        "vector_weight": mem.vector_weight,
        "keyword_weight": mem.keyword_weight,
        "rrf_k": mem.rrf_k,
    }
