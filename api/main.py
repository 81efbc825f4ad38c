from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agentmemory.memory.embeddings import EmbeddingProvider

from .backend.config import ApiConfig
from .backend.routers import memory, system
from .backend.state import build_state


def create_app(embedder: EmbeddingProvider | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        load_dotenv()
        app.state.container = build_state(embedder=embedder)
        logging.getLogger("agentmemory.api").info("API startup complete")
        yield

    app = FastAPI(title="agentmemory-api", version="0.1.0", lifespan=lifespan)

    config = ApiConfig.from_env()
    cors_origins = [o.strip() for o in config.cors_origin.split(",") if o.strip()]
    if not cors_origins:
        cors_origins = ["http://localhost:5173"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(system.router, prefix="/api/v1")
    app.include_router(memory.router, prefix="/api/v1")

    return app


app = create_app()


def main() -> int:
    import uvicorn

    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
