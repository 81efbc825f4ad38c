from __future__ import annotations

from dataclasses import dataclass

from agentmemory.memory.config import MemoryConfig
from agentmemory.memory.embeddings import EmbeddingProvider
from agentmemory.memory.service import MemoryService
from agentmemory.memory.tools import MemoryToolDispatcher

from .config import ApiConfig


@dataclass
class AppState:
    config: ApiConfig
    memory_config: MemoryConfig
    memory: MemoryService
    tools: MemoryToolDispatcher


def build_state(embedder: EmbeddingProvider | None = None) -> AppState:
    memory_config = MemoryConfig.from_env()
    memory = MemoryService(config=memory_config, embedder=embedder)
    memory.store.ensure_initialized()
    return AppState(
        config=ApiConfig.from_env(),
        memory_config=memory_config,
        memory=memory,
        tools=MemoryToolDispatcher(memory),
    )
