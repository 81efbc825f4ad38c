"""Embedding providers: FastEmbed (local ONNX) and OpenAI."""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from openai import OpenAI

from agentmemory.memory.config import MemoryConfig
from agentmemory.memory.errors import DimensionMismatchError, EmbeddingError

LOG = logging.getLogger("agentmemory.embeddings")


class EmbeddingProvider(ABC):
    """Maps text to fixed-length float vectors."""

    def __init__(self, dimensions: int):
        self.dimensions = dimensions

    @abstractmethod
    def _embed(self, texts: list[str]) -> list[list[float]]:
        ...

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed texts in order. Any provider failure is raised as EmbeddingError."""
        texts = list(texts)
        if not texts:
            return []
        try:
            vectors = self._embed(texts)
        except EmbeddingError:
            raise
        except Exception as exc:
            raise EmbeddingError(f"{type(self).__name__} failed: {exc}") from exc
        if len(vectors) != len(texts):
            raise EmbeddingError(f"provider returned {len(vectors)} vectors for {len(texts)} texts")
        for vec in vectors:
            if len(vec) != self.dimensions:
                raise DimensionMismatchError(self.dimensions, len(vec), what="provider embedding")
        return vectors

    def embed_one(self, text: str) -> list[float]:
        (vector,) = self.embed([text])
        return vector


class FastEmbedProvider(EmbeddingProvider):
    """Local embeddings via FastEmbed. The model loads on first use."""

    def __init__(
        self,
        model_name: str = "sentence-transformers/all-MiniLM-L6-v2",
        dimensions: int = 384,
        batch_size: int = 32,
    ):
        super().__init__(dimensions)
        self.model_name = model_name
        self.batch_size = batch_size
        self._model = None

    def _get_model(self):
        if self._model is None:
            from fastembed import TextEmbedding
            providers_raw = os.environ.get("AGENTMEMORY_EMBEDDING_PROVIDERS", "CPUExecutionProvider").strip()
            providers = None if not providers_raw or providers_raw.lower() == "auto" else [
                p.strip() for p in providers_raw.split(",") if p.strip()
            ]
            LOG.info("Loading FastEmbed model %s", self.model_name)
            self._model = TextEmbedding(
                model_name=self.model_name,
                max_length=512,
                providers=providers,
            )
        return self._model

    def _embed(self, texts: list[str]) -> list[list[float]]:
        model = self._get_model()
        return [[float(x) for x in emb] for emb in model.embed(texts, batch_size=self.batch_size)]


def get_openai_client() -> OpenAI:
    api_key = os.environ.get("OPENAI_API_KEY", "").strip()
    base_url = os.environ.get("OPENAI_BASE_URL", "").strip()
    if not api_key:
        raise ValueError("Set OPENAI_API_KEY")
    kwargs: dict[str, Any] = {"api_key": api_key}
    if base_url:
        kwargs["base_url"] = base_url
    return OpenAI(**kwargs)


class OpenAIEmbeddingProvider(EmbeddingProvider):
    def __init__(
        self,
        model_name: str = "text-embedding-3-small",
        dimensions: int = 1536,
        client: OpenAI | None = None,
    ):
        super().__init__(dimensions)
        self.model_name = model_name
        self._client = client

    def _embed(self, texts: list[str]) -> list[list[float]]:
        if self._client is None:
            self._client = get_openai_client()
        response = self._client.embeddings.create(
            model=self.model_name,
            input=texts,
            dimensions=self.dimensions,
        )
        data = sorted(response.data, key=lambda d: d.index)
        return [list(d.embedding) for d in data]


def get_embedding_provider(config: MemoryConfig) -> EmbeddingProvider:
    if config.embedding_backend == "openai":
        return OpenAIEmbeddingProvider(model_name=config.embedding_model, dimensions=config.dimensions)
    if config.embedding_backend == "fastembed":
        return FastEmbedProvider(model_name=config.embedding_model, dimensions=config.dimensions)
    raise ValueError(f"Unknown embedding backend: {config.embedding_backend!r}")
