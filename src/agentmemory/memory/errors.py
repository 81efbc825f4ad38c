"""Exceptions raised by the memory store and its collaborators."""

from __future__ import annotations


class MemoryStoreError(Exception):
    """Base class for memory subsystem failures."""


class DimensionMismatchError(MemoryStoreError, ValueError):
    """An embedding does not have the store's configured dimensionality."""

    def __init__(self, expected: int, actual: int, what: str = "embedding"):
        self.expected = expected
        self.actual = actual
        super().__init__(f"{what} has dimensionality {actual}, expected {expected}")


class EmbeddingError(MemoryStoreError):
    """The embedding provider failed or returned an unusable response."""
