"""Tool-call surface (memory_search, memory_write, memory_get) for LLM agents."""

from __future__ import annotations

import logging
from typing import Any

from agentmemory.memory.service import MemoryService

LOG = logging.getLogger("agentmemory.tools")

NO_RESULTS = "No relevant information found in memory."
MAX_SEARCH_RESULTS = 50


class MemoryToolDispatcher:
    """Function definitions plus execution against a MemoryService."""

    def __init__(self, service: MemoryService):
        self._service = service

    def definitions(self) -> list[dict[str, Any]]:
        return [
            {
                "type": "function",
                "name": "memory_search",
                "description": (
                    "Search persistent memory for relevant information. Use this to find past context, "
                    "decisions, preferences, or facts."
                ),
                "parameters": {
                    "type": "object",
                    "properties": {
                        "query": {"type": "string", "description": "The search query to find relevant information in memory"},
                        "max_results": {
                            "type": "integer",
                            "minimum": 1,
                            "maximum": MAX_SEARCH_RESULTS,
                            "description": "Maximum number of results to return (default 6)",
                        },
                    },
                    "required": ["query"],
                },
            },
            {
                "type": "function",
                "name": "memory_write",
                "description": (
                    "Write content to persistent memory. Use this to save important decisions, preferences, "
                    "facts, or context for future reference. Write to 'MEMORY.md' for long-term durable facts, "
                    "or let it default to the daily log."
                ),
                "parameters": {
                    "type": "object",
                    "properties": {
                        "content": {"type": "string", "description": "The content to write to memory"},
                        "source": {"type": "string", "description": "Source path for the memory entry (default: daily log)"},
                        "title": {"type": "string", "description": "Optional title for the memory entry"},
                    },
                    "required": ["content"],
                },
            },
            {
                "type": "function",
                "name": "memory_get",
                "description": "Read a specific memory source by its path. Use this to review what's already stored there.",
                "parameters": {
                    "type": "object",
                    "properties": {
                        "source": {
                            "type": "string",
                            "description": "The source path to read (e.g., 'MEMORY.md' or 'memory/2026-02-14.md')",
                        },
                    },
                    "required": ["source"],
                },
            },
        ]

    def execute(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        handlers = {
            "memory_search": self._search,
            "memory_write": self._write,
            "memory_get": self._get,
        }
        handler = handlers.get(name)
        if handler is None:
            return {"ok": False, "error": f"Unknown tool: {name}"}
        try:
            return {"ok": True, "result": handler(arguments)}
        except Exception as exc:
            LOG.warning("Tool %s failed: %s", name, exc, exc_info=True)
            return {"ok": False, "error": str(exc)}

    def _search(self, arguments: dict[str, Any]) -> str:
        query = str(arguments.get("query", "")).strip()
        if not query:
            raise ValueError("query is required")
        raw = arguments.get("max_results")
        max_results = 6 if raw is None else min(int(raw), MAX_SEARCH_RESULTS)
        results = self._service.search(query, max_results=max_results)
        if not results:
            return NO_RESULTS
        return "\n\n---\n\n".join(
            f"**Result {i}** (score: {r.score:.3f}, source: {r.source_path})\n{r.content}"
            for i, r in enumerate(results, start=1)
        )

    def _write(self, arguments: dict[str, Any]) -> str:
        content = str(arguments.get("content", "") or "")
        source = arguments.get("source") or None
        title = arguments.get("title") or None
        result = self._service.write(content, source=source, title=title)
        return f"Wrote {result.chunks_written} chunk(s) to memory at '{result.source}'."

    def _get(self, arguments: dict[str, Any]) -> str:
        source = str(arguments.get("source", "")).strip()
        if not source:
            raise ValueError("source is required")
        text = self._service.get(source)
        if text is None:
            return f"No memory found at source '{source}'."
        return text
