from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ApiConfig:
    app_name: str = "agentmemory-api"
    cors_origin: str = "http://localhost:5173"
    max_search_results: int = 50

    @classmethod
    def from_env(cls) -> "ApiConfig":
        return cls(
            cors_origin=os.environ.get("AGENTMEMORY_CORS_ORIGIN", "http://localhost:5173").strip(),
            max_search_results=int(os.environ.get("AGENTMEMORY_MAX_SEARCH_RESULTS", "50")),
        )
