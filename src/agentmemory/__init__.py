"""agentmemory: durable, embedding-indexed memory for LLM agents."""

__version__ = "0.1.0"
