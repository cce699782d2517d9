"""
Clients package for the Taskforce engine.

Contains clients for external services:
- llm_client: Advisory model (OpenAI-compatible chat completions)
- store_client: Store interface and the in-memory implementation
- redis_store: Redis-backed store
"""

from taskforce.clients.llm_client import AdvisoryClient, create_advisory_client
from taskforce.clients.store_client import InMemoryStore, TaskforceStore
from taskforce.clients.redis_store import RedisStore

__all__ = [
    "AdvisoryClient",
    "create_advisory_client",
    "InMemoryStore",
    "TaskforceStore",
    "RedisStore",
]
