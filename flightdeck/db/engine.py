"""State store factory."""

import redis

from flightdeck.config import Settings
from flightdeck.db.inmemory import InMemoryKeyValueStore
from flightdeck.db.kv import KeyValueStore
from flightdeck.db.redis_store import RedisKeyValueStore


def create_kv_store_from_settings(settings: Settings) -> KeyValueStore:
    """Create the key-value store for durable checklist state.

    Uses Redis when REDIS_URL is configured, otherwise an in-memory store
    (state then lives for the lifetime of the process).

    Args:
        settings: Application settings

    Returns:
        Key-value store
    """
    if settings.redis_url:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        return RedisKeyValueStore(client)
    return InMemoryKeyValueStore()
