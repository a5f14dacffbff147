"""Redis-backed key-value store."""

import redis


class RedisKeyValueStore:
    """Redis implementation of KeyValueStore using GET/SET/DEL and SADD/SREM/SMEMBERS."""

    def __init__(self, redis_client: redis.Redis) -> None:
        """Initialize store.

        Args:
            redis_client: Redis client created with ``decode_responses=True``
        """
        self._redis = redis_client

    def get(self, key: str) -> str | None:
        """Get a value."""
        value = self._redis.get(key)
        if value is None:
            return None
        return value.decode("utf-8") if isinstance(value, bytes) else str(value)

    def put(self, key: str, value: str) -> None:
        """Store a value."""
        self._redis.set(key, value)

    def remove(self, key: str) -> None:
        """Remove a value."""
        self._redis.delete(key)

    def set_members(self, key: str) -> set[str]:
        """Get all members of a string set."""
        members = self._redis.smembers(key)
        return {m.decode("utf-8") if isinstance(m, bytes) else str(m) for m in members}

    def set_add(self, key: str, member: str) -> None:
        """Add a member to a string set."""
        self._redis.sadd(key, member)

    def set_remove(self, key: str, member: str) -> None:
        """Remove a member from a string set."""
        self._redis.srem(key, member)

    def ping(self) -> bool:
        """Check Redis connectivity."""
        return bool(self._redis.ping())
