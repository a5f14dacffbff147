"""In-memory implementations of store interfaces."""

import threading


class InMemoryKeyValueStore:
    """In-memory implementation of KeyValueStore."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._sets: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        """Get a value."""
        with self._lock:
            return self._values.get(key)

    def put(self, key: str, value: str) -> None:
        """Store a value."""
        with self._lock:
            self._values[key] = value

    def remove(self, key: str) -> None:
        """Remove a value."""
        with self._lock:
            self._values.pop(key, None)
            self._sets.pop(key, None)

    def set_members(self, key: str) -> set[str]:
        """Get a copy of a string set."""
        with self._lock:
            return set(self._sets.get(key, ()))

    def set_add(self, key: str, member: str) -> None:
        """Add a member to a string set."""
        with self._lock:
            self._sets.setdefault(key, set()).add(member)

    def set_remove(self, key: str, member: str) -> None:
        """Remove a member from a string set."""
        with self._lock:
            members = self._sets.get(key)
            if members is None:
                return
            members.discard(member)
            if not members:
                del self._sets[key]

    def ping(self) -> bool:
        return True
