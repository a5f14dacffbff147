"""Key-value store protocol used for durable checklist state."""

from typing import Protocol


class KeyValueStore(Protocol):
    """String key-value store with a string-set primitive."""

    def get(self, key: str) -> str | None:
        """Get a value.

        Args:
            key: Key

        Returns:
            Stored string or None if absent
        """
        ...

    def put(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one.

        Args:
            key: Key
            value: String value
        """
        ...

    def remove(self, key: str) -> None:
        """Remove a value. Removing a missing key is not an error.

        Args:
            key: Key
        """
        ...

    def set_members(self, key: str) -> set[str]:
        """Get all members of a string set (empty if absent)."""
        ...

    def set_add(self, key: str, member: str) -> None:
        """Add a member to a string set."""
        ...

    def set_remove(self, key: str, member: str) -> None:
        """Remove a member from a string set."""
        ...

    def ping(self) -> bool:
        """Check store connectivity."""
        ...
