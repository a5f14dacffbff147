"""Checklist state store - one record per checklist plus a side index."""

import logging

from pydantic import ValidationError

from flightdeck.db.kv import KeyValueStore
from flightdeck.models.snapshot import PersistedSnapshot

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "checklist_"
DEFAULT_INDEX_KEY = "saved_checklists"


class ChecklistStateStore:
    """Reads and writes PersistedSnapshot records through a KeyValueStore.

    Each checklist's record lives under ``<prefix><checklist_id>``. The set of
    checklist ids with saved state lives under a fixed index key, so callers
    can tell whether a checklist is resumable without reading every record.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        index_key: str = DEFAULT_INDEX_KEY,
    ) -> None:
        self._store = store
        self._key_prefix = key_prefix
        self._index_key = index_key

    @property
    def kv_store(self) -> KeyValueStore:
        return self._store

    def key_for(self, checklist_id: str) -> str:
        return f"{self._key_prefix}{checklist_id}"

    def save(self, snapshot: PersistedSnapshot) -> None:
        """Write a checklist's record and register it in the index.

        Raises:
            Exception: Whatever the underlying store raises; callers decide how to degrade
        """
        self._store.put(self.key_for(snapshot.document_id), snapshot.to_json())
        self._store.set_add(self._index_key, snapshot.document_id)

    def load(self, checklist_id: str) -> PersistedSnapshot | None:
        """Load a checklist's record.

        Returns:
            Snapshot, or None when missing, unreadable or unparseable
        """
        try:
            raw = self._store.get(self.key_for(checklist_id))
        except Exception:
            logger.exception("Failed to read saved state for %s", checklist_id)
            return None

        if raw is None:
            return None

        try:
            snapshot = PersistedSnapshot.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding unparseable saved state for %s: %s", checklist_id, e)
            return None

        if not snapshot.document_id:
            snapshot = snapshot.model_copy(update={"document_id": checklist_id})
        return snapshot

    def clear(self, checklist_id: str) -> None:
        """Remove a checklist's record and its index entry."""
        self._store.remove(self.key_for(checklist_id))
        self._store.set_remove(self._index_key, checklist_id)

    def saved_ids(self) -> set[str]:
        """Ids of every checklist that currently has saved state."""
        try:
            return self._store.set_members(self._index_key)
        except Exception:
            logger.exception("Failed to read saved checklist index")
            return set()

    def has_saved(self, checklist_id: str) -> bool:
        return checklist_id in self.saved_ids()
