"""Persistence codec - converts live progress to and from PersistedSnapshot.

Items are identified by their challenge text (or their index as a string when
the challenge is empty), so a lightly re-ordered document keeps most of its
saved progress. Identifiers that no longer match any task item are dropped.
"""

import logging

from flightdeck.models.checklist import Checklist, ChecklistItem, ChecklistList
from flightdeck.models.snapshot import PersistedSnapshot, Position
from flightdeck.tracking.completion import CompletionTracker
from flightdeck.tracking.navigation import NavigationState

logger = logging.getLogger(__name__)


def _is_ordinal(text: str) -> bool:
    # str.isdigit also accepts superscripts and other non-ASCII digits
    return text.isascii() and text.isdigit()


def compound_key(section_index: int, list_index: int) -> str:
    """Create the ``"{section}_{list}"`` key for a list address."""
    return f"{section_index}_{list_index}"


def parse_compound_key(key: str) -> tuple[int, int] | None:
    """Split a compound key into (section_index, list_index), or None if malformed."""
    parts = key.split("_")
    if len(parts) != 2 or not all(_is_ordinal(part) for part in parts):
        return None
    return int(parts[0]), int(parts[1])


def item_identifier(item: ChecklistItem, item_index: int) -> str:
    """Identifier persisted for a completed item."""
    return item.challenge if item.challenge else str(item_index)


def _resolve_identifier(checklist_list: ChecklistList, identifier: str) -> int | None:
    for item_index, item in enumerate(checklist_list.items):
        if item.is_task and item.challenge == identifier:
            return item_index

    # Numeric fallback ordinal
    if _is_ordinal(identifier):
        item_index = int(identifier)
        if item_index < len(checklist_list.items) and checklist_list.items[item_index].is_task:
            return item_index
    return None


def serialize(
    document_id: str,
    position: Position,
    tracker: CompletionTracker,
) -> PersistedSnapshot:
    """Build the durable snapshot for a checklist's progress.

    Args:
        document_id: Checklist identifier
        position: Current navigation position
        tracker: Completion tracker bound to the checklist

    Returns:
        Snapshot with one compound key per non-empty completed set
    """
    checklist = tracker.checklist
    completed: dict[str, list[str]] = {}

    for (section_index, list_index), item_indices in tracker.as_mapping().items():
        if not item_indices:
            continue
        checklist_list = checklist.sections[section_index].lists[list_index]
        completed[compound_key(section_index, list_index)] = [
            item_identifier(checklist_list.items[item_index], item_index)
            for item_index in sorted(item_indices)
        ]

    return PersistedSnapshot(
        document_id=document_id,
        section_index=position.section_index,
        list_index=position.list_index,
        item_index=position.item_index,
        completed=completed,
    )


def deserialize(snapshot: PersistedSnapshot, checklist: Checklist) -> tuple[Position, CompletionTracker]:
    """Rebuild position and completion from a snapshot against a freshly loaded document.

    Never raises for stale data: unknown lists and identifiers are skipped and
    the position is clamped to the document's shape.

    Args:
        snapshot: Persisted snapshot
        checklist: Freshly loaded document

    Returns:
        (position, tracker)
    """
    tracker = CompletionTracker(checklist)

    for key, identifiers in snapshot.completed.items():
        address = parse_compound_key(key)
        checklist_list = checklist.get_list(*address) if address else None
        if address is None or checklist_list is None:
            logger.debug("Dropping saved progress for unknown list %r", key)
            continue

        for identifier in identifiers:
            item_index = _resolve_identifier(checklist_list, identifier)
            if item_index is None:
                logger.debug("Dropping saved item %r from list %s", identifier, key)
                continue
            tracker.mark(address[0], address[1], item_index)

    navigation = NavigationState(checklist, tracker)
    navigation.move_to(snapshot.section_index, snapshot.list_index, snapshot.item_index)
    return navigation.position, tracker
