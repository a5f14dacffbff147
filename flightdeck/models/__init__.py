"""Models package - re-exports for convenience."""

from flightdeck.models.checklist import (
    Checklist,
    ChecklistInfo,
    ChecklistItem,
    ChecklistList,
    ChecklistSection,
)
from flightdeck.models.common import ItemKind, SectionType
from flightdeck.models.snapshot import PersistedSnapshot, Position

__all__ = [
    # Common
    "ItemKind",
    "SectionType",
    # Document
    "Checklist",
    "ChecklistInfo",
    "ChecklistItem",
    "ChecklistList",
    "ChecklistSection",
    # Progress
    "PersistedSnapshot",
    "Position",
]
