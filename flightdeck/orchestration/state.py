"""Session state model - immutable snapshots published to observers."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from flightdeck.models.checklist import Checklist, ChecklistItem
from flightdeck.models.common import SectionType
from flightdeck.models.snapshot import Position


class SessionStatus(str, Enum):
    """Session lifecycle state."""

    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a checklist session.

    A new instance replaces the previous one after every operation, so a reader
    holding a snapshot never observes a partially applied change.
    """

    checklist_id: str
    status: SessionStatus = SessionStatus.LOADING
    error: str | None = None
    checklist: Checklist | None = None

    section_index: int = 0
    list_index: int = 0
    item_index: int = 0
    section_type: SectionType | None = None
    list_title: str = ""

    # Active list
    items: tuple[ChecklistItem, ...] = ()
    completed_items: frozenset[int] = frozenset()
    blocked_items: frozenset[int] = frozenset()

    # Whole document
    completed_by_list: Mapping[tuple[int, int], frozenset[int]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    has_multiple_sections: bool = False
    has_multiple_lists: bool = False
    all_required_complete: bool = False

    save_failures: int = 0

    @property
    def position(self) -> Position:
        return Position(self.section_index, self.list_index, self.item_index)

    @property
    def is_ready(self) -> bool:
        return self.status == SessionStatus.READY

    @property
    def title(self) -> str:
        return self.checklist.title if self.checklist is not None else ""
