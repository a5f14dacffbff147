"""Navigation state - current section/list/item position with bounds checks."""

from flightdeck.models.checklist import Checklist, ChecklistList
from flightdeck.models.snapshot import Position
from flightdeck.tracking.completion import CompletionTracker


def _clamp(index: int, length: int) -> int:
    return index if 0 <= index < length else 0


class NavigationState:
    """Current reading position within a checklist document.

    Section and list indices are always valid for the bound document (or 0 when
    the document has no sections/lists). The item index is either valid for the
    current list or 0.
    """

    def __init__(self, checklist: Checklist, tracker: CompletionTracker) -> None:
        self._checklist = checklist
        self._tracker = tracker
        self.section_index = 0
        self.list_index = 0
        self.item_index = 0

    @property
    def position(self) -> Position:
        return Position(self.section_index, self.list_index, self.item_index)

    @property
    def current_list(self) -> ChecklistList | None:
        return self._checklist.get_list(self.section_index, self.list_index)

    def _section_count(self) -> int:
        return len(self._checklist.sections)

    def _list_count(self) -> int:
        if not self._checklist.sections:
            return 0
        return len(self._checklist.sections[self.section_index].lists)

    def _item_count(self) -> int:
        current = self.current_list
        return len(current.items) if current is not None else 0

    def _point_at_first_incomplete(self) -> None:
        first = self._tracker.first_incomplete(self.section_index, self.list_index)
        self.item_index = first if first is not None else 0

    def select_section(self, index: int) -> bool:
        """Switch section, resetting the list and re-pointing the item.

        Returns:
            True if the position changed
        """
        if index == self.section_index or not 0 <= index < self._section_count():
            return False
        self.section_index = index
        self.list_index = 0
        self._point_at_first_incomplete()
        return True

    def select_list(self, index: int) -> bool:
        """Switch list within the current section and re-point the item."""
        if index == self.list_index or not 0 <= index < self._list_count():
            return False
        self.list_index = index
        self._point_at_first_incomplete()
        return True

    def select_item(self, index: int) -> bool:
        """Point at an item of the current list. Out-of-range requests are rejected."""
        if not 0 <= index < self._item_count():
            return False
        self.item_index = index
        return True

    def move_to(self, section_index: int, list_index: int, item_index: int) -> None:
        """Jump to an address, clamping each index against the document shape."""
        self.section_index = _clamp(section_index, self._section_count())
        self.list_index = _clamp(list_index, self._list_count())
        self.item_index = _clamp(item_index, self._item_count())

    def clamp(self) -> None:
        """Re-validate indices after a structural change."""
        self.move_to(self.section_index, self.list_index, self.item_index)

    def rebind(self, checklist: Checklist, tracker: CompletionTracker) -> None:
        """Bind to a reloaded document, keeping the position where it still exists."""
        self._checklist = checklist
        self._tracker = tracker
        self.clamp()
