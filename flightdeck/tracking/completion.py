"""Completion tracking for a checklist document.

Completed items are tracked per (section_index, list_index) as a set of item
indices. Only task items can ever be members of a set.
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from flightdeck.models.checklist import Checklist
from flightdeck.models.common import SectionType

ListKey = tuple[int, int]


class CompletionTracker:
    """Per-list completed item sets for one checklist document."""

    def __init__(self, checklist: Checklist) -> None:
        self._checklist = checklist
        self._completed: dict[ListKey, set[int]] = {key: set() for key in checklist.list_addresses()}

    @property
    def checklist(self) -> Checklist:
        return self._checklist

    def _is_task(self, section_index: int, list_index: int, item_index: int) -> bool:
        item = self._checklist.get_item(section_index, list_index, item_index)
        return item is not None and item.is_task

    def toggle(self, section_index: int, list_index: int, item_index: int) -> bool | None:
        """Flip completion of a task item.

        Returns:
            New membership, or None if the address is not a task item
        """
        if not self._is_task(section_index, list_index, item_index):
            return None

        completed = self._completed[(section_index, list_index)]
        if item_index in completed:
            completed.remove(item_index)
            return False
        completed.add(item_index)
        return True

    def mark(self, section_index: int, list_index: int, item_index: int) -> bool:
        """Mark a task item complete without toggling. Returns False if rejected."""
        if not self._is_task(section_index, list_index, item_index):
            return False
        self._completed[(section_index, list_index)].add(item_index)
        return True

    def mark_all(self, section_index: int, list_index: int) -> int:
        """Mark every task item of a list complete.

        Returns:
            Number of items newly marked
        """
        checklist_list = self._checklist.get_list(section_index, list_index)
        if checklist_list is None:
            return 0

        completed = self._completed[(section_index, list_index)]
        task_indices = {idx for idx, item in enumerate(checklist_list.items) if item.is_task}
        added = len(task_indices - completed)
        completed |= task_indices
        return added

    def is_complete(self, section_index: int, list_index: int, item_index: int) -> bool:
        return item_index in self._completed.get((section_index, list_index), ())

    def completed_in(self, section_index: int, list_index: int) -> frozenset[int]:
        return frozenset(self._completed.get((section_index, list_index), ()))

    def as_mapping(self) -> Mapping[ListKey, frozenset[int]]:
        """Immutable copy of every completed set, keyed by list address."""
        return MappingProxyType({key: frozenset(items) for key, items in self._completed.items()})

    def copy(self) -> "CompletionTracker":
        clone = CompletionTracker(self._checklist)
        clone._completed = {key: set(items) for key, items in self._completed.items()}
        return clone

    def all_mandatory_complete(self) -> bool:
        """True when every mandatory task of the document is complete."""
        for section_index, section in enumerate(self._checklist.sections):
            for list_index, checklist_list in enumerate(section.lists):
                completed = self._completed[(section_index, list_index)]
                for item_index, item in enumerate(checklist_list.items):
                    if item.is_mandatory_task and item_index not in completed:
                        return False
        return True

    def _incomplete_tasks(self, section_index: int, list_index: int) -> Iterable[int]:
        checklist_list = self._checklist.get_list(section_index, list_index)
        if checklist_list is None:
            return
        completed = self._completed[(section_index, list_index)]
        for item_index, item in enumerate(checklist_list.items):
            if item.is_task and item_index not in completed:
                yield item_index

    def first_incomplete(self, section_index: int, list_index: int) -> int | None:
        """Smallest incomplete task index in a list, or None."""
        return next(iter(self._incomplete_tasks(section_index, list_index)), None)

    def first_skipped_after(self, current_index: int, section_index: int, list_index: int) -> int | None:
        """First incomplete task strictly after ``current_index``; no wrap-around."""
        for item_index in self._incomplete_tasks(section_index, list_index):
            if item_index > current_index:
                return item_index
        return None

    def first_incomplete_other_than(self, current_index: int, section_index: int, list_index: int) -> int | None:
        """First incomplete task anywhere in the list that is not ``current_index``."""
        for item_index in self._incomplete_tasks(section_index, list_index):
            if item_index != current_index:
                return item_index
        return None

    def first_incomplete_mandatory(self) -> tuple[int, int, int] | None:
        """Address of the first incomplete mandatory task in document order."""
        for section_index, list_index in self._checklist.list_addresses():
            checklist_list = self._checklist.sections[section_index].lists[list_index]
            for item_index in self._incomplete_tasks(section_index, list_index):
                if checklist_list.items[item_index].mandatory:
                    return (section_index, list_index, item_index)
        return None

    def first_incomplete_in_sections(
        self, section_types: Iterable[SectionType] = (SectionType.checklist,)
    ) -> tuple[int, int, int] | None:
        """Address of the first incomplete task within sections of the given types."""
        wanted = set(section_types)
        for section_index, list_index in self._checklist.list_addresses():
            if self._checklist.sections[section_index].type not in wanted:
                continue
            item_index = self.first_incomplete(section_index, list_index)
            if item_index is not None:
                return (section_index, list_index, item_index)
        return None

    def blocked_items(self, section_index: int, list_index: int) -> frozenset[int]:
        """Incomplete tasks that follow the first incomplete mandatory task of a list."""
        checklist_list = self._checklist.get_list(section_index, list_index)
        if checklist_list is None:
            return frozenset()

        blocker: int | None = None
        blocked: set[int] = set()
        for item_index in self._incomplete_tasks(section_index, list_index):
            if blocker is None:
                if checklist_list.items[item_index].mandatory:
                    blocker = item_index
                continue
            blocked.add(item_index)
        return frozenset(blocked)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompletionTracker):
            return NotImplemented
        return self._checklist == other._checklist and self._completed == other._completed
