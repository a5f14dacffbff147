"""Checklist document models - immutable title → sections → lists → items tree."""

from pydantic import BaseModel, ConfigDict, Field

from flightdeck.models.common import ItemKind, SectionType


class ChecklistItem(BaseModel):
    """A single checklist line."""

    model_config = ConfigDict(frozen=True)

    kind: ItemKind = ItemKind.task
    challenge: str = ""
    response: str = ""
    mandatory: bool = False

    @property
    def is_task(self) -> bool:
        return self.kind == ItemKind.task

    @property
    def is_mandatory_task(self) -> bool:
        return self.is_task and self.mandatory


class ChecklistList(BaseModel):
    """Named group of items within a section."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    items: tuple[ChecklistItem, ...] = Field(default_factory=tuple)


class ChecklistSection(BaseModel):
    """Top-level grouping (e.g. Preflight, Emergency)."""

    model_config = ConfigDict(frozen=True)

    type: SectionType = SectionType.checklist
    title: str = ""
    lists: tuple[ChecklistList, ...] = Field(default_factory=tuple)


class Checklist(BaseModel):
    """Parsed checklist document."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""
    sections: tuple[ChecklistSection, ...] = Field(default_factory=tuple)

    def get_list(self, section_index: int, list_index: int) -> ChecklistList | None:
        """Get a list by address, or None if the address does not exist."""
        if not 0 <= section_index < len(self.sections):
            return None
        lists = self.sections[section_index].lists
        if not 0 <= list_index < len(lists):
            return None
        return lists[list_index]

    def get_item(self, section_index: int, list_index: int, item_index: int) -> ChecklistItem | None:
        """Get an item by address, or None if the address does not exist."""
        checklist_list = self.get_list(section_index, list_index)
        if checklist_list is None or not 0 <= item_index < len(checklist_list.items):
            return None
        return checklist_list.items[item_index]

    def list_addresses(self) -> list[tuple[int, int]]:
        """All (section_index, list_index) pairs in document order."""
        return [
            (section_index, list_index)
            for section_index, section in enumerate(self.sections)
            for list_index in range(len(section.lists))
        ]


class ChecklistInfo(BaseModel):
    """Catalog entry for an available checklist document."""

    checklist_id: str
    title: str
    description: str = ""
