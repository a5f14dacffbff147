"""Position and persisted snapshot models."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


@dataclass(frozen=True)
class Position:
    """Navigation position within a checklist document."""

    section_index: int = 0
    list_index: int = 0
    item_index: int = 0


class PersistedSnapshot(BaseModel):
    """Durable record of one checklist's progress.

    Serialized with camelCase keys:

        {"documentId": "demo", "sectionIndex": 0, "listIndex": 0, "itemIndex": 2,
         "completed": {"0_0": ["Fuel quantity", "Master switch"]}}

    ``completed`` maps a compound ``"{section}_{list}"`` key to item identifiers
    (challenge text, or the item index as a string when the challenge is empty).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    document_id: str = ""
    section_index: int = 0
    list_index: int = 0
    item_index: int = 0
    completed: dict[str, list[str]] = Field(default_factory=dict)

    @property
    def position(self) -> Position:
        return Position(self.section_index, self.list_index, self.item_index)

    def to_json(self) -> str:
        """Serialize to the persisted JSON format."""
        return self.model_dump_json(by_alias=True)
