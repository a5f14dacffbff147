"""Normalization of checklist JSON documents into the canonical model.

Two document shapes are accepted and folded into one schema:

- canonical: ``sections[].type/title/lists[].title/items[].kind/challenge/...``
- authoring: ``sections[].sectionType/sectionTitle/lists[].listTitle/listItems[].listItemType/...``

Unknown item kinds become tasks; reference item kinds become notes.
"""

from typing import Any

from pydantic import ValidationError

from flightdeck.models.checklist import Checklist, ChecklistItem, ChecklistList, ChecklistSection
from flightdeck.models.common import ItemKind, SectionType

_INFORMATIONAL_ALIASES = {"reference": ItemKind.note, "referencenote": ItemKind.note}


class DocumentFormatError(Exception):
    """Raised when a checklist document cannot be normalized."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


def _pick(payload: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


def _as_list(value: Any, field: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DocumentFormatError(f"{field} must be an array", field=field)
    return value


def _as_dict(value: Any, field: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DocumentFormatError(f"{field} must be an object", field=field)
    return value


def normalize_item_kind(raw: Any) -> ItemKind:
    """Map a raw item type string to an ItemKind (case-insensitive)."""
    value = str(raw or "task").strip().lower()
    if value in _INFORMATIONAL_ALIASES:
        return _INFORMATIONAL_ALIASES[value]
    try:
        return ItemKind(value)
    except ValueError:
        return ItemKind.task


def normalize_section_type(raw: Any) -> SectionType:
    """Map a raw section type string to a SectionType, defaulting to checklist."""
    try:
        return SectionType(str(raw or "checklist").strip().lower())
    except ValueError:
        return SectionType.checklist


_TRUE_STRINGS = {"true", "yes", "1"}
_FALSE_STRINGS = {"false", "no", "0", ""}


def _as_flag(value: Any, field: str) -> bool:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise DocumentFormatError(f"{field} must be a boolean", field=field)
    return bool(value)


def _normalize_item(payload: Any, field: str) -> ChecklistItem:
    item = _as_dict(payload, field)
    return ChecklistItem(
        kind=normalize_item_kind(_pick(item, "kind", "listItemType", "type")),
        challenge=str(_pick(item, "challenge", "challengeText", "text", default="")),
        response=str(_pick(item, "response", "responseText", default="")),
        mandatory=_as_flag(_pick(item, "mandatory", "isRequired", default=False), f"{field}.mandatory"),
    )


def _normalize_list(payload: Any, field: str) -> ChecklistList:
    checklist_list = _as_dict(payload, field)
    raw_items = _as_list(_pick(checklist_list, "items", "listItems"), f"{field}.items")
    return ChecklistList(
        title=str(_pick(checklist_list, "title", "listTitle", default="")),
        items=tuple(_normalize_item(raw, f"{field}.items[{idx}]") for idx, raw in enumerate(raw_items)),
    )


def _normalize_section(payload: Any, field: str) -> ChecklistSection:
    section = _as_dict(payload, field)
    raw_lists = _as_list(_pick(section, "lists"), f"{field}.lists")
    return ChecklistSection(
        type=normalize_section_type(_pick(section, "type", "sectionType")),
        title=str(_pick(section, "title", "sectionTitle", default="")),
        lists=tuple(_normalize_list(raw, f"{field}.lists[{idx}]") for idx, raw in enumerate(raw_lists)),
    )


def normalize_document(payload: Any) -> Checklist:
    """Normalize a decoded JSON document into a Checklist.

    Args:
        payload: Decoded JSON value

    Returns:
        Immutable Checklist

    Raises:
        DocumentFormatError: If the document shape is not recognised
    """
    document = _as_dict(payload, "document")
    if "title" not in document:
        raise DocumentFormatError("Missing required field: title", field="title")

    raw_sections = _as_list(document.get("sections"), "sections")
    try:
        return Checklist(
            title=str(document["title"]),
            description=str(document.get("description") or ""),
            sections=tuple(
                _normalize_section(raw, f"sections[{idx}]") for idx, raw in enumerate(raw_sections)
            ),
        )
    except ValidationError as e:
        raise DocumentFormatError(f"Invalid checklist document: {e}") from e
