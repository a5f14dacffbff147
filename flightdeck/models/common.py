"""Common types and enums shared across all models."""

from enum import Enum


class ItemKind(str, Enum):
    """Checklist item kind. Only tasks can be completed."""

    task = "task"
    note = "note"
    label = "label"
    caution = "caution"
    warning = "warning"


class SectionType(str, Enum):
    """Checklist section type."""

    checklist = "checklist"
    emergency = "emergency"
    reference = "reference"
