"""Checklist document loaders."""

import json
import logging
from pathlib import Path
from typing import Protocol

from flightdeck.loading.normalize import DocumentFormatError, normalize_document
from flightdeck.models.checklist import Checklist, ChecklistInfo

logger = logging.getLogger(__name__)


class ChecklistLoader(Protocol):
    """Source of parsed checklist documents."""

    def load(self, identifier: str) -> Checklist | None:
        """Load a checklist document.

        Args:
            identifier: Checklist identifier (file stem)

        Returns:
            Parsed checklist, or None if missing or malformed
        """
        ...

    def list_available(self) -> list[ChecklistInfo]:
        """List checklists that can be loaded.

        Returns:
            Catalog entries sorted by identifier
        """
        ...


class FileChecklistLoader:
    """Loads ``<directory>/<identifier>.json`` documents."""

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    def _path_for(self, identifier: str) -> Path | None:
        if not identifier or "/" in identifier or "\\" in identifier or identifier.startswith("."):
            return None
        return self._directory / f"{identifier}.json"

    def load(self, identifier: str) -> Checklist | None:
        """Load and normalize a checklist, or None if missing or malformed."""
        path = self._path_for(identifier)
        if path is None or not path.is_file():
            logger.warning("Checklist not found: %s", identifier)
            return None

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            return normalize_document(payload)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Checklist %s could not be read: %s", identifier, e)
            return None
        except DocumentFormatError as e:
            logger.warning("Checklist %s is malformed: %s (field: %s)", identifier, e.message, e.field)
            return None

    def list_available(self) -> list[ChecklistInfo]:
        """List every readable document in the directory."""
        if not self._directory.is_dir():
            return []

        results: list[ChecklistInfo] = []
        for path in sorted(self._directory.glob("*.json")):
            checklist = self.load(path.stem)
            if checklist is None:
                continue
            results.append(
                ChecklistInfo(
                    checklist_id=path.stem,
                    # Fall back to a readable form of the file name
                    title=checklist.title or path.stem.replace("_", " ").title(),
                    description=checklist.description,
                )
            )
        return results


class StaticChecklistLoader:
    """In-memory loader serving pre-built documents."""

    def __init__(self, documents: dict[str, Checklist] | None = None) -> None:
        self._documents: dict[str, Checklist] = dict(documents or {})

    def add(self, identifier: str, checklist: Checklist) -> None:
        self._documents[identifier] = checklist

    def load(self, identifier: str) -> Checklist | None:
        return self._documents.get(identifier)

    def list_available(self) -> list[ChecklistInfo]:
        return [
            ChecklistInfo(checklist_id=identifier, title=checklist.title, description=checklist.description)
            for identifier, checklist in sorted(self._documents.items())
        ]
