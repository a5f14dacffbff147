"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from flightdeck.db.inmemory import InMemoryKeyValueStore
from flightdeck.loading.loader import FileChecklistLoader, StaticChecklistLoader
from flightdeck.models import Checklist, ChecklistItem, ChecklistList, ChecklistSection, ItemKind, SectionType
from flightdeck.orchestration.registry import SessionRegistry
from flightdeck.orchestration.session import ChecklistSession
from flightdeck.persistence.saver import BackgroundSaver
from flightdeck.persistence.state_store import ChecklistStateStore

CHECKLISTS_DIR = Path(__file__).resolve().parents[1] / "checklists"


def task(challenge: str, mandatory: bool = False, response: str = "CHECK") -> ChecklistItem:
    return ChecklistItem(kind=ItemKind.task, challenge=challenge, response=response, mandatory=mandatory)


def info(kind: ItemKind, text: str) -> ChecklistItem:
    return ChecklistItem(kind=kind, challenge=text)


@pytest.fixture
def scenario_checklist() -> Checklist:
    """One section, one list: [mandatory, mandatory, optional]."""
    return Checklist(
        title="Scenario",
        sections=(
            ChecklistSection(
                title="Main",
                lists=(ChecklistList(title="Only", items=(task("Battery", True), task("Fuel", True), task("Lights"))),),
            ),
        ),
    )


@pytest.fixture
def multi_section_checklist() -> Checklist:
    """Two checklist sections, one emergency section and one reference section.

    Layout (s, l): items
        (0, 0) Cabin:        Master* | note | Fuel quantity | Flaps
        (0, 1) Exterior:     label | Fuel vent | Oil level*
        (1, 0) Before start: note | Seats* | Brakes
        (2, 0) Engine fire:  Mixture | Fuel valve
        (3, 0) Speeds:       note | note

    ``*`` marks mandatory tasks.
    """
    return Checklist(
        title="Preflight",
        description="Multi-section test document",
        sections=(
            ChecklistSection(
                type=SectionType.checklist,
                title="Preflight",
                lists=(
                    ChecklistList(
                        title="Cabin",
                        items=(
                            task("Master", True),
                            info(ItemKind.note, "Check placards"),
                            task("Fuel quantity"),
                            task("Flaps"),
                        ),
                    ),
                    ChecklistList(
                        title="Exterior",
                        items=(
                            info(ItemKind.label, "Left wing"),
                            task("Fuel vent"),
                            task("Oil level", True),
                        ),
                    ),
                ),
            ),
            ChecklistSection(
                type=SectionType.checklist,
                title="Start",
                lists=(
                    ChecklistList(
                        title="Before start",
                        items=(info(ItemKind.note, "Brief passengers"), task("Seats", True), task("Brakes")),
                    ),
                ),
            ),
            ChecklistSection(
                type=SectionType.emergency,
                title="Emergency",
                lists=(ChecklistList(title="Engine fire", items=(task("Mixture"), task("Fuel valve"))),),
            ),
            ChecklistSection(
                type=SectionType.reference,
                title="Reference",
                lists=(ChecklistList(title="Speeds", items=(info(ItemKind.note, "Vr"), info(ItemKind.note, "Vy"))),),
            ),
        ),
    )


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def state_store(kv_store: InMemoryKeyValueStore) -> ChecklistStateStore:
    return ChecklistStateStore(kv_store)


@pytest.fixture
def saver(state_store: ChecklistStateStore) -> Iterator[BackgroundSaver]:
    saver = BackgroundSaver(state_store)
    yield saver
    saver.shutdown()


@pytest.fixture
def loader(scenario_checklist: Checklist, multi_section_checklist: Checklist) -> StaticChecklistLoader:
    return StaticChecklistLoader({"demo": scenario_checklist, "preflight": multi_section_checklist})


@pytest.fixture
def make_session(
    loader: StaticChecklistLoader,
    state_store: ChecklistStateStore,
    saver: BackgroundSaver,
) -> Callable[..., ChecklistSession]:
    """Factory for loaded sessions sharing one loader, store and saver.

    Usage:
        session = make_session("preflight", resume=True, auto_advance_lists=True)
    """

    def _make(checklist_id: str = "demo", resume: bool = False, **kwargs: Any) -> ChecklistSession:
        session = ChecklistSession(checklist_id, loader, state_store, saver, **kwargs)
        session.load(resume=resume)
        return session

    return _make


@pytest.fixture
def file_registry(state_store: ChecklistStateStore, saver: BackgroundSaver) -> SessionRegistry:
    """Registry serving the bundled checklists with an in-memory state store."""
    return SessionRegistry(FileChecklistLoader(CHECKLISTS_DIR), state_store, saver)
