"""Checklist session endpoints - open, observe, act on and close sessions."""

from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from flightdeck.models.checklist import ChecklistItem
from flightdeck.models.common import SectionType
from flightdeck.orchestration.registry import SessionRegistry, get_session_registry
from flightdeck.orchestration.session import ChecklistSession
from flightdeck.orchestration.state import SessionSnapshot, SessionStatus

router = APIRouter(prefix="/sessions", tags=["sessions"])


class OpenSessionRequest(BaseModel):
    """Request body for POST /sessions."""

    checklist_id: str = Field(..., min_length=1, description="Checklist identifier")
    resume: bool = Field(False, description="Restore saved progress if available")


class SelectRequest(BaseModel):
    """Request body for POST /sessions/{id}/select.

    Fields are applied in order section, list, item.
    """

    section: int | None = None
    list: int | None = None
    item: int | None = None


class SessionView(BaseModel):
    """Response for every session endpoint."""

    session_id: str
    checklist_id: str
    status: SessionStatus
    error: str | None = None
    title: str = ""
    section_index: int = 0
    list_index: int = 0
    item_index: int = 0
    section_type: SectionType | None = None
    section_titles: list[str] = Field(default_factory=list)
    list_titles: list[str] = Field(default_factory=list)
    list_title: str = ""
    items: list[ChecklistItem] = Field(default_factory=list)
    completed_items: list[int] = Field(default_factory=list)
    blocked_items: list[int] = Field(default_factory=list)
    has_multiple_sections: bool = False
    has_multiple_lists: bool = False
    all_required_complete: bool = False
    save_failures: int = 0

    @classmethod
    def from_snapshot(cls, session_id: str, snapshot: SessionSnapshot) -> "SessionView":
        section_titles: list[str] = []
        list_titles: list[str] = []
        if snapshot.checklist is not None and snapshot.checklist.sections:
            section_titles = [section.title for section in snapshot.checklist.sections]
            current = snapshot.checklist.sections[snapshot.section_index]
            list_titles = [checklist_list.title for checklist_list in current.lists]

        return cls(
            session_id=session_id,
            checklist_id=snapshot.checklist_id,
            status=snapshot.status,
            error=snapshot.error,
            title=snapshot.title,
            section_index=snapshot.section_index,
            list_index=snapshot.list_index,
            item_index=snapshot.item_index,
            section_type=snapshot.section_type,
            section_titles=section_titles,
            list_titles=list_titles,
            list_title=snapshot.list_title,
            items=list(snapshot.items),
            completed_items=sorted(snapshot.completed_items),
            blocked_items=sorted(snapshot.blocked_items),
            has_multiple_sections=snapshot.has_multiple_sections,
            has_multiple_lists=snapshot.has_multiple_lists,
            all_required_complete=snapshot.all_required_complete,
            save_failures=snapshot.save_failures,
        )


def _select_emergency(session: ChecklistSession) -> SessionSnapshot:
    session.select_first_emergency_section()
    return session.snapshot


ACTIONS: dict[str, Callable[[ChecklistSession], SessionSnapshot]] = {
    "check": ChecklistSession.check_current_item,
    "skip": ChecklistSession.skip_item,
    "search-skipped": ChecklistSession.search_first_skipped,
    "search-required": ChecklistSession.search_required_item,
    "mark-all": ChecklistSession.mark_all_complete,
    "emergency": _select_emergency,
    "jump": ChecklistSession.jump_to_first_incomplete,
    "restart": ChecklistSession.restart,
}


def _get_session(registry: SessionRegistry, session_id: str) -> ChecklistSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Session {session_id} not found")
    return session


@router.post("", response_model=SessionView, status_code=status.HTTP_201_CREATED)
def open_session(
    request: OpenSessionRequest,
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> SessionView:
    """Open a session on a checklist.

    Args:
        request: Checklist ID and resume flag
        registry: Session registry

    Returns:
        Initial session view (status ``error`` if the checklist could not be loaded)
    """
    session_id, session = registry.open(request.checklist_id, resume=request.resume)
    return SessionView.from_snapshot(session_id, session.snapshot)


@router.get("/{session_id}", response_model=SessionView)
def get_session(
    session_id: str,
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> SessionView:
    """Get the current session view."""
    session = _get_session(registry, session_id)
    return SessionView.from_snapshot(session_id, session.snapshot)


@router.post("/{session_id}/actions/{action}", response_model=SessionView)
def run_action(
    session_id: str,
    action: str,
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> SessionView:
    """Run a session action.

    Raises:
        HTTPException: 404 for an unknown session, 400 for an unknown action
    """
    session = _get_session(registry, session_id)
    handler = ACTIONS.get(action)
    if handler is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown action {action}; expected one of {sorted(ACTIONS)}",
        )
    return SessionView.from_snapshot(session_id, handler(session))


@router.post("/{session_id}/items/{item_index}/toggle", response_model=SessionView)
def toggle_item(
    session_id: str,
    item_index: int,
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> SessionView:
    """Toggle an item of the current list."""
    session = _get_session(registry, session_id)
    return SessionView.from_snapshot(session_id, session.toggle_item(item_index))


@router.post("/{session_id}/select", response_model=SessionView)
def select(
    session_id: str,
    request: SelectRequest,
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> SessionView:
    """Select a section, list and/or item."""
    session = _get_session(registry, session_id)
    snapshot = session.snapshot
    if request.section is not None:
        snapshot = session.select_section(request.section)
    if request.list is not None:
        snapshot = session.select_list(request.list)
    if request.item is not None:
        snapshot = session.select_item(request.item)
    return SessionView.from_snapshot(session_id, snapshot)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def close_session(
    session_id: str,
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> None:
    """Flush pending saves and close the session."""
    if registry.close(session_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Session {session_id} not found")
