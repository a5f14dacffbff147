"""Checklist catalog endpoints - GET /checklists, GET /checklists/{id}, DELETE /checklists/{id}/state."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from flightdeck.models.checklist import Checklist
from flightdeck.orchestration.registry import SessionRegistry, get_session_registry

router = APIRouter(prefix="/checklists", tags=["checklists"])


class ChecklistSummary(BaseModel):
    """Catalog entry with resume availability."""

    checklist_id: str
    title: str
    description: str
    resumable: bool


class ChecklistListResponse(BaseModel):
    """Response for GET /checklists."""

    checklists: list[ChecklistSummary]


@router.get("", response_model=ChecklistListResponse)
def list_checklists(
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> ChecklistListResponse:
    """List available checklists.

    ``resumable`` is true when saved progress exists for the checklist.
    """
    saved = registry.state_store.saved_ids()
    return ChecklistListResponse(
        checklists=[
            ChecklistSummary(
                checklist_id=info.checklist_id,
                title=info.title,
                description=info.description,
                resumable=info.checklist_id in saved,
            )
            for info in registry.loader.list_available()
        ]
    )


@router.get("/{checklist_id}", response_model=Checklist)
def get_checklist(
    checklist_id: str,
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> Checklist:
    """Get a normalized checklist document.

    Raises:
        HTTPException: 404 if the checklist is missing or malformed
    """
    checklist = registry.loader.load(checklist_id)
    if checklist is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Checklist {checklist_id} not found")
    return checklist


@router.delete("/{checklist_id}/state", status_code=status.HTTP_204_NO_CONTENT)
def clear_checklist_state(
    checklist_id: str,
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> None:
    """Discard saved progress for a checklist (pending saves are cancelled first)."""
    registry.saver.cancel(checklist_id)
    registry.saver.flush(checklist_id)
    registry.state_store.clear(checklist_id)
