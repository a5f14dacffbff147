"""Health check endpoints.

- ``/health`` is a liveness probe that always answers 200
- ``/healthz`` checks the state store and the background saver
"""

import json
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response

from flightdeck.orchestration.registry import SessionRegistry, get_session_registry

router = APIRouter()


def check_state_store(registry: SessionRegistry) -> tuple[bool, str]:
    """Check state store connectivity.

    Returns:
        (is_ok, status_message)
    """
    try:
        if registry.state_store.kv_store.ping():
            return (True, "ok")
        return (False, "error: ping failed")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
def healthz(
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> dict[str, Any] | Response:
    """Health check endpoint.

    Returns:
        200 with component status if the state store is reachable
        503 otherwise
    """
    store_ok, store_status = check_state_store(registry)
    saver_status = "idle" if registry.saver.is_idle() else "busy"

    response_body = {
        "status": "ok" if store_ok else "degraded",
        "components": {
            "state_store": store_status,
            "saver": saver_status,
            "open_sessions": len(registry),
        },
    }

    if not store_ok:
        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
