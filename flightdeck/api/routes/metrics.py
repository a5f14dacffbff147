"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes:
    - checklist_actions_total{action, outcome}
    - checklist_saves_total{outcome}
    - checklist_save_latency_ms{outcome}
    - checklist_saves_superseded_total
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
