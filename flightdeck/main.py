"""FastAPI application - checklist progress and navigation service."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from flightdeck.api.routes.checklists import router as checklists_router
from flightdeck.api.routes.health import router as health_router
from flightdeck.api.routes.metrics import router as metrics_router
from flightdeck.api.routes.sessions import router as sessions_router
from flightdeck.config import get_settings
from flightdeck.orchestration.registry import shutdown_session_registry
from flightdeck.utils.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging(get_settings().log_level)
    yield
    # Pending saves are written before the process exits
    shutdown_session_registry()


app = FastAPI(title="Flightdeck Checklist API", version="0.1.0", lifespan=lifespan)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(checklists_router, tags=["checklists"])
app.include_router(sessions_router, tags=["sessions"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Flightdeck Checklist API", "version": "0.1.0"}
