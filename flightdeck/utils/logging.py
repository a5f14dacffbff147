"""Structured logging for checklist sessions."""

import logging
from typing import Any

from flightdeck.models.snapshot import Position

logger = logging.getLogger(__name__)


class SessionLogger:
    """Interface for structured session logging (no-op default)."""

    def log_action(self, checklist_id: str, action: str, outcome: str, position: Position) -> None:
        """Log a session action."""
        pass

    def log_save(
        self,
        checklist_id: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log a save attempt."""
        pass


class StructuredSessionLogger(SessionLogger):
    """Structured logger for session actions and saves."""

    def log_action(self, checklist_id: str, action: str, outcome: str, position: Position) -> None:
        """Log session action with structured data."""
        log_data: dict[str, Any] = {
            "checklist_id": checklist_id,
            "action": action,
            "outcome": outcome,
            "section_index": position.section_index,
            "list_index": position.list_index,
            "item_index": position.item_index,
        }

        log_msg = f"Checklist action: {action} - {outcome}"

        if outcome in ("ok", "noop"):
            logger.debug(log_msg, extra={"structured": log_data})
        else:
            logger.info(log_msg, extra={"structured": log_data})

    def log_save(
        self,
        checklist_id: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log save attempt with structured data."""
        log_data: dict[str, Any] = {
            "checklist_id": checklist_id,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Checklist save: {checklist_id} - {outcome}"

        if outcome == "success":
            logger.debug(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})


def configure_logging(level: str) -> None:
    """Configure root logging for the service process."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
