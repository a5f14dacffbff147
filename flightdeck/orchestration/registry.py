"""Registry of open checklist sessions with shared loader, store and saver."""

import logging
import threading
import uuid
from pathlib import Path

from flightdeck.config import Settings, get_settings
from flightdeck.db.engine import create_kv_store_from_settings
from flightdeck.loading.loader import ChecklistLoader, FileChecklistLoader
from flightdeck.orchestration.session import ChecklistSession
from flightdeck.persistence.saver import BackgroundSaver
from flightdeck.persistence.state_store import ChecklistStateStore
from flightdeck.utils.logging import SessionLogger, StructuredSessionLogger
from flightdeck.utils.metrics import PrometheusSessionMetrics, SessionMetrics

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Open sessions keyed by session ID.

    Every session shares the same loader, state store and background saver,
    so saves for different checklists run concurrently while saves for one
    checklist stay ordered.
    """

    def __init__(
        self,
        loader: ChecklistLoader,
        state_store: ChecklistStateStore,
        saver: BackgroundSaver,
        *,
        enforce_mandatory_order: bool = False,
        auto_advance_lists: bool = False,
        metrics: SessionMetrics | None = None,
        session_logger: SessionLogger | None = None,
    ) -> None:
        self.loader = loader
        self.state_store = state_store
        self.saver = saver
        self._enforce_mandatory_order = enforce_mandatory_order
        self._auto_advance_lists = auto_advance_lists
        self._metrics = metrics or SessionMetrics()
        self._session_logger = session_logger or SessionLogger()
        self._lock = threading.Lock()
        self._sessions: dict[str, ChecklistSession] = {}

    def open(self, checklist_id: str, resume: bool = False) -> tuple[str, ChecklistSession]:
        """Create a session and load its checklist.

        The session is registered even if loading fails; its snapshot then
        carries the error.

        Returns:
            (session_id, session)
        """
        session = ChecklistSession(
            checklist_id,
            self.loader,
            self.state_store,
            self.saver,
            enforce_mandatory_order=self._enforce_mandatory_order,
            auto_advance_lists=self._auto_advance_lists,
            metrics=self._metrics,
            session_logger=self._session_logger,
        )
        session.load(resume=resume)

        session_id = uuid.uuid4().hex
        with self._lock:
            self._sessions[session_id] = session
        logger.info("Opened session %s for checklist %s", session_id, checklist_id)
        return session_id, session

    def get(self, session_id: str) -> ChecklistSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def close(self, session_id: str, timeout: float | None = None) -> bool | None:
        """Flush and forget a session.

        Returns:
            None if the session is unknown, else whether its saves were flushed
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return None
        flushed = session.close(timeout=timeout)
        if not flushed:
            logger.warning("Session %s closed before its saves were flushed", session_id)
        return flushed

    def shutdown(self) -> None:
        """Close every session and stop the saver."""
        with self._lock:
            self._sessions.clear()
        self.saver.shutdown()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


def create_registry_from_settings(settings: Settings) -> SessionRegistry:
    """Wire loader, state store and saver from settings."""
    metrics = PrometheusSessionMetrics()
    session_logger = StructuredSessionLogger()
    state_store = ChecklistStateStore(
        create_kv_store_from_settings(settings),
        key_prefix=settings.state_key_prefix,
        index_key=settings.saved_index_key,
    )
    saver = BackgroundSaver(
        state_store,
        max_workers=settings.save_workers,
        metrics=metrics,
        session_logger=session_logger,
    )
    return SessionRegistry(
        FileChecklistLoader(Path(settings.checklists_dir)),
        state_store,
        saver,
        enforce_mandatory_order=settings.enforce_mandatory_order,
        auto_advance_lists=settings.auto_advance_lists,
        metrics=metrics,
        session_logger=session_logger,
    )


# Global registry instance shared by the API routes
_registry: SessionRegistry | None = None


def get_session_registry() -> SessionRegistry:
    """Get the global session registry instance."""
    global _registry
    if _registry is None:
        _registry = create_registry_from_settings(get_settings())
    return _registry


def shutdown_session_registry() -> None:
    """Flush and discard the global registry, if one was created."""
    global _registry
    if _registry is not None:
        _registry.shutdown()
        _registry = None
