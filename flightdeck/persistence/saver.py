"""Background saver for checklist state.

Saves run on a small thread pool so that user actions never block on storage:

- at most one write is in flight per checklist
- a newer snapshot replaces a pending older one instead of queuing behind it
- ``flush`` blocks until a checklist (or every checklist) has nothing pending

Usage:
    saver = BackgroundSaver(state_store)
    saver.submit(snapshot)      # fire-and-forget during interaction
    saver.flush("demo")         # at the session boundary
    saver.shutdown()
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor

from flightdeck.models.snapshot import PersistedSnapshot
from flightdeck.persistence.state_store import ChecklistStateStore
from flightdeck.utils.logging import SessionLogger
from flightdeck.utils.metrics import SessionMetrics

logger = logging.getLogger(__name__)


class BackgroundSaver:
    """Coalescing, cancellable background writer for PersistedSnapshot records."""

    def __init__(
        self,
        state_store: ChecklistStateStore,
        max_workers: int = 2,
        metrics: SessionMetrics | None = None,
        session_logger: SessionLogger | None = None,
    ) -> None:
        """Initialize saver.

        Args:
            state_store: Destination store
            max_workers: Maximum concurrent writes (across checklists)
            metrics: Metrics recorder (optional, defaults to no-op)
            session_logger: Structured logger (optional, defaults to no-op)
        """
        self._state_store = state_store
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="checklist-save")
        self._metrics = metrics or SessionMetrics()
        self._session_logger = session_logger or SessionLogger()
        self._cond = threading.Condition()
        self._pending: dict[str, PersistedSnapshot] = {}
        self._in_flight: set[str] = set()
        self._failures: dict[str, int] = {}
        self._closed = False

    @property
    def state_store(self) -> ChecklistStateStore:
        return self._state_store

    def submit(self, snapshot: PersistedSnapshot) -> None:
        """Queue a snapshot for writing, superseding any pending one for the same checklist."""
        checklist_id = snapshot.document_id
        with self._cond:
            if self._closed:
                logger.warning("Saver is shut down; dropping save for %s", checklist_id)
                return
            if checklist_id in self._pending:
                self._metrics.inc_superseded()
            self._pending[checklist_id] = snapshot
            if checklist_id in self._in_flight:
                return
            self._in_flight.add(checklist_id)
            # Submitted under the condition so shutdown cannot close the pool in between
            self._executor.submit(self._drain, checklist_id)

    def cancel(self, checklist_id: str) -> bool:
        """Drop a pending (not yet started) save.

        Returns:
            True if a pending snapshot was dropped
        """
        with self._cond:
            dropped = self._pending.pop(checklist_id, None) is not None
            self._cond.notify_all()
            return dropped

    def is_idle(self, checklist_id: str | None = None) -> bool:
        with self._cond:
            return self._is_idle_locked(checklist_id)

    def _is_idle_locked(self, checklist_id: str | None) -> bool:
        if checklist_id is None:
            return not self._pending and not self._in_flight
        return checklist_id not in self._pending and checklist_id not in self._in_flight

    def flush(self, checklist_id: str | None = None, timeout: float | None = None) -> bool:
        """Wait until pending saves are written.

        Args:
            checklist_id: Checklist to wait for (None = every checklist)
            timeout: Max seconds to wait (None = indefinite)

        Returns:
            True if idle, False if the timeout elapsed first
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._is_idle_locked(checklist_id), timeout=timeout)

    def failure_count(self, checklist_id: str) -> int:
        with self._cond:
            return self._failures.get(checklist_id, 0)

    def shutdown(self) -> None:
        """Flush every pending save and stop the worker threads."""
        self.flush()
        with self._cond:
            self._closed = True
        self._executor.shutdown(wait=True)

    def _drain(self, checklist_id: str) -> None:
        while True:
            with self._cond:
                snapshot = self._pending.pop(checklist_id, None)
                if snapshot is None:
                    self._in_flight.discard(checklist_id)
                    self._cond.notify_all()
                    return
            self._write(snapshot)

    def _write(self, snapshot: PersistedSnapshot) -> None:
        checklist_id = snapshot.document_id
        start = time.perf_counter()
        try:
            self._state_store.save(snapshot)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.exception("Failed to save checklist state for %s", checklist_id)
            with self._cond:
                self._failures[checklist_id] = self._failures.get(checklist_id, 0) + 1
            self._metrics.record_save("error", elapsed_ms)
            self._session_logger.log_save(checklist_id, "error", elapsed_ms, error_reason=type(e).__name__)
            return

        elapsed_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_save("success", elapsed_ms)
        self._session_logger.log_save(checklist_id, "success", elapsed_ms)

    def __enter__(self) -> "BackgroundSaver":
        return self

    def __exit__(self, *args: object) -> None:
        self.shutdown()
