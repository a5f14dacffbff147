"""Checklist session orchestrator.

Owns the navigation state and completion tracker for one checklist-viewing
session, runs every operation as a serialized read-modify-publish cycle, and
hands durable saves to the background saver.

Lifecycle: ``loading`` → ``ready`` (or ``error`` when the document cannot be
loaded). Operations are refused outside ``ready``; nothing raises to callers.
"""

import logging
import threading
from collections.abc import Callable

from flightdeck.loading.loader import ChecklistLoader
from flightdeck.models.checklist import Checklist
from flightdeck.models.common import SectionType
from flightdeck.orchestration.state import SessionSnapshot, SessionStatus
from flightdeck.persistence.codec import deserialize, serialize
from flightdeck.persistence.saver import BackgroundSaver
from flightdeck.persistence.state_store import ChecklistStateStore
from flightdeck.tracking.completion import CompletionTracker
from flightdeck.tracking.navigation import NavigationState
from flightdeck.utils.logging import SessionLogger
from flightdeck.utils.metrics import SessionMetrics

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[SessionSnapshot], None]


class ChecklistSession:
    """Progress and navigation state machine for one checklist."""

    def __init__(
        self,
        checklist_id: str,
        loader: ChecklistLoader,
        state_store: ChecklistStateStore,
        saver: BackgroundSaver,
        *,
        enforce_mandatory_order: bool = False,
        auto_advance_lists: bool = False,
        metrics: SessionMetrics | None = None,
        session_logger: SessionLogger | None = None,
    ) -> None:
        """Initialize session in the loading state.

        Args:
            checklist_id: Checklist identifier (loader key and persistence key)
            loader: Document loader
            state_store: Store holding saved progress (resume/restart)
            saver: Background saver for fire-and-forget writes
            enforce_mandatory_order: Refuse checking items blocked by an earlier
                incomplete mandatory item
            auto_advance_lists: Move to the next list/section of a checklist
                section once its last task is complete
            metrics: Metrics recorder (optional, defaults to no-op)
            session_logger: Structured logger (optional, defaults to no-op)
        """
        self.checklist_id = checklist_id
        self._loader = loader
        self._state_store = state_store
        self._saver = saver
        self._enforce_mandatory_order = enforce_mandatory_order
        self._auto_advance_lists = auto_advance_lists
        self._metrics = metrics or SessionMetrics()
        self._session_logger = session_logger or SessionLogger()

        self._lock = threading.RLock()
        self._listeners: list[SnapshotListener] = []

        self._status = SessionStatus.LOADING
        self._error: str | None = None
        self._checklist: Checklist | None = None
        self._tracker: CompletionTracker | None = None
        self._navigation: NavigationState | None = None
        self._all_required_latched = False

        self._snapshot = SessionSnapshot(checklist_id=checklist_id)

    @property
    def snapshot(self) -> SessionSnapshot:
        """Latest published snapshot."""
        return self._snapshot

    @property
    def status(self) -> SessionStatus:
        return self._snapshot.status

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a listener; it immediately receives the current snapshot.

        Returns:
            Callable that unregisters the listener
        """
        with self._lock:
            self._listeners.append(listener)
            self._notify(listener, self._snapshot)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def begin_load(self) -> SessionSnapshot:
        """Enter the loading state; operations are refused until load completes."""
        with self._lock:
            self._status = SessionStatus.LOADING
            self._error = None
            self._checklist = None
            self._tracker = None
            self._navigation = None
            self._all_required_latched = False
            return self._publish()

    def complete_load(
        self,
        checklist: Checklist | None,
        *,
        resume: bool = False,
        error: str | None = None,
    ) -> SessionSnapshot:
        """Loader callback: become ready with a fresh or restored state.

        Args:
            checklist: Loaded document, or None if loading failed
            resume: Apply the saved snapshot for this checklist, if any
            error: Error message to publish when ``checklist`` is None

        Returns:
            Published snapshot
        """
        with self._lock:
            if self._status != SessionStatus.LOADING:
                logger.warning("Ignoring load completion for %s outside loading state", self.checklist_id)
                return self._snapshot

            if checklist is None:
                self._status = SessionStatus.ERROR
                self._error = error or f"Failed to load checklist {self.checklist_id}"
                logger.warning("Checklist %s failed to load: %s", self.checklist_id, self._error)
                return self._publish()

            tracker = CompletionTracker(checklist)
            navigation = NavigationState(checklist, tracker)

            if resume:
                saved = self._state_store.load(self.checklist_id)
                if saved is not None:
                    try:
                        position, restored = deserialize(saved, checklist)
                    except Exception:
                        logger.exception("Saved state for %s could not be restored; starting fresh", self.checklist_id)
                    else:
                        tracker = restored
                        navigation = NavigationState(checklist, tracker)
                        navigation.move_to(position.section_index, position.list_index, position.item_index)
                        logger.info("Resumed checklist %s at %s", self.checklist_id, position)

            self._checklist = checklist
            self._tracker = tracker
            self._navigation = navigation
            self._all_required_latched = False
            if resume:
                self._update_latch()
            self._status = SessionStatus.READY
            self._error = None
            return self._publish()

    def load(self, resume: bool = False) -> SessionSnapshot:
        """Load the document through the loader and become ready (or error)."""
        self.begin_load()
        try:
            checklist = self._loader.load(self.checklist_id)
        except Exception as e:
            logger.exception("Loader raised for checklist %s", self.checklist_id)
            return self.complete_load(None, error=f"Error loading checklist: {e}")
        return self.complete_load(checklist, resume=resume)

    def close(self, timeout: float | None = None) -> bool:
        """Flush pending saves for this checklist and wait for them.

        Returns:
            True if every pending save was written before the timeout
        """
        return self._saver.flush(self.checklist_id, timeout=timeout)

    def restart(self) -> SessionSnapshot:
        """Discard all progress and the saved record, returning to the first item."""

        def mutate() -> bool:
            self._saver.cancel(self.checklist_id)
            self._saver.flush(self.checklist_id)
            try:
                self._state_store.clear(self.checklist_id)
            except Exception:
                logger.exception("Failed to clear saved state for %s", self.checklist_id)

            assert self._checklist is not None
            self._tracker = CompletionTracker(self._checklist)
            self._navigation = NavigationState(self._checklist, self._tracker)
            self._all_required_latched = False
            return True

        return self._run("restart", mutate, save=False)

    def check_current_item(self) -> SessionSnapshot:
        """Toggle the current item and advance to the first incomplete task if it is now complete."""
        return self._run("check", lambda: self._toggle(self._nav.item_index))

    def toggle_item(self, item_index: int) -> SessionSnapshot:
        """Toggle an item of the current list, with the same advance rule as check."""
        return self._run("toggle", lambda: self._toggle(item_index))

    def skip_item(self) -> SessionSnapshot:
        """Move forward to the next incomplete task; stay put if there is none."""

        def mutate() -> bool:
            nav = self._nav
            target = self._trk.first_skipped_after(nav.item_index, nav.section_index, nav.list_index)
            return target is not None and nav.select_item(target)

        return self._run("skip", mutate)

    def search_first_skipped(self) -> SessionSnapshot:
        """Jump to the first incomplete task of the current list other than the current one."""

        def mutate() -> bool:
            nav = self._nav
            target = self._trk.first_incomplete_other_than(nav.item_index, nav.section_index, nav.list_index)
            return target is not None and nav.select_item(target)

        return self._run("search_skipped", mutate)

    def search_required_item(self) -> SessionSnapshot:
        """Jump to the first incomplete mandatory task of the whole document."""

        def mutate() -> bool:
            address = self._trk.first_incomplete_mandatory()
            if address is None:
                return False
            return self._move_to(*address)

        return self._run("search_required", mutate)

    def jump_to_first_incomplete(self) -> SessionSnapshot:
        """Jump to the first incomplete task of the checklist sections.

        When everything is complete, goes to the last item of the last
        non-empty list of a checklist section.
        """

        def mutate() -> bool:
            address = self._trk.first_incomplete_in_sections((SectionType.checklist,))
            if address is None:
                address = self._last_checklist_item()
            if address is None:
                return False
            return self._move_to(*address)

        return self._run("jump_first_incomplete", mutate)

    def select_section(self, index: int) -> SessionSnapshot:
        """Select a section; the list resets to 0 and the item to its first incomplete task."""
        return self._run("select_section", lambda: self._nav.select_section(index))

    def select_list(self, index: int) -> SessionSnapshot:
        """Select a list of the current section."""
        return self._run("select_list", lambda: self._nav.select_list(index))

    def select_item(self, index: int) -> SessionSnapshot:
        """Select an item of the current list; out-of-range indices are rejected."""
        return self._run("select_item", lambda: self._nav.select_item(index))

    def select_first_emergency_section(self) -> bool:
        """Select the first emergency section.

        Returns:
            True if the document has an emergency section
        """
        found = False

        def mutate() -> bool:
            nonlocal found
            assert self._checklist is not None
            for index, section in enumerate(self._checklist.sections):
                if section.type == SectionType.emergency:
                    found = True
                    return self._nav.select_section(index)
            return False

        self._run("emergency", mutate)
        return found

    def mark_all_complete(self) -> SessionSnapshot:
        """Mark every task of the current list complete in one update."""

        def mutate() -> bool:
            nav = self._nav
            if self._trk.mark_all(nav.section_index, nav.list_index) == 0:
                return False
            self._update_latch()
            if self._auto_advance_lists:
                self._advance_to_next_list()
            return True

        return self._run("mark_all", mutate)

    @property
    def _nav(self) -> NavigationState:
        assert self._navigation is not None
        return self._navigation

    @property
    def _trk(self) -> CompletionTracker:
        assert self._tracker is not None
        return self._tracker

    def _run(self, action: str, mutate: Callable[[], bool], save: bool = True) -> SessionSnapshot:
        with self._lock:
            if self._status != SessionStatus.READY:
                logger.warning(
                    "Refusing %s on checklist %s in %s state", action, self.checklist_id, self._status.value
                )
                self._metrics.inc_action(action, "rejected")
                return self._snapshot

            changed = mutate()
            outcome = "ok" if changed else "noop"
            self._metrics.inc_action(action, outcome)
            self._session_logger.log_action(self.checklist_id, action, outcome, self._nav.position)

            if changed and save:
                self._save()
            return self._publish()

    def _toggle(self, item_index: int) -> bool:
        nav, tracker = self._nav, self._trk
        section_index, list_index = nav.section_index, nav.list_index

        if (
            self._enforce_mandatory_order
            and not tracker.is_complete(section_index, list_index, item_index)
            and item_index in tracker.blocked_items(section_index, list_index)
        ):
            logger.info("Item %d is blocked by an earlier required item", item_index)
            return False

        now_complete = tracker.toggle(section_index, list_index, item_index)
        if now_complete is None:
            return False

        if now_complete:
            self._update_latch()
            next_index = tracker.first_incomplete(section_index, list_index)
            if next_index is not None:
                nav.select_item(next_index)
            elif self._auto_advance_lists:
                self._advance_to_next_list()
        return True

    def _move_to(self, section_index: int, list_index: int, item_index: int) -> bool:
        before = self._nav.position
        self._nav.move_to(section_index, list_index, item_index)
        return self._nav.position != before

    def _advance_to_next_list(self) -> None:
        assert self._checklist is not None
        nav = self._nav
        sections = self._checklist.sections
        if sections[nav.section_index].type != SectionType.checklist:
            return

        if nav.list_index < len(sections[nav.section_index].lists) - 1:
            nav.select_list(nav.list_index + 1)
            return

        for index in range(nav.section_index + 1, len(sections)):
            if sections[index].type == SectionType.checklist:
                nav.select_section(index)
                return

    def _last_checklist_item(self) -> tuple[int, int, int] | None:
        assert self._checklist is not None
        last: tuple[int, int, int] | None = None
        for section_index, list_index in self._checklist.list_addresses():
            section = self._checklist.sections[section_index]
            items = section.lists[list_index].items
            if section.type == SectionType.checklist and items:
                last = (section_index, list_index, len(items) - 1)
        return last

    def _update_latch(self) -> None:
        # One-way: later un-checks never clear it
        if not self._all_required_latched and self._trk.all_mandatory_complete():
            self._all_required_latched = True
            logger.info("All required items complete for checklist %s", self.checklist_id)

    def _save(self) -> None:
        snapshot = serialize(self.checklist_id, self._nav.position, self._trk)
        self._saver.submit(snapshot)

    def _build_snapshot(self) -> SessionSnapshot:
        failures = self._saver.failure_count(self.checklist_id)
        if self._status != SessionStatus.READY or self._checklist is None:
            return SessionSnapshot(
                checklist_id=self.checklist_id,
                status=self._status,
                error=self._error,
                save_failures=failures,
            )

        checklist, nav, tracker = self._checklist, self._nav, self._trk
        section = checklist.sections[nav.section_index] if checklist.sections else None
        current_list = nav.current_list

        return SessionSnapshot(
            checklist_id=self.checklist_id,
            status=self._status,
            error=None,
            checklist=checklist,
            section_index=nav.section_index,
            list_index=nav.list_index,
            item_index=nav.item_index,
            section_type=section.type if section is not None else None,
            list_title=current_list.title if current_list is not None else "",
            items=current_list.items if current_list is not None else (),
            completed_items=tracker.completed_in(nav.section_index, nav.list_index),
            blocked_items=tracker.blocked_items(nav.section_index, nav.list_index),
            completed_by_list=tracker.as_mapping(),
            has_multiple_sections=len(checklist.sections) > 1,
            has_multiple_lists=section is not None and len(section.lists) > 1,
            all_required_complete=self._all_required_latched,
            save_failures=failures,
        )

    def _publish(self) -> SessionSnapshot:
        snapshot = self._build_snapshot()
        self._snapshot = snapshot
        for listener in list(self._listeners):
            self._notify(listener, snapshot)
        return snapshot

    def _notify(self, listener: SnapshotListener, snapshot: SessionSnapshot) -> None:
        try:
            listener(snapshot)
        except Exception:
            logger.exception("Snapshot listener failed for checklist %s", self.checklist_id)
