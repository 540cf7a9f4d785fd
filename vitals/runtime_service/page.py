"""
Page — the document/window signals the metric modules listen to.

The page owns the scheduler (event loop) and the performance timeline,
the same way a browser window owns its event loop and `performance`.
Drivers (tests, the trace replayer) change its state through hide(),
restore_from_cache(), complete_load() and friends; each change dispatches
the matching event stamped with the scheduler's current time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from utils.logger import get_logger
from vitals.runtime_service.scheduler import CooperativeScheduler
from vitals.runtime_service.timeline import PerformanceTimeline

_log = get_logger(__name__)

VISIBLE = "visible"
HIDDEN = "hidden"

Listener = Callable[["PageEvent"], None]


@dataclass(frozen=True)
class PageEvent:
    type: str
    time_stamp: float
    persisted: bool = False


class Page:
    """Simulated browsing context for one page session."""

    def __init__(
        self,
        scheduler: Optional[CooperativeScheduler] = None,
        timeline: Optional[PerformanceTimeline] = None,
        *,
        hidden: bool = False,
        prerendering: bool = False,
        loaded: bool = False,
    ) -> None:
        self.scheduler = scheduler or CooperativeScheduler()
        self.performance = timeline or PerformanceTimeline(self.scheduler)
        self.visibility_state = HIDDEN if hidden else VISIBLE
        self.prerendering = prerendering
        self.ready_state = "complete" if loaded else "loading"
        self._listeners: Dict[str, List[Tuple[Listener, bool]]] = {}

    @property
    def hidden(self) -> bool:
        return self.visibility_state == HIDDEN

    # ── Listeners ───────────────────────────────────────────

    def add_listener(self, event_type: str, callback: Listener, *, once: bool = False) -> None:
        if self._registered(event_type, callback):
            return
        self._listeners.setdefault(event_type, []).append((callback, once))

    def _registered(self, event_type: str, callback: Listener) -> bool:
        return any(cb == callback for cb, _ in self._listeners.get(event_type, []))

    def remove_listener(self, event_type: str, callback: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        self._listeners[event_type] = [(cb, once) for cb, once in listeners if cb != callback]

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners.get(event_type, []))

    def dispatch(self, event_type: str, *, persisted: bool = False) -> PageEvent:
        event = PageEvent(event_type, self.scheduler.now(), persisted)
        # Listeners added while dispatching wait for the next event; removed
        # ones are skipped.
        for callback, once in list(self._listeners.get(event_type, [])):
            if not self._registered(event_type, callback):
                continue
            if once:
                self.remove_listener(event_type, callback)
            callback(event)
        return event

    # ── Drivers ─────────────────────────────────────────────

    def hide(self) -> None:
        if self.hidden:
            return
        self.visibility_state = HIDDEN
        _log.debug("page_hidden", at_ms=self.scheduler.now())
        self.dispatch("visibilitychange")

    def show(self) -> None:
        if not self.hidden:
            return
        self.visibility_state = VISIBLE
        self.dispatch("visibilitychange")

    def activate(self) -> None:
        """End prerendering: the page becomes the active, user-visible page."""
        if not self.prerendering:
            return
        self.prerendering = False
        self.dispatch("prerenderingchange")

    def complete_load(self) -> None:
        if self.ready_state == "complete":
            return
        self.ready_state = "complete"
        self.dispatch("load")

    def restore_from_cache(self) -> PageEvent:
        """Reactivate the page from the back/forward cache."""
        _log.debug("page_restored_from_cache", at_ms=self.scheduler.now())
        self.show()
        return self.dispatch("pageshow", persisted=True)

    def key_down(self) -> None:
        self.dispatch("keydown")

    def click(self) -> None:
        self.dispatch("click")
