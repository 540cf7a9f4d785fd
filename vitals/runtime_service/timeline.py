"""
Performance timeline — the push-based event source every metric observes.

Architecture decisions:
  1. record() never calls observers synchronously. Entries are queued per
     subscription and delivered in one zero-delay scheduler task, like a
     PerformanceObserver callback. Until that task runs the entries can be
     pulled with Subscription.drain(), which is what the hidden handlers
     rely on.
  2. Every recorded entry is also kept in a per-category buffer so late
     subscribers can ask for buffered entries.
  3. Subscriptions are explicit objects. Each metric owns its own and
     disconnects it; a disconnected subscription drops its queue.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from utils.logger import get_logger
from utils.timing import timed
from vitals.errors import UnsupportedCapability
from vitals.runtime_service.entries import CATEGORIES, EVENT, NAVIGATION
from vitals.runtime_service.scheduler import CooperativeScheduler

_log = get_logger(__name__)

EntryCallback = Callable[[List], None]


class Subscription:
    """A cancellable observer over one or more entry categories."""

    def __init__(self, timeline: "PerformanceTimeline", callback: EntryCallback) -> None:
        self._timeline = timeline
        self._callback = callback
        self._categories: Dict[str, Optional[float]] = {}
        self._queue: List = []
        self.connected = True

    @property
    def categories(self) -> List[str]:
        return list(self._categories)

    def observe(
        self,
        category: str,
        *,
        include_buffered: bool = True,
        duration_threshold: Optional[float] = None,
    ) -> "Subscription":
        if not self._timeline.supports(category):
            raise UnsupportedCapability(category)
        self.connected = True
        self._categories[category] = duration_threshold
        self._timeline._attach(category, self)
        if include_buffered:
            for entry in self._timeline.entries_by_type(category):
                self._enqueue(entry)
        return self

    def drain(self) -> List:
        """Take queued-but-undelivered entries."""
        batch, self._queue = self._queue, []
        return batch

    def disconnect(self) -> None:
        if not self.connected:
            return
        self.connected = False
        self._queue = []
        self._categories.clear()
        self._timeline._detach(self)

    def _enqueue(self, entry) -> None:
        if not self.connected or entry.category not in self._categories:
            return
        threshold = self._categories[entry.category]
        if entry.category == EVENT and threshold is not None and entry.duration < threshold:
            return
        self._queue.append(entry)
        self._timeline._schedule_delivery()

    def _deliver(self) -> None:
        if not self.connected or not self._queue:
            return
        self._callback(self.drain())


class PerformanceTimeline:
    """In-memory entry buffer with asynchronous observer delivery."""

    def __init__(
        self,
        scheduler: CooperativeScheduler,
        supported: Optional[Iterable[str]] = None,
    ) -> None:
        self._scheduler = scheduler
        self._supported = frozenset(CATEGORIES if supported is None else supported)
        self._buffer: Dict[str, List] = {}
        self._observers: Dict[str, List[Subscription]] = {}
        self._delivery = None

    def supports(self, category: str) -> bool:
        return category in self._supported

    def subscribe(
        self,
        category: str,
        callback: EntryCallback,
        *,
        include_buffered: bool = True,
        duration_threshold: Optional[float] = None,
    ) -> Subscription:
        """Observe `category`. Raises UnsupportedCapability for unknown categories."""
        sub = Subscription(self, callback)
        return sub.observe(
            category,
            include_buffered=include_buffered,
            duration_threshold=duration_threshold,
        )

    def record(self, entry) -> None:
        if not self.supports(entry.category):
            _log.debug("timeline_entry_dropped", category=entry.category)
            return
        self._buffer.setdefault(entry.category, []).append(entry)
        for sub in list(self._observers.get(entry.category, [])):
            sub._enqueue(entry)

    def entries_by_type(self, category: str) -> List:
        return list(self._buffer.get(category, []))

    def navigation_entry(self):
        """The navigation record, or None when the host has not produced one."""
        entries = self._buffer.get(NAVIGATION)
        return entries[0] if entries else None

    # ── Internals ───────────────────────────────────────────

    def _attach(self, category: str, sub: Subscription) -> None:
        observers = self._observers.setdefault(category, [])
        if sub not in observers:
            observers.append(sub)

    def _detach(self, sub: Subscription) -> None:
        for observers in self._observers.values():
            if sub in observers:
                observers.remove(sub)

    def _schedule_delivery(self) -> None:
        if self._delivery is not None and self._delivery.pending:
            return
        self._delivery = self._scheduler.call_later(0, self._deliver_all)

    def _deliver_all(self) -> None:
        subs = {id(s): s for observers in self._observers.values() for s in observers}
        with timed("timeline_delivery", observers=len(subs)):
            for sub in subs.values():
                sub._deliver()
