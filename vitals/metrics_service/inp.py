"""
INP — Interaction to Next Paint, an online ~98th percentile over interactions.

Architecture decisions:
  1. One value per interaction: an interaction (a tap, a key press) yields
     several event timing entries sharing an interaction id. The table
     keeps the longest duration per id.
  2. Rank selection on the durations sorted descending (n = interactions):
       n <= 10      → rank 0 (the worst interaction)
       n <= 50      → rank min(1, n-1) (second worst)
       n >  50      → rank max(0, ceil(0.02*n) - 1)
     The breakpoints are small-sample corrections carried over unchanged
     for compatibility with previously reported values.
  3. Entries are never processed on the observer callback itself. Each
     batch is deferred with when_idle_or_hidden(), so recomputing never
     competes with the interaction that produced the entry.
  4. Nothing is reported until the selected value is positive: a page
     nobody interacted with has no INP rather than an INP of 0.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional

import numpy as np

from utils.logger import get_logger
from utils.timing import timed
from vitals.errors import UnsupportedCapability
from vitals.lifecycle_service.bfcache import on_cache_restore
from vitals.lifecycle_service.scheduling import ScheduledAction, when_idle_or_hidden
from vitals.metrics_service.base import MetricModule
from vitals.runtime_service.entries import EVENT, FIRST_INPUT, RawEntry
from vitals.runtime_service.page import PageEvent
from vitals.runtime_service.timeline import Subscription

_log = get_logger(__name__)


def percentile_rank(n: int) -> int:
    """Index into the descending durations that approximates the 98th percentile."""
    if n <= 10:
        return 0
    if n <= 50:
        return min(1, n - 1)
    return max(0, math.ceil(n * 0.02) - 1)


def select_percentile(durations: Iterable[float]) -> float:
    """Pick the ~p98 duration; 0 for an empty sequence."""
    values = np.fromiter(durations, dtype=float)
    if values.size == 0:
        return 0.0
    descending = np.sort(values)[::-1]
    return float(descending[percentile_rank(values.size)])


class InteractionTable:
    """interaction id → longest duration observed for it."""

    def __init__(self) -> None:
        self._durations: Dict[int, float] = {}

    def __len__(self) -> int:
        return len(self._durations)

    def get(self, interaction_id: int) -> Optional[float]:
        return self._durations.get(interaction_id)

    def record(self, entry: RawEntry) -> bool:
        """Fold `entry` in. Returns True if it raised its interaction's maximum."""
        if not entry.interaction_id:
            return False
        if entry.duration > self._durations.get(entry.interaction_id, 0.0):
            self._durations[entry.interaction_id] = entry.duration
            return True
        return False

    def durations(self) -> List[float]:
        return list(self._durations.values())

    def clear(self) -> None:
        self._durations.clear()


class InteractionMetric(MetricModule):
    name = "INP"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._writer = self.store.writer("INP")
        self.table = InteractionTable()
        self._pending: List[ScheduledAction] = []
        self._subscription: Optional[Subscription] = None

    def _start(self) -> None:
        self._subscription = self.timeline.subscribe(
            EVENT,
            self.handle_entries,
            duration_threshold=self.settings.inp_duration_threshold_ms,
        )
        try:
            self._subscription.observe(FIRST_INPUT)
        except UnsupportedCapability:
            _log.debug("inp_first_input_unavailable")

        self.page.add_listener("visibilitychange", self._on_visibility_change)
        on_cache_restore(self.page, self._on_restore)

    def handle_entries(self, entries: List[RawEntry]) -> None:
        """Defer processing of an observer batch to idle time (or hidden)."""
        batch = list(entries)
        self._pending = [p for p in self._pending if not p.done]
        self._pending.append(when_idle_or_hidden(self.page, lambda: self._process(batch)))

    def _process(self, entries: Iterable[RawEntry]) -> None:
        for entry in entries:
            if self.table.record(entry):
                _log.debug("inp_interaction_recorded", interaction_id=entry.interaction_id, duration_ms=entry.duration)
        self._report()

    def _report(self) -> None:
        with timed("inp_recompute", interactions=len(self.table)):
            value = select_percentile(self.table.durations())
        if value > 0:
            self._writer.report(round(value))

    def _on_visibility_change(self, event: PageEvent) -> None:
        if not self.page.hidden or self._subscription is None:
            return
        self._process(self._subscription.drain())

    def _on_restore(self, event: PageEvent) -> None:
        for pending in self._pending:
            pending.cancel()
        self._pending = []
        if self._subscription is not None:
            self._subscription.drain()
        self.table.clear()
        self._writer.clear()
