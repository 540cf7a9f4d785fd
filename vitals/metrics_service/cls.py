"""
CLS — Cumulative Layout Shift, aggregated over session windows.

Architecture decisions:
  1. Shifts are grouped into session windows. A window closes when the
     next shift comes more than 1s after the previous one, or more than
     5s after the window opened. The closing check runs *before* the new
     entry is added.
  2. The reported value is the worst window seen so far in this
     navigation, rounded to three decimals. It only grows, except on a
     cache restore, where it drops to exactly 0.
  3. Shifts within 500ms of user input (had_recent_input) are expected
     and never touch a window.
  4. CLS starts at 0 (no shifts yet is a perfect score), set without an
     on_metric report. The page going hidden drains pending entries and
     forces a report.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from utils.logger import get_logger
from vitals.lifecycle_service.bfcache import on_cache_restore
from vitals.metrics_service.base import MetricModule
from vitals.runtime_service.entries import LAYOUT_SHIFT, RawEntry
from vitals.runtime_service.page import PageEvent
from vitals.runtime_service.timeline import Subscription

_log = get_logger(__name__)


class SessionWindow:
    """Ordered layout-shift entries of one session and their summed value."""

    def __init__(self, gap_ms: float = 1000.0, max_duration_ms: float = 5000.0) -> None:
        self.gap_ms = gap_ms
        self.max_duration_ms = max_duration_ms
        self.entries: List[RawEntry] = []
        self.value = 0.0

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def window_start(self) -> Optional[float]:
        return self.entries[0].start_time if self.entries else None

    @property
    def last_entry_time(self) -> Optional[float]:
        return self.entries[-1].start_time if self.entries else None

    def should_close(self, entry: RawEntry) -> bool:
        if not self.entries:
            return False
        return (
            entry.start_time - self.last_entry_time > self.gap_ms
            or entry.start_time - self.window_start > self.max_duration_ms
        )

    def add(self, entry: RawEntry) -> float:
        """Add `entry`, closing the window first if needed. Returns the window value."""
        if self.should_close(entry):
            _log.debug(
                "cls_session_closed",
                entries=len(self.entries),
                value=round(self.value, 4),
                next_start_ms=entry.start_time,
            )
            self.reset()
        self.entries.append(entry)
        self.value += entry.value
        return self.value

    def reset(self) -> None:
        self.entries = []
        self.value = 0.0


class LayoutShiftMetric(MetricModule):
    name = "CLS"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._writer = self.store.writer("CLS")
        self.window = SessionWindow(
            gap_ms=self.settings.cls_session_gap_ms,
            max_duration_ms=self.settings.cls_max_session_ms,
        )
        self.max_value = 0.0
        self._subscription: Optional[Subscription] = None

    def _start(self) -> None:
        self._subscription = self.timeline.subscribe(LAYOUT_SHIFT, self.handle_entries)

        self._writer.update(0)

        self.page.add_listener("visibilitychange", self._on_visibility_change)
        on_cache_restore(self.page, self._on_restore)

    def handle_entries(self, entries: Iterable[RawEntry]) -> None:
        for entry in entries:
            if entry.had_recent_input:
                continue
            session_value = self.window.add(entry)
            if session_value > self.max_value:
                self.max_value = session_value
                self._report()

    def _report(self) -> None:
        self._writer.report(round(self.max_value, 3))

    def _on_visibility_change(self, event: PageEvent) -> None:
        if not self.page.hidden:
            return
        if self._subscription is not None:
            self.handle_entries(self._subscription.drain())
        self._report()

    def _on_restore(self, event: PageEvent) -> None:
        self.max_value = 0.0
        self.window.reset()
        if self._subscription is not None:
            # Shifts queued before the restore belong to the previous navigation.
            self._subscription.drain()
        self._report()
