"""
LCP — Largest Contentful Paint.

Architecture decisions:
  1. Live value: every larger paint candidate seen while the page was
     still visible updates the record (on_update only). The value never
     shrinks within a navigation.
  2. Official value: frozen once, after the user first interacts (keydown,
     click) or the page goes hidden. The freeze itself is deferred to idle
     time with when_idle_or_hidden(), wrapped in run_once() so the three
     triggers produce a single report.
  3. Timestamps are shifted by the prerender activation offset.
  4. Hosts that cannot observe largest-contentful-paint skip the metric.
  5. Cache restore: the restored page paints without new LCP entries, so
     the value becomes the time from restore to the second animation frame.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from utils.logger import get_logger
from vitals.errors import UnsupportedCapability
from vitals.lifecycle_service.activation import get_activation_start
from vitals.lifecycle_service.bfcache import on_cache_restore
from vitals.lifecycle_service.guards import run_once
from vitals.lifecycle_service.scheduling import double_animation_frame, when_idle_or_hidden
from vitals.metrics_service.base import MetricModule
from vitals.runtime_service.entries import LARGEST_CONTENTFUL_PAINT, RawEntry
from vitals.runtime_service.page import PageEvent
from vitals.runtime_service.timeline import Subscription

_log = get_logger(__name__)


class LargestPaintMetric(MetricModule):
    name = "LCP"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._writer = self.store.writer("LCP")
        self.value = 0
        self.entries: List[RawEntry] = []
        self._subscription: Optional[Subscription] = None
        self.stop_listening = run_once(
            lambda: when_idle_or_hidden(self.page, self._finalize)
        )
        self.finalized = False

    def _start(self) -> None:
        if not self.timeline.supports(LARGEST_CONTENTFUL_PAINT):
            raise UnsupportedCapability(LARGEST_CONTENTFUL_PAINT)

        for event_type in ("keydown", "click"):
            self.page.add_listener(event_type, self._on_input, once=True)
        self.page.add_listener("visibilitychange", self._on_visibility_change)

        self._subscription = self.timeline.subscribe(LARGEST_CONTENTFUL_PAINT, self.handle_entries)

        on_cache_restore(self.page, self._on_restore)

    def handle_entries(self, entries: Iterable[RawEntry]) -> None:
        activation = get_activation_start(self.timeline)
        for entry in entries:
            if entry.start_time >= self.visibility.first_hidden_time:
                continue
            value = round(max(entry.start_time - activation, 0))
            if value > 0 and value > self.value:
                self.value = value
                self.entries.append(entry)
                self._writer.update(self.value)

    def _report(self) -> None:
        if self.value > 0:
            self._writer.report(self.value)

    def _on_input(self, event: PageEvent) -> None:
        self.stop_listening()

    def _on_visibility_change(self, event: PageEvent) -> None:
        if self.page.hidden:
            self.stop_listening()

    def _finalize(self) -> None:
        if self._subscription is not None:
            self.handle_entries(self._subscription.drain())
            self._subscription.disconnect()
        self.finalized = True
        _log.debug("lcp_finalized", value_ms=self.value)
        self._report()

    def _on_restore(self, event: PageEvent) -> None:
        self.value = 0
        self.entries = []

        def _measure() -> None:
            self.value = round(self.scheduler.now() - event.time_stamp)
            self._report()

        double_animation_frame(self.scheduler, _measure)
