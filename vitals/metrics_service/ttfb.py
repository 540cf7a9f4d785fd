"""
TTFB — Time to First Byte.

Read once from the navigation record after the page has loaded, so the
read never competes with loading work. A missing record leaves TTFB unset
rather than reporting a misleading 0.
"""

from __future__ import annotations

from utils.logger import diagnostic, get_logger
from vitals.errors import MissingData
from vitals.lifecycle_service.activation import get_activation_start
from vitals.lifecycle_service.bfcache import on_cache_restore
from vitals.lifecycle_service.scheduling import double_animation_frame, when_loaded
from vitals.metrics_service.base import MetricModule
from vitals.runtime_service.entries import NavigationTiming
from vitals.runtime_service.page import PageEvent
from vitals.runtime_service.timeline import PerformanceTimeline

_log = get_logger(__name__)


def time_to_first_byte(nav: NavigationTiming, activation_start: float = 0.0) -> float:
    """max(0, responseStart - activation offset)."""
    return max(nav.response_start - activation_start, 0.0)


def read_navigation(timeline: PerformanceTimeline) -> NavigationTiming:
    nav = timeline.navigation_entry()
    if nav is None:
        raise MissingData("navigation timing record not available")
    return nav


class TimeToFirstByteMetric(MetricModule):
    name = "TTFB"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._writer = self.store.writer("TTFB")

    def _start(self) -> None:
        when_loaded(self.page, self._read)
        on_cache_restore(self.page, self._on_restore)

    def _read(self) -> None:
        try:
            nav = read_navigation(self.timeline)
        except MissingData as e:
            diagnostic(_log, "ttfb_missing_data", debug=self.debug, error=str(e))
            return
        value = time_to_first_byte(nav, get_activation_start(self.timeline))
        self._writer.report(round(value))

    def _on_restore(self, event: PageEvent) -> None:
        self._writer.clear()
        double_animation_frame(
            self.scheduler,
            lambda: self._writer.report(round(self.scheduler.now() - event.time_stamp)),
        )
