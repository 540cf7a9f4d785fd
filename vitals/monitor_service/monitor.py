"""
WebVitalsMonitor — everything one page session needs, wired once.

Architecture decisions:
  1. One VisibilityTracker and one MetricsStore per page session, created
     here and passed by reference into every metric module.
  2. Modules start in a fixed order (CLS, INP, LCP, FCP, FID, TTFB,
     navigation timers). A module whose host capability is missing is
     skipped; the others still start.
  3. Collaborators (overlay, beacon sender, budget checker) only see the
     MetricCallbacks interface.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from configs.settings import Settings, get_settings
from utils.logger import get_logger
from vitals.lifecycle_service.visibility import VisibilityTracker
from vitals.metrics_service.base import MetricModule
from vitals.metrics_service.cls import LayoutShiftMetric
from vitals.metrics_service.fcp import FirstContentfulPaintMetric
from vitals.metrics_service.fid import FirstInputDelayMetric
from vitals.metrics_service.inp import InteractionMetric
from vitals.metrics_service.lcp import LargestPaintMetric
from vitals.metrics_service.navigation import NavigationTimingMetric
from vitals.metrics_service.store import MetricCallbacks, MetricsStore
from vitals.metrics_service.ttfb import TimeToFirstByteMetric
from vitals.runtime_service.page import Page

_log = get_logger(__name__)

_MODULES = (
    LayoutShiftMetric,
    InteractionMetric,
    LargestPaintMetric,
    FirstContentfulPaintMetric,
    FirstInputDelayMetric,
    TimeToFirstByteMetric,
    NavigationTimingMetric,
)


class WebVitalsMonitor:
    def __init__(
        self,
        page: Page,
        callbacks: Iterable[MetricCallbacks] = (),
        *,
        settings: Optional[Settings] = None,
        debug: Optional[bool] = None,
    ) -> None:
        self.page = page
        self.settings = settings or get_settings()
        self.store = MetricsStore()
        for cb in callbacks:
            self.store.dispatcher.register(cb)
        self.visibility = VisibilityTracker(page)
        self.modules: List[MetricModule] = [
            module(page, self.store, self.visibility, debug=debug, settings=self.settings)
            for module in _MODULES
        ]
        self._started = False

    def start(self) -> Dict[str, bool]:
        """Start every module. Returns module name → started."""
        if not self._started:
            self._started = True
            for module in self.modules:
                module.start()
            _log.info(
                "monitor_started",
                modules=[m.name for m in self.modules if m.started],
                skipped=[m.name for m in self.modules if not m.started],
            )
        return {m.name: m.started for m in self.modules}

    def module(self, name: str) -> MetricModule:
        for module in self.modules:
            if module.name == name:
                return module
        raise KeyError(name)

    def add_callbacks(self, callbacks: MetricCallbacks) -> None:
        self.store.dispatcher.register(callbacks)

    @property
    def metrics(self) -> Dict[str, float]:
        return self.store.snapshot()
