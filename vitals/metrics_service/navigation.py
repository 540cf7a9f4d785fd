"""
Coarse navigation timers — DNS, TCP, DOM and LOAD.

Snapshot reads of the navigation record taken once after load, not live
observers. They are display values: stored with an on_update notification
only, and not re-measured after a cache restore (the restored page did not
touch the network).
"""

from __future__ import annotations

from typing import Dict

from utils.logger import diagnostic, get_logger
from vitals.errors import MissingData
from vitals.lifecycle_service.scheduling import when_loaded
from vitals.metrics_service.base import MetricModule
from vitals.metrics_service.ttfb import read_navigation
from vitals.runtime_service.entries import NavigationTiming

_log = get_logger(__name__)


def navigation_timers(nav: NavigationTiming) -> Dict[str, float]:
    """DNS/TCP/DOM always; LOAD only once the load event has ended."""
    timers = {
        "DNS": nav.domain_lookup_end - nav.domain_lookup_start,
        "TCP": nav.connect_end - nav.connect_start,
        "DOM": nav.dom_content_loaded_event_end - nav.response_end,
    }
    if nav.load_event_end > 0:
        timers["LOAD"] = nav.load_event_end - nav.start_time
    return timers


class NavigationTimingMetric(MetricModule):
    name = "navigation"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._writers = {name: self.store.writer(name) for name in ("DNS", "TCP", "DOM", "LOAD")}

    def _start(self) -> None:
        when_loaded(self.page, self._read)

    def _read(self) -> None:
        try:
            nav = read_navigation(self.timeline)
        except MissingData as e:
            diagnostic(_log, "navigation_missing_data", debug=self.debug, error=str(e))
            return
        for name, value in navigation_timers(nav).items():
            self._writers[name].update(round(value))
