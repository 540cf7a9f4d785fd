"""
FCP — First Contentful Paint. Single-shot: the first paint with content.
"""

from __future__ import annotations

from typing import Iterable, Optional

from utils.logger import get_logger
from vitals.lifecycle_service.activation import get_activation_start
from vitals.lifecycle_service.bfcache import on_cache_restore
from vitals.lifecycle_service.scheduling import double_animation_frame
from vitals.metrics_service.base import MetricModule
from vitals.runtime_service.entries import FIRST_CONTENTFUL_PAINT, PAINT, RawEntry
from vitals.runtime_service.page import PageEvent
from vitals.runtime_service.timeline import Subscription

_log = get_logger(__name__)


class FirstContentfulPaintMetric(MetricModule):
    name = "FCP"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._writer = self.store.writer("FCP")
        self._subscription: Optional[Subscription] = None

    def _start(self) -> None:
        self._subscription = self.timeline.subscribe(PAINT, self.handle_entries)
        on_cache_restore(self.page, self._on_restore)

    def handle_entries(self, entries: Iterable[RawEntry]) -> None:
        fcp = next((e for e in entries if e.name == FIRST_CONTENTFUL_PAINT), None)
        if fcp is None:
            return
        if fcp.start_time < self.visibility.first_hidden_time:
            value = max(fcp.start_time - get_activation_start(self.timeline), 0)
            self._writer.report(round(value))
        else:
            _log.debug("fcp_after_hidden_ignored", start_ms=fcp.start_time)
        if self._subscription is not None:
            self._subscription.disconnect()

    def _on_restore(self, event: PageEvent) -> None:
        self._writer.clear()
        double_animation_frame(
            self.scheduler,
            lambda: self._writer.report(round(self.scheduler.now() - event.time_stamp)),
        )
