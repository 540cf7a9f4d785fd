"""
FID — First Input Delay: how long the first interaction waited before
its handlers could start. Re-armed after a cache restore.
"""

from __future__ import annotations

from typing import List, Optional

from utils.logger import get_logger
from vitals.lifecycle_service.bfcache import on_cache_restore
from vitals.metrics_service.base import MetricModule
from vitals.runtime_service.entries import FIRST_INPUT, RawEntry
from vitals.runtime_service.page import PageEvent
from vitals.runtime_service.timeline import Subscription

_log = get_logger(__name__)


class FirstInputDelayMetric(MetricModule):
    name = "FID"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._writer = self.store.writer("FID")
        self._subscription: Optional[Subscription] = None

    def _start(self) -> None:
        self._subscribe(include_buffered=True)
        on_cache_restore(self.page, self._on_restore)

    def _subscribe(self, *, include_buffered: bool) -> None:
        self._subscription = self.timeline.subscribe(
            FIRST_INPUT, self.handle_entries, include_buffered=include_buffered
        )

    def handle_entries(self, entries: List[RawEntry]) -> None:
        if not entries:
            return
        first = entries[0]
        if first.start_time < self.visibility.first_hidden_time:
            processing_start = first.processing_start
            if processing_start is None:
                processing_start = first.start_time
            self._writer.report(round(processing_start - first.start_time))
        if self._subscription is not None:
            self._subscription.disconnect()

    def _on_restore(self, event: PageEvent) -> None:
        self._writer.clear()
        if self._subscription is not None:
            self._subscription.disconnect()
        # The buffered first-input entry belongs to the previous navigation.
        self._subscribe(include_buffered=False)
