"""
Shared plumbing for metric modules.

A module is constructed with the page, the session's store and the shared
VisibilityTracker, claims its writer(s), and starts observing on start().
UnsupportedCapability raised while starting skips the metric: a
diagnostic is logged and start() returns False. Nothing is raised to the
caller.
"""

from __future__ import annotations

from typing import Optional

from configs.settings import Settings, get_settings
from utils.logger import diagnostic, get_logger
from vitals.errors import UnsupportedCapability
from vitals.lifecycle_service.visibility import VisibilityTracker
from vitals.metrics_service.store import MetricsStore
from vitals.runtime_service.page import Page

_log = get_logger(__name__)


class MetricModule:
    name: str = ""

    def __init__(
        self,
        page: Page,
        store: MetricsStore,
        visibility: VisibilityTracker,
        *,
        debug: Optional[bool] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.page = page
        self.timeline = page.performance
        self.scheduler = page.scheduler
        self.store = store
        self.visibility = visibility
        self.settings = settings or get_settings()
        self.debug = self.settings.debug if debug is None else debug
        self.started = False

    def start(self) -> bool:
        if self.started:
            return True
        try:
            self._start()
        except UnsupportedCapability as e:
            diagnostic(_log, "metric_unsupported", debug=self.debug, metric=self.name, capability=e.capability)
            return False
        self.started = True
        _log.debug("metric_started", metric=self.name)
        return True

    def _start(self) -> None:
        raise NotImplementedError
