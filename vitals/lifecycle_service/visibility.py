"""
Visibility Tracker — the first time the page became hidden.

Paint metrics only count entries that happened while the page was still
visible. One tracker is built per page session and shared by reference
with every metric module; it never resets itself, not even on a cache
restore.
"""

from __future__ import annotations

import math

from utils.logger import get_logger
from vitals.runtime_service.page import Page, PageEvent

_log = get_logger(__name__)

NEVER = math.inf


class VisibilityTracker:
    def __init__(self, page: Page) -> None:
        self._page = page
        self._first_hidden_time = 0.0 if page.hidden else NEVER
        page.add_listener("visibilitychange", self._on_change)
        page.add_listener("prerenderingchange", self._on_change)

    @property
    def first_hidden_time(self) -> float:
        return self._first_hidden_time

    def _on_change(self, event: PageEvent) -> None:
        if not self._page.hidden or self._first_hidden_time != NEVER:
            return
        self._first_hidden_time = event.time_stamp if event.type == "visibilitychange" else 0.0
        _log.debug("first_hidden_time_set", at_ms=self._first_hidden_time, via=event.type)
