"""
Cache-restore signal.

A page reactivated from the back/forward cache is a new navigation as far
as the metrics are concerned, but no new navigation record, paint entries
or load event are produced. Modules register here to reset their state.
"""

from __future__ import annotations

from typing import Callable

from vitals.runtime_service.page import Page, PageEvent

RestoreCallback = Callable[[PageEvent], None]


def on_cache_restore(page: Page, callback: RestoreCallback) -> Callable[[PageEvent], None]:
    """Call `callback` with the pageshow event of every persisted restore."""

    def _on_pageshow(event: PageEvent) -> None:
        if event.persisted:
            callback(event)

    page.add_listener("pageshow", _on_pageshow)
    return _on_pageshow
