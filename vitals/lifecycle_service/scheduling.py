"""
Deferred execution helpers built on the cooperative scheduler.

Architecture decisions:
  1. when_idle_or_hidden() races two triggers: an idle callback (bounded
     by a timeout) and the page becoming hidden. Hosts without idle
     callbacks get a short fixed timer instead.
  2. Both triggers call the same FinalizeOnce wrapper, so whichever fires
     second is a no-op. On firing, the loser is torn down as well: the
     hidden listener is removed and the idle/timer task cancelled.
  3. double_animation_frame() waits two frames, which guarantees that at
     least one paint happened after the callback was requested.
"""

from __future__ import annotations

from typing import Callable, Optional

from configs.settings import get_settings
from utils.logger import get_logger
from vitals.errors import UnsupportedCapability
from vitals.lifecycle_service.guards import run_once
from vitals.runtime_service.page import Page, PageEvent
from vitals.runtime_service.scheduler import CooperativeScheduler, TaskHandle

_log = get_logger(__name__)


class ScheduledAction:
    """An action waiting for idle time or for the page to become hidden."""

    def __init__(
        self,
        page: Page,
        action: Callable[[], None],
        *,
        idle_timeout_ms: Optional[float] = None,
        fallback_delay_ms: Optional[float] = None,
    ) -> None:
        cfg = get_settings()
        self._page = page
        self._action = action
        self._fire = run_once(self._run)
        self.trigger: Optional[str] = None

        if idle_timeout_ms is None:
            idle_timeout_ms = cfg.idle_timeout_ms
        if fallback_delay_ms is None:
            fallback_delay_ms = cfg.idle_fallback_delay_ms

        scheduler = page.scheduler
        try:
            self._task: TaskHandle = scheduler.request_idle_callback(
                lambda: self._fire("idle"), timeout_ms=idle_timeout_ms
            )
        except UnsupportedCapability:
            self._task = scheduler.call_later(fallback_delay_ms, lambda: self._fire("fallback"))
        page.add_listener("visibilitychange", self._on_visibility_change)

    @property
    def done(self) -> bool:
        return self._fire.done

    def cancel(self) -> None:
        if self._fire.done:
            return
        self._fire.cancel()
        self._teardown()

    def _on_visibility_change(self, event: PageEvent) -> None:
        if self._page.hidden:
            self._fire("hidden")

    def _run(self, trigger: str) -> None:
        self.trigger = trigger
        self._teardown()
        self._action()

    def _teardown(self) -> None:
        self._task.cancel()
        self._page.remove_listener("visibilitychange", self._on_visibility_change)


def when_idle_or_hidden(
    page: Page,
    action: Callable[[], None],
    *,
    idle_timeout_ms: Optional[float] = None,
    fallback_delay_ms: Optional[float] = None,
) -> ScheduledAction:
    return ScheduledAction(
        page,
        action,
        idle_timeout_ms=idle_timeout_ms,
        fallback_delay_ms=fallback_delay_ms,
    )


def double_animation_frame(scheduler: CooperativeScheduler, callback: Callable[[], None]) -> TaskHandle:
    """Run `callback` on the frame after the next one."""
    return scheduler.request_animation_frame(
        lambda: scheduler.request_animation_frame(callback)
    )


def when_loaded(page: Page, callback: Callable[[], None]) -> None:
    """Run `callback` in a fresh task once the document has finished loading."""
    if page.ready_state == "complete":
        page.scheduler.call_later(0, callback)
        return
    page.add_listener("load", lambda _event: page.scheduler.call_later(0, callback), once=True)
