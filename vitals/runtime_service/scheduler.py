"""
Cooperative scheduler — the host event loop, made explicit.

Architecture decisions:
  1. Single thread, virtual clock. Nothing here sleeps; time only moves
     when the driver calls advance(). Tests decide exactly when timers,
     idle periods and animation frames happen, so race orderings such as
     "hidden fires before the idle timeout" are forced, not hoped for.
  2. Three task queues mirror the browser facilities the metrics rely on:
     timers (setTimeout), idle callbacks (requestIdleCallback with a
     timeout) and animation frames (requestAnimationFrame).
  3. A TaskHandle runs its callback at most once, even when the same
     handle sits in two queues (an idle callback plus its timeout timer).
  4. Callback exceptions propagate to whoever drives the loop. Metric code
     catches its own expected errors; anything else is a bug.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Callable, List, Optional, Tuple

from utils.logger import get_logger
from vitals.errors import UnsupportedCapability

_log = get_logger(__name__)


class TaskHandle:
    """Cancellable reference to one scheduled callback."""

    __slots__ = ("_callback", "kind", "fired", "cancelled")

    def __init__(self, callback: Callable[[], None], kind: str) -> None:
        self._callback = callback
        self.kind = kind
        self.fired = False
        self.cancelled = False

    @property
    def pending(self) -> bool:
        return not (self.fired or self.cancelled)

    def cancel(self) -> None:
        self.cancelled = True

    def _run(self) -> bool:
        if not self.pending:
            return False
        self.fired = True
        self._callback()
        return True


class CooperativeScheduler:
    """Virtual-time event loop with timers, idle periods and animation frames."""

    def __init__(self, *, supports_idle: bool = True, start_ms: float = 0.0) -> None:
        self.supports_idle = supports_idle
        self._now = float(start_ms)
        self._seq = itertools.count()
        self._timers: List[Tuple[float, int, TaskHandle]] = []
        self._idle: List[TaskHandle] = []
        self._frames: List[TaskHandle] = []

    def now(self) -> float:
        """Current time in ms since navigation start."""
        return self._now

    # ── Registration ────────────────────────────────────────

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TaskHandle:
        handle = TaskHandle(callback, "timer")
        self._push_timer(max(0.0, delay_ms), handle)
        return handle

    def request_idle_callback(
        self,
        callback: Callable[[], None],
        timeout_ms: Optional[float] = None,
    ) -> TaskHandle:
        """
        Run `callback` during the next idle period. With a timeout, the
        callback is forced once `timeout_ms` elapses without one.
        """
        if not self.supports_idle:
            raise UnsupportedCapability("idle-callback")
        handle = TaskHandle(callback, "idle")
        self._idle.append(handle)
        if timeout_ms is not None:
            self._push_timer(max(0.0, timeout_ms), handle)
        return handle

    def request_animation_frame(self, callback: Callable[[], None]) -> TaskHandle:
        handle = TaskHandle(callback, "frame")
        self._frames.append(handle)
        return handle

    def _push_timer(self, delay_ms: float, handle: TaskHandle) -> None:
        heapq.heappush(self._timers, (self._now + delay_ms, next(self._seq), handle))

    # ── Driving ─────────────────────────────────────────────

    def advance(self, ms: float) -> int:
        """
        Move the clock forward by `ms`, running every timer that falls due
        in (due time, submission order) order. Timers scheduled by a
        running callback are honoured if they fall inside the window.
        Returns the number of callbacks run.
        """
        if ms < 0:
            raise ValueError("cannot move the clock backwards")
        target = self._now + ms
        ran = 0
        while self._timers and self._timers[0][0] <= target:
            due, _, handle = heapq.heappop(self._timers)
            self._now = max(self._now, due)
            if handle._run():
                ran += 1
        self._now = target
        return ran

    def run_pending(self) -> int:
        """Run zero-delay work queued at the current instant."""
        return self.advance(0)

    def advance_to(self, at_ms: float) -> int:
        return self.advance(max(0.0, at_ms - self._now))

    def run_idle(self) -> int:
        """Run one idle period: every idle callback pending when it starts."""
        batch, self._idle = self._idle, []
        ran = sum(1 for handle in batch if handle._run())
        if ran:
            _log.debug("scheduler_idle_period", ran=ran, at_ms=self._now)
        return ran

    def render_frame(self) -> int:
        """Render one animation frame. Callbacks queued during it wait for the next."""
        batch, self._frames = self._frames, []
        return sum(1 for handle in batch if handle._run())

    # ── Introspection ───────────────────────────────────────

    @property
    def pending_timers(self) -> int:
        return sum(1 for _, _, h in self._timers if h.pending)

    @property
    def pending_idle(self) -> int:
        return sum(1 for h in self._idle if h.pending)

    @property
    def pending_frames(self) -> int:
        return sum(1 for h in self._frames if h.pending)
