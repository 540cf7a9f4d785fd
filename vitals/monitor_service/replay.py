"""
Trace replay — drive a simulated page from a recorded JSON trace.

Why replay?
  - Field bugs in metric code show up as a sequence of host events
    (entries, hides, restores). Writing that sequence down as data and
    replaying it reproduces the exact interleaving, without a browser.
  - Pydantic validates the trace at the boundary, so a malformed trace
    fails before any metric state is touched.

Trace format:
    {
      "supports_idle": true,
      "steps": [
        {"at": 0,    "action": "navigation", "navigation": {"response_start": 120}},
        {"at": 350,  "action": "entry", "entry": {"category": "layout-shift", "start_time": 350, "value": 0.1}},
        {"at": 900,  "action": "load"},
        {"at": 2000, "action": "hide"}
      ]
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, model_validator

from configs.settings import Settings, get_settings
from utils.logger import get_logger
from vitals.metrics_service.store import MetricCallbacks
from vitals.monitor_service.monitor import WebVitalsMonitor
from vitals.runtime_service.entries import CATEGORIES, NavigationTiming, RawEntry
from vitals.runtime_service.page import Page
from vitals.runtime_service.scheduler import CooperativeScheduler
from vitals.runtime_service.timeline import PerformanceTimeline

_log = get_logger(__name__)

Action = Literal[
    "entry",
    "navigation",
    "hide",
    "show",
    "activate",
    "load",
    "restore",
    "keydown",
    "click",
    "idle",
    "frame",
]


class EntryModel(BaseModel):
    category: str
    start_time: float
    duration: float = Field(default=0.0, ge=0)
    value: float = Field(default=0.0, ge=0)
    had_recent_input: bool = False
    interaction_id: Optional[int] = None
    name: str = ""
    processing_start: Optional[float] = None

    def to_entry(self) -> RawEntry:
        return RawEntry(**self.model_dump())


class NavigationModel(BaseModel):
    start_time: float = 0.0
    domain_lookup_start: float = 0.0
    domain_lookup_end: float = 0.0
    connect_start: float = 0.0
    connect_end: float = 0.0
    response_start: float = 0.0
    response_end: float = 0.0
    dom_content_loaded_event_end: float = 0.0
    load_event_end: float = 0.0
    activation_start: float = Field(default=0.0, ge=0)

    def to_entry(self) -> NavigationTiming:
        return NavigationTiming(**self.model_dump())


class TraceStep(BaseModel):
    at: float = Field(ge=0, description="Scheduler time (ms) at which the step applies")
    action: Action
    entry: Optional[EntryModel] = None
    navigation: Optional[NavigationModel] = None

    @model_validator(mode="after")
    def _payload_matches_action(self) -> "TraceStep":
        if self.action == "entry" and self.entry is None:
            raise ValueError("an 'entry' step needs an entry payload")
        if self.action == "navigation" and self.navigation is None:
            raise ValueError("a 'navigation' step needs a navigation payload")
        return self


class Trace(BaseModel):
    hidden: bool = False
    prerendering: bool = False
    supports_idle: bool = True
    unsupported: List[str] = Field(default_factory=list, description="Categories the host cannot observe")
    flush_ms: float = Field(default=1000.0, ge=0, description="Time allowed for deferred work after the last step")
    steps: List[TraceStep] = Field(default_factory=list)

    @model_validator(mode="after")
    def _steps_in_order(self) -> "Trace":
        times = [s.at for s in self.steps]
        if times != sorted(times):
            raise ValueError("trace steps must be ordered by 'at'")
        return self


@dataclass
class ReplayResult:
    reports: List[Tuple[str, float]] = field(default_factory=list)
    updates: int = 0
    metrics: Dict[str, float] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "reports": [{"name": n, "value": v} for n, v in self.reports],
            "updates": self.updates,
            "metrics": self.metrics,
            "skipped": self.skipped,
        }


def _apply(page: Page, step: TraceStep) -> None:
    action = step.action
    if action == "entry":
        page.performance.record(step.entry.to_entry())
    elif action == "navigation":
        page.performance.record(step.navigation.to_entry())
    elif action == "hide":
        page.hide()
    elif action == "show":
        page.show()
    elif action == "activate":
        page.activate()
    elif action == "load":
        page.complete_load()
    elif action == "restore":
        page.restore_from_cache()
    elif action == "keydown":
        page.key_down()
    elif action == "click":
        page.click()
    elif action == "idle":
        page.scheduler.run_idle()
    elif action == "frame":
        page.scheduler.render_frame()


def replay_trace(
    trace: Union[Trace, Dict[str, Any]],
    *,
    settings: Optional[Settings] = None,
    debug: Optional[bool] = None,
) -> ReplayResult:
    """Replay `trace` against a fresh page session and collect every report."""
    if not isinstance(trace, Trace):
        trace = Trace.model_validate(trace)
    cfg = settings or get_settings()

    scheduler = CooperativeScheduler(supports_idle=trace.supports_idle)
    supported = [c for c in CATEGORIES if c not in set(trace.unsupported)]
    page = Page(
        scheduler,
        PerformanceTimeline(scheduler, supported),
        hidden=trace.hidden,
        prerendering=trace.prerendering,
    )

    result = ReplayResult()

    def _on_metric(name: str, value: float) -> None:
        result.reports.append((name, value))

    def _on_update() -> None:
        result.updates += 1

    monitor = WebVitalsMonitor(
        page,
        [MetricCallbacks(on_metric=_on_metric, on_update=_on_update)],
        settings=cfg,
        debug=debug,
    )
    started = monitor.start()
    result.skipped = [name for name, ok in started.items() if not ok]

    for step in trace.steps:
        scheduler.advance_to(step.at)
        _apply(page, step)
        scheduler.run_pending()

    # Let deferred work settle: two frames for restore re-measurement,
    # then enough time for idle timeouts and fallback timers.
    scheduler.render_frame()
    scheduler.render_frame()
    scheduler.advance(trace.flush_ms)

    result.metrics = monitor.metrics
    _log.info("trace_replayed", steps=len(trace.steps), reports=len(result.reports))
    return result
