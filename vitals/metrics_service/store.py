"""
Metric store and callback dispatcher.

Architecture decisions:
  1. One MetricsRecord per page session, one optional float per metric.
  2. Single writer per field. store.writer("CLS") hands out the only
     MetricWriter for that name; a second claim raises. Modules cannot
     overwrite each other's values by accident.
  3. Two notification grains for collaborators:
       on_metric(name, value) — a value worth reporting (beacon, budget check)
       on_update()            — something changed (live debug display)
  4. A collaborator that raises is logged and skipped. Metric delivery to
     the other collaborators, and the page itself, carry on.
  5. Writes take a lock. The host is single-threaded today; the lock keeps
     the record consistent if a threaded host drives it.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, fields
from typing import Callable, Dict, List, Optional

from utils.logger import get_logger

_log = get_logger(__name__)

METRIC_NAMES = ("LCP", "FID", "CLS", "FCP", "TTFB", "INP", "DNS", "TCP", "DOM", "LOAD")


@dataclass
class MetricsRecord:
    LCP: Optional[float] = None
    FID: Optional[float] = None
    CLS: Optional[float] = None
    FCP: Optional[float] = None
    TTFB: Optional[float] = None
    INP: Optional[float] = None
    DNS: Optional[float] = None
    TCP: Optional[float] = None
    DOM: Optional[float] = None
    LOAD: Optional[float] = None

    def as_dict(self) -> Dict[str, float]:
        """Only the metrics that currently hold a value."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


@dataclass(eq=False)
class MetricCallbacks:
    """A collaborator's hooks. Either may be omitted."""

    on_metric: Optional[Callable[[str, float], None]] = None
    on_update: Optional[Callable[[], None]] = None


class MetricDispatcher:
    """Fans metric notifications out to every registered collaborator."""

    def __init__(self) -> None:
        self._collaborators: List[MetricCallbacks] = []

    def register(self, callbacks: MetricCallbacks) -> None:
        self._collaborators.append(callbacks)

    def unregister(self, callbacks: MetricCallbacks) -> None:
        if callbacks in self._collaborators:
            self._collaborators.remove(callbacks)

    def on_metric(self, name: str, value: float) -> None:
        for cb in list(self._collaborators):
            if cb.on_metric is None:
                continue
            try:
                cb.on_metric(name, value)
            except Exception as e:
                _log.warning("collaborator_on_metric_failed", metric=name, error=str(e))

    def on_update(self) -> None:
        for cb in list(self._collaborators):
            if cb.on_update is None:
                continue
            try:
                cb.on_update()
            except Exception as e:
                _log.warning("collaborator_on_update_failed", error=str(e))


class MetricWriter:
    """Write access to exactly one field of the record."""

    def __init__(self, store: "MetricsStore", name: str) -> None:
        self._store = store
        self.name = name

    @property
    def value(self) -> Optional[float]:
        return getattr(self._store.record, self.name)

    def update(self, value: float) -> None:
        """Live value: stored, and only on_update fires."""
        self._store._set(self.name, value)
        self._store.dispatcher.on_update()

    def report(self, value: float) -> None:
        """Reportable value: stored, then on_metric and on_update fire."""
        self._store._set(self.name, value)
        self._store.dispatcher.on_metric(self.name, value)
        self._store.dispatcher.on_update()

    def clear(self) -> None:
        self._store._set(self.name, None)


class MetricsStore:
    """The shared MetricsRecord of one page session plus its dispatcher."""

    def __init__(self, dispatcher: Optional[MetricDispatcher] = None) -> None:
        self.record = MetricsRecord()
        self.dispatcher = dispatcher or MetricDispatcher()
        self._writers: Dict[str, MetricWriter] = {}
        self._lock = threading.Lock()

    def writer(self, name: str) -> MetricWriter:
        if name not in METRIC_NAMES:
            raise ValueError(f"unknown metric: {name}")
        with self._lock:
            if name in self._writers:
                raise ValueError(f"metric {name} already has a writer")
            writer = MetricWriter(self, name)
            self._writers[name] = writer
        return writer

    def snapshot(self) -> Dict[str, float]:
        with self._lock:
            return self.record.as_dict()

    def _set(self, name: str, value: Optional[float]) -> None:
        with self._lock:
            setattr(self.record, name, value)
