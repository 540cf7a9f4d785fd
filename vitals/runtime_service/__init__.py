"""
Runtime Service Package — the simulated host: event loop, page, timeline.
"""

from vitals.runtime_service.entries import NavigationTiming, RawEntry
from vitals.runtime_service.page import Page, PageEvent
from vitals.runtime_service.scheduler import CooperativeScheduler, TaskHandle
from vitals.runtime_service.timeline import PerformanceTimeline, Subscription

__all__ = [
    "CooperativeScheduler",
    "NavigationTiming",
    "Page",
    "PageEvent",
    "PerformanceTimeline",
    "RawEntry",
    "Subscription",
    "TaskHandle",
]
