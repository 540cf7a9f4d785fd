"""
Activation offset for prerendered pages.

A prerendered page exists before the user sees it. Paint and TTFB
timestamps are measured from navigation start, so the time spent in
prerender is subtracted to get user-perceived latency.
"""

from __future__ import annotations

from vitals.runtime_service.timeline import PerformanceTimeline


def get_activation_start(timeline: PerformanceTimeline) -> float:
    """Activation start of the navigation record; 0 if absent or not prerendered."""
    nav = timeline.navigation_entry()
    if nav is None:
        return 0.0
    return getattr(nav, "activation_start", 0.0) or 0.0
