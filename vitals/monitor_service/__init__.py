"""
Monitor Service Package — page-session wiring and trace replay.
"""

from vitals.monitor_service.monitor import WebVitalsMonitor
from vitals.monitor_service.replay import ReplayResult, Trace, TraceStep, replay_trace

__all__ = [
    "ReplayResult",
    "Trace",
    "TraceStep",
    "WebVitalsMonitor",
    "replay_trace",
]
