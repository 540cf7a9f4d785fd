"""
Lifecycle Service Package — visibility, finalization and restore helpers
shared by the metric modules.
"""

from vitals.lifecycle_service.activation import get_activation_start
from vitals.lifecycle_service.bfcache import on_cache_restore
from vitals.lifecycle_service.guards import FinalizeOnce, run_once
from vitals.lifecycle_service.scheduling import (
    ScheduledAction,
    double_animation_frame,
    when_idle_or_hidden,
    when_loaded,
)
from vitals.lifecycle_service.visibility import NEVER, VisibilityTracker

__all__ = [
    "FinalizeOnce",
    "NEVER",
    "ScheduledAction",
    "VisibilityTracker",
    "double_animation_frame",
    "get_activation_start",
    "on_cache_restore",
    "run_once",
    "when_idle_or_hidden",
    "when_loaded",
]
