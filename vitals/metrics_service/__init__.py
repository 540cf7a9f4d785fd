"""
Metrics Service Package — one module per metric plus the shared store.
"""

from vitals.metrics_service.cls import LayoutShiftMetric, SessionWindow
from vitals.metrics_service.fcp import FirstContentfulPaintMetric
from vitals.metrics_service.fid import FirstInputDelayMetric
from vitals.metrics_service.inp import (
    InteractionMetric,
    InteractionTable,
    percentile_rank,
    select_percentile,
)
from vitals.metrics_service.lcp import LargestPaintMetric
from vitals.metrics_service.navigation import NavigationTimingMetric, navigation_timers
from vitals.metrics_service.store import (
    METRIC_NAMES,
    MetricCallbacks,
    MetricDispatcher,
    MetricsRecord,
    MetricsStore,
    MetricWriter,
)
from vitals.metrics_service.ttfb import TimeToFirstByteMetric, time_to_first_byte

__all__ = [
    "FirstContentfulPaintMetric",
    "FirstInputDelayMetric",
    "InteractionMetric",
    "InteractionTable",
    "LargestPaintMetric",
    "LayoutShiftMetric",
    "METRIC_NAMES",
    "MetricCallbacks",
    "MetricDispatcher",
    "MetricWriter",
    "MetricsRecord",
    "MetricsStore",
    "NavigationTimingMetric",
    "SessionWindow",
    "TimeToFirstByteMetric",
    "navigation_timers",
    "percentile_rank",
    "select_percentile",
    "time_to_first_byte",
]
