"""
Unit tests for TTFB and the coarse navigation timers — post-load
snapshot reads, activation offsets, missing records and cache restore.
"""
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from vitals.lifecycle_service.visibility import VisibilityTracker
from vitals.metrics_service.navigation import NavigationTimingMetric, navigation_timers
from vitals.metrics_service.ttfb import TimeToFirstByteMetric, time_to_first_byte
from vitals.runtime_service.entries import NavigationTiming
from vitals.runtime_service.page import Page

NAV = NavigationTiming(
    domain_lookup_start=5,
    domain_lookup_end=25,
    connect_start=25,
    connect_end=70,
    response_start=120,
    response_end=180,
    dom_content_loaded_event_end=640,
    load_event_end=910,
)


@pytest.fixture()
def ttfb(page, store, visibility):
    metric = TimeToFirstByteMetric(page, store, visibility)
    assert metric.start()
    return metric


@pytest.fixture()
def nav_timers(page, store, visibility):
    metric = NavigationTimingMetric(page, store, visibility)
    assert metric.start()
    return metric


class TestTimeToFirstByteFormula:
    def test_no_activation(self):
        assert time_to_first_byte(NavigationTiming(response_start=120), 0) == 120

    def test_activation_subtracted(self):
        assert time_to_first_byte(NavigationTiming(response_start=120), 20) == 100

    def test_response_before_activation_clamped(self):
        assert time_to_first_byte(NavigationTiming(response_start=120), 300) == 0


class TestTimeToFirstByteMetric:
    def test_read_after_load(self, ttfb, page, store, recorder):
        page.performance.record(NAV)
        page.scheduler.run_pending()
        assert store.record.TTFB is None
        page.complete_load()
        page.scheduler.run_pending()
        assert recorder.values("TTFB") == [120]

    def test_already_loaded_page(self, store, recorder):
        page = Page(loaded=True)
        page.performance.record(NAV)
        TimeToFirstByteMetric(page, store, VisibilityTracker(page)).start()
        page.scheduler.run_pending()
        assert store.record.TTFB == 120

    def test_prerendered_page(self, ttfb, page, store):
        page.performance.record(NavigationTiming(response_start=120, activation_start=300))
        page.complete_load()
        page.scheduler.run_pending()
        assert store.record.TTFB == 0

    def test_missing_navigation_record_leaves_unset(self, ttfb, page, store, recorder):
        page.complete_load()
        page.scheduler.run_pending()
        assert store.record.TTFB is None
        assert recorder.reports == []

    def test_restore_measures_elapsed_time(self, ttfb, page, store, recorder):
        page.performance.record(NAV)
        page.complete_load()
        page.scheduler.run_pending()
        page.scheduler.advance(4000)
        page.restore_from_cache()
        assert store.record.TTFB is None
        page.scheduler.advance(16)
        page.scheduler.render_frame()
        page.scheduler.advance(16)
        page.scheduler.render_frame()
        assert recorder.values("TTFB") == [120, 32]


class TestNavigationTimers:
    def test_formulae(self):
        assert navigation_timers(NAV) == {"DNS": 20, "TCP": 45, "DOM": 460, "LOAD": 910}

    def test_load_omitted_until_load_event_ends(self):
        timers = navigation_timers(NavigationTiming(response_end=100, dom_content_loaded_event_end=300))
        assert "LOAD" not in timers
        assert timers["DOM"] == 200

    def test_snapshot_after_load(self, nav_timers, page, store, recorder):
        page.performance.record(NAV)
        page.complete_load()
        page.scheduler.run_pending()
        assert store.snapshot() == {"DNS": 20, "TCP": 45, "DOM": 460, "LOAD": 910}
        assert recorder.reports == []
        assert recorder.updates == 4

    def test_missing_record(self, nav_timers, page, store):
        page.complete_load()
        page.scheduler.run_pending()
        assert store.snapshot() == {}

    def test_not_remeasured_on_restore(self, nav_timers, page, store):
        page.performance.record(NAV)
        page.complete_load()
        page.scheduler.run_pending()
        page.restore_from_cache()
        page.scheduler.render_frame()
        page.scheduler.render_frame()
        assert store.record.DNS == 20
        assert store.record.LOAD == 910
