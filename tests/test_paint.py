"""
Unit tests for the paint finalizers — LCP live updates and one-shot
finalization, FCP, FID, the hidden-time cutoff, activation offsets and
re-measurement after a cache restore.
"""
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from vitals.lifecycle_service.visibility import VisibilityTracker
from vitals.metrics_service.fcp import FirstContentfulPaintMetric
from vitals.metrics_service.fid import FirstInputDelayMetric
from vitals.metrics_service.lcp import LargestPaintMetric
from vitals.runtime_service.entries import NavigationTiming, RawEntry
from vitals.runtime_service.page import Page
from vitals.runtime_service.scheduler import CooperativeScheduler
from vitals.runtime_service.timeline import PerformanceTimeline


def lcp_entry(t):
    return RawEntry("largest-contentful-paint", t)


def paint(t, name="first-contentful-paint"):
    return RawEntry("paint", t, name=name)


def two_frames(scheduler, frame_ms=16):
    scheduler.advance(frame_ms)
    scheduler.render_frame()
    scheduler.advance(frame_ms)
    scheduler.render_frame()


@pytest.fixture()
def lcp(page, store, visibility):
    metric = LargestPaintMetric(page, store, visibility)
    assert metric.start()
    return metric


@pytest.fixture()
def fcp(page, store, visibility):
    metric = FirstContentfulPaintMetric(page, store, visibility)
    assert metric.start()
    return metric


@pytest.fixture()
def fid(page, store, visibility):
    metric = FirstInputDelayMetric(page, store, visibility)
    assert metric.start()
    return metric


# ── LCP ─────────────────────────────────────────────────────

class TestLargestPaintLive:
    def test_live_updates_without_report(self, lcp, page, store, recorder):
        page.performance.record(lcp_entry(450))
        page.performance.record(lcp_entry(700))
        page.scheduler.run_pending()
        assert store.record.LCP == 700
        assert recorder.values("LCP") == []
        assert recorder.updates == 2

    def test_never_shrinks(self, lcp, store):
        lcp.handle_entries([lcp_entry(700), lcp_entry(300)])
        assert store.record.LCP == 700

    def test_entries_after_hidden_ignored(self, lcp, page, store):
        lcp.handle_entries([lcp_entry(400)])
        page.scheduler.advance(1000)
        page.hide()
        lcp.handle_entries([lcp_entry(1000), lcp_entry(1500)])
        assert store.record.LCP == 400

    def test_hidden_from_start_ignores_everything(self, store):
        page = Page(hidden=True)
        metric = LargestPaintMetric(page, store, VisibilityTracker(page))
        metric.start()
        metric.handle_entries([lcp_entry(1), lcp_entry(200)])
        assert store.record.LCP is None

    def test_activation_offset_subtracted(self, lcp, page, store):
        page.performance.record(NavigationTiming(activation_start=200))
        lcp.handle_entries([lcp_entry(450)])
        assert store.record.LCP == 250

    def test_candidate_before_activation_not_kept(self, lcp, page, store):
        page.performance.record(NavigationTiming(activation_start=500))
        lcp.handle_entries([lcp_entry(450)])
        assert store.record.LCP is None


class TestLargestPaintFinalization:
    def test_click_finalizes_after_idle(self, lcp, page, recorder):
        page.performance.record(lcp_entry(700))
        page.scheduler.run_pending()
        page.click()
        assert recorder.values("LCP") == []
        page.scheduler.run_idle()
        assert recorder.values("LCP") == [700]
        assert lcp.finalized

    def test_all_triggers_report_once(self, lcp, page, recorder):
        page.performance.record(lcp_entry(700))
        page.scheduler.run_pending()
        page.key_down()
        page.click()
        page.hide()
        page.scheduler.run_idle()
        page.scheduler.advance(2000)
        assert recorder.values("LCP") == [700]

    def test_hidden_trigger_uses_idle_timeout(self, lcp, page, recorder, settings):
        page.performance.record(lcp_entry(700))
        page.scheduler.run_pending()
        page.scheduler.advance(100)
        page.hide()
        assert recorder.values("LCP") == []
        page.scheduler.advance(settings.idle_timeout_ms)
        assert recorder.values("LCP") == [700]

    def test_finalize_drains_pending_candidates(self, lcp, page, store, recorder):
        page.performance.record(lcp_entry(700))
        page.click()
        page.scheduler.run_idle()
        assert recorder.values("LCP") == [700]

    def test_observation_stops_after_finalization(self, lcp, page, store):
        page.performance.record(lcp_entry(700))
        page.scheduler.run_pending()
        page.key_down()
        page.scheduler.run_idle()
        page.performance.record(lcp_entry(900))
        page.scheduler.run_pending()
        assert store.record.LCP == 700

    def test_zero_value_not_reported(self, lcp, page, recorder):
        page.click()
        page.scheduler.run_idle()
        assert recorder.values("LCP") == []

    def test_unsupported_host_skips_metric(self, store):
        scheduler = CooperativeScheduler()
        page = Page(scheduler, PerformanceTimeline(scheduler, supported=["paint", "layout-shift"]))
        metric = LargestPaintMetric(page, store, VisibilityTracker(page), debug=True)
        assert metric.start() is False
        assert page.listener_count("click") == 0
        assert page.listener_count("keydown") == 0


class TestLargestPaintRestore:
    def test_restore_remeasures_after_two_frames(self, lcp, page, store, recorder):
        page.performance.record(lcp_entry(700))
        page.scheduler.run_pending()
        page.click()
        page.scheduler.run_idle()
        page.scheduler.advance(5000)
        page.restore_from_cache()
        assert lcp.value == 0
        page.scheduler.advance(16)
        page.scheduler.render_frame()
        assert recorder.values("LCP") == [700]
        page.scheduler.advance(16)
        page.scheduler.render_frame()
        assert recorder.values("LCP") == [700, 32]
        assert store.record.LCP == 32


# ── FCP ─────────────────────────────────────────────────────

class TestFirstContentfulPaint:
    def test_reports_first_contentful_paint(self, fcp, page, recorder):
        page.performance.record(paint(200, name="first-paint"))
        page.performance.record(paint(300))
        page.scheduler.run_pending()
        assert recorder.values("FCP") == [300]

    def test_single_shot(self, fcp, page, recorder):
        page.performance.record(paint(300))
        page.scheduler.run_pending()
        page.performance.record(paint(900))
        page.scheduler.run_pending()
        assert recorder.values("FCP") == [300]

    def test_waits_for_contentful_entry(self, fcp, page, recorder):
        page.performance.record(paint(200, name="first-paint"))
        page.scheduler.run_pending()
        assert recorder.values("FCP") == []
        page.performance.record(paint(320))
        page.scheduler.run_pending()
        assert recorder.values("FCP") == [320]

    def test_after_hidden_ignored(self, fcp, page, store):
        page.scheduler.advance(100)
        page.hide()
        page.performance.record(paint(300))
        page.scheduler.run_pending()
        assert store.record.FCP is None

    def test_activation_offset_clamped_at_zero(self, fcp, page, store):
        page.performance.record(NavigationTiming(activation_start=500))
        page.performance.record(paint(300))
        page.scheduler.run_pending()
        assert store.record.FCP == 0

    def test_restore_clears_then_remeasures(self, fcp, page, store, recorder):
        page.performance.record(paint(300))
        page.scheduler.run_pending()
        page.scheduler.advance(8000)
        page.restore_from_cache()
        assert store.record.FCP is None
        two_frames(page.scheduler, frame_ms=10)
        assert store.record.FCP == 20
        assert recorder.values("FCP") == [300, 20]


# ── FID ─────────────────────────────────────────────────────

class TestFirstInputDelay:
    def test_delay_until_processing_start(self, fid, page, recorder):
        page.performance.record(RawEntry("first-input", 3000, duration=48, processing_start=3012.4, interaction_id=1))
        page.scheduler.run_pending()
        assert recorder.values("FID") == [12]

    def test_after_hidden_ignored(self, fid, page, store):
        page.scheduler.advance(100)
        page.hide()
        page.performance.record(RawEntry("first-input", 300, processing_start=320))
        page.scheduler.run_pending()
        assert store.record.FID is None

    def test_restore_rearms(self, fid, page, store, recorder):
        page.performance.record(RawEntry("first-input", 300, processing_start=320))
        page.scheduler.run_pending()
        page.scheduler.advance(5000)
        page.restore_from_cache()
        assert store.record.FID is None
        page.scheduler.run_pending()
        assert store.record.FID is None
        page.performance.record(RawEntry("first-input", 5100, processing_start=5105))
        page.scheduler.run_pending()
        assert recorder.values("FID") == [20, 5]
