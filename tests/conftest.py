"""
Shared fixtures: a fresh simulated page, a metrics store and a recorder
collaborator that captures every callback.
"""
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from configs.settings import Settings
from vitals.lifecycle_service.visibility import VisibilityTracker
from vitals.metrics_service.store import MetricCallbacks, MetricsStore
from vitals.runtime_service.page import Page


class Recorder:
    """Collaborator that remembers every on_metric / on_update call."""

    def __init__(self) -> None:
        self.reports = []
        self.updates = 0

    def on_metric(self, name, value):
        self.reports.append((name, value))

    def on_update(self):
        self.updates += 1

    def values(self, name):
        return [v for n, v in self.reports if n == name]

    def callbacks(self) -> MetricCallbacks:
        return MetricCallbacks(on_metric=self.on_metric, on_update=self.on_update)


@pytest.fixture()
def settings():
    return Settings()


@pytest.fixture()
def page():
    return Page()


@pytest.fixture()
def recorder():
    return Recorder()


@pytest.fixture()
def store(recorder):
    s = MetricsStore()
    s.dispatcher.register(recorder.callbacks())
    return s


@pytest.fixture()
def visibility(page):
    return VisibilityTracker(page)
