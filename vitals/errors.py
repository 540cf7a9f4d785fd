"""
Error taxonomy for the metric engine.

None of these ever reach the hosting page. Metric modules catch them at
their own boundary and log a diagnostic; the page keeps running with the
metric skipped or left unset.
"""

from __future__ import annotations


class VitalsError(Exception):
    """Base class for engine errors."""


class UnsupportedCapability(VitalsError):
    """The host cannot observe a category or lacks a scheduling facility."""

    def __init__(self, capability: str) -> None:
        super().__init__(f"unsupported capability: {capability}")
        self.capability = capability


class MissingData(VitalsError):
    """An expected record (e.g. navigation timing) was absent at read time."""
