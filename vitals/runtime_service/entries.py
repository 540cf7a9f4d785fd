"""
Performance entries as delivered by the host timeline.

Entries are frozen: once recorded they are shared by every subscription
that observes their category, so nobody may mutate them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# ── Categories ──────────────────────────────────────────────

LAYOUT_SHIFT = "layout-shift"
PAINT = "paint"
LARGEST_CONTENTFUL_PAINT = "largest-contentful-paint"
EVENT = "event"
FIRST_INPUT = "first-input"
NAVIGATION = "navigation"

CATEGORIES = (
    LAYOUT_SHIFT,
    PAINT,
    LARGEST_CONTENTFUL_PAINT,
    EVENT,
    FIRST_INPUT,
    NAVIGATION,
)

FIRST_CONTENTFUL_PAINT = "first-contentful-paint"


@dataclass(frozen=True)
class RawEntry:
    """One timestamped observation. Times are ms since navigation start."""

    category: str
    start_time: float
    duration: float = 0.0
    value: float = 0.0
    had_recent_input: bool = False
    interaction_id: Optional[int] = None
    name: str = ""
    processing_start: Optional[float] = None


@dataclass(frozen=True)
class NavigationTiming:
    """The single navigation record of a page load."""

    start_time: float = 0.0
    domain_lookup_start: float = 0.0
    domain_lookup_end: float = 0.0
    connect_start: float = 0.0
    connect_end: float = 0.0
    response_start: float = 0.0
    response_end: float = 0.0
    dom_content_loaded_event_end: float = 0.0
    load_event_end: float = 0.0
    activation_start: float = 0.0
    category: str = NAVIGATION
