"""
Timing instrumentation for engine internals.

Design decision: time.perf_counter_ns() measures the real cost of a
recompute, independent of the virtual clock the host scheduler runs on.
Results are logged at debug level by default; recomputes happen on every
interaction batch and would flood an INFO log.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Generator

from utils.logger import get_logger

_log = get_logger(__name__)


@contextmanager
def timed(label: str, level: str = "debug", **context) -> Generator[dict, None, None]:
    """
    Context manager that measures elapsed wall time in milliseconds.

    Usage:
        with timed("inp_recompute", interactions=len(table)) as t:
            value = select_percentile(durations)
        t["ms"]  # e.g. 0.04

    The dict is populated *after* the block finishes.
    """
    result: dict = {}
    start = time.perf_counter_ns()
    try:
        yield result
    finally:
        elapsed_ns = time.perf_counter_ns() - start
        result["ns"] = elapsed_ns
        result["ms"] = elapsed_ns / 1_000_000
        getattr(_log, level)(label, latency_ms=round(result["ms"], 3), **context)
