"""
Finalize-once guard.

Several independent listeners (idle, hidden, key-down, click) may all try
to finalize the same metric. Wrapping the action makes every call after
the first a no-op, so no locking or listener bookkeeping is needed to
prevent a double report.
"""

from __future__ import annotations

from typing import Any, Callable, Optional


class FinalizeOnce:
    """Callable wrapper that runs its action on the first call only."""

    __slots__ = ("_action", "done")

    def __init__(self, action: Callable[..., Any]) -> None:
        self._action = action
        self.done = False

    def __call__(self, *args, **kwargs) -> Optional[Any]:
        if self.done:
            return None
        # Marked before running: a re-entrant call from inside the action is a no-op.
        self.done = True
        return self._action(*args, **kwargs)

    def cancel(self) -> None:
        """Disarm without running the action."""
        self.done = True


def run_once(action: Callable[..., Any]) -> FinalizeOnce:
    return FinalizeOnce(action)
