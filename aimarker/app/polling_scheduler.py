"""Scheduler helper that owns named timers for UI-driven polling.

The hosting UI passes Tk ``after`` and ``after_cancel`` callables (or a fake
clock in tests) into this class so timer state is tracked in one place and
canceled safely when the prober is torn down.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

ScheduleFn = Callable[[int, Callable[[], None]], Any]
CancelFn = Callable[[Any], None]

_log = logging.getLogger(__name__)


@dataclass
class PollHandle:
    """Timer token associated with a single named timer.

    Attributes:
        name: Timer key (for example ``poll`` or ``wakeup_retry``).
        token: Scheduler token returned by the UI scheduler implementation.
    """
    name: str
    token: Any


class PollingScheduler:
    """Manage one-shot named timers using a UI scheduler (for example Tk).

    Scheduling a name that is already pending replaces the pending timer, so
    there is at most one timer per name at any time.
    """

    def __init__(self, schedule: ScheduleFn, cancel: CancelFn) -> None:
        """Store schedule/cancel functions and initialize handle registry.

        Args:
            schedule: Function compatible with ``after(delay_ms, callback)``.
            cancel: Function compatible with ``after_cancel(token)``.
        """
        self._schedule = schedule
        self._cancel = cancel
        self._handles: Dict[str, PollHandle] = {}

    def schedule(self, name: str, delay_ms: int, callback: Callable[[], None]) -> None:
        """Schedule or reschedule a named timer.

        Args:
            name: Timer key.
            delay_ms: Delay in milliseconds before callback execution.
            callback: Function to run once the delay elapses.
        """
        delay = max(1, int(delay_ms))
        self.cancel(name)
        handle = PollHandle(name=name, token=None)

        def _fire() -> None:
            # Drop the handle before running so the callback may reschedule.
            if self._handles.get(name) is handle:
                del self._handles[name]
            callback()

        handle.token = self._schedule(delay, _fire)
        self._handles[name] = handle

    def cancel(self, name: str) -> None:
        """Cancel a pending timer; unknown names are ignored."""
        handle = self._handles.pop(name, None)
        if not handle:
            return
        try:
            self._cancel(handle.token)
        except Exception as exc:
            # Tk raises for tokens that already fired.
            _log.debug("Cancel of timer %s failed: %s", name, exc)

    def cancel_all(self) -> None:
        """Cancel all pending timers."""
        for name in list(self._handles.keys()):
            self.cancel(name)

    def handle_for(self, name: str) -> Optional[PollHandle]:
        """Return the current handle for a timer, if scheduled."""
        return self._handles.get(name)

    def pending(self) -> List[str]:
        return sorted(self._handles)


__all__ = ["PollHandle", "PollingScheduler"]
