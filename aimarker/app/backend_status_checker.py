"""Backend availability prober driving the status banner.

State machine::

    checking -> online | offline | error | rate_limited | waking_up
    waking_up -> checking            (one auto re-check after ``wakeup_retry_s``)
    any non-checking -> checking     (manual refresh or periodic poll)

Timers run through :class:`PollingScheduler` under three names: ``poll``
(periodic probe), ``wakeup_progress`` (progress animation) and
``wakeup_retry`` (one-shot re-check). Each name has at most one pending timer.
Results carry the request token of the probe that produced them and are
dropped when a newer probe started or the checker was unmounted.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from aimarker.app.polling_scheduler import PollingScheduler
from aimarker.app.probe_runner import InlineProbeRunner, ProbeRunner
from aimarker.app.status_mirror import BACKEND_STATUS, BackendStatusMirror
from aimarker.domain.backend_status import BackendAvailability, BackendStatus, ProbeResult
from aimarker.domain.settings import MarkerSettings
from aimarker.usecases.error_mapping import classify_probe_error

POLL_TIMER = "poll"
PROGRESS_TIMER = "wakeup_progress"
RETRY_TIMER = "wakeup_retry"

WAKING_UP_DETAIL = "Server is waking up..."

StatusCallback = Callable[[BackendStatus, Dict[str, Any]], None]
StateCallback = Callable[[BackendAvailability], None]


def _ms(seconds: float) -> int:
    return max(1, int(round(seconds * 1000)))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BackendStatusChecker:
    """Poll the backend health and keep ``BackendAvailability`` current."""

    def __init__(
        self,
        check_health: Callable[[], ProbeResult],
        scheduler: PollingScheduler,
        *,
        settings: Optional[MarkerSettings] = None,
        mirror: Optional[BackendStatusMirror] = None,
        runner: Optional[ProbeRunner] = None,
        on_status_change: Optional[StatusCallback] = None,
        on_state: Optional[StateCallback] = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Wire collaborators; nothing runs before :meth:`mount`.

        Args:
            check_health: Probe callable, usually ``CheckBackendHealth``.
            scheduler: Timer owner backed by Tk ``after`` or a fake clock.
            settings: Poll interval, wake-up retry delay and progress step.
            mirror: Status slot to publish into; the process-wide one by default.
            runner: Executes probes; inline by default.
            on_status_change: Called with each probe outcome and its payload.
            on_state: Called with every applied state, progress ticks included.
            now: Clock used for ``last_checked_at``.
        """
        self._check_health = check_health
        self._scheduler = scheduler
        self._settings = settings or MarkerSettings()
        self._mirror = mirror or BACKEND_STATUS
        self._runner = runner or InlineProbeRunner()
        self._on_status_change = on_status_change
        self._on_state = on_state
        self._now = now
        self._log = logging.getLogger(__name__)

        self._state = BackendAvailability()
        self._token = 0
        self._mounted = False

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------
    @property
    def state(self) -> BackendAvailability:
        return self._state

    @property
    def mounted(self) -> bool:
        return self._mounted

    def mount(self) -> None:
        """Attach to the mirror, probe now and start the periodic poll."""
        if self._mounted:
            return
        self._mirror.attach(self)
        self._mounted = True
        self._schedule_poll()
        self._start_probe()

    def unmount(self) -> None:
        """Cancel every timer and drop any probe still in flight."""
        if not self._mounted:
            return
        self._mounted = False
        self._token += 1
        self._scheduler.cancel_all()
        self._runner.close()
        self._mirror.detach(self)

    def refresh(self) -> bool:
        """Manual retry. Returns ``False`` when a probe is already running."""
        if not self._mounted or self._state.status is BackendStatus.CHECKING:
            return False
        self._start_probe()
        return True

    # ------------------------------------------------------------------
    # Probe lifecycle
    # ------------------------------------------------------------------
    def _start_probe(self) -> None:
        self._scheduler.cancel(PROGRESS_TIMER)
        self._scheduler.cancel(RETRY_TIMER)
        self._token += 1
        token = self._token
        self._apply(self._state.with_status(BackendStatus.CHECKING, detail=None))
        self._runner.submit(self._probe, lambda result: self._on_result(token, result))

    def _probe(self) -> ProbeResult:
        try:
            return self._check_health()
        except Exception as exc:
            self._log.warning("Backend status check failed: %s", exc)
            return ProbeResult(failure=classify_probe_error(exc))

    def _on_result(self, token: int, result: ProbeResult) -> None:
        if not self._mounted or token != self._token:
            self._log.debug("Dropping stale probe result (token %s, current %s)", token, self._token)
            return
        checked_at = self._now()

        if result.ok:
            self._apply(
                self._state.with_status(
                    BackendStatus.ONLINE,
                    detail=None,
                    last_checked_at=checked_at,
                    attempt_count=0,
                )
            )
            self._notify(BackendStatus.ONLINE, result.data)
            return

        failure = result.failure
        status = failure.status if failure else BackendStatus.ERROR
        attempts = self._state.attempt_count + 1
        if status is BackendStatus.WAKING_UP:
            self._apply(
                self._state.with_status(
                    BackendStatus.WAKING_UP,
                    detail=WAKING_UP_DETAIL,
                    last_checked_at=checked_at,
                    attempt_count=attempts,
                )
            )
            self._scheduler.schedule(PROGRESS_TIMER, _ms(self._settings.wakeup_tick_s), self._on_progress_tick)
            self._scheduler.schedule(RETRY_TIMER, _ms(self._settings.wakeup_retry_s), self._on_wakeup_retry)
        else:
            self._apply(
                self._state.with_status(
                    status,
                    detail=failure.detail if failure else None,
                    last_checked_at=checked_at,
                    attempt_count=attempts,
                )
            )
        self._notify(status, result.data)

    def _on_progress_tick(self) -> None:
        if not self._mounted or self._state.status is not BackendStatus.WAKING_UP:
            return
        self._apply(self._state.advance_progress(self._settings.wakeup_step_pct))
        if self._state.wakeup_progress < 100:
            self._scheduler.schedule(PROGRESS_TIMER, _ms(self._settings.wakeup_tick_s), self._on_progress_tick)

    def _on_wakeup_retry(self) -> None:
        if self._mounted and self._state.status is BackendStatus.WAKING_UP:
            self._log.info("Re-checking backend after wake-up delay")
            self._start_probe()

    def _schedule_poll(self) -> None:
        self._scheduler.schedule(POLL_TIMER, _ms(self._settings.status_poll_interval_s), self._on_poll_tick)

    def _on_poll_tick(self) -> None:
        if not self._mounted:
            return
        self._schedule_poll()
        if self._state.status is BackendStatus.CHECKING:
            return
        self._start_probe()

    # ------------------------------------------------------------------
    # State fan-out
    # ------------------------------------------------------------------
    def _apply(self, state: BackendAvailability) -> None:
        previous = self._state
        self._state = state
        if previous.status is not state.status:
            self._log.info("Backend status %s -> %s", previous.status.value, state.status.value)
        last_checked = state.last_checked_at.isoformat() if state.last_checked_at else ""
        error = state.detail if state.status is not BackendStatus.ONLINE else None
        self._mirror.publish(self, state.status.value, last_checked, error)
        if self._on_state:
            self._on_state(state)

    def _notify(self, status: BackendStatus, data: Dict[str, Any]) -> None:
        if self._on_status_change:
            self._on_status_change(status, data)


__all__ = [
    "BackendStatusChecker",
    "POLL_TIMER",
    "PROGRESS_TIMER",
    "RETRY_TIMER",
    "WAKING_UP_DETAIL",
]
