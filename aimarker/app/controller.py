"""Adapter and use-case wiring for the backend status banner.

This module builds the health adapter, probe use case, status checker and
banner view model from :class:`aimarker.domain.settings.MarkerSettings`. The
hosting UI supplies its ``after`` / ``after_cancel`` pair and, optionally, a
thread-safe ``post`` to run probes off the UI thread.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from ..adapters.health_rest import HealthRestAdapter
from ..domain.ports import HealthPort
from ..domain.settings import MarkerSettings, load_settings
from ..usecases.check_backend_health import CheckBackendHealth
from ..viewmodels.backend_status_vm import BackendStatusVM
from .backend_status_checker import BackendStatusChecker, StatusCallback
from .polling_scheduler import CancelFn, PollingScheduler, ScheduleFn
from .probe_runner import InlineProbeRunner, ThreadProbeRunner
from .status_mirror import BACKEND_STATUS, BackendStatusMirror


class StatusController:
    """Own one mounted checker plus its adapter and view model.

    A fresh checker and health adapter are built on every :meth:`start`
    because :meth:`stop` closes the adapter session.
    """

    def __init__(
        self,
        schedule: ScheduleFn,
        cancel: CancelFn,
        *,
        settings: Optional[MarkerSettings] = None,
        post: Optional[Callable[[Callable[[], None]], None]] = None,
        health_port_factory: Optional[Callable[[MarkerSettings], HealthPort]] = None,
        mirror: Optional[BackendStatusMirror] = None,
        model: Optional[str] = None,
        on_status_change: Optional[StatusCallback] = None,
        on_update_banner: Optional[Callable[[dict], None]] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self._schedule = schedule
        self._cancel = cancel
        self._post = post
        self._health_port_factory = health_port_factory or HealthRestAdapter.from_settings
        self._mirror = mirror or BACKEND_STATUS
        self._model = model
        self._on_status_change = on_status_change
        self.vm = BackendStatusVM(on_update_banner=on_update_banner, on_retry=self.retry)
        self.health_port: Optional[HealthPort] = None
        self.checker: Optional[BackendStatusChecker] = None

    def start(self) -> BackendStatusChecker:
        if self.checker is not None and self.checker.mounted:
            return self.checker
        self.health_port = self._health_port_factory(self.settings)
        runner: Any = ThreadProbeRunner(self._post) if self._post else InlineProbeRunner()
        self.checker = BackendStatusChecker(
            CheckBackendHealth(self.health_port, model=self._model),
            PollingScheduler(self._schedule, self._cancel),
            settings=self.settings,
            mirror=self._mirror,
            runner=runner,
            on_status_change=self._on_status_change,
            on_state=self.vm.apply_state,
        )
        self.checker.mount()
        return self.checker

    def stop(self) -> None:
        if self.checker is not None:
            self.checker.unmount()
        if self.health_port is not None:
            self.health_port.close()
            self.health_port = None

    def retry(self) -> bool:
        if self.checker is None:
            return False
        return self.checker.refresh()


__all__ = ["StatusController"]
