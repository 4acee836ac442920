from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from aimarker.domain.backend_status import BackendStatus, ProbeErrorKind, ProbeResult
from aimarker.domain.ports import HealthPort
from aimarker.usecases.error_mapping import classify_probe_error

_KIND_FOR_STATUS = {
    BackendStatus.RATE_LIMITED: ProbeErrorKind.RATE_LIMITED,
    BackendStatus.OFFLINE: ProbeErrorKind.NETWORK_UNREACHABLE,
    BackendStatus.TIMEOUT: ProbeErrorKind.REQUEST_TIMEOUT,
    BackendStatus.WAKING_UP: ProbeErrorKind.REQUEST_TIMEOUT,
}


@dataclass
class CheckBackendHealth:
    """Run one health probe and return a classified result; never raises."""

    health_port: HealthPort
    model: Optional[str] = None
    _log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__), repr=False)

    def __call__(self) -> ProbeResult:
        try:
            report = self.health_port.health(self.model)
        except Exception as exc:
            failure = classify_probe_error(exc)
            self._log.warning("Backend health probe failed (%s): %s", failure.kind.value, failure.detail)
            return ProbeResult(failure=failure)

        if report.ok:
            return ProbeResult.success(report)

        kind = _KIND_FOR_STATUS.get(report.status, ProbeErrorKind.BACKEND_ERROR)
        detail = report.detail or "Backend health check failed"
        self._log.warning("Backend reported unhealthy (%s): %s", report.status.value, detail)
        return ProbeResult.failed(kind, detail, report=report)
