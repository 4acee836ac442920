"""Backend availability types shared by the prober, mirror and view models.

The prober never inspects loosely-typed errors directly: every failure is first
turned into a :class:`ProbeFailure` with a closed :class:`ProbeErrorKind`, and
the transition logic only looks at that kind.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class BackendStatus(str, Enum):
    """Availability states rendered by banners and indicators."""

    CHECKING = "checking"
    ONLINE = "online"
    OFFLINE = "offline"
    ERROR = "error"
    TIMEOUT = "timeout"
    WAKING_UP = "waking_up"
    RATE_LIMITED = "rate_limited"


class ProbeErrorKind(str, Enum):
    """Closed set of probe failure classifications."""

    NETWORK_UNREACHABLE = "network_unreachable"
    REQUEST_TIMEOUT = "request_timeout"
    RATE_LIMITED = "rate_limited"
    BACKEND_ERROR = "backend_error"


_STATUS_FOR_KIND: Dict[ProbeErrorKind, BackendStatus] = {
    ProbeErrorKind.NETWORK_UNREACHABLE: BackendStatus.OFFLINE,
    ProbeErrorKind.REQUEST_TIMEOUT: BackendStatus.WAKING_UP,
    ProbeErrorKind.RATE_LIMITED: BackendStatus.RATE_LIMITED,
    ProbeErrorKind.BACKEND_ERROR: BackendStatus.ERROR,
}


@dataclass(frozen=True)
class HealthReport:
    """Normalized answer of one health probe that reached the backend.

    Attributes:
        ok: ``True`` when the backend is usable.
        status: Status suggested by the payload inspection.
        detail: Human-readable reason when ``ok`` is ``False``.
        data: Raw health payload (may be empty).
    """

    ok: bool
    status: BackendStatus
    detail: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProbeFailure:
    """Classified probe failure."""

    kind: ProbeErrorKind
    detail: str
    retry_after_s: Optional[float] = None

    @property
    def status(self) -> BackendStatus:
        return _STATUS_FOR_KIND[self.kind]


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a probe: either a success report or a classified failure."""

    report: Optional[HealthReport] = None
    failure: Optional[ProbeFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.report is not None and self.report.ok

    @property
    def data(self) -> Dict[str, Any]:
        return dict(self.report.data) if self.report else {}

    @classmethod
    def success(cls, report: HealthReport) -> "ProbeResult":
        return cls(report=report)

    @classmethod
    def failed(
        cls,
        kind: ProbeErrorKind,
        detail: str,
        *,
        retry_after_s: Optional[float] = None,
        report: Optional[HealthReport] = None,
    ) -> "ProbeResult":
        return cls(
            report=report,
            failure=ProbeFailure(kind=kind, detail=detail, retry_after_s=retry_after_s),
        )


@dataclass(frozen=True)
class BackendAvailability:
    """Prober state at one point in time."""

    status: BackendStatus = BackendStatus.CHECKING
    detail: Optional[str] = None
    last_checked_at: Optional[datetime] = None
    wakeup_progress: int = 0
    attempt_count: int = 0

    def with_status(self, status: BackendStatus, **changes: Any) -> "BackendAvailability":
        """Return a copy in ``status``; entering ``waking_up`` resets progress."""
        if status is BackendStatus.WAKING_UP and self.status is not BackendStatus.WAKING_UP:
            changes.setdefault("wakeup_progress", 0)
        return replace(self, status=status, **changes)

    def advance_progress(self, step: int) -> "BackendAvailability":
        """Advance the wake-up progress, only while waking up, capped at 100."""
        if self.status is not BackendStatus.WAKING_UP:
            return self
        return replace(self, wakeup_progress=min(100, self.wakeup_progress + max(0, step)))

    @property
    def is_online(self) -> bool:
        return self.status is BackendStatus.ONLINE


__all__ = [
    "BackendAvailability",
    "BackendStatus",
    "HealthReport",
    "ProbeErrorKind",
    "ProbeFailure",
    "ProbeResult",
]
