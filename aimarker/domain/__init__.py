"""Domain package exports for value objects and aggregates."""

from .activity import ActionKind, ActivityLogEntry, SessionEvent, UserSession
from .backend_status import (
    BackendAvailability,
    BackendStatus,
    HealthReport,
    ProbeErrorKind,
    ProbeFailure,
    ProbeResult,
)
from .errors import PersistenceFailure, UseCaseError, ValidationError
from .settings import MarkerSettings, load_settings

__all__ = [
    "ActionKind",
    "ActivityLogEntry",
    "BackendAvailability",
    "BackendStatus",
    "HealthReport",
    "MarkerSettings",
    "PersistenceFailure",
    "ProbeErrorKind",
    "ProbeFailure",
    "ProbeResult",
    "SessionEvent",
    "UseCaseError",
    "UserSession",
    "ValidationError",
    "load_settings",
]
