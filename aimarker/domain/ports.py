from __future__ import annotations
from typing import Iterable, List, Optional, Protocol

from .activity import ActionKind, ActivityLogEntry, UserSession
from .backend_status import HealthReport
from .errors import UseCaseError


# ---- Ports (Hexagonal boundaries) ----
class HealthPort(Protocol):
    """Health probe against the grading backend.

    Raises adapter errors (timeouts, connection failures, HTTP errors); the
    probe use case classifies them.
    """

    def health(self, model: Optional[str] = None) -> HealthReport: ...
    def close(self) -> None: ...


class ActivityLogPort(Protocol):
    """Append-only persistence for activity entries."""

    def append(self, entry: ActivityLogEntry) -> ActivityLogEntry: ...
    def find(
        self,
        *,
        user_id: Optional[str] = None,
        action: Optional[ActionKind] = None,
        success: Optional[bool] = None,
    ) -> List[ActivityLogEntry]: ...


class SessionPort(Protocol):
    """Persistence for user sessions (replace-by-id)."""

    def save_session(self, session: UserSession) -> UserSession: ...
    def get_session(self, session_id: str) -> Optional[UserSession]: ...
    def sessions_for(self, user_id: str) -> Iterable[UserSession]: ...


__all__ = ["ActivityLogPort", "HealthPort", "SessionPort", "UseCaseError"]
