from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping, Optional

from aimarker.domain.activity import SessionEvent, UserSession, utcnow
from aimarker.domain.errors import UseCaseError, ValidationError
from aimarker.domain.ports import SessionPort

_log = logging.getLogger(__name__)


class TrackUserSession:
    """Start, extend and end user sessions; one active session per user."""

    def __init__(self, store: SessionPort) -> None:
        self.store = store

    def start(
        self,
        user_id: Any,
        *,
        username: str = "",
        session_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        browser: Optional[str] = None,
        operating_system: Optional[str] = None,
    ) -> UserSession:
        user = str(user_id).strip() if user_id is not None else ""
        if not user:
            raise ValidationError("User ID is required", field="user_id")
        previous = self.active_for(user)
        if previous is not None:
            _log.info("Ending stale session %s for user %s", previous.session_id, user)
            self.store.save_session(previous.ended())
        session = UserSession(
            session_id=session_id or uuid.uuid4().hex,
            user_id=user,
            username=username,
            ip_address=ip_address,
            user_agent=user_agent,
            browser=browser,
            operating_system=operating_system,
        )
        return self.store.save_session(session)

    def record_event(
        self,
        session_id: str,
        event_type: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> UserSession:
        session = self._require(session_id)
        if not session.is_active:
            raise ValidationError(f"Session {session_id} has ended", field="session_id")
        kind = (event_type or "").strip()
        if not kind:
            raise ValidationError("Event type is required", field="event_type")
        event = SessionEvent(event_type=kind, timestamp=utcnow(), details=dict(details or {}))
        return self.store.save_session(session.with_event(event))

    def end(self, session_id: str) -> UserSession:
        session = self._require(session_id)
        if not session.is_active:
            return session
        return self.store.save_session(session.ended())

    def active_for(self, user_id: Any) -> Optional[UserSession]:
        for session in self.store.sessions_for(str(user_id)):
            if session.is_active:
                return session
        return None

    def _require(self, session_id: str) -> UserSession:
        session = self.store.get_session(session_id)
        if session is None:
            raise UseCaseError("SESSION_NOT_FOUND", f"Unknown session: {session_id}")
        return session
