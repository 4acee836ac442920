"""In-memory activity and session store for tests and single-process runs."""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional

from aimarker.domain.activity import ActionKind, ActivityLogEntry, UserSession
from aimarker.domain.ports import ActivityLogPort, SessionPort


def matches(
    entry: ActivityLogEntry,
    *,
    user_id: Optional[str] = None,
    action: Optional[ActionKind] = None,
    success: Optional[bool] = None,
) -> bool:
    if user_id is not None and entry.user_id != str(user_id):
        return False
    if action is not None and entry.action is not action:
        return False
    if success is not None and entry.success is not success:
        return False
    return True


class ActivityStoreMemory(ActivityLogPort, SessionPort):
    """Keeps entries and sessions in process memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: List[ActivityLogEntry] = []
        self._sessions: Dict[str, UserSession] = {}

    # ---- Activity log ----
    def append(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        with self._lock:
            self._entries.append(entry)
        return entry

    def find(
        self,
        *,
        user_id: Optional[str] = None,
        action: Optional[ActionKind] = None,
        success: Optional[bool] = None,
    ) -> List[ActivityLogEntry]:
        with self._lock:
            entries = list(self._entries)
        return [e for e in entries if matches(e, user_id=user_id, action=action, success=success)]

    # ---- Sessions ----
    def save_session(self, session: UserSession) -> UserSession:
        with self._lock:
            self._sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> Optional[UserSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def sessions_for(self, user_id: str) -> Iterable[UserSession]:
        with self._lock:
            return [s for s in self._sessions.values() if s.user_id == str(user_id)]


__all__ = ["ActivityStoreMemory", "matches"]
