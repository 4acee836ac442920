from __future__ import annotations
import json, logging, os, threading
from typing import Dict, Iterable, List, Optional

from aimarker.domain.activity import ActionKind, ActivityLogEntry, UserSession
from aimarker.domain.errors import PersistenceFailure
from aimarker.domain.ports import ActivityLogPort, SessionPort

from .activity_store_memory import matches

_log = logging.getLogger(__name__)


class ActivityStoreLocal(ActivityLogPort, SessionPort):
    """Local filesystem storage for activity entries (JSON lines) and sessions (JSON)."""

    LOG_FILE = "activity_log.jsonl"
    SESSIONS_FILE = "user_sessions.json"

    def __init__(self, root_dir: str = ".") -> None:
        self.root = root_dir
        self._lock = threading.Lock()

    @property
    def log_path(self) -> str:
        return os.path.join(self.root, self.LOG_FILE)

    @property
    def sessions_path(self) -> str:
        return os.path.join(self.root, self.SESSIONS_FILE)

    # ---- Activity log (append-only JSON lines) ----
    def append(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        line = entry.model_dump_json()
        try:
            with self._lock:
                os.makedirs(self.root, exist_ok=True)
                with open(self.log_path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
        except OSError as exc:
            raise PersistenceFailure(f"Could not append to {self.log_path}: {exc}") from exc
        return entry

    def find(
        self,
        *,
        user_id: Optional[str] = None,
        action: Optional[ActionKind] = None,
        success: Optional[bool] = None,
    ) -> List[ActivityLogEntry]:
        if not os.path.exists(self.log_path):
            return []
        result: List[ActivityLogEntry] = []
        with self._lock, open(self.log_path, "r", encoding="utf-8") as f:
            for lineno, raw in enumerate(f, start=1):
                raw = raw.strip()
                if not raw:
                    continue
                try:
                    entry = ActivityLogEntry.model_validate_json(raw)
                except ValueError as exc:
                    _log.warning("Skipping unreadable line %d of %s: %s", lineno, self.log_path, exc)
                    continue
                if matches(entry, user_id=user_id, action=action, success=success):
                    result.append(entry)
        return result

    # ---- Sessions (JSON, replaced by id) ----
    def save_session(self, session: UserSession) -> UserSession:
        with self._lock:
            sessions = self._read_sessions()
            sessions[session.session_id] = session.to_dict()
            try:
                os.makedirs(self.root, exist_ok=True)
                tmp = self.sessions_path + ".tmp"
                with open(tmp, "w", encoding="utf-8") as f:
                    json.dump(sessions, f, ensure_ascii=False, indent=2)
                os.replace(tmp, self.sessions_path)
            except OSError as exc:
                raise PersistenceFailure(f"Could not write {self.sessions_path}: {exc}") from exc
        return session

    def get_session(self, session_id: str) -> Optional[UserSession]:
        with self._lock:
            data = self._read_sessions().get(session_id)
        return UserSession.from_dict(data) if data else None

    def sessions_for(self, user_id: str) -> Iterable[UserSession]:
        with self._lock:
            sessions = self._read_sessions()
        return [
            UserSession.from_dict(data)
            for data in sessions.values()
            if str(data.get("user_id")) == str(user_id)
        ]

    def _read_sessions(self) -> Dict[str, Dict]:
        if not os.path.exists(self.sessions_path):
            return {}
        with open(self.sessions_path, "r", encoding="utf-8") as f:
            return json.load(f)
