"""Activity log and user session models.

``ActivityLogEntry`` is validated with pydantic so malformed actions, IP
addresses and user agents are rejected before anything reaches a store.
Entries are frozen; the log only ever grows.
"""

from __future__ import annotations

import ipaddress
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

USER_AGENT_MAX_LEN = 500


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActionKind(str, Enum):
    """Tracked user actions."""

    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    SUBMIT_QUESTION = "SUBMIT_QUESTION"
    VIEW_FEEDBACK = "VIEW_FEEDBACK"
    EXPORT_DATA = "EXPORT_DATA"
    IMPORT_CSV = "IMPORT_CSV"
    SAVE_TEAM = "SAVE_TEAM"

    @classmethod
    def parse(cls, value: Any) -> "ActionKind":
        """Accept ``ActionKind`` members and their loose spellings.

        ``"submit-question"``, ``"submit_question"`` and ``"SUBMIT_QUESTION"``
        all map to :attr:`SUBMIT_QUESTION`.

        Raises:
            ValueError: If ``value`` names no known action.
        """
        if isinstance(value, cls):
            return value
        token = str(value or "").strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls(token)
        except ValueError:
            raise ValueError(f"{value!r} is not a valid action") from None


def _new_id() -> str:
    return uuid.uuid4().hex


class ActivityLogEntry(BaseModel):
    """One recorded user action."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    user_id: str
    action: ActionKind
    details: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=utcnow)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = Field(default=None, max_length=USER_AGENT_MAX_LEN)
    success: bool = True
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("user_id", mode="before")
    @classmethod
    def _coerce_user_id(cls, value: Any) -> str:
        text = str(value).strip() if value is not None else ""
        if not text:
            raise ValueError("User ID is required")
        return text

    @field_validator("action", mode="before")
    @classmethod
    def _parse_action(cls, value: Any) -> ActionKind:
        return ActionKind.parse(value)

    @field_validator("ip_address")
    @classmethod
    def _check_ip(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        try:
            ipaddress.ip_address(value.strip())
        except ValueError:
            raise ValueError("Invalid IP address format") from None
        return value.strip()

    def formatted(self) -> Dict[str, Any]:
        """Public projection used by listings and the HTTP service."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "action": self.action.value,
            "details": dict(self.details),
            "timestamp": self.timestamp.isoformat(),
            "success": self.success,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class SessionEvent:
    """Single event recorded inside a user session."""

    event_type: str
    timestamp: datetime = field(default_factory=utcnow)
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "timestamp": self.timestamp.isoformat(),
            "details": dict(self.details),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionEvent":
        return cls(
            event_type=str(data.get("event_type") or ""),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            details=dict(data.get("details") or {}),
        )


@dataclass(frozen=True)
class UserSession:
    """A browsing session from login to logout."""

    session_id: str
    user_id: str
    username: str = ""
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    browser: Optional[str] = None
    operating_system: Optional[str] = None
    start_time: datetime = field(default_factory=utcnow)
    end_time: Optional[datetime] = None
    is_active: bool = True
    total_clicks: int = 0
    total_key_presses: int = 0
    events: Tuple[SessionEvent, ...] = ()

    def with_event(self, event: SessionEvent) -> "UserSession":
        clicks = self.total_clicks + (1 if event.event_type == "click" else 0)
        keys = self.total_key_presses + (1 if event.event_type == "keypress" else 0)
        return replace(
            self,
            events=self.events + (event,),
            total_clicks=clicks,
            total_key_presses=keys,
        )

    def ended(self, at: Optional[datetime] = None) -> "UserSession":
        return replace(self, is_active=False, end_time=at or utcnow())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "username": self.username,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "browser": self.browser,
            "operating_system": self.operating_system,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "is_active": self.is_active,
            "total_clicks": self.total_clicks,
            "total_key_presses": self.total_key_presses,
            "events": [event.to_dict() for event in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserSession":
        end_raw = data.get("end_time")
        return cls(
            session_id=str(data["session_id"]),
            user_id=str(data["user_id"]),
            username=str(data.get("username") or ""),
            ip_address=data.get("ip_address"),
            user_agent=data.get("user_agent"),
            browser=data.get("browser"),
            operating_system=data.get("operating_system"),
            start_time=datetime.fromisoformat(data["start_time"]),
            end_time=datetime.fromisoformat(end_raw) if end_raw else None,
            is_active=bool(data.get("is_active", True)),
            total_clicks=int(data.get("total_clicks") or 0),
            total_key_presses=int(data.get("total_key_presses") or 0),
            events=tuple(SessionEvent.from_dict(item) for item in data.get("events") or ()),
        )


__all__ = [
    "ActionKind",
    "ActivityLogEntry",
    "SessionEvent",
    "USER_AGENT_MAX_LEN",
    "UserSession",
    "utcnow",
]
