from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..domain.backend_status import BackendAvailability, BackendStatus

PROGRESS_DISPLAY_CAP = 95

_INDICATOR_LABELS: Dict[BackendStatus, str] = {
    BackendStatus.ONLINE: "Backend Online",
    BackendStatus.CHECKING: "Checking...",
    BackendStatus.WAKING_UP: "Starting Up...",
    BackendStatus.OFFLINE: "Backend Offline",
    BackendStatus.ERROR: "Connection Error",
    BackendStatus.TIMEOUT: "Connection Timeout",
    BackendStatus.RATE_LIMITED: "Rate Limited",
}

_INDICATOR_TONES: Dict[BackendStatus, str] = {
    BackendStatus.ONLINE: "ok",
    BackendStatus.CHECKING: "busy",
    BackendStatus.WAKING_UP: "warn",
}


@dataclass
class BackendStatusVM:
    """Turns ``BackendAvailability`` into banner and indicator DTOs, no I/O here."""

    on_update_banner: Optional[Callable[[Dict], None]] = None
    on_retry: Optional[Callable[[], bool]] = None

    last_state: Optional[BackendAvailability] = None

    def apply_state(self, state: BackendAvailability) -> Dict:
        self.last_state = state
        dto = self.banner(state)
        if self.on_update_banner:
            self.on_update_banner(dto)
        return dto

    def request_retry(self) -> bool:
        """Forward the retry button; ignored while the button is disabled."""
        if self.last_state is not None and not self.retry_enabled(self.last_state):
            return False
        if self.on_retry is None:
            return False
        return bool(self.on_retry())

    # ------------------------------------------------------------------
    # DTO helpers
    # ------------------------------------------------------------------
    @staticmethod
    def indicator_label(status: BackendStatus) -> str:
        return _INDICATOR_LABELS.get(status, "Unknown Status")

    @staticmethod
    def indicator_tone(status: BackendStatus) -> str:
        return _INDICATOR_TONES.get(status, "error")

    @staticmethod
    def display_progress(state: BackendAvailability) -> int:
        """Progress shown to the user; held below 100 until the backend answers."""
        if state.status is BackendStatus.ONLINE:
            return 100
        if state.status is not BackendStatus.WAKING_UP:
            return 0
        return min(state.wakeup_progress, PROGRESS_DISPLAY_CAP)

    @staticmethod
    def retry_enabled(state: BackendAvailability) -> bool:
        if state.status is BackendStatus.CHECKING:
            return False
        if state.status is BackendStatus.WAKING_UP:
            return state.wakeup_progress >= PROGRESS_DISPLAY_CAP
        return True

    def banner(self, state: BackendAvailability) -> Dict:
        waking = state.status is BackendStatus.WAKING_UP
        if waking:
            title = "Backend Server is Starting Up"
            message = "This can take up to 30-60 seconds as the server initializes."
            button = f"Waking Up... ({self.display_progress(state)}%)"
        else:
            title = "Backend Server is Offline"
            message = "The backend server is currently offline. Click the button to wake it up."
            button = "Try Again" if state.attempt_count > 0 else "Wake Up API"
        return {
            "visible": state.status is not BackendStatus.ONLINE,
            "status": state.status.value,
            "indicator": self.indicator_label(state.status),
            "tone": self.indicator_tone(state.status),
            "title": title,
            "message": message,
            "detail": state.detail or "",
            "show_progress": waking,
            "progress": self.display_progress(state),
            "button_label": button,
            "retry_enabled": self.retry_enabled(state),
            "last_checked": state.last_checked_at.strftime("%H:%M:%S") if state.last_checked_at else "",
        }


__all__ = ["BackendStatusVM", "PROGRESS_DISPLAY_CAP"]
