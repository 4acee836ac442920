"""Process-wide slot holding the latest known backend status.

Any component may read the slot; only the prober that attached to it may
write. Attaching and detaching follow the prober's mount/unmount.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional


class BackendStatusMirror:
    """Last-writer-wins status slot with a single registered writer."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._owner: Optional[object] = None
        self._snapshot: Optional[Dict[str, str]] = None

    def attach(self, owner: object) -> None:
        """Register ``owner`` as the only writer.

        Raises:
            RuntimeError: If another owner is attached.
        """
        with self._lock:
            if self._owner is not None and self._owner is not owner:
                raise RuntimeError("Backend status mirror already has a writer attached.")
            self._owner = owner

    def detach(self, owner: object) -> None:
        """Release the slot and clear the stored status."""
        with self._lock:
            if self._owner is owner:
                self._owner = None
                self._snapshot = None

    def publish(self, owner: object, status: str, last_checked: str, error: Optional[str] = None) -> None:
        with self._lock:
            if self._owner is not owner:
                raise RuntimeError("Only the attached prober may publish backend status.")
            snapshot = {"status": status, "lastChecked": last_checked}
            if error:
                snapshot["error"] = error
            self._snapshot = snapshot

    def read(self) -> Optional[Dict[str, Any]]:
        """Return a copy of the latest status, or ``None`` before the first probe."""
        with self._lock:
            return dict(self._snapshot) if self._snapshot else None

    @property
    def attached(self) -> bool:
        with self._lock:
            return self._owner is not None


BACKEND_STATUS = BackendStatusMirror()


def read_backend_status() -> Optional[Dict[str, Any]]:
    return BACKEND_STATUS.read()


__all__ = ["BACKEND_STATUS", "BackendStatusMirror", "read_backend_status"]
