"""Domain-level error types for use-case and adapter mapping.

These errors cross layer boundaries without leaking transport or persistence
details. Use cases raise them; the HTTP service and view models map their
``code`` to user-facing responses.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str, *, meta: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = meta or {}


class ValidationError(UseCaseError):
    """Rejected input; nothing was persisted."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        meta = {"field": field} if field else None
        super().__init__("INVALID_ACTIVITY", message, meta=meta)
        self.field = field


class PersistenceFailure(UseCaseError):
    """The underlying store could not complete a write."""

    def __init__(self, message: str) -> None:
        super().__init__("PERSISTENCE_FAILED", message)


__all__ = ["PersistenceFailure", "UseCaseError", "ValidationError"]
