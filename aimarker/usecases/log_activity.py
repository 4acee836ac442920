"""Use cases for writing and reading the activity log."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import pydantic

from aimarker.domain.activity import ActionKind, ActivityLogEntry, utcnow
from aimarker.domain.errors import PersistenceFailure, UseCaseError, ValidationError
from aimarker.domain.ports import ActivityLogPort

_log = logging.getLogger(__name__)

_METADATA_KEYS = ("ip_address", "user_agent", "success")


class LogActivity:
    """Append one immutable activity entry to the store.

    Validation happens before the store is touched, so a rejected entry leaves
    no trace. Store failures are logged and re-raised as
    :class:`PersistenceFailure`.
    """

    def __init__(self, store: ActivityLogPort) -> None:
        self.store = store

    def __call__(
        self,
        user_id: Any,
        action: Any,
        details: Optional[Mapping[str, Any]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> ActivityLogEntry:
        """Validate and persist one entry.

        Args:
            user_id: Owning user reference (not checked for existence).
            action: ``ActionKind`` member or its loose spelling.
            details: Free-form key/value map.
            metadata: Optional ``ip_address``, ``user_agent`` and ``success``.

        Returns:
            ActivityLogEntry: The stored entry.

        Raises:
            ValidationError: Unknown action, bad IP address or user agent.
            PersistenceFailure: The store write failed.
        """
        entry = self.build_entry(user_id, action, details, metadata)
        try:
            stored = self.store.append(entry)
        except PersistenceFailure as exc:
            _log.error("Error logging activity %s for user %s: %s", entry.action.value, entry.user_id, exc)
            raise
        except Exception as exc:
            _log.error("Error logging activity %s for user %s: %s", entry.action.value, entry.user_id, exc)
            raise PersistenceFailure(str(exc) or exc.__class__.__name__) from exc
        _log.debug("Logged %s for user %s", stored.action.value, stored.user_id)
        return stored

    @staticmethod
    def build_entry(
        user_id: Any,
        action: Any,
        details: Optional[Mapping[str, Any]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> ActivityLogEntry:
        meta = dict(metadata or {})
        unknown = set(meta) - set(_METADATA_KEYS)
        if unknown:
            raise ValidationError(
                f"Unknown metadata keys: {', '.join(sorted(unknown))}",
                field="metadata",
            )
        try:
            return ActivityLogEntry(
                user_id=user_id,
                action=action,
                details=dict(details or {}),
                timestamp=utcnow(),
                ip_address=meta.get("ip_address"),
                user_agent=meta.get("user_agent"),
                success=meta.get("success") is not False,
            )
        except pydantic.ValidationError as exc:
            raise _validation_error(exc) from exc


def _validation_error(exc: pydantic.ValidationError) -> ValidationError:
    first = exc.errors()[0] if exc.errors() else {}
    loc = first.get("loc") or ()
    field_name = str(loc[0]) if loc else None
    message = str(first.get("msg") or "Invalid activity entry")
    # pydantic prefixes messages raised from validators.
    message = message.removeprefix("Value error, ")
    return ValidationError(message, field=field_name)


class ListActivity:
    """Return formatted entries, newest first."""

    def __init__(self, store: ActivityLogPort) -> None:
        self.store = store

    def __call__(
        self,
        *,
        user_id: Optional[Any] = None,
        action: Optional[Any] = None,
        success: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        kind: Optional[ActionKind] = None
        if action is not None:
            try:
                kind = ActionKind.parse(action)
            except ValueError as exc:
                raise ValidationError(str(exc), field="action") from exc
        if limit is not None and limit < 0:
            raise UseCaseError("INVALID_LIMIT", "limit must be zero or positive")

        entries = self.store.find(
            user_id=str(user_id) if user_id is not None else None,
            action=kind,
            success=success,
        )
        # Later appends win ties on timestamp.
        entries = sorted(reversed(entries), key=lambda e: e.timestamp, reverse=True)
        if limit is not None:
            entries = entries[:limit]
        return [entry.formatted() for entry in entries]


__all__ = ["ListActivity", "LogActivity"]
