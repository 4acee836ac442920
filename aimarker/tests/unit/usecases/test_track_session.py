from __future__ import annotations

import pytest

from aimarker.adapters.activity_store_memory import ActivityStoreMemory
from aimarker.domain.errors import UseCaseError, ValidationError
from aimarker.usecases.track_session import TrackUserSession


def test_start_creates_active_session() -> None:
    tracker = TrackUserSession(ActivityStoreMemory())

    session = tracker.start("u1", username="alice", session_id="s-1", browser="Firefox")

    assert session.is_active is True
    assert session.end_time is None
    assert tracker.active_for("u1") == session


def test_events_are_appended_and_counted() -> None:
    tracker = TrackUserSession(ActivityStoreMemory())
    tracker.start("u1", session_id="s-1")

    tracker.record_event("s-1", "click", {"target": "submit"})
    tracker.record_event("s-1", "click")
    session = tracker.record_event("s-1", "keypress")

    assert [e.event_type for e in session.events] == ["click", "click", "keypress"]
    assert session.events[0].details == {"target": "submit"}
    assert session.total_clicks == 2
    assert session.total_key_presses == 1


def test_end_closes_session_and_blocks_new_events() -> None:
    tracker = TrackUserSession(ActivityStoreMemory())
    tracker.start("u1", session_id="s-1")

    ended = tracker.end("s-1")

    assert ended.is_active is False
    assert ended.end_time is not None
    assert tracker.active_for("u1") is None
    assert tracker.end("s-1") == ended
    with pytest.raises(ValidationError):
        tracker.record_event("s-1", "click")


def test_starting_again_ends_previous_session() -> None:
    store = ActivityStoreMemory()
    tracker = TrackUserSession(store)
    tracker.start("u1", session_id="old")

    tracker.start("u1", session_id="new")

    assert store.get_session("old").is_active is False
    assert tracker.active_for("u1").session_id == "new"


def test_unknown_session_raises() -> None:
    tracker = TrackUserSession(ActivityStoreMemory())

    with pytest.raises(UseCaseError) as info:
        tracker.record_event("missing", "click")
    assert info.value.code == "SESSION_NOT_FOUND"


def test_blank_inputs_are_rejected() -> None:
    tracker = TrackUserSession(ActivityStoreMemory())

    with pytest.raises(ValidationError):
        tracker.start(" ")
    tracker.start("u1", session_id="s-1")
    with pytest.raises(ValidationError):
        tracker.record_event("s-1", "  ")
