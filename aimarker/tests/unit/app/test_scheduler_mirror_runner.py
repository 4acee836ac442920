from __future__ import annotations

import threading
from typing import Callable, List

import pytest

from aimarker.app.polling_scheduler import PollingScheduler
from aimarker.app.probe_runner import InlineProbeRunner, ThreadProbeRunner
from aimarker.app.status_mirror import BackendStatusMirror


def test_scheduler_replaces_pending_timer_with_same_name(fake_clock) -> None:
    fired: List[str] = []
    scheduler = PollingScheduler(fake_clock.after, fake_clock.after_cancel)

    scheduler.schedule("poll", 1000, lambda: fired.append("first"))
    scheduler.schedule("poll", 2000, lambda: fired.append("second"))
    fake_clock.advance(5)

    assert fired == ["second"]
    assert scheduler.handle_for("poll") is None


def test_scheduler_callback_may_reschedule_itself(fake_clock) -> None:
    ticks: List[int] = []
    scheduler = PollingScheduler(fake_clock.after, fake_clock.after_cancel)

    def _tick() -> None:
        ticks.append(fake_clock.now_ms)
        if len(ticks) < 3:
            scheduler.schedule("tick", 1000, _tick)

    scheduler.schedule("tick", 1000, _tick)
    fake_clock.advance(10)

    assert ticks == [1000, 2000, 3000]
    assert scheduler.pending() == []


def test_scheduler_cancel_all_tolerates_failing_cancel() -> None:
    def _cancel(token) -> None:
        raise ValueError("already fired")

    scheduler = PollingScheduler(lambda delay, cb: "token", _cancel)
    scheduler.schedule("a", 10, lambda: None)
    scheduler.schedule("b", 10, lambda: None)

    scheduler.cancel_all()

    assert scheduler.pending() == []


def test_mirror_single_writer_lifecycle() -> None:
    mirror = BackendStatusMirror()
    owner, intruder = object(), object()

    assert mirror.read() is None
    mirror.attach(owner)
    mirror.publish(owner, "offline", "2024-05-01T12:00:00+00:00", "refused")

    assert mirror.read() == {"status": "offline", "lastChecked": "2024-05-01T12:00:00+00:00", "error": "refused"}
    with pytest.raises(RuntimeError):
        mirror.publish(intruder, "online", "")
    with pytest.raises(RuntimeError):
        mirror.attach(intruder)

    snapshot = mirror.read()
    snapshot["status"] = "online"
    assert mirror.read()["status"] == "offline"

    mirror.detach(owner)
    assert mirror.read() is None
    assert mirror.attached is False


def test_inline_runner_delivers_immediately() -> None:
    results: List[int] = []

    InlineProbeRunner().submit(lambda: 42, results.append)

    assert results == [42]


def test_thread_runner_posts_result_back() -> None:
    posted: List[Callable[[], None]] = []
    ready = threading.Event()
    results: List[str] = []

    def _post(callback: Callable[[], None]) -> None:
        posted.append(callback)
        ready.set()

    runner = ThreadProbeRunner(_post)
    runner.submit(lambda: "online", results.append)

    assert ready.wait(timeout=5)
    assert results == []
    posted[0]()
    assert results == ["online"]
    runner.close()
