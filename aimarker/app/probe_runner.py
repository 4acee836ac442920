"""Runners that execute a probe and hand its result back to the UI thread.

``InlineProbeRunner`` runs the probe synchronously (tests, scripts).
``ThreadProbeRunner`` runs it on one worker thread and delivers the result via
``post``, which must schedule the callback on the UI thread (for Tk, a queue
drained by an ``after`` loop).
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, Protocol, TypeVar

T = TypeVar("T")

_log = logging.getLogger(__name__)


class ProbeRunner(Protocol):
    def submit(self, fn: Callable[[], T], on_done: Callable[[T], None]) -> None: ...
    def close(self) -> None: ...


class InlineProbeRunner:
    """Run ``fn`` immediately on the calling thread."""

    def submit(self, fn: Callable[[], T], on_done: Callable[[T], None]) -> None:
        on_done(fn())

    def close(self) -> None:
        return None


class ThreadProbeRunner:
    """Run ``fn`` on a single worker thread; results go through ``post``."""

    def __init__(self, post: Callable[[Callable[[], None]], None]) -> None:
        self._post = post
        self._executor: Optional[ThreadPoolExecutor] = None

    def submit(self, fn: Callable[[], T], on_done: Callable[[T], None]) -> None:
        # Closed runners start a fresh worker on the next submit.
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="health-probe")
        future = self._executor.submit(fn)

        def _deliver(done: "Future[T]") -> None:
            if done.cancelled():
                return
            exc = done.exception()
            if exc is not None:
                _log.error("Probe runner task failed: %s", exc)
                return
            result = done.result()
            self._post(lambda: on_done(result))

        future.add_done_callback(_deliver)

    def close(self) -> None:
        executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)


__all__ = ["InlineProbeRunner", "ProbeRunner", "ThreadProbeRunner"]
