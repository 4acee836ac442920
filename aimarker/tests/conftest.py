from __future__ import annotations

import heapq
import itertools
from typing import Callable, Dict, List, Tuple

import pytest


class FakeClock:
    """Deterministic stand-in for Tk ``after`` / ``after_cancel``."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._seq = itertools.count()
        self._queue: List[Tuple[int, int, str]] = []
        self._callbacks: Dict[str, Callable[[], None]] = {}

    def after(self, delay_ms: int, callback: Callable[[], None]) -> str:
        seq = next(self._seq)
        token = f"after#{seq}"
        heapq.heappush(self._queue, (self.now_ms + int(delay_ms), seq, token))
        self._callbacks[token] = callback
        return token

    def after_cancel(self, token: str) -> None:
        self._callbacks.pop(token, None)

    def advance(self, seconds: float) -> None:
        target = self.now_ms + int(round(seconds * 1000))
        while self._queue and self._queue[0][0] <= target:
            due, _, token = heapq.heappop(self._queue)
            callback = self._callbacks.pop(token, None)
            if callback is None:
                continue
            self.now_ms = due
            callback()
        self.now_ms = target

    @property
    def pending(self) -> int:
        return len(self._callbacks)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
