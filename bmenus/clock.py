"""Wall clock in epoch milliseconds, injectable for tests."""

import time
from typing import Callable

Clock = Callable[[], int]


def current_millis() -> int:
    """Current time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


class ManualClock:
    """Clock that only moves when told to. Used by tests."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis
