import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int:
        ...


class SystemClock:
    def now(self) -> int:
        return int(time.time())


class FixedClock:
    """Manually driven clock for tests and replays."""

    def __init__(self, now: int):
        self._now = int(now)

    def now(self) -> int:
        return self._now

    def set(self, now: int) -> None:
        self._now = int(now)

    def advance(self, seconds: int) -> int:
        self._now += int(seconds)
        return self._now


_system_clock = SystemClock()

# --- FastAPI dependency ---
def get_clock() -> Clock:
    return _system_clock
