"""Injectable time sources used to stamp lifecycle timestamps."""

from datetime import datetime, timedelta
from typing import Optional, Protocol

from .timezone_utils import ensure_utc, utc_now


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return utc_now()


class FixedClock:
    """Clock pinned to a single instant; ``advance`` moves it forward."""

    def __init__(self, instant: datetime):
        self._instant = ensure_utc(instant)

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = ensure_utc(instant)

    def advance(self, *, seconds: float = 0, minutes: float = 0, hours: float = 0) -> datetime:
        self._instant = self._instant + timedelta(seconds=seconds, minutes=minutes, hours=hours)
        return self._instant


_default_clock: Optional[SystemClock] = None


def get_clock() -> SystemClock:
    global _default_clock
    if _default_clock is None:
        _default_clock = SystemClock()
    return _default_clock
