# app/core/clock.py
from datetime import datetime, timezone


class Clock:
    """
    Source of "now" for scheduling decisions.

    Injected into services through `get_clock` so tests can pin the
    current instant instead of patching datetime.
    """

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock frozen at a given instant (tests, batch reruns)."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self.instant = instant


_system_clock = Clock()


def get_clock() -> Clock:
    """FastAPI dependency returning the process clock."""
    return _system_clock
