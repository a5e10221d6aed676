"""Fixed Clock — deterministic, advanceable stand-in for SystemClock."""

from datetime import datetime, timedelta, timezone

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Returns the same instant until advanced."""

    def __init__(self, now: datetime = BASE_TIME):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> datetime:
        self._now = self._now + timedelta(**kwargs)
        return self._now
