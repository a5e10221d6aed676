"""System Clock — production implementation of the core Clock protocol."""

from datetime import datetime, timezone


class SystemClock:
    """Wall-clock UTC time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def get_clock() -> SystemClock:
    """FastAPI dependency — overridden in tests with a fixed clock."""
    return SystemClock()
