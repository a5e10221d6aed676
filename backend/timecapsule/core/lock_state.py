"""Lock State — derives a capsule's lifecycle phase from its fields and an instant.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Retirement = retired flag OR now >= unlock_at + retention window;
      the flag alone is never trusted (the sweeper may not have run yet)
    - Locked = now < unlock_at; unlocked otherwise (unless retired)
    - Naive datetimes are interpreted as UTC (SQLite drops offsets on round-trip)

Design Decisions:
    - Time passed in explicitly: callers read the injected Clock once per
      operation, so every rule in one request sees the same instant
"""

import hmac
from datetime import datetime, timedelta, timezone

from timecapsule.core.domain_types import DEFAULT_RETENTION_WINDOW, LockState
from timecapsule.core.repository_protocols import CapsuleLike


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def retirement_deadline(
    unlock_at: datetime, window: timedelta = DEFAULT_RETENTION_WINDOW,
) -> datetime:
    """Instant at which an unlocked capsule ages out (clamped to datetime.max)."""
    try:
        return as_utc(unlock_at) + window
    except OverflowError:
        return datetime.max.replace(tzinfo=timezone.utc)


def is_locked(capsule: CapsuleLike, now: datetime) -> bool:
    return as_utc(now) < as_utc(capsule.unlock_at)


def is_retired(
    capsule: CapsuleLike, now: datetime,
    window: timedelta = DEFAULT_RETENTION_WINDOW,
) -> bool:
    """Retired if flagged by the sweeper or the window has elapsed."""
    if capsule.retired:
        return True
    # Subtract from now: unlock_at may sit at the top of the datetime range
    return as_utc(now) - window >= as_utc(capsule.unlock_at)


def lock_state(
    capsule: CapsuleLike, now: datetime,
    window: timedelta = DEFAULT_RETENTION_WINDOW,
) -> LockState:
    if is_retired(capsule, now, window):
        return LockState.RETIRED
    if is_locked(capsule, now):
        return LockState.LOCKED
    return LockState.UNLOCKED


def codes_match(supplied: str, stored: str) -> bool:
    """Exact, case-sensitive comparison in constant time."""
    return hmac.compare_digest(supplied.encode("utf-8"), stored.encode("utf-8"))
