"""Capsule Listing — pagination math and the redacted read-time projection.

Invariants:
    - message is revealed only for capsules unlocked and not retired at `now`
    - Redaction is computed per request, never stored
    - unlock_code is never part of a summary
    - total_pages = ceil(total / limit); 0 when there is nothing to list
"""

import math
from datetime import datetime, timedelta

from timecapsule.core.domain_types import DEFAULT_RETENTION_WINDOW, LockState
from timecapsule.core.lock_state import as_utc, lock_state
from timecapsule.core.repository_protocols import CapsuleLike


def page_offset(page: int, limit: int) -> int:
    """Row offset for a 1-indexed page."""
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit)


def project_summary(
    capsule: CapsuleLike, now: datetime,
    window: timedelta = DEFAULT_RETENTION_WINDOW,
) -> dict:
    state = lock_state(capsule, now, window)
    return {
        "id": capsule.id,
        "message": capsule.message if state == LockState.UNLOCKED else None,
        "unlock_at": as_utc(capsule.unlock_at),
        "status": state.value,
        "retired": state == LockState.RETIRED,
        "created_at": as_utc(capsule.created_at),
        "updated_at": as_utc(capsule.updated_at),
    }


def build_pagination(total: int, page: int, limit: int) -> dict:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": total_pages(total, limit),
    }
