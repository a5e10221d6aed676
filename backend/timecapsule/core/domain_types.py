"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - CapsuleId wraps UUID, OwnerId wraps the verified principal id
    - All lock phases encoded as an Enum — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enum: serializes to JSON without custom encoders
"""

from datetime import timedelta
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

CapsuleId = NewType("CapsuleId", UUID)
OwnerId = NewType("OwnerId", str)


# ─── Constants ───────────────────────────────────────────────────

DEFAULT_RETENTION_WINDOW = timedelta(days=30)
DEFAULT_UNLOCK_CODE_LENGTH = 10
MAX_OWNER_ID_LENGTH = 255


# ─── Enums ───────────────────────────────────────────────────────

class LockState(str, Enum):
    """Logical phase of a capsule at a given instant."""
    LOCKED = "locked"
    UNLOCKED = "unlocked"
    RETIRED = "retired"
