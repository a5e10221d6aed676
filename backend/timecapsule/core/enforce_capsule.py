"""Capsule Rule Enforcement — validates every lifecycle operation before it touches the store.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Raise a typed TimeCapsuleError on violation, return normally on success
    - Checks short-circuit in a fixed order so the rejection reason is deterministic:
        read:          found -> not retired -> code -> unlocked
        update/delete: found -> code -> still locked -> (update) fields
    - A capsule owned by someone else is passed in as None (lookups are owner-scoped)

Design Decisions:
    - Exceptions over error dicts: the HTTP shell maps TimeCapsuleError to JSON
      in one global handler, so every rejection reaches the caller unchanged
"""

from datetime import datetime, timedelta

from timecapsule.core.domain_types import DEFAULT_RETENTION_WINDOW
from timecapsule.core.errors import (
    CapsuleAlreadyUnlockedError,
    CapsuleNotFoundError,
    CapsuleNotYetUnlockedError,
    CapsuleRetiredError,
    CapsuleValidationError,
    ErrorContext,
    InvalidUnlockCodeError,
)
from timecapsule.core.lock_state import as_utc, codes_match, is_locked, is_retired
from timecapsule.core.repository_protocols import CapsuleLike


def _context(capsule: CapsuleLike) -> ErrorContext:
    return ErrorContext(capsule_id=str(capsule.id), owner_id=capsule.owner_id)


# ─── Field Rules ─────────────────────────────────────────────────

def validate_message(message: str | None) -> str:
    """Message must be present and not blank. Returned as given (not stripped)."""
    if message is None or not message.strip():
        raise CapsuleValidationError("Message is required", "message")
    return message


def validate_unlock_at(unlock_at: datetime | None, now: datetime) -> datetime:
    """unlock_at must be a valid instant strictly after now. Returned in UTC."""
    if unlock_at is None:
        raise CapsuleValidationError("Unlock time is required", "unlock_at")
    try:
        unlock_at = as_utc(unlock_at)
    except OverflowError:
        raise CapsuleValidationError(
            "Unlock time is out of range", "unlock_at",
        )
    if unlock_at <= as_utc(now):
        raise CapsuleValidationError(
            "Unlock time must be a valid date in the future", "unlock_at",
        )
    return unlock_at


def validate_update_fields(
    message: str | None, unlock_at: datetime | None, now: datetime,
) -> dict:
    """Build the column values for an update. At least one field is required."""
    if message is None and unlock_at is None:
        raise CapsuleValidationError(
            "At least one field to update is required", "body",
        )
    values: dict = {}
    if message is not None:
        values["message"] = validate_message(message)
    if unlock_at is not None:
        values["unlock_at"] = validate_unlock_at(unlock_at, now)
    return values


# ─── State Rules ─────────────────────────────────────────────────

def check_found(capsule: CapsuleLike | None, capsule_id: str) -> CapsuleLike:
    if capsule is None:
        raise CapsuleNotFoundError(capsule_id)
    return capsule


def check_not_retired(
    capsule: CapsuleLike, now: datetime,
    window: timedelta = DEFAULT_RETENTION_WINDOW,
) -> None:
    if is_retired(capsule, now, window):
        raise CapsuleRetiredError(_context(capsule))


def check_unlock_code(capsule: CapsuleLike, code: str) -> None:
    if not codes_match(code, capsule.unlock_code):
        raise InvalidUnlockCodeError(_context(capsule))


def check_time_reached(capsule: CapsuleLike, now: datetime) -> None:
    """Read gate: content stays hidden until unlock_at."""
    if is_locked(capsule, now):
        raise CapsuleNotYetUnlockedError(
            as_utc(capsule.unlock_at), _context(capsule),
        )


def check_still_locked(
    capsule: CapsuleLike, now: datetime, operation: str,
) -> None:
    """Mutation gate: content becomes immutable once unlock_at passes."""
    if not is_locked(capsule, now):
        raise CapsuleAlreadyUnlockedError(operation, _context(capsule))


# ─── Chains ──────────────────────────────────────────────────────

def validate_read(
    capsule: CapsuleLike | None, capsule_id: str, code: str, now: datetime,
    window: timedelta = DEFAULT_RETENTION_WINDOW,
) -> CapsuleLike:
    """Chain all read checks. Returns the capsule if it may be revealed."""
    capsule = check_found(capsule, capsule_id)
    check_not_retired(capsule, now, window)
    check_unlock_code(capsule, code)
    check_time_reached(capsule, now)
    return capsule


def validate_mutation(
    capsule: CapsuleLike | None, capsule_id: str, code: str, now: datetime,
    operation: str,
) -> CapsuleLike:
    """Chain the update/delete checks shared by both operations."""
    capsule = check_found(capsule, capsule_id)
    check_unlock_code(capsule, code)
    check_still_locked(capsule, now, operation)
    return capsule
