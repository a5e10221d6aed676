"""Capsule Rule Enforcement — tests for pure lifecycle validation.

Tests cover:
    - field rules for message and unlock_at
    - update field rules (at least one field, future date)
    - read chain precedence: not found > retired > code > time gate
    - mutation chain precedence: not found > code > already unlocked
"""

from datetime import datetime, timedelta, timezone

import pytest

from timecapsule.core.enforce_capsule import (
    check_still_locked,
    check_time_reached,
    validate_message,
    validate_mutation,
    validate_read,
    validate_unlock_at,
    validate_update_fields,
)
from timecapsule.core.errors import (
    CapsuleAlreadyUnlockedError,
    CapsuleNotFoundError,
    CapsuleNotYetUnlockedError,
    CapsuleRetiredError,
    CapsuleValidationError,
    InvalidUnlockCodeError,
)

from tests.core.capsule_factory import make_capsule
from tests.fixed_clock import BASE_TIME

CODE = "AbCd23EfGh"
UNLOCK = BASE_TIME + timedelta(hours=1)


# ─── validate_message ────────────────────────────────────────────

def test_message_returned_unchanged():
    assert validate_message("  keep my spaces ") == "  keep my spaces "


@pytest.mark.parametrize("message", [None, "", "   \n"])
def test_blank_message_rejected(message):
    with pytest.raises(CapsuleValidationError) as exc:
        validate_message(message)
    assert exc.value.field == "message"
    assert exc.value.http_status == 400


# ─── validate_unlock_at ──────────────────────────────────────────

def test_future_unlock_at_accepted():
    assert validate_unlock_at(UNLOCK, BASE_TIME) == UNLOCK


def test_unlock_at_equal_to_now_rejected():
    with pytest.raises(CapsuleValidationError):
        validate_unlock_at(BASE_TIME, BASE_TIME)


def test_past_unlock_at_rejected():
    with pytest.raises(CapsuleValidationError) as exc:
        validate_unlock_at(BASE_TIME - timedelta(days=1), BASE_TIME)
    assert exc.value.field == "unlock_at"


def test_missing_unlock_at_rejected():
    with pytest.raises(CapsuleValidationError):
        validate_unlock_at(None, BASE_TIME)


def test_naive_unlock_at_treated_as_utc():
    naive = datetime(2026, 1, 1, 13, 0)
    assert validate_unlock_at(naive, BASE_TIME) == UNLOCK


def test_unlock_at_past_utc_range_rejected():
    minus_five = timezone(timedelta(hours=-5))
    beyond = datetime(9999, 12, 31, 23, 59, 59, tzinfo=minus_five)
    with pytest.raises(CapsuleValidationError) as exc:
        validate_unlock_at(beyond, BASE_TIME)
    assert exc.value.field == "unlock_at"


# ─── validate_update_fields ──────────────────────────────────────

def test_update_requires_a_field():
    with pytest.raises(CapsuleValidationError) as exc:
        validate_update_fields(None, None, BASE_TIME)
    assert "At least one field" in exc.value.message


def test_update_message_only():
    assert validate_update_fields("new", None, BASE_TIME) == {"message": "new"}


def test_update_unlock_at_only():
    later = BASE_TIME + timedelta(days=3)
    assert validate_update_fields(None, later, BASE_TIME) == {"unlock_at": later}


def test_update_rejects_past_unlock_at():
    with pytest.raises(CapsuleValidationError):
        validate_update_fields("new", BASE_TIME - timedelta(minutes=1), BASE_TIME)


def test_update_rejects_blank_message():
    with pytest.raises(CapsuleValidationError):
        validate_update_fields("", None, BASE_TIME)


# ─── validate_read ───────────────────────────────────────────────

def test_read_missing_capsule_is_not_found():
    with pytest.raises(CapsuleNotFoundError):
        validate_read(None, "abc", CODE, BASE_TIME)


def test_read_before_unlock_is_not_yet_unlocked_with_date():
    capsule = make_capsule(unlock_at=UNLOCK)
    with pytest.raises(CapsuleNotYetUnlockedError) as exc:
        validate_read(capsule, str(capsule.id), CODE, BASE_TIME)
    assert exc.value.unlock_at == UNLOCK
    assert exc.value.http_status == 403


def test_read_wrong_code_checked_before_time_gate():
    capsule = make_capsule(unlock_at=UNLOCK)
    with pytest.raises(InvalidUnlockCodeError):
        validate_read(capsule, str(capsule.id), "wrong", BASE_TIME)


def test_read_retired_beats_wrong_code():
    capsule = make_capsule(unlock_at=UNLOCK, retired=True)
    with pytest.raises(CapsuleRetiredError):
        validate_read(capsule, str(capsule.id), "wrong", UNLOCK)


def test_read_retired_by_window_without_flag():
    capsule = make_capsule(unlock_at=UNLOCK, retired=False)
    with pytest.raises(CapsuleRetiredError):
        validate_read(capsule, str(capsule.id), CODE, UNLOCK + timedelta(days=40))


def test_read_unlocked_with_correct_code_returns_capsule():
    capsule = make_capsule(unlock_at=UNLOCK)
    assert validate_read(capsule, str(capsule.id), CODE, UNLOCK) is capsule


def test_time_gate_alone():
    capsule = make_capsule(unlock_at=UNLOCK)
    with pytest.raises(CapsuleNotYetUnlockedError):
        check_time_reached(capsule, BASE_TIME)
    check_time_reached(capsule, UNLOCK)


# ─── validate_mutation ───────────────────────────────────────────

def test_mutation_missing_capsule_is_not_found():
    with pytest.raises(CapsuleNotFoundError):
        validate_mutation(None, "abc", CODE, BASE_TIME, "update")


def test_mutation_wrong_code_beats_already_unlocked():
    capsule = make_capsule(unlock_at=UNLOCK)
    with pytest.raises(InvalidUnlockCodeError):
        validate_mutation(capsule, str(capsule.id), "wrong", UNLOCK, "update")


def test_mutation_after_unlock_rejected():
    capsule = make_capsule(unlock_at=UNLOCK)
    with pytest.raises(CapsuleAlreadyUnlockedError) as exc:
        validate_mutation(capsule, str(capsule.id), CODE, UNLOCK, "delete")
    assert exc.value.message == "Cannot delete an unlocked capsule"


def test_mutation_while_locked_passes():
    capsule = make_capsule(unlock_at=UNLOCK)
    assert validate_mutation(capsule, str(capsule.id), CODE, BASE_TIME, "update") is capsule


def test_still_locked_check_uses_strict_boundary():
    capsule = make_capsule(unlock_at=UNLOCK)
    check_still_locked(capsule, UNLOCK - timedelta(microseconds=1), "update")
    with pytest.raises(CapsuleAlreadyUnlockedError):
        check_still_locked(capsule, UNLOCK, "update")
