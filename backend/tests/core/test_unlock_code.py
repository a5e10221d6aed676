"""Unlock Code — tests for the capability-secret generator."""

import pytest

from timecapsule.core.unlock_code import UNLOCK_CODE_ALPHABET, generate_unlock_code


def test_default_length_is_ten():
    assert len(generate_unlock_code()) == 10


def test_custom_length():
    assert len(generate_unlock_code(16)) == 16


def test_only_unambiguous_characters():
    codes = "".join(generate_unlock_code() for _ in range(200))
    assert set(codes) <= set(UNLOCK_CODE_ALPHABET)
    for glyph in "0O1Il":
        assert glyph not in UNLOCK_CODE_ALPHABET


def test_codes_do_not_repeat_in_practice():
    codes = {generate_unlock_code() for _ in range(500)}
    assert len(codes) == 500


def test_zero_length_rejected():
    with pytest.raises(ValueError):
        generate_unlock_code(0)
