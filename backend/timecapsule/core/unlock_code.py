"""Unlock-Code Generator — opaque capability secrets issued once per capsule.

Invariants:
    - Drawn from a CSPRNG (secrets module), never from random
    - Alphabet excludes look-alike glyphs (0/O/o, 1/I/l)
    - No uniqueness check: codes are secrets, not identifiers
"""

import secrets

from timecapsule.core.domain_types import DEFAULT_UNLOCK_CODE_LENGTH

UNLOCK_CODE_ALPHABET = (
    "ABCDEFGHJKLMNPQRSTUVWXYZ"
    "abcdefghijkmnpqrstuvwxyz"
    "23456789"
)


def generate_unlock_code(length: int = DEFAULT_UNLOCK_CODE_LENGTH) -> str:
    if length < 1:
        raise ValueError("unlock code length must be positive")
    return "".join(secrets.choice(UNLOCK_CODE_ALPHABET) for _ in range(length))
