"""Bearer Identity — token verification at the capsule API boundary."""

import jwt
import pytest

from timecapsule.core.domain_types import MAX_OWNER_ID_LENGTH
from timecapsule.core.errors import AuthenticationError
from timecapsule.infrastructure.auth import decode_owner_id

from tests.tokens import make_token


async def test_missing_token_returns_401(client):
    res = await client.get("/capsules")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTHENTICATION_FAILED"


async def test_garbage_token_returns_401(client):
    res = await client.get(
        "/capsules", headers={"Authorization": "Bearer not.a.jwt"},
    )
    assert res.status_code == 401


async def test_wrong_signature_returns_401(client):
    token = jwt.encode({"sub": "user-1"}, "another-secret", algorithm="HS256")
    res = await client.get(
        "/capsules", headers={"Authorization": f"Bearer {token}"},
    )
    assert res.status_code == 401


async def test_valid_token_reaches_route(client):
    res = await client.get(
        "/capsules", headers={"Authorization": f"Bearer {make_token()}"},
    )
    assert res.status_code == 200


def test_decode_owner_from_sub():
    assert decode_owner_id(make_token("alice"), "test-secret", "HS256") == "alice"


def test_decode_owner_falls_back_to_id_claim():
    token = jwt.encode({"id": 7, "username": "bob"}, "test-secret", algorithm="HS256")
    assert decode_owner_id(token, "test-secret", "HS256") == "7"


def test_decode_rejects_token_without_subject():
    token = jwt.encode({"username": "nobody"}, "test-secret", algorithm="HS256")
    with pytest.raises(AuthenticationError):
        decode_owner_id(token, "test-secret", "HS256")


def test_decode_rejects_expired_token():
    token = jwt.encode({"sub": "alice", "exp": 1}, "test-secret", algorithm="HS256")
    with pytest.raises(AuthenticationError):
        decode_owner_id(token, "test-secret", "HS256")


def test_decode_accepts_subject_at_column_width():
    owner = "u" * MAX_OWNER_ID_LENGTH
    assert decode_owner_id(make_token(owner), "test-secret", "HS256") == owner


def test_decode_rejects_subject_wider_than_column():
    token = make_token("u" * (MAX_OWNER_ID_LENGTH + 1))
    with pytest.raises(AuthenticationError):
        decode_owner_id(token, "test-secret", "HS256")
