"""Bearer Identity — verifies the caller's JWT and yields a trusted owner id.

Invariants:
    - Every capsule route depends on get_current_owner; the core trusts its result
    - Missing, malformed, expired or wrongly-signed tokens -> AuthenticationError (401)
    - Owner id taken from the `sub` claim, falling back to `id`, at most
      MAX_OWNER_ID_LENGTH characters (the owner_id column width)

Design Decisions:
    - Verification only: tokens are issued by a separate identity service
    - HTTPBearer(auto_error=False): we raise our own error so the response
      uses the standard error envelope instead of FastAPI's default 403
"""

import logging

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from timecapsule.config import get_settings
from timecapsule.core.domain_types import MAX_OWNER_ID_LENGTH, OwnerId
from timecapsule.core.errors import AuthenticationError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def decode_owner_id(token: str, secret: str, algorithm: str) -> OwnerId:
    """Verify token signature/expiry and extract the principal id."""
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.PyJWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise AuthenticationError("Invalid token")
    owner = payload.get("sub") or payload.get("id")
    if owner is None or str(owner) == "":
        raise AuthenticationError("Token has no subject")
    if len(str(owner)) > MAX_OWNER_ID_LENGTH:
        raise AuthenticationError("Token subject is too long")
    return OwnerId(str(owner))


async def get_current_owner(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> OwnerId:
    """FastAPI dependency — the verified owner id for this request."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token is required")
    settings = get_settings()
    return decode_owner_id(
        credentials.credentials, settings.jwt_secret, settings.jwt_algorithm,
    )
