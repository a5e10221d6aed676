"""Capsule Lifecycle Engine — orchestrates store IO around the pure capsule rules.

Invariants:
    - The clock is read ONCE per operation; every rule in that operation sees the same `now`
    - A missing unlock code is rejected before any lookup
    - Ids that do not parse as UUIDs are reported as not found
    - The unlock code leaves the engine only in create()'s result
    - Rejections propagate as TimeCapsuleError; infrastructure errors propagate untouched

Design Decisions:
    - Impureim sandwich: load (IO) -> validate (pure core) -> mutate (IO)
    - Repository and clock injected per request so tests substitute both
"""

import logging
from datetime import datetime, timedelta
from typing import Callable
from uuid import UUID

from timecapsule.core.capsule_listing import (
    build_pagination, page_offset, project_summary,
)
from timecapsule.core.domain_types import (
    DEFAULT_RETENTION_WINDOW, DEFAULT_UNLOCK_CODE_LENGTH, CapsuleId, OwnerId,
)
from timecapsule.core.enforce_capsule import (
    validate_message,
    validate_mutation,
    validate_read,
    validate_unlock_at,
    validate_update_fields,
)
from timecapsule.core.errors import (
    CapsuleNotFoundError, CapsuleValidationError, UnlockCodeRequiredError,
)
from timecapsule.core.lock_state import as_utc
from timecapsule.core.repository_protocols import CapsuleRepository, Clock
from timecapsule.core.unlock_code import generate_unlock_code

logger = logging.getLogger(__name__)

MAX_PAGE_LIMIT = 100


def _parse_capsule_id(capsule_id: str | UUID) -> CapsuleId:
    if isinstance(capsule_id, UUID):
        return CapsuleId(capsule_id)
    try:
        return CapsuleId(UUID(str(capsule_id)))
    except ValueError:
        raise CapsuleNotFoundError(str(capsule_id))


def _require_code(code: str | None) -> str:
    if not code:
        raise UnlockCodeRequiredError()
    return code


class CapsuleService:
    """Create, read, list, update and delete capsules for one caller."""

    def __init__(
        self,
        repository: CapsuleRepository,
        clock: Clock,
        *,
        retention_window: timedelta = DEFAULT_RETENTION_WINDOW,
        code_length: int = DEFAULT_UNLOCK_CODE_LENGTH,
        code_generator: Callable[[int], str] = generate_unlock_code,
    ):
        self._repository = repository
        self._clock = clock
        self._retention_window = retention_window
        self._code_length = code_length
        self._code_generator = code_generator

    async def create(
        self, owner_id: OwnerId, message: str | None, unlock_at: datetime | None,
    ) -> dict:
        now = self._clock.now()
        message = validate_message(message)
        unlock_at = validate_unlock_at(unlock_at, now)
        capsule = await self._repository.add(
            owner_id=owner_id,
            message=message,
            unlock_at=unlock_at,
            unlock_code=self._code_generator(self._code_length),
            now=now,
        )
        logger.info(
            "Capsule created",
            extra={"capsule_id": str(capsule.id), "owner_id": owner_id},
        )
        return {
            "id": capsule.id,
            "unlock_code": capsule.unlock_code,
            "unlock_at": as_utc(capsule.unlock_at),
        }

    async def read(
        self, owner_id: OwnerId, capsule_id: str | UUID, code: str | None,
    ) -> dict:
        code = _require_code(code)
        parsed_id = _parse_capsule_id(capsule_id)
        now = self._clock.now()
        capsule = await self._repository.get_owned(parsed_id, owner_id)
        capsule = validate_read(
            capsule, str(parsed_id), code, now, self._retention_window,
        )
        return {
            "id": capsule.id,
            "message": capsule.message,
            "unlock_at": as_utc(capsule.unlock_at),
            "created_at": as_utc(capsule.created_at),
            "updated_at": as_utc(capsule.updated_at),
        }

    async def list(
        self, owner_id: OwnerId, page: int = 1, limit: int = 10,
    ) -> dict:
        if page < 1:
            raise CapsuleValidationError("page must be >= 1", "page")
        if not 1 <= limit <= MAX_PAGE_LIMIT:
            raise CapsuleValidationError(
                f"limit must be between 1 and {MAX_PAGE_LIMIT}", "limit",
            )
        now = self._clock.now()
        total = await self._repository.count_owned(owner_id)
        capsules = await self._repository.list_owned(
            owner_id, offset=page_offset(page, limit), limit=limit,
        )
        return {
            "capsules": [
                project_summary(c, now, self._retention_window)
                for c in capsules
            ],
            "pagination": build_pagination(total, page, limit),
        }

    async def update(
        self,
        owner_id: OwnerId,
        capsule_id: str | UUID,
        code: str | None,
        *,
        message: str | None = None,
        unlock_at: datetime | None = None,
    ) -> CapsuleId:
        code = _require_code(code)
        parsed_id = _parse_capsule_id(capsule_id)
        now = self._clock.now()
        capsule = await self._repository.get_owned(parsed_id, owner_id)
        validate_mutation(capsule, str(parsed_id), code, now, "update")
        values = validate_update_fields(message, unlock_at, now)
        values["updated_at"] = now
        applied = await self._repository.update_locked(
            parsed_id, owner_id, code, locked_after=now, values=values,
        )
        if not applied:
            raise CapsuleNotFoundError(str(parsed_id))
        logger.info(
            "Capsule updated",
            extra={"capsule_id": str(parsed_id), "owner_id": owner_id},
        )
        return parsed_id

    async def delete(
        self, owner_id: OwnerId, capsule_id: str | UUID, code: str | None,
    ) -> CapsuleId:
        code = _require_code(code)
        parsed_id = _parse_capsule_id(capsule_id)
        now = self._clock.now()
        capsule = await self._repository.get_owned(parsed_id, owner_id)
        validate_mutation(capsule, str(parsed_id), code, now, "delete")
        removed = await self._repository.delete_locked(
            parsed_id, owner_id, code, locked_after=now,
        )
        if not removed:
            raise CapsuleNotFoundError(str(parsed_id))
        logger.info(
            "Capsule deleted",
            extra={"capsule_id": str(parsed_id), "owner_id": owner_id},
        )
        return parsed_id
