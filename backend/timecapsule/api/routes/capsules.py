"""Capsule Routes — HTTP surface of the capsule lifecycle engine.

Invariants:
    - Every route depends on get_current_owner (verified bearer identity)
    - Routes never contain lifecycle rules; CapsuleService decides every outcome
    - Rejections are raised as TimeCapsuleError and rendered by the global handler
    - The unlock code travels in the `code` query parameter

Design Decisions:
    - Capsule id taken as str: malformed ids surface as 404 from the engine
      rather than a 400 from path validation, so probing reveals nothing
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from timecapsule.config import get_settings
from timecapsule.core.domain_types import OwnerId
from timecapsule.core.repository_protocols import Clock
from timecapsule.infrastructure.auth import get_current_owner
from timecapsule.infrastructure.clock import get_clock
from timecapsule.infrastructure.database import get_db
from timecapsule.schemas.capsule import (
    CapsuleCreate,
    CapsuleCreatedResponse,
    CapsuleListResponse,
    CapsuleMutationResponse,
    CapsuleResponse,
    CapsuleUpdate,
)
from timecapsule.services.capsule_service import MAX_PAGE_LIMIT, CapsuleService
from timecapsule.services.capsule_store import SqlCapsuleRepository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/capsules", tags=["capsules"])


def get_capsule_service(
    db: AsyncSession = Depends(get_db), clock: Clock = Depends(get_clock),
) -> CapsuleService:
    """Per-request engine bound to the request's DB session."""
    settings = get_settings()
    return CapsuleService(
        SqlCapsuleRepository(db),
        clock,
        retention_window=settings.retention_window,
        code_length=settings.unlock_code_length,
    )


@router.post(
    "", response_model=CapsuleCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_capsule(
    body: CapsuleCreate,
    owner_id: OwnerId = Depends(get_current_owner),
    service: CapsuleService = Depends(get_capsule_service),
):
    """Create a capsule. The unlock code is returned here and nowhere else."""
    created = await service.create(owner_id, body.message, body.unlock_at)
    return {"message": "Capsule created successfully", "capsule": created}


@router.get("", response_model=CapsuleListResponse)
async def list_capsules(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_LIMIT),
    owner_id: OwnerId = Depends(get_current_owner),
    service: CapsuleService = Depends(get_capsule_service),
):
    """List the caller's capsules, newest first, messages redacted until unlocked."""
    return await service.list(owner_id, page=page, limit=limit)


@router.get("/{capsule_id}", response_model=CapsuleResponse)
async def get_capsule(
    capsule_id: str,
    code: str | None = Query(None),
    owner_id: OwnerId = Depends(get_current_owner),
    service: CapsuleService = Depends(get_capsule_service),
):
    """Reveal an unlocked capsule to the holder of its unlock code."""
    return await service.read(owner_id, capsule_id, code)


@router.put("/{capsule_id}", response_model=CapsuleMutationResponse)
async def update_capsule(
    capsule_id: str,
    body: CapsuleUpdate,
    code: str | None = Query(None),
    owner_id: OwnerId = Depends(get_current_owner),
    service: CapsuleService = Depends(get_capsule_service),
):
    """Change message and/or unlock_at while the capsule is still locked."""
    updated_id = await service.update(
        owner_id, capsule_id, code,
        message=body.message, unlock_at=body.unlock_at,
    )
    return {"message": "Capsule updated successfully", "id": updated_id}


@router.delete("/{capsule_id}", response_model=CapsuleMutationResponse)
async def delete_capsule(
    capsule_id: str,
    code: str | None = Query(None),
    owner_id: OwnerId = Depends(get_current_owner),
    service: CapsuleService = Depends(get_capsule_service),
):
    """Permanently remove a capsule that has not unlocked yet."""
    deleted_id = await service.delete(owner_id, capsule_id, code)
    return {"message": "Capsule deleted successfully", "id": deleted_id}
