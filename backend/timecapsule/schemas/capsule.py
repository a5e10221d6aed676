"""Capsule Schemas — Pydantic models for the capsule API boundary.

Invariants:
    - Request bodies only check types/shape; lifecycle rules (non-empty message,
      future unlock_at, lock state) are enforced by the core so every caller
      gets the same rejection regardless of transport
    - No response model except CapsuleCreated carries unlock_code

Design Decisions:
    - Optional request fields: a missing field is reported by the core as a
      VALIDATION_ERROR with the offending field name
    - totalPages keeps its camelCase wire name for existing clients
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CapsuleCreate(BaseModel):
    """Capsule creation payload."""
    message: str | None = Field(None, max_length=100_000)
    unlock_at: datetime | None = None


class CapsuleUpdate(BaseModel):
    """Partial update — any subset of message/unlock_at."""
    message: str | None = Field(None, max_length=100_000)
    unlock_at: datetime | None = None


class CapsuleCreatedBody(BaseModel):
    id: UUID
    unlock_code: str
    unlock_at: datetime


class CapsuleCreatedResponse(BaseModel):
    message: str = "Capsule created successfully"
    capsule: CapsuleCreatedBody


class CapsuleResponse(BaseModel):
    """Unlocked capsule content — never includes the unlock code."""
    id: UUID
    message: str
    unlock_at: datetime
    created_at: datetime
    updated_at: datetime


class CapsuleSummary(BaseModel):
    """Listing entry — message is null unless unlocked and not retired."""
    id: UUID
    message: str | None
    unlock_at: datetime
    status: str
    retired: bool
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    page: int
    limit: int
    total_pages: int = Field(alias="totalPages")


class CapsuleListResponse(BaseModel):
    capsules: list[CapsuleSummary]
    pagination: Pagination


class CapsuleMutationResponse(BaseModel):
    message: str
    id: UUID
