"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations (store, clock) accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Clock is a protocol so tests substitute a fixed, advanceable instant
    - Guarded writes take the full predicate (owner, code, not_after) so the
      store can apply the lifecycle check and the mutation in one statement
"""

from datetime import datetime
from typing import Protocol
from uuid import UUID


class CapsuleLike(Protocol):
    """Structural contract for Capsule records passed to core rules.

    Avoids coupling core to the ORM model while giving mypy
    real type information (unlike Any).
    """
    id: UUID
    owner_id: str
    message: str
    unlock_at: datetime
    unlock_code: str
    retired: bool
    created_at: datetime
    updated_at: datetime


class Clock(Protocol):
    """Source of the current instant (timezone-aware, UTC)."""
    def now(self) -> datetime: ...


class CapsuleRepository(Protocol):
    """Contract for capsule persistence — implemented by shell."""
    async def add(
        self, *, owner_id: str, message: str, unlock_at: datetime,
        unlock_code: str, now: datetime,
    ) -> CapsuleLike: ...
    async def get_owned(
        self, capsule_id: UUID, owner_id: str,
    ) -> CapsuleLike | None: ...
    async def count_owned(self, owner_id: str) -> int: ...
    async def list_owned(
        self, owner_id: str, *, offset: int, limit: int,
    ) -> list[CapsuleLike]: ...
    async def update_locked(
        self, capsule_id: UUID, owner_id: str, unlock_code: str,
        *, locked_after: datetime, values: dict,
    ) -> bool: ...
    async def delete_locked(
        self, capsule_id: UUID, owner_id: str, unlock_code: str,
        *, locked_after: datetime,
    ) -> bool: ...
    async def mark_overdue_retired(
        self, *, cutoff: datetime, now: datetime,
    ) -> int: ...
