"""Capsule Store — SQLAlchemy implementation of the CapsuleRepository protocol.

Invariants:
    - Every lookup is filtered by owner_id; there is no unscoped read path
    - Update/delete statements repeat the lifecycle predicate
      (owner, unlock code, unlock_at still in the future) so a write never lands
      on a capsule that was removed or unlocked after the caller's checks
    - mark_overdue_retired is ONE UPDATE statement (atomic at the database level)
    - Every mutation commits before returning
    - Reads use populate_existing: bulk statements bypass the identity map,
      so a row already loaded in this session is refreshed from the database

Design Decisions:
    - synchronize_session=False on bulk statements: the request session never
      reuses the rows afterwards, and in-memory evaluation would compare the
      naive datetimes SQLite returns against aware bind values
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from timecapsule.models.capsule import Capsule


class SqlCapsuleRepository:
    """Owner-scoped capsule persistence over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def add(
        self, *, owner_id: str, message: str, unlock_at: datetime,
        unlock_code: str, now: datetime,
    ) -> Capsule:
        capsule = Capsule(
            owner_id=owner_id,
            message=message,
            unlock_at=unlock_at,
            unlock_code=unlock_code,
            retired=False,
            created_at=now,
            updated_at=now,
        )
        self._db.add(capsule)
        await self._db.commit()
        return capsule

    async def get_owned(self, capsule_id: UUID, owner_id: str) -> Capsule | None:
        result = await self._db.execute(
            select(Capsule)
            .where(Capsule.id == capsule_id, Capsule.owner_id == owner_id)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def count_owned(self, owner_id: str) -> int:
        result = await self._db.execute(
            select(func.count()).select_from(Capsule).where(
                Capsule.owner_id == owner_id,
            ),
        )
        return result.scalar_one()

    async def list_owned(
        self, owner_id: str, *, offset: int, limit: int,
    ) -> list[Capsule]:
        result = await self._db.execute(
            select(Capsule)
            .where(Capsule.owner_id == owner_id)
            .order_by(Capsule.created_at.desc(), Capsule.id.desc())
            .offset(offset)
            .limit(limit)
            .execution_options(populate_existing=True),
        )
        return list(result.scalars().all())

    async def update_locked(
        self, capsule_id: UUID, owner_id: str, unlock_code: str,
        *, locked_after: datetime, values: dict,
    ) -> bool:
        result = await self._db.execute(
            update(Capsule)
            .where(
                Capsule.id == capsule_id,
                Capsule.owner_id == owner_id,
                Capsule.unlock_code == unlock_code,
                Capsule.unlock_at > locked_after,
            )
            .values(**values)
            .execution_options(synchronize_session=False),
        )
        await self._db.commit()
        return result.rowcount > 0

    async def delete_locked(
        self, capsule_id: UUID, owner_id: str, unlock_code: str,
        *, locked_after: datetime,
    ) -> bool:
        result = await self._db.execute(
            delete(Capsule)
            .where(
                Capsule.id == capsule_id,
                Capsule.owner_id == owner_id,
                Capsule.unlock_code == unlock_code,
                Capsule.unlock_at > locked_after,
            )
            .execution_options(synchronize_session=False),
        )
        await self._db.commit()
        return result.rowcount > 0

    async def mark_overdue_retired(
        self, *, cutoff: datetime, now: datetime,
    ) -> int:
        """Flag every non-retired capsule whose unlock_at is before cutoff."""
        result = await self._db.execute(
            update(Capsule)
            .where(Capsule.retired.is_(False), Capsule.unlock_at < cutoff)
            .values(retired=True, updated_at=now)
            .execution_options(synchronize_session=False),
        )
        await self._db.commit()
        return result.rowcount
