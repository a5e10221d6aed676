"""Capsule ORM — persists a message that unlocks at a future instant.

Invariants:
    - id is UUID primary key (client-side default)
    - owner_id, unlock_code and created_at never change after insert
    - retired only ever goes false -> true (set by the expiration sweeper)
    - created_at/updated_at are written from the injected clock, not server defaults

Design Decisions:
    - No users table: owner_id is the verified principal id from the bearer token
    - Composite index (retired, unlock_at) serves the sweeper's bulk UPDATE
    - Generic Uuid type: native on PostgreSQL, CHAR(32) on SQLite test databases
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from timecapsule.core.domain_types import MAX_OWNER_ID_LENGTH
from timecapsule.db.base import Base


class Capsule(Base):
    """Capsule — owner-scoped, code-guarded, time-locked message."""
    __tablename__ = "capsules"
    __table_args__ = (
        Index("ix_capsules_retired_unlock_at", "retired", "unlock_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    owner_id: Mapped[str] = mapped_column(
        String(MAX_OWNER_ID_LENGTH), nullable=False, index=True,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    unlock_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    unlock_code: Mapped[str] = mapped_column(String(32), nullable=False)
    retired: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
