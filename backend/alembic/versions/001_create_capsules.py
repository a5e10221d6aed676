"""Create capsules table.

Revision ID: 001_capsules
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_capsules"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "capsules",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("owner_id", sa.String(255), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("unlock_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("unlock_code", sa.String(32), nullable=False),
        sa.Column("retired", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_capsules_owner_id", "capsules", ["owner_id"])
    op.create_index(
        "ix_capsules_retired_unlock_at", "capsules", ["retired", "unlock_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_capsules_retired_unlock_at", table_name="capsules")
    op.drop_index("ix_capsules_owner_id", table_name="capsules")
    op.drop_table("capsules")
