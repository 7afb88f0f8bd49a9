"""create api keys and observations

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the API key directory and the observation log."""
    op.create_table(
        "api_keys",
        sa.Column("key", sa.LargeBinary(length=32), nullable=False),
        sa.PrimaryKeyConstraint("key"),
    )
    op.create_table(
        "observations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("key", sa.LargeBinary(length=32), nullable=False),
        sa.Column("obs", sa.LargeBinary(length=10), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["key"], ["api_keys.key"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_observations_key_created_at",
        "observations",
        ["key", "created_at"],
    )


def downgrade() -> None:
    """Drop the observation log and the API key directory."""
    op.drop_index("ix_observations_key_created_at", table_name="observations")
    op.drop_table("observations")
    op.drop_table("api_keys")
