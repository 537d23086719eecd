# pyright: reportAttributeAccessIssue=false, reportUndefinedVariable=false
"""add_wishlists

Revision ID: 8d2e6f4a1b57
Revises: 4f1c2a7b9e30
Create Date: 2026-10-19 15:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel.sql.sqltypes

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8d2e6f4a1b57"
down_revision: str | None = "4f1c2a7b9e30"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    if op.get_bind().dialect.name == "postgresql":
        with op.get_context().autocommit_block():
            op.execute("ALTER TYPE eventtype ADD VALUE IF NOT EXISTS 'WISHLIST_UPDATED'")

    op.create_table(
        "wishlists",
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.BigInteger(), sa.ForeignKey("players.id"), nullable=False),
        sa.Column("server_id", sqlmodel.sql.sqltypes.AutoString(length=10), nullable=False),
        sa.Column("scope", sqlmodel.sql.sqltypes.AutoString(length=16), nullable=False),
        sa.Column("hero_ids", sa.JSON(), nullable=True),
        sa.Column("pity_counter", sa.Integer(), nullable=False),
        sa.Column("pity_threshold", sa.Integer(), nullable=False),
        sa.Column("times_triggered", sa.Integer(), nullable=False),
        sa.Column("last_triggered_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "player_id", "server_id", "scope", name="uq_wishlists_player_server_scope"
        ),
    )
    op.create_index("ix_wishlists_id", "wishlists", ["id"])
    op.create_index("ix_wishlists_player_id", "wishlists", ["player_id"])
    op.create_index("ix_wishlists_server_id", "wishlists", ["server_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("wishlists")
    # Postgres cannot drop a single enum value; WISHLIST_UPDATED stays on eventtype
