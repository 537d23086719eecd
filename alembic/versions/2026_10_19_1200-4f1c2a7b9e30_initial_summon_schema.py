# pyright: reportAttributeAccessIssue=false, reportUndefinedVariable=false
"""initial_summon_schema

Revision ID: 4f1c2a7b9e30
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel.sql.sqltypes
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4f1c2a7b9e30"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

HERO_RARITY = postgresql.ENUM(
    "COMMON", "RARE", "EPIC", "LEGENDARY", "MYTHIC", name="herorarity", create_type=False
)
ELEMENT = postgresql.ENUM(
    "FIRE", "WATER", "WIND", "ELECTRIC", "LIGHT", "SHADOW", name="element", create_type=False
)
BANNER_TYPE = postgresql.ENUM(
    "STANDARD", "LIMITED", "BEGINNER", "MYTHIC", "ELEMENTAL", name="bannertype", create_type=False
)
EVENT_TYPE = postgresql.ENUM(
    "SUMMON",
    "MYTHIC_SUMMON",
    "NEW_HERO",
    "SCROLLS_EARNED",
    "ADMIN_INCREASE_CURRENCY",
    "ADMIN_DECREASE_CURRENCY",
    "ADMIN_SET_CURRENCY",
    name="eventtype",
    create_type=False,
)
ENUMS = (HERO_RARITY, ELEMENT, BANNER_TYPE, EVENT_TYPE)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _player_fk() -> sa.Column:
    return sa.Column("player_id", sa.BigInteger(), sa.ForeignKey("players.id"), nullable=False)


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    for enum in ENUMS:
        enum.create(bind, checkfirst=True)

    op.create_table(
        "players",
        *_timestamps(),
        sa.Column("id", sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False),
        sa.Column("server_id", sqlmodel.sql.sqltypes.AutoString(length=10), nullable=False),
        sa.Column("gems", sa.Integer(), nullable=False),
        sa.Column("tickets", sa.Integer(), nullable=False),
        sa.Column("summon_version", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_players_id", "players", ["id"])
    op.create_index("ix_players_server_id", "players", ["server_id"])

    op.create_table(
        "heroes",
        *_timestamps(),
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("rarity", HERO_RARITY, nullable=False),
        sa.Column("element", ELEMENT, nullable=True),
        sa.Column("role", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_heroes_id", "heroes", ["id"])
    op.create_index("ix_heroes_name", "heroes", ["name"])
    op.create_index("ix_heroes_rarity", "heroes", ["rarity"])

    op.create_table(
        "banners",
        *_timestamps(),
        sa.Column("id", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("type", BANNER_TYPE, nullable=False),
        sa.Column("description", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("allowed_servers", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_visible", sa.Boolean(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("hero_pool", sa.JSON(), nullable=True),
        sa.Column("focus_heroes", sa.JSON(), nullable=True),
        sa.Column("rates", sa.JSON(), nullable=True),
        sa.Column("costs", sa.JSON(), nullable=True),
        sa.Column("pity_config", sa.JSON(), nullable=True),
        sa.Column("elemental_config", sa.JSON(), nullable=True),
        sa.Column("total_pulls", sa.Integer(), nullable=False),
        sa.Column("legendary_count", sa.Integer(), nullable=False),
        sa.Column("epic_count", sa.Integer(), nullable=False),
        sa.Column("mythic_count", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_banners_id", "banners", ["id"])
    op.create_index("ix_banners_type", "banners", ["type"])

    op.create_table(
        "player_heroes",
        *_timestamps(),
        sa.Column("id", sa.Integer(), nullable=False),
        _player_fk(),
        sa.Column(
            "hero_id",
            sqlmodel.sql.sqltypes.AutoString(),
            sa.ForeignKey("heroes.id"),
            nullable=False,
        ),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("stars", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("player_id", "hero_id", name="uq_player_heroes_player_hero"),
    )
    op.create_index("ix_player_heroes_id", "player_heroes", ["id"])
    op.create_index("ix_player_heroes_player_id", "player_heroes", ["player_id"])
    op.create_index("ix_player_heroes_hero_id", "player_heroes", ["hero_id"])

    op.create_table(
        "hero_fragments",
        *_timestamps(),
        sa.Column("id", sa.Integer(), nullable=False),
        _player_fk(),
        sa.Column(
            "hero_id",
            sqlmodel.sql.sqltypes.AutoString(),
            sa.ForeignKey("heroes.id"),
            nullable=False,
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("player_id", "hero_id", name="uq_hero_fragments_player_hero"),
    )
    op.create_index("ix_hero_fragments_id", "hero_fragments", ["id"])
    op.create_index("ix_hero_fragments_player_id", "hero_fragments", ["player_id"])
    op.create_index("ix_hero_fragments_hero_id", "hero_fragments", ["hero_id"])

    op.create_table(
        "banner_pity",
        *_timestamps(),
        sa.Column("id", sa.Integer(), nullable=False),
        _player_fk(),
        sa.Column("pity_group", sqlmodel.sql.sqltypes.AutoString(length=80), nullable=False),
        sa.Column("pulls_since_legendary", sa.Integer(), nullable=False),
        sa.Column("pulls_since_epic", sa.Integer(), nullable=False),
        sa.Column("total_pulls", sa.Integer(), nullable=False),
        sa.Column("has_received_legendary", sa.Boolean(), nullable=False),
        sa.Column("last_pull_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("player_id", "pity_group", name="uq_banner_pity_player_group"),
    )
    op.create_index("ix_banner_pity_id", "banner_pity", ["id"])
    op.create_index("ix_banner_pity_player_id", "banner_pity", ["player_id"])
    op.create_index("ix_banner_pity_pity_group", "banner_pity", ["pity_group"])

    op.create_table(
        "mythic_pity",
        *_timestamps(),
        sa.Column("id", sa.Integer(), nullable=False),
        _player_fk(),
        sa.Column("server_id", sqlmodel.sql.sqltypes.AutoString(length=10), nullable=False),
        sa.Column("fused_pull_counter", sa.Integer(), nullable=False),
        sa.Column("scrolls_earned", sa.Integer(), nullable=False),
        sa.Column("scrolls_used", sa.Integer(), nullable=False),
        sa.Column("scrolls_available", sa.Integer(), nullable=False),
        sa.Column("mythic_pulls_since_last", sa.Integer(), nullable=False),
        sa.Column("mythic_pity_threshold", sa.Integer(), nullable=False),
        sa.Column("total_mythic_pulls", sa.Integer(), nullable=False),
        sa.Column("last_scroll_earned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_mythic_pulled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("mythic_heroes_obtained", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("player_id", "server_id", name="uq_mythic_pity_player_server"),
        sa.CheckConstraint(
            "scrolls_available = scrolls_earned - scrolls_used", name="scroll_balance_consistent"
        ),
        sa.CheckConstraint("scrolls_available >= 0", name="scroll_balance_non_negative"),
    )
    op.create_index("ix_mythic_pity_id", "mythic_pity", ["id"])
    op.create_index("ix_mythic_pity_player_id", "mythic_pity", ["player_id"])
    op.create_index("ix_mythic_pity_server_id", "mythic_pity", ["server_id"])

    op.create_table(
        "summons",
        *_timestamps(),
        sa.Column("id", sa.Integer(), nullable=False),
        _player_fk(),
        sa.Column(
            "banner_id",
            sqlmodel.sql.sqltypes.AutoString(),
            sa.ForeignKey("banners.id"),
            nullable=False,
        ),
        sa.Column(
            "hero_id",
            sqlmodel.sql.sqltypes.AutoString(),
            sa.ForeignKey("heroes.id"),
            nullable=False,
        ),
        sa.Column("rarity", HERO_RARITY, nullable=False),
        sa.Column("batch_id", sqlmodel.sql.sqltypes.AutoString(length=32), nullable=False),
        sa.Column("seed", sa.BigInteger(), nullable=False),
        sa.Column("pull_number", sa.Integer(), nullable=False),
        sa.Column("is_new", sa.Boolean(), nullable=False),
        sa.Column("fragments_gained", sa.Integer(), nullable=False),
        sa.Column("is_focus", sa.Boolean(), nullable=False),
        sa.Column("was_pity", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_summons_id", "summons", ["id"])
    op.create_index("ix_summons_player_id", "summons", ["player_id"])
    op.create_index("ix_summons_banner_id", "summons", ["banner_id"])
    op.create_index("ix_summons_hero_id", "summons", ["hero_id"])
    op.create_index("ix_summons_batch_id", "summons", ["batch_id"])

    op.create_table(
        "event_logs",
        *_timestamps(),
        sa.Column("id", sa.Integer(), nullable=False),
        _player_fk(),
        sa.Column("event_type", EVENT_TYPE, nullable=False),
        sa.Column("context", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_event_logs_id", "event_logs", ["id"])
    op.create_index("ix_event_logs_player_id", "event_logs", ["player_id"])
    op.create_index("ix_event_logs_event_type", "event_logs", ["event_type"])


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        "event_logs",
        "summons",
        "mythic_pity",
        "banner_pity",
        "hero_fragments",
        "player_heroes",
        "banners",
        "heroes",
        "players",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum in ENUMS:
        enum.drop(bind, checkfirst=True)
