import datetime

import sqlmodel

from ._base import BaseModel


class BannerPity(BaseModel, table=True):
    """Pity counters of one player for one pity group.

    A pity group is either a single banner (``banner:<id>``) or a shared key
    used by every banner configured with ``shared_pity``.
    """

    __tablename__: str = "banner_pity"
    __table_args__ = (
        sqlmodel.UniqueConstraint("player_id", "pity_group", name="uq_banner_pity_player_group"),
    )

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    player_id: int = sqlmodel.Field(
        foreign_key="players.id", index=True, sa_type=sqlmodel.BigInteger
    )
    pity_group: str = sqlmodel.Field(max_length=80, index=True)
    pulls_since_legendary: int = sqlmodel.Field(default=0, ge=0)
    """Number of pulls since the last Legendary or higher"""
    pulls_since_epic: int = sqlmodel.Field(default=0, ge=0)
    """Number of pulls since the last Epic or higher"""
    total_pulls: int = sqlmodel.Field(default=0, ge=0)
    has_received_legendary: bool = False
    last_pull_at: datetime.datetime | None = sqlmodel.Field(
        default=None, sa_type=sqlmodel.DateTime(timezone=True)
    )
