import sqlmodel

from ._base import BaseModel


class PlayerHero(BaseModel, table=True):
    """A hero in a player's roster. At most one row per player and hero."""

    __tablename__: str = "player_heroes"
    __table_args__ = (
        sqlmodel.UniqueConstraint("player_id", "hero_id", name="uq_player_heroes_player_hero"),
    )

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    player_id: int = sqlmodel.Field(
        foreign_key="players.id", index=True, sa_type=sqlmodel.BigInteger
    )
    hero_id: str = sqlmodel.Field(foreign_key="heroes.id", index=True)
    level: int = sqlmodel.Field(default=1, ge=1)
    stars: int = sqlmodel.Field(default=1, ge=1)
