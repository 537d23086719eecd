import sqlmodel

from ._base import BaseModel


class HeroFragment(BaseModel, table=True):
    __tablename__: str = "hero_fragments"
    __table_args__ = (
        sqlmodel.UniqueConstraint("player_id", "hero_id", name="uq_hero_fragments_player_hero"),
    )

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    player_id: int = sqlmodel.Field(
        foreign_key="players.id", index=True, sa_type=sqlmodel.BigInteger
    )
    hero_id: str = sqlmodel.Field(foreign_key="heroes.id", index=True)
    quantity: int = sqlmodel.Field(default=0, ge=0)
