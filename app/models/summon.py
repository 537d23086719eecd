import sqlmodel

from app.core.enums import HeroRarity

from ._base import BaseModel


class Summon(BaseModel, table=True):
    """Log each individual draw made by a player."""

    __tablename__: str = "summons"

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    player_id: int = sqlmodel.Field(
        foreign_key="players.id", index=True, sa_type=sqlmodel.BigInteger
    )
    banner_id: str = sqlmodel.Field(foreign_key="banners.id", index=True)
    hero_id: str = sqlmodel.Field(foreign_key="heroes.id", index=True)
    rarity: HeroRarity
    batch_id: str = sqlmodel.Field(max_length=32, index=True)
    """Shared by every draw of one pull request"""
    seed: int = sqlmodel.Field(sa_type=sqlmodel.BigInteger)
    """Seed of the batch RNG, kept for audits and replays"""
    pull_number: int = sqlmodel.Field(ge=1)
    is_new: bool = False
    fragments_gained: int = sqlmodel.Field(default=0, ge=0)
    is_focus: bool = False
    was_pity: bool = sqlmodel.Field(default=False)
    """Whether this pull was forced by a pity counter"""
