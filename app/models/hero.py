import sqlmodel

from app.core.enums import Element, HeroRarity

from ._base import BaseModel


class Hero(BaseModel, table=True):
    __tablename__: str = "heroes"

    id: str = sqlmodel.Field(primary_key=True, index=True, max_length=64)
    name: str = sqlmodel.Field(max_length=100, index=True)
    rarity: HeroRarity = sqlmodel.Field(index=True)
    element: Element | None = None
    role: str | None = None

    def __str__(self) -> str:
        return f"{self.name} ({self.rarity})"
