from datetime import datetime

from pydantic import BaseModel, Field

from app.core.config import settings
from app.core.enums import Element
from app.models.hero import Hero
from app.models.wishlist import Wishlist


class WishlistHero(BaseModel):
    hero_id: str
    hero_name: str
    element: Element | None = None


class WishlistStatus(BaseModel):
    server_id: str
    element: Element | None = None
    """``None`` for the normal wishlist"""
    heroes: list[WishlistHero]
    max_heroes: int
    slots_available: int
    pity_counter: int
    pity_threshold: int
    pulls_until_pity: int
    times_triggered: int
    last_triggered_at: datetime | None = None

    @classmethod
    def from_state(cls, state: Wishlist, heroes: list[Hero]) -> "WishlistStatus":
        max_heroes = settings.wishlist_max_heroes
        return cls(
            server_id=state.server_id,
            element=state.element,
            heroes=[
                WishlistHero(hero_id=hero.id, hero_name=hero.name, element=hero.element)
                for hero in heroes
            ],
            max_heroes=max_heroes,
            slots_available=max(0, max_heroes - len(heroes)),
            pity_counter=state.pity_counter,
            pity_threshold=state.pity_threshold,
            pulls_until_pity=state.pulls_until_pity,
            times_triggered=state.times_triggered,
            last_triggered_at=state.last_triggered_at,
        )


class WishlistUpdate(BaseModel):
    """Replace the whole wishlist."""

    hero_ids: list[str] = Field(default_factory=list)
    element: Element | None = None


class WishlistAdd(BaseModel):
    hero_id: str
    element: Element | None = None
