from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.db import get_db
from app.core.enums import Element, EventType, HeroRarity
from app.core.exceptions import InvalidRequestError
from app.models.event_log import EventLog
from app.models.hero import Hero
from app.models.wishlist import Wishlist, wishlist_scope
from app.schemas.wishlist import WishlistStatus


class WishlistService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_wishlist(
        self, player_id: int, server_id: str, element: Element | None = None
    ) -> Wishlist | None:
        result = await self.db.exec(
            select(Wishlist).where(
                Wishlist.player_id == player_id,
                Wishlist.server_id == server_id,
                Wishlist.scope == wishlist_scope(element),
            )
        )
        return result.first()

    @staticmethod
    def _new_wishlist(player_id: int, server_id: str, element: Element | None) -> Wishlist:
        return Wishlist(
            player_id=player_id,
            server_id=server_id,
            scope=wishlist_scope(element),
            hero_ids=[],
            pity_threshold=settings.wishlist_pity_threshold,
        )

    async def get_or_create(
        self, player_id: int, server_id: str, element: Element | None = None
    ) -> Wishlist:
        """Load a wishlist, adding an empty one to the session if missing. Does not commit."""
        wishlist = await self.get_wishlist(player_id, server_id, element)
        if wishlist is None:
            wishlist = self._new_wishlist(player_id, server_id, element)
            self.db.add(wishlist)
        return wishlist

    async def get_heroes(self, wishlist: Wishlist) -> list[Hero]:
        """The wishlisted heroes, in the order the player listed them."""
        if not wishlist.hero_ids:
            return []
        result = await self.db.exec(select(Hero).where(col(Hero.id).in_(wishlist.hero_ids)))
        by_id = {hero.id: hero for hero in result.all()}
        return [by_id[hero_id] for hero_id in wishlist.hero_ids if hero_id in by_id]

    async def get_status(
        self, player_id: int, server_id: str, element: Element | None = None
    ) -> WishlistStatus:
        wishlist = await self.get_wishlist(player_id, server_id, element)
        if wishlist is None:
            wishlist = self._new_wishlist(player_id, server_id, element)
        return WishlistStatus.from_state(wishlist, await self.get_heroes(wishlist))

    async def get_available_heroes(self, element: Element | None = None) -> Sequence[Hero]:
        """Heroes that may be wishlisted: Legendary, and of the element for elemental lists."""
        query = select(Hero).where(Hero.rarity == HeroRarity.LEGENDARY)
        if element is not None:
            query = query.where(Hero.element == element)
        result = await self.db.exec(query.order_by(col(Hero.id)))
        return result.all()

    async def _validate_heroes(self, hero_ids: list[str], element: Element | None) -> None:
        if len(set(hero_ids)) != len(hero_ids):
            msg = "願望清單中有重複的英雄"
            raise InvalidRequestError(msg)
        if len(hero_ids) > settings.wishlist_max_heroes:
            msg = f"願望清單最多只能放 {settings.wishlist_max_heroes} 位英雄"
            raise InvalidRequestError(msg)
        if not hero_ids:
            return

        result = await self.db.exec(select(Hero).where(col(Hero.id).in_(hero_ids)))
        heroes = {hero.id: hero for hero in result.all()}
        for hero_id in hero_ids:
            hero = heroes.get(hero_id)
            if hero is None:
                msg = f"找不到英雄 {hero_id}"
                raise InvalidRequestError(msg, status_code=404)
            if hero.rarity != HeroRarity.LEGENDARY:
                msg = "只有傳說英雄可以加入願望清單"
                raise InvalidRequestError(msg)
            if element is not None and hero.element != element:
                msg = f"{hero.name} 不屬於 {element} 元素"
                raise InvalidRequestError(msg)

    async def _save(self, wishlist: Wishlist, hero_ids: list[str], reason: str) -> WishlistStatus:
        previous = list(wishlist.hero_ids or [])
        wishlist.hero_ids = hero_ids
        self.db.add(wishlist)
        self.db.add(
            EventLog(
                player_id=wishlist.player_id,
                event_type=EventType.WISHLIST_UPDATED,
                context={
                    "server_id": wishlist.server_id,
                    "scope": wishlist.scope,
                    "previous": previous,
                    "hero_ids": hero_ids,
                    "reason": reason,
                },
            )
        )
        await self.db.commit()
        await self.db.refresh(wishlist)
        return WishlistStatus.from_state(wishlist, await self.get_heroes(wishlist))

    async def update_wishlist(
        self, player_id: int, server_id: str, hero_ids: list[str], element: Element | None = None
    ) -> WishlistStatus:
        """Replace the wishlist's heroes. The pity counter is kept."""
        await self._validate_heroes(hero_ids, element)
        wishlist = await self.get_or_create(player_id, server_id, element)
        return await self._save(wishlist, hero_ids, "update")

    async def add_hero(
        self, player_id: int, server_id: str, hero_id: str, element: Element | None = None
    ) -> WishlistStatus:
        wishlist = await self.get_wishlist(player_id, server_id, element)
        current = list(wishlist.hero_ids or []) if wishlist else []
        if hero_id in current:
            msg = "此英雄已在願望清單中"
            raise InvalidRequestError(msg)

        hero_ids = [*current, hero_id]
        await self._validate_heroes(hero_ids, element)
        if wishlist is None:
            wishlist = await self.get_or_create(player_id, server_id, element)
        return await self._save(wishlist, hero_ids, "add")

    async def remove_hero(
        self, player_id: int, server_id: str, hero_id: str, element: Element | None = None
    ) -> WishlistStatus:
        wishlist = await self.get_wishlist(player_id, server_id, element)
        if wishlist is None or hero_id not in wishlist.hero_ids:
            msg = "此英雄不在願望清單中"
            raise InvalidRequestError(msg, status_code=404)

        hero_ids = [existing for existing in wishlist.hero_ids if existing != hero_id]
        return await self._save(wishlist, hero_ids, "remove")
