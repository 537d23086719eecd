from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends, HTTPException
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import get_db
from app.core.enums import SortOrder
from app.models.hero import Hero
from app.schemas.common import PaginationData
from app.schemas.hero import HeroCreate, HeroListParams, HeroUpdate


class HeroService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_heroes(
        self, *, page: int, page_size: int, params: HeroListParams
    ) -> tuple[Sequence[Hero], PaginationData]:
        offset = (page - 1) * page_size

        query = select(Hero)
        if params.search_name:
            query = query.where(col(Hero.name).ilike(f"%{params.search_name}%"))
        if params.rarity is not None:
            query = query.where(Hero.rarity == params.rarity)
        if params.element is not None:
            query = query.where(Hero.element == params.element)

        total_items_result = await self.db.exec(query)
        total_items = len(total_items_result.all())

        sort_column = getattr(Hero, params.sort_by.value)
        if params.sort_order == SortOrder.DESC:
            query = query.order_by(sort_column.desc())
        else:
            query = query.order_by(sort_column.asc())

        result = await self.db.exec(query.offset(offset).limit(page_size))
        heroes = result.all()

        pagination = PaginationData.for_page(page, page_size, total_items)

        return heroes, pagination

    async def get_heroes_by_name(self, name: str) -> Sequence[Hero]:
        result = await self.db.exec(select(Hero).where(col(Hero.name).ilike(f"%{name}%")))
        return result.all()

    async def get_hero(self, hero_id: str) -> Hero | None:
        result = await self.db.exec(select(Hero).where(Hero.id == hero_id))
        return result.first()

    async def create_hero(self, hero_data: HeroCreate) -> Hero:
        if await self.get_hero(hero_data.id):
            raise HTTPException(status_code=400, detail=f"英雄 ID {hero_data.id} 已存在")

        hero = Hero(**hero_data.model_dump())
        self.db.add(hero)
        await self.db.commit()
        await self.db.refresh(hero)
        return hero

    async def update_hero(self, hero_id: str, hero_data: HeroUpdate) -> Hero | None:
        existing_hero = await self.get_hero(hero_id)
        if not existing_hero:
            return None

        existing_hero.sqlmodel_update(hero_data.model_dump(exclude_unset=True))
        self.db.add(existing_hero)
        await self.db.commit()
        await self.db.refresh(existing_hero)
        return existing_hero

    async def delete_hero(self, hero_id: str) -> bool:
        hero = await self.get_hero(hero_id)
        if not hero:
            return False

        await self.db.delete(hero)
        await self.db.commit()
        return True
