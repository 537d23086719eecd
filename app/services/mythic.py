from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends
from sqlmodel import col, desc, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.db import get_db
from app.core.enums import BannerType
from app.models.banner import Banner
from app.models.hero import Hero
from app.models.mythic_pity import MythicPity
from app.models.summon import Summon
from app.schemas.common import PaginationData
from app.schemas.mythic import MythicStatus
from app.schemas.summon import SummonHistoryEntry


class MythicService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_mythic_pity(self, player_id: int, server_id: str) -> MythicPity | None:
        result = await self.db.exec(
            select(MythicPity).where(
                MythicPity.player_id == player_id, MythicPity.server_id == server_id
            )
        )
        return result.first()

    async def get_or_create(self, player_id: int, server_id: str) -> MythicPity:
        """Load the player's mythic ledger, adding a fresh one to the session if missing.

        Does not commit; the row is persisted with the summon batch that needs it.
        """
        mythic = await self.get_mythic_pity(player_id, server_id)
        if mythic is None:
            mythic = MythicPity(
                player_id=player_id,
                server_id=server_id,
                mythic_pity_threshold=settings.mythic_pity_threshold,
                mythic_heroes_obtained=[],
            )
            self.db.add(mythic)
        return mythic

    async def get_mythic_status(self, player_id: int, server_id: str) -> MythicStatus:
        mythic = await self.get_mythic_pity(player_id, server_id)
        if mythic is None:
            mythic = MythicPity(
                player_id=player_id,
                server_id=server_id,
                mythic_pity_threshold=settings.mythic_pity_threshold,
                mythic_heroes_obtained=[],
            )
        return MythicStatus.from_state(mythic)

    async def get_mythic_history(
        self, player_id: int, *, page: int, page_size: int
    ) -> tuple[Sequence[SummonHistoryEntry], PaginationData]:
        """Draws the player made on Mythic banners, newest first."""
        offset = (page - 1) * page_size

        query = (
            select(Summon, Hero.name, Banner.name)
            .join(Hero, col(Summon.hero_id) == col(Hero.id))
            .join(Banner, col(Summon.banner_id) == col(Banner.id))
            .where(Summon.player_id == player_id, Banner.type == BannerType.MYTHIC)
        )

        total_items_result = await self.db.exec(query)
        total_items = len(total_items_result.all())

        result = await self.db.exec(
            query.order_by(desc(col(Summon.created_at)), desc(col(Summon.id)))
            .offset(offset)
            .limit(page_size)
        )
        entries = [
            SummonHistoryEntry.from_row(summon, hero_name, banner_name)
            for summon, hero_name, banner_name in result.all()
        ]

        pagination = PaginationData.for_page(page, page_size, total_items)

        return entries, pagination
