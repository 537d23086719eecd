import datetime
import secrets
from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends
from loguru import logger
from sqlalchemy import case, distinct
from sqlmodel import col, desc, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.db import get_db
from app.core.enums import HeroRarity
from app.core.exceptions import InvalidRequestError, PersistenceConflictError
from app.models.banner import Banner
from app.models.banner_pity import BannerPity
from app.models.hero import Hero
from app.models.summon import Summon
from app.schemas.common import PaginationData
from app.schemas.summon import PitySnapshot, PullBatchResult, SummonHistoryEntry, SummonStats
from app.services.banner import BannerService
from app.services.elemental import ElementalRotation, get_elemental_rotation
from app.services.pity import PityTracker, pity_group_key
from app.services.summon_batch import SummonBatch
from app.utils.misc import ensure_utc, get_utc_now


class SummonService:
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db)],
        rotation: Annotated[ElementalRotation, Depends(get_elemental_rotation)],
    ) -> None:
        self.db = db
        self.rotation = rotation

    def _new_batch(  # noqa: PLR0913
        self,
        *,
        player_id: int,
        server_id: str,
        banner_id: str,
        count: int,
        free: bool,
        seed: int,
    ) -> SummonBatch:
        return SummonBatch(
            self.db,
            self.rotation,
            player_id=player_id,
            server_id=server_id,
            banner_id=banner_id,
            count=count,
            free=free,
            seed=seed,
        )

    async def pull(  # noqa: PLR0913
        self,
        player_id: int,
        server_id: str,
        banner_id: str,
        count: int,
        *,
        free: bool = False,
        seed: int | None = None,
    ) -> PullBatchResult:
        """Perform ``count`` summons for a player on a banner.

        The batch either commits completely or not at all. When another batch of
        the same player commits first, the whole batch is redone from a fresh read
        with fresh rolls, up to ``settings.summon_conflict_retries`` attempts.

        Args:
            player_id: ID of the player
            server_id: Server the player is pulling from
            banner_id: ID of the banner
            count: Number of pulls (1 or 10)
            free: Skip the currency debit, for granted free pulls
            seed: RNG seed of the first attempt; random when omitted

        Returns:
            The ordered pull results with the updated pity and mythic state.
        """
        attempts = settings.summon_conflict_retries
        for attempt in range(1, attempts + 1):
            batch_seed = seed if seed is not None and attempt == 1 else secrets.randbits(63)
            batch = self._new_batch(
                player_id=player_id,
                server_id=server_id,
                banner_id=banner_id,
                count=count,
                free=free,
                seed=batch_seed,
            )
            try:
                return await batch.run()
            except PersistenceConflictError:
                if attempt == attempts:
                    raise
                logger.warning(
                    f"Summon conflict for player {player_id} on {banner_id}, "
                    f"retrying ({attempt}/{attempts})"
                )

    async def get_pity_status(self, player_id: int, banner_id: str) -> PitySnapshot:
        banner = await BannerService(self.db).get_banner(banner_id)
        if banner is None:
            msg = "找不到卡池"
            raise InvalidRequestError(msg, status_code=404)
        if banner.is_mythic:
            msg = "神話卡池請查看神話保底進度"
            raise InvalidRequestError(msg)

        pity_config = banner.get_pity_config()
        tracker = PityTracker.from_config(pity_config)
        group = pity_group_key(banner.id, pity_config)

        result = await self.db.exec(
            select(BannerPity).where(
                BannerPity.player_id == player_id, BannerPity.pity_group == group
            )
        )
        pity = result.first() or BannerPity(player_id=player_id, pity_group=group)

        return tracker.snapshot(pity)

    async def get_summon_history(
        self, player_id: int, *, page: int, page_size: int, banner_id: str | None = None
    ) -> tuple[Sequence[SummonHistoryEntry], PaginationData]:
        offset = (page - 1) * page_size

        query = (
            select(Summon, Hero.name, Banner.name)
            .join(Hero, col(Summon.hero_id) == col(Hero.id))
            .join(Banner, col(Summon.banner_id) == col(Banner.id))
            .where(Summon.player_id == player_id)
        )
        if banner_id is not None:
            query = query.where(Summon.banner_id == banner_id)

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

    async def get_summon_stats(self, player_id: int) -> SummonStats:
        rarity_result = await self.db.exec(
            select(Summon.rarity, func.count())
            .where(Summon.player_id == player_id)
            .group_by(Summon.rarity)
        )
        distribution: dict[HeroRarity, int] = dict.fromkeys(HeroRarity, 0)
        for rarity, count in rarity_result.all():
            distribution[HeroRarity(rarity)] = count or 0
        total = sum(distribution.values())

        totals_result = await self.db.exec(
            select(
                func.count(distinct(col(Summon.batch_id))),
                func.sum(case((col(Summon.was_pity), 1), else_=0)),
                func.sum(case((col(Summon.is_focus), 1), else_=0)),
                func.sum(case((col(Summon.is_new), 1), else_=0)),
            ).where(Summon.player_id == player_id)
        )
        sessions, pity_hits, focus_hits, new_heroes = totals_result.one()

        week_ago = get_utc_now() - datetime.timedelta(days=7)
        recent_result = await self.db.exec(
            select(func.count()).where(
                Summon.player_id == player_id, col(Summon.created_at) >= week_ago
            )
        )
        last_result = await self.db.exec(
            select(func.max(Summon.created_at)).where(Summon.player_id == player_id)
        )
        last_pull_at = last_result.one()

        return SummonStats(
            total_summons=total,
            total_sessions=sessions or 0,
            rarity_distribution=distribution,
            rarity_rates={
                rarity: round(count / total * 100, 2) if total else 0.0
                for rarity, count in distribution.items()
            },
            pity_hits=pity_hits or 0,
            focus_hits=focus_hits or 0,
            new_heroes=new_heroes or 0,
            pulls_last_7_days=recent_result.one() or 0,
            favorite_rarity=(
                max(distribution, key=lambda rarity: distribution[rarity]) if total else None
            ),
            last_pull_at=ensure_utc(last_pull_at) if last_pull_at else None,
        )
