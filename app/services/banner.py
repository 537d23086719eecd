import datetime
from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends, HTTPException, status
from sqlalchemy import update
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.db import get_db
from app.core.enums import BannerType, HeroRarity
from app.core.exceptions import ConfigurationError
from app.models.banner import Banner
from app.models.hero import Hero
from app.schemas.banner import BannerCreate, BannerRatesInfo, BannerUpdate
from app.schemas.common import PaginationData
from app.services.pity import PityTracker
from app.utils.misc import ensure_utc, get_utc_now

# Nested configuration is stored as JSON, so it is dumped in JSON mode
JSON_FIELDS = frozenset({
    "allowed_servers",
    "hero_pool",
    "focus_heroes",
    "rates",
    "costs",
    "pity_config",
    "elemental_config",
})


def _dump_banner_data(data: BannerCreate | BannerUpdate) -> dict:
    plain = data.model_dump(exclude_unset=isinstance(data, BannerUpdate))
    json_ready = data.model_dump(mode="json", include=JSON_FIELDS & plain.keys())
    return {**plain, **json_ready}


def required_rarities(banner: Banner) -> list[HeroRarity]:
    """Rarities a banner can produce, and therefore must have heroes for."""
    rates = banner.get_rates()
    if banner.is_mythic:
        rarities = [HeroRarity.MYTHIC]
        if rates.mythic < 100:  # noqa: PLR2004
            rarities.append(HeroRarity.LEGENDARY)
        return rarities

    tracker = PityTracker.from_config(banner.get_pity_config())
    rarities = [
        rarity
        for rarity in (HeroRarity.COMMON, HeroRarity.RARE, HeroRarity.EPIC, HeroRarity.LEGENDARY)
        if rates.for_rarity(rarity) > 0
    ]
    if tracker.legendary_pity > 0 and HeroRarity.LEGENDARY not in rarities:
        rarities.append(HeroRarity.LEGENDARY)
    if tracker.epic_pity > 0 and HeroRarity.EPIC not in rarities:
        rarities.append(HeroRarity.EPIC)
    return rarities


def validate_banner(
    banner: Banner, pool: Sequence[Hero], *, status_code: int | None = None
) -> None:
    """Check a banner's configuration against its resolved hero pool.

    Raises:
        ConfigurationError: On the first problem found. ``status_code`` lets the
            admin endpoints report it as a client error.
    """

    def fail(detail: str) -> None:
        raise ConfigurationError(detail, status_code=status_code)

    if ensure_utc(banner.end_time) <= ensure_utc(banner.start_time):
        fail("卡池結束時間必須晚於開始時間")
    if not banner.allowed_servers:
        fail("卡池必須至少開放一個伺服器")

    rates = banner.get_rates()
    if not banner.is_mythic and abs(rates.standard_total - 100) > settings.rate_sum_tolerance:
        fail(f"卡池機率總和必須為 100%，目前為 {rates.standard_total:g}%")

    if not banner.is_mythic:
        costs = banner.get_costs()
        pull_costs = (costs.single_pull, costs.multi_pull, costs.first_pull_discount)
        if any(cost.mythic_scrolls for cost in pull_costs if cost is not None):
            fail("神話卷軸只能用於神話卡池")

    if banner.type == BannerType.ELEMENTAL and banner.get_elemental_config() is None:
        fail("元素卡池必須設定元素")

    rarities_in_pool = {hero.rarity for hero in pool}
    for rarity in required_rarities(banner):
        if rarity not in rarities_in_pool:
            fail(f"卡池中沒有 {rarity} 稀有度的英雄")

    pool_ids = {hero.id for hero in pool}
    for focus in banner.get_focus_heroes():
        if focus.hero_id not in pool_ids:
            fail(f"主打英雄 {focus.hero_id} 不在卡池中")


class BannerService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_banners(
        self, *, page: int, page_size: int, banner_type: BannerType | None = None
    ) -> tuple[Sequence[Banner], PaginationData]:
        offset = (page - 1) * page_size

        query = select(Banner)
        if banner_type is not None:
            query = query.where(Banner.type == banner_type)

        total_items_result = await self.db.exec(query)
        total_items = len(total_items_result.all())

        result = await self.db.exec(
            query.order_by(col(Banner.sort_order), col(Banner.start_time))
            .offset(offset)
            .limit(page_size)
        )
        banners = result.all()

        pagination = PaginationData.for_page(page, page_size, total_items)

        return banners, pagination

    async def get_banner(self, banner_id: str) -> Banner | None:
        result = await self.db.exec(select(Banner).where(Banner.id == banner_id))
        return result.first()

    async def get_active_banners(
        self, server_id: str, *, now: datetime.datetime | None = None
    ) -> list[Banner]:
        """Banners a player on ``server_id`` can pull from right now."""
        now = now or get_utc_now()
        result = await self.db.exec(
            select(Banner)
            .where(col(Banner.is_active), col(Banner.is_visible))
            .order_by(col(Banner.sort_order), col(Banner.start_time))
        )
        # Window and server checks run in Python; SQLite drops tz info and
        # allowed_servers is a JSON list
        return [
            banner
            for banner in result.all()
            if banner.is_currently_active(now) and banner.is_available_on(server_id)
        ]

    async def get_available_heroes(self, banner: Banner) -> list[Hero]:
        """Resolve a banner's pool configuration into concrete heroes."""
        pool_config = banner.get_hero_pool()

        query = select(Hero)
        if not pool_config.include_all:
            if not pool_config.specific_heroes:
                return []
            query = query.where(col(Hero.id).in_(pool_config.specific_heroes))
        if pool_config.excluded_heroes:
            query = query.where(col(Hero.id).not_in(pool_config.excluded_heroes))
        if pool_config.rarity_filters:
            query = query.where(col(Hero.rarity).in_(pool_config.rarity_filters))

        result = await self.db.exec(query.order_by(col(Hero.id)))
        return list(result.all())

    async def validate(self, banner: Banner, *, status_code: int | None = None) -> list[Hero]:
        """Validate ``banner`` and return its hero pool."""
        pool = await self.get_available_heroes(banner)
        validate_banner(banner, pool, status_code=status_code)
        return pool

    async def create_banner(self, banner_data: BannerCreate) -> Banner:
        if await self.get_banner(banner_data.id):
            raise HTTPException(status_code=400, detail=f"卡池 ID {banner_data.id} 已存在")

        banner = Banner(**_dump_banner_data(banner_data))
        await self.validate(banner, status_code=status.HTTP_400_BAD_REQUEST)

        self.db.add(banner)
        await self.db.commit()
        await self.db.refresh(banner)
        return banner

    async def update_banner(self, banner_id: str, banner_data: BannerUpdate) -> Banner | None:
        existing_banner = await self.get_banner(banner_id)
        if not existing_banner:
            return None

        existing_banner.sqlmodel_update(_dump_banner_data(banner_data))
        try:
            await self.validate(existing_banner, status_code=status.HTTP_400_BAD_REQUEST)
        except ConfigurationError:
            await self.db.rollback()
            raise

        self.db.add(existing_banner)
        await self.db.commit()
        await self.db.refresh(existing_banner)
        return existing_banner

    async def delete_banner(self, banner_id: str) -> bool:
        banner = await self.get_banner(banner_id)
        if not banner:
            return False

        await self.db.delete(banner)
        await self.db.commit()
        return True

    async def record_pull_stats(
        self, banner_id: str, *, pulls: int, legendary: int, epic: int, mythic: int
    ) -> None:
        """Add a batch's draws to the banner's aggregate stats.

        Increment-only so concurrent batches on the same banner never lose
        updates. Does not commit.
        """
        conn = await self.db.connection()
        await conn.execute(
            update(Banner)
            .where(col(Banner.id) == banner_id)
            .values(
                total_pulls=col(Banner.total_pulls) + pulls,
                legendary_count=col(Banner.legendary_count) + legendary,
                epic_count=col(Banner.epic_count) + epic,
                mythic_count=col(Banner.mythic_count) + mythic,
            )
        )

    @staticmethod
    def get_rates_info(banner: Banner) -> BannerRatesInfo:
        pity_config = banner.get_pity_config()
        tracker = PityTracker.from_config(pity_config)
        focus_heroes = banner.get_focus_heroes()

        guarantees: list[str] = []
        if banner.is_mythic:
            guarantees.append(f"{settings.mythic_pity_threshold} 抽內必定獲得神話英雄")
        else:
            if tracker.legendary_pity > 0:
                guarantees.append(f"{tracker.legendary_pity} 抽內必定獲得傳說英雄")
            if tracker.epic_pity > 0:
                guarantees.append(f"{tracker.epic_pity} 抽內必定獲得史詩以上英雄")
            if pity_config.shared_pity:
                guarantees.append("保底次數與其他共享卡池共用")
        guarantees.extend(
            f"首次獲得傳說英雄時必定為 {focus.hero_id}" for focus in focus_heroes if focus.guaranteed
        )

        return BannerRatesInfo(
            banner_id=banner.id,
            name=banner.name,
            rates=banner.get_rates(),
            legendary_pity=tracker.legendary_pity,
            epic_pity=tracker.epic_pity,
            shared_pity=pity_config.shared_pity,
            focus_heroes=focus_heroes,
            guarantees=guarantees,
        )
