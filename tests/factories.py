import datetime
from collections.abc import Callable
from typing import Any

from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.enums import BannerType, HeroRarity
from app.models.banner import Banner
from app.models.player import Player
from app.utils.misc import get_utc_now

HEROES: list[tuple[str, HeroRarity]] = [
    ("footman", HeroRarity.COMMON),
    ("archer", HeroRarity.COMMON),
    ("ranger", HeroRarity.RARE),
    ("cleric", HeroRarity.RARE),
    ("paladin", HeroRarity.EPIC),
    ("sorceress", HeroRarity.EPIC),
    ("dragon_knight", HeroRarity.LEGENDARY),
    ("storm_queen", HeroRarity.LEGENDARY),
    ("lich_king", HeroRarity.LEGENDARY),
    ("sun_god", HeroRarity.MYTHIC),
    ("void_empress", HeroRarity.MYTHIC),
]

SessionFactory = Callable[[], AsyncSession]

STANDARD_POOL = {"include_all": True, "rarity_filters": ["Common", "Rare", "Epic", "Legendary"]}


async def create_player(session: AsyncSession, **overrides: Any) -> Player:
    data: dict[str, Any] = {"id": 1001, "name": "tester", "server_id": "S1", "gems": 5000}
    data.update(overrides)
    player = Player(**data)
    session.add(player)
    await session.commit()
    await session.refresh(player)
    return player


def banner_data(banner_id: str = "standard", **overrides: Any) -> dict[str, Any]:
    now = get_utc_now()
    data: dict[str, Any] = {
        "id": banner_id,
        "name": banner_id.title(),
        "type": BannerType.STANDARD,
        "start_time": now - datetime.timedelta(days=1),
        "end_time": now + datetime.timedelta(days=30),
        "allowed_servers": ["ALL"],
        "hero_pool": STANDARD_POOL,
        "focus_heroes": [],
        "rates": {"common": 50, "rare": 30, "epic": 15, "legendary": 5},
        "costs": {"single_pull": {"gems": 100}, "multi_pull": {"gems": 1000}},
        "pity_config": {"legendary_pity": 90},
    }
    data.update(overrides)
    return data


async def create_banner(
    session: AsyncSession, banner_id: str = "standard", **overrides: Any
) -> Banner:
    """Insert a banner directly, skipping save-time validation."""
    banner = Banner(**banner_data(banner_id, **overrides))
    session.add(banner)
    await session.commit()
    await session.refresh(banner)
    return banner


async def create_mythic_banner(
    session: AsyncSession, banner_id: str = "mythic", **overrides: Any
) -> Banner:
    data: dict[str, Any] = {
        "type": BannerType.MYTHIC,
        "hero_pool": {"include_all": True, "rarity_filters": ["Legendary", "Mythic"]},
        "rates": {"mythic": 10},
        "costs": {},
        "pity_config": {},
    }
    data.update(overrides)
    return await create_banner(session, banner_id, **data)
