import datetime

import pytest
from fastapi import HTTPException
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.enums import BannerType, HeroRarity
from app.core.exceptions import ConfigurationError
from app.models.hero import Hero
from app.schemas.banner import BannerCreate, BannerRates, BannerUpdate
from app.services.banner import BannerService
from app.utils.misc import get_utc_now
from factories import banner_data, create_banner, create_mythic_banner

pytestmark = pytest.mark.usefixtures("heroes")


async def test_create_valid_banner(session: AsyncSession) -> None:
    service = BannerService(session)

    banner = await service.create_banner(BannerCreate(**banner_data()))

    assert banner.id == "standard"
    assert banner.get_rates() == BannerRates(common=50, rare=30, epic=15, legendary=5)
    assert banner.get_hero_pool().rarity_filters == [
        HeroRarity.COMMON,
        HeroRarity.RARE,
        HeroRarity.EPIC,
        HeroRarity.LEGENDARY,
    ]


async def test_duplicate_banner_id_rejected(session: AsyncSession) -> None:
    service = BannerService(session)
    await service.create_banner(BannerCreate(**banner_data()))

    with pytest.raises(HTTPException) as exc_info:
        await service.create_banner(BannerCreate(**banner_data()))

    assert exc_info.value.status_code == 400


async def test_rates_must_sum_to_100(session: AsyncSession) -> None:
    service = BannerService(session)
    rates = {"common": 49, "rare": 30, "epic": 15, "legendary": 5}

    with pytest.raises(ConfigurationError) as exc_info:
        await service.create_banner(BannerCreate(**banner_data(rates=rates)))

    assert exc_info.value.status_code == 400
    assert await service.get_banner("standard") is None


async def test_rate_sum_within_tolerance_accepted(session: AsyncSession) -> None:
    service = BannerService(session)
    rates = {"common": 50.05, "rare": 30, "epic": 15, "legendary": 5}

    banner = await service.create_banner(BannerCreate(**banner_data(rates=rates)))

    assert banner.get_rates().standard_total == pytest.approx(100.05)


async def test_focus_hero_must_be_in_pool(session: AsyncSession) -> None:
    service = BannerService(session)
    data = banner_data(focus_heroes=[{"hero_id": "sun_god", "focus_chance": 0.5}])

    with pytest.raises(ConfigurationError, match="sun_god"):
        await service.create_banner(BannerCreate(**data))


async def test_pool_must_cover_rolled_rarities(session: AsyncSession) -> None:
    service = BannerService(session)
    pool = {"include_all": False, "specific_heroes": ["footman", "ranger", "paladin"]}

    with pytest.raises(ConfigurationError, match="Legendary"):
        await service.create_banner(BannerCreate(**banner_data(hero_pool=pool)))


async def test_legendary_pity_requires_legendary_heroes(session: AsyncSession) -> None:
    service = BannerService(session)
    pool = {"include_all": False, "specific_heroes": ["footman", "ranger", "paladin"]}
    rates = {"common": 60, "rare": 30, "epic": 10, "legendary": 0}

    with pytest.raises(ConfigurationError, match="Legendary"):
        await service.create_banner(BannerCreate(**banner_data(hero_pool=pool, rates=rates)))


async def test_scroll_costs_only_on_mythic_banners(session: AsyncSession) -> None:
    service = BannerService(session)
    costs = {"single_pull": {"mythic_scrolls": 1}}

    with pytest.raises(ConfigurationError):
        await service.create_banner(BannerCreate(**banner_data(costs=costs)))


async def test_elemental_banner_needs_element(session: AsyncSession) -> None:
    service = BannerService(session)

    with pytest.raises(ConfigurationError):
        await service.create_banner(
            BannerCreate(**banner_data("fire", type=BannerType.ELEMENTAL))
        )

    banner = await service.create_banner(
        BannerCreate(
            **banner_data(
                "fire", type=BannerType.ELEMENTAL, elemental_config={"element": "Fire"}
            )
        )
    )
    assert banner.get_elemental_config() is not None


async def test_window_must_be_ordered(session: AsyncSession) -> None:
    service = BannerService(session)
    now = get_utc_now()

    with pytest.raises(ConfigurationError):
        await service.create_banner(
            BannerCreate(**banner_data(start_time=now, end_time=now - datetime.timedelta(hours=1)))
        )


async def test_mythic_banner_skips_rate_sum(session: AsyncSession) -> None:
    service = BannerService(session)
    data = banner_data(
        "mythic",
        type=BannerType.MYTHIC,
        hero_pool={"include_all": True, "rarity_filters": ["Legendary", "Mythic"]},
        rates={"mythic": 10},
        costs={"single_pull": {"mythic_scrolls": 1}, "multi_pull": {"mythic_scrolls": 10}},
    )

    banner = await service.create_banner(BannerCreate(**data))

    assert banner.is_mythic


async def test_failed_update_leaves_banner_unchanged(session: AsyncSession) -> None:
    service = BannerService(session)
    await service.create_banner(BannerCreate(**banner_data()))

    with pytest.raises(ConfigurationError):
        await service.update_banner(
            "standard", BannerUpdate(rates=BannerRates(common=10, legendary=5))
        )

    banner = await service.get_banner("standard")
    assert banner is not None
    assert banner.get_rates().common == 50


async def test_update_banner(session: AsyncSession) -> None:
    service = BannerService(session)
    await service.create_banner(BannerCreate(**banner_data()))

    banner = await service.update_banner("standard", BannerUpdate(name="Renamed", sort_order=3))

    assert banner is not None
    assert banner.name == "Renamed"
    assert banner.sort_order == 3
    assert banner.get_rates().common == 50
    assert await service.update_banner("missing", BannerUpdate(name="x")) is None


async def test_delete_banner(session: AsyncSession) -> None:
    service = BannerService(session)
    await create_banner(session)

    assert await service.delete_banner("standard")
    assert not await service.delete_banner("standard")


async def test_active_banners_filtered_and_sorted(session: AsyncSession) -> None:
    now = get_utc_now()
    await create_banner(session, "late", sort_order=2)
    await create_banner(session, "early", sort_order=1)
    await create_banner(
        session,
        "expired",
        start_time=now - datetime.timedelta(days=10),
        end_time=now - datetime.timedelta(days=1),
    )
    await create_banner(session, "upcoming", start_time=now + datetime.timedelta(days=1))
    await create_banner(session, "disabled", is_active=False)
    await create_banner(session, "hidden", is_visible=False)
    await create_banner(session, "s2_only", allowed_servers=["S2"])

    banners = await BannerService(session).get_active_banners("S1")

    assert [banner.id for banner in banners] == ["early", "late"]

    s2_banners = await BannerService(session).get_active_banners("S2")
    assert {banner.id for banner in s2_banners} == {"early", "late", "s2_only"}


async def test_pool_resolution(session: AsyncSession, heroes: dict[str, Hero]) -> None:
    service = BannerService(session)
    standard = await create_banner(session)
    curated = await create_banner(
        session,
        "curated",
        hero_pool={
            "include_all": False,
            "specific_heroes": ["footman", "archer", "dragon_knight"],
            "excluded_heroes": ["archer"],
        },
    )

    standard_pool = await service.get_available_heroes(standard)
    curated_pool = await service.get_available_heroes(curated)

    assert {hero.id for hero in standard_pool} == {
        hero_id for hero_id, hero in heroes.items() if hero.rarity != HeroRarity.MYTHIC
    }
    assert [hero.id for hero in curated_pool] == ["dragon_knight", "footman"]


async def test_empty_specific_pool(session: AsyncSession) -> None:
    banner = await create_banner(session, hero_pool={"include_all": False})

    assert await BannerService(session).get_available_heroes(banner) == []


async def test_record_pull_stats_increments(session: AsyncSession) -> None:
    service = BannerService(session)
    banner = await create_banner(session)

    await service.record_pull_stats("standard", pulls=10, legendary=1, epic=2, mythic=0)
    await service.record_pull_stats("standard", pulls=1, legendary=0, epic=1, mythic=0)
    await session.commit()
    await session.refresh(banner)

    assert banner.total_pulls == 11
    assert banner.legendary_count == 1
    assert banner.epic_count == 3


async def test_rates_info_lists_guarantees(session: AsyncSession) -> None:
    banner = await create_banner(
        session,
        pity_config={"legendary_pity": 80, "epic_pity": 10, "shared_pity": True},
        focus_heroes=[{"hero_id": "storm_queen", "focus_chance": 0.5, "guaranteed": True}],
    )

    info = BannerService.get_rates_info(banner)

    assert info.legendary_pity == 80
    assert info.epic_pity == 10
    assert info.shared_pity
    assert len(info.guarantees) == 4
    assert "storm_queen" in info.guarantees[-1]


async def test_rates_info_for_mythic_banner(session: AsyncSession) -> None:
    banner = await create_mythic_banner(session)

    info = BannerService.get_rates_info(banner)

    assert info.rates.mythic == 10
    assert info.guarantees == ["35 抽內必定獲得神話英雄"]


async def test_paginated_banner_listing(session: AsyncSession) -> None:
    await create_banner(session)
    await create_mythic_banner(session)

    banners, pagination = await BannerService(session).get_banners(
        page=1, page_size=10, banner_type=BannerType.MYTHIC
    )

    assert [banner.id for banner in banners] == ["mythic"]
    assert pagination.total_items == 1
