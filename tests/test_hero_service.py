import pytest
from fastapi import HTTPException
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.enums import HeroRarity, HeroSortField, SortOrder
from app.models.hero import Hero
from app.schemas.hero import HeroCreate, HeroListParams, HeroUpdate
from app.services.hero import HeroService


async def test_list_heroes_filtered(session: AsyncSession, heroes: dict[str, Hero]) -> None:
    service = HeroService(session)

    legendary, pagination = await service.get_heroes(
        page=1, page_size=10, params=HeroListParams(rarity=HeroRarity.LEGENDARY)
    )

    assert [hero.id for hero in legendary] == ["dragon_knight", "lich_king", "storm_queen"]
    assert pagination.total_items == 3

    everything, pagination = await service.get_heroes(
        page=2,
        page_size=5,
        params=HeroListParams(sort_by=HeroSortField.ID, sort_order=SortOrder.DESC),
    )
    assert pagination.total_items == len(heroes)
    assert pagination.total_pages == 3
    assert len(everything) == 5


@pytest.mark.usefixtures("heroes")
async def test_search_by_name(session: AsyncSession) -> None:
    found = await HeroService(session).get_heroes_by_name("queen")

    assert {hero.id for hero in found} == {"storm_queen"}


async def test_create_update_delete(session: AsyncSession) -> None:
    service = HeroService(session)

    hero = await service.create_hero(
        HeroCreate(id="frost_mage", name="Frost Mage", rarity=HeroRarity.EPIC)
    )
    assert hero.rarity == HeroRarity.EPIC

    with pytest.raises(HTTPException) as exc_info:
        await service.create_hero(HeroCreate(id="frost_mage", name="Dup", rarity=HeroRarity.RARE))
    assert exc_info.value.status_code == 400

    updated = await service.update_hero("frost_mage", HeroUpdate(name="Ice Mage"))
    assert updated is not None
    assert updated.name == "Ice Mage"
    assert updated.rarity == HeroRarity.EPIC

    assert await service.delete_hero("frost_mage")
    assert await service.get_hero("frost_mage") is None
    assert await service.update_hero("frost_mage", HeroUpdate(name="x")) is None
