import pytest
from fastapi import HTTPException
from pydantic import ValidationError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.enums import Currency, EventType, HeroRarity
from app.core.exceptions import InsufficientResourcesError
from app.models.event_log import EventLog
from app.models.hero_fragment import HeroFragment
from app.models.player_hero import PlayerHero
from app.schemas.player import CurrencyAdjustment
from app.services.player import PlayerService
from factories import SessionFactory, create_player

pytestmark = pytest.mark.usefixtures("heroes")


async def test_increase_currency_logs_event(session: AsyncSession) -> None:
    await create_player(session)

    player = await PlayerService(session).increase_currency(
        1001, Currency.TICKETS, 5, "event reward"
    )

    assert player.tickets == 5
    result = await session.exec(select(EventLog))
    event = result.one()
    assert event.event_type == EventType.ADMIN_INCREASE_CURRENCY
    assert event.context == {"currency": "tickets", "amount": 5, "reason": "event reward"}


async def test_decrease_currency(session: AsyncSession) -> None:
    await create_player(session)

    player = await PlayerService(session).decrease_currency(1001, Currency.GEMS, 1000, "refund")

    assert player.gems == 4000


async def test_decrease_below_zero_rejected(
    session: AsyncSession, session_factory: SessionFactory
) -> None:
    await create_player(session, gems=10)

    with pytest.raises(InsufficientResourcesError) as exc_info:
        await PlayerService(session).decrease_currency(1001, Currency.GEMS, 100, "oops")

    assert exc_info.value.available == 10
    async with session_factory() as other:
        player = await PlayerService(other).get_player(1001)
        assert player is not None
        assert player.gems == 10
        events = await other.exec(select(EventLog))
        assert events.all() == []


async def test_set_currency(session: AsyncSession) -> None:
    await create_player(session)

    player = await PlayerService(session).set_currency(1001, Currency.GEMS, 42, "reset")

    assert player.gems == 42
    result = await session.exec(select(EventLog))
    assert result.one().context["reason"] == "Set from 5000 to 42: reset"


async def test_currency_on_missing_player(session: AsyncSession) -> None:
    with pytest.raises(HTTPException) as exc_info:
        await PlayerService(session).increase_currency(1, Currency.GEMS, 1, "x")

    assert exc_info.value.status_code == 404


def test_scrolls_cannot_be_adjusted() -> None:
    with pytest.raises(ValidationError):
        CurrencyAdjustment(currency=Currency.MYTHIC_SCROLLS, amount=1, reason="gift")


async def test_roster_fragments_and_statistics(session: AsyncSession) -> None:
    await create_player(session)
    session.add_all([
        PlayerHero(player_id=1001, hero_id="footman"),
        PlayerHero(player_id=1001, hero_id="storm_queen", stars=3),
        HeroFragment(player_id=1001, hero_id="storm_queen", quantity=50),
        HeroFragment(player_id=1001, hero_id="archer", quantity=0),
    ])
    await session.commit()
    service = PlayerService(session)

    roster = await service.get_roster(1001)
    fragments = await service.get_fragments(1001)
    stats = await service.get_hero_statistics(1001)

    assert {entry.hero_id: entry.fragments for entry in roster} == {
        "footman": 0,
        "storm_queen": 50,
    }
    assert [balance.hero_id for balance in fragments] == ["storm_queen"]
    assert stats.total_owned_heroes == 2
    assert stats.heroes_per_rarity[HeroRarity.LEGENDARY] == 1
    assert stats.heroes_per_rarity[HeroRarity.MYTHIC] == 0
    assert stats.total_fragments == 50
    assert await service.get_owned_hero_ids(1001) == {"footman", "storm_queen"}
