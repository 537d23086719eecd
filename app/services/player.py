from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends, HTTPException
from sqlalchemy import update
from sqlmodel import col, func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import get_db
from app.core.enums import Currency, EventType, HeroRarity
from app.core.exceptions import InsufficientResourcesError, PersistenceConflictError
from app.models.event_log import EventLog
from app.models.hero import Hero
from app.models.hero_fragment import HeroFragment
from app.models.player import Player
from app.models.player_hero import PlayerHero
from app.schemas.common import PaginationData
from app.schemas.player import FragmentBalance, HeroStatistics, PlayerUpdate, RosterEntry


class PlayerService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_players(
        self, *, page: int, page_size: int
    ) -> tuple[Sequence[Player], PaginationData]:
        offset = (page - 1) * page_size

        total_items_result = await self.db.exec(select(Player))
        total_items = len(total_items_result.all())

        result = await self.db.exec(select(Player).offset(offset).limit(page_size))
        players = result.all()

        pagination = PaginationData.for_page(page, page_size, total_items)

        return players, pagination

    async def get_player(self, player_id: int, *, for_update: bool = False) -> Player | None:
        query = select(Player).where(Player.id == player_id)
        if for_update:
            # Always reload; a batch must see the latest summon_version
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.exec(query)
        return result.first()

    async def create_player(self, player: Player) -> Player:
        self.db.add(player)
        await self.db.commit()
        await self.db.refresh(player)
        return player

    async def update_player(self, player_id: int, player: PlayerUpdate) -> Player | None:
        existing_player = await self.get_player(player_id)
        if not existing_player:
            return None

        player_data = player.model_dump(exclude_unset=True)
        existing_player.sqlmodel_update(player_data)
        self.db.add(existing_player)
        await self.db.commit()
        await self.db.refresh(existing_player)
        return existing_player

    async def delete_player(self, player_id: int) -> bool:
        player = await self.get_player(player_id)
        if not player:
            return False

        await self.db.delete(player)
        await self.db.commit()
        return True

    async def _log_currency_event(
        self, player_id: int, event_type: EventType, currency: Currency, amount: int, reason: str
    ) -> None:
        """Log a currency event to the event log."""
        event_log = EventLog(
            player_id=player_id,
            event_type=event_type,
            context={"currency": currency.value, "amount": amount, "reason": reason},
        )
        self.db.add(event_log)

    async def _get_existing_player(self, player_id: int) -> Player:
        player = await self.get_player(player_id)
        if not player:
            raise HTTPException(status_code=404, detail="找不到玩家")
        return player

    async def increase_currency(
        self, player_id: int, currency: Currency, amount: int, reason: str
    ) -> Player:
        """Increase a player's gems or tickets and log the event."""
        player = await self._get_existing_player(player_id)

        # Relative update so a concurrent summon debit is never overwritten
        column = getattr(Player, currency.value)
        conn = await self.db.connection()
        await conn.execute(
            update(Player).where(col(Player.id) == player_id).values({column: column + amount})
        )

        await self._log_currency_event(
            player_id, EventType.ADMIN_INCREASE_CURRENCY, currency, amount, reason
        )

        await self.db.commit()
        await self.db.refresh(player)
        return player

    async def decrease_currency(
        self, player_id: int, currency: Currency, amount: int, reason: str
    ) -> Player:
        """Decrease a player's gems or tickets and log the event.

        Raises:
            HTTPException: If player not found or insufficient funds.
        """
        player = await self._get_existing_player(player_id)

        column = getattr(Player, currency.value)
        conn = await self.db.connection()
        result = await conn.execute(
            update(Player)
            .where(col(Player.id) == player_id, column >= amount)
            .values({column: column - amount})
        )
        if result.rowcount == 0:
            await self.db.rollback()
            await self.db.refresh(player)
            raise InsufficientResourcesError(
                currency, required=amount, available=getattr(player, currency.value)
            )

        await self._log_currency_event(
            player_id, EventType.ADMIN_DECREASE_CURRENCY, currency, amount, reason
        )

        await self.db.commit()
        await self.db.refresh(player)
        return player

    async def set_currency(
        self, player_id: int, currency: Currency, amount: int, reason: str
    ) -> Player:
        """Set a player's gems or tickets to a specific amount and log the event."""
        player = await self._get_existing_player(player_id)

        old_amount = getattr(player, currency.value)
        setattr(player, currency.value, amount)
        self.db.add(player)

        await self._log_currency_event(
            player_id,
            EventType.ADMIN_SET_CURRENCY,
            currency,
            amount,
            f"Set from {old_amount} to {amount}: {reason}",
        )

        await self.db.commit()
        await self.db.refresh(player)
        return player

    async def get_owned_hero_ids(self, player_id: int) -> set[str]:
        result = await self.db.exec(
            select(PlayerHero.hero_id).where(PlayerHero.player_id == player_id)
        )
        return set(result.all())

    async def get_roster(self, player_id: int) -> list[RosterEntry]:
        result = await self.db.exec(
            select(PlayerHero, Hero, HeroFragment.quantity)
            .join(Hero, col(PlayerHero.hero_id) == col(Hero.id))
            .outerjoin(
                HeroFragment,
                (col(HeroFragment.player_id) == col(PlayerHero.player_id))
                & (col(HeroFragment.hero_id) == col(PlayerHero.hero_id)),
            )
            .where(PlayerHero.player_id == player_id)
            .order_by(col(PlayerHero.created_at), col(PlayerHero.id))
        )
        return [
            RosterEntry(
                hero_id=hero.id,
                hero_name=hero.name,
                rarity=hero.rarity,
                element=hero.element,
                level=entry.level,
                stars=entry.stars,
                fragments=fragments or 0,
                obtained_at=entry.created_at,
            )
            for entry, hero, fragments in result.all()
        ]

    async def get_fragments(self, player_id: int) -> list[FragmentBalance]:
        result = await self.db.exec(
            select(HeroFragment, Hero)
            .join(Hero, col(HeroFragment.hero_id) == col(Hero.id))
            .where(HeroFragment.player_id == player_id, col(HeroFragment.quantity) > 0)
            .order_by(col(Hero.id))
        )
        return [
            FragmentBalance(
                hero_id=hero.id, hero_name=hero.name, rarity=hero.rarity, quantity=fragment.quantity
            )
            for fragment, hero in result.all()
        ]

    async def get_hero_statistics(self, player_id: int) -> HeroStatistics:
        """Get roster statistics for a player."""
        rarity_result = await self.db.exec(
            select(Hero.rarity, func.count())
            .join(PlayerHero, col(PlayerHero.hero_id) == col(Hero.id))
            .where(PlayerHero.player_id == player_id)
            .group_by(Hero.rarity)
        )

        heroes_per_rarity: dict[HeroRarity, int] = dict.fromkeys(HeroRarity, 0)
        for rarity, count in rarity_result.all():
            heroes_per_rarity[HeroRarity(rarity)] = count or 0

        fragments_result = await self.db.exec(
            select(func.sum(HeroFragment.quantity)).where(HeroFragment.player_id == player_id)
        )
        total_fragments = fragments_result.one() or 0

        return HeroStatistics(
            total_owned_heroes=sum(heroes_per_rarity.values()),
            heroes_per_rarity=heroes_per_rarity,
            total_fragments=total_fragments,
        )

    # The methods below join the caller's transaction and never commit.

    def add_hero_to_roster(self, player_id: int, hero_id: str) -> PlayerHero:
        entry = PlayerHero(player_id=player_id, hero_id=hero_id, level=1, stars=1)
        self.db.add(entry)
        return entry

    async def credit_fragments(self, player_id: int, hero_id: str, amount: int) -> HeroFragment:
        result = await self.db.exec(
            select(HeroFragment).where(
                HeroFragment.player_id == player_id, HeroFragment.hero_id == hero_id
            )
        )
        fragment = result.first()

        if fragment:
            fragment.quantity += amount
        else:
            fragment = HeroFragment(player_id=player_id, hero_id=hero_id, quantity=amount)
        self.db.add(fragment)
        return fragment

    async def debit_for_summon(
        self, player_id: int, *, version: int, gems: int, tickets: int
    ) -> tuple[int, int]:
        """Charge a summon batch and claim the player's summon version.

        A single conditional UPDATE, so the balance check and the debit can't
        interleave with another batch of the same player.

        Returns:
            The remaining gems and tickets.

        Raises:
            PersistenceConflictError: Another batch committed since ``version`` was read.
            InsufficientResourcesError: The balance no longer covers the cost.
        """
        conn = await self.db.connection()
        result = await conn.execute(
            update(Player)
            .where(
                col(Player.id) == player_id,
                col(Player.summon_version) == version,
                col(Player.gems) >= gems,
                col(Player.tickets) >= tickets,
            )
            .values(
                gems=col(Player.gems) - gems,
                tickets=col(Player.tickets) - tickets,
                summon_version=version + 1,
            )
            .returning(col(Player.gems), col(Player.tickets))
        )
        row = result.first()
        if row is not None:
            return row[0], row[1]

        current = await conn.execute(
            select(Player.summon_version, Player.gems, Player.tickets).where(
                Player.id == player_id
            )
        )
        current_version, current_gems, current_tickets = current.one()
        if current_version != version:
            msg = "同時有其他召喚正在進行，請稍後再試"
            raise PersistenceConflictError(msg)
        if current_gems < gems:
            raise InsufficientResourcesError(Currency.GEMS, required=gems, available=current_gems)
        raise InsufficientResourcesError(
            Currency.TICKETS, required=tickets, available=current_tickets
        )
