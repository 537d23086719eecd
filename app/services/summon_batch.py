"""One summon request carried out as a single unit of work.

A batch walks ``VALIDATING -> (ROLLING -> RESOLVING) x count -> PERSISTING ->
COMPLETED``. Every mutation stays in the session until the final commit, so a
failure at any point rolls the whole batch back (``REJECTED`` while validating,
``ROLLED_BACK`` afterwards) and nothing of it is ever visible.
"""

import random
import uuid
from collections import Counter, defaultdict
from dataclasses import dataclass

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.enums import BannerType, Currency, Element, EventType, HeroRarity, SummonState
from app.core.exceptions import (
    InsufficientResourcesError,
    InvalidRequestError,
    PersistenceConflictError,
)
from app.models.banner import Banner
from app.models.banner_pity import BannerPity
from app.models.event_log import EventLog
from app.models.hero import Hero
from app.models.mythic_pity import MythicPity
from app.models.player import Player
from app.models.summon import Summon
from app.models.wishlist import Wishlist
from app.schemas.banner import FocusHero, PullCost
from app.schemas.mythic import MythicStatus
from app.schemas.summon import PitySnapshot, PullBatchResult, PullBatchSummary, PullResult
from app.services.banner import BannerService
from app.services.elemental import ElementalRotation
from app.services.hero_selector import HeroSelector
from app.services.mythic import MythicService
from app.services.ownership import OwnershipResolver
from app.services.pity import PityTracker, pity_group_key
from app.services.player import PlayerService
from app.services.rarity_roller import RarityRoller, RollOutcome
from app.services.wishlist import WishlistService
from app.utils.misc import get_utc_now

VALID_PULL_COUNTS = frozenset({1, 10})


@dataclass(slots=True)
class Draw:
    pull_number: int
    hero: Hero
    outcome: RollOutcome
    is_focus: bool
    is_new: bool
    fragments_gained: int
    is_wishlist_pity: bool = False

    def to_result(self) -> PullResult:
        return PullResult(
            hero_id=self.hero.id,
            hero_name=self.hero.name,
            rarity=self.outcome.rarity,
            is_new=self.is_new,
            fragments_gained=self.fragments_gained,
            is_focus_hero=self.is_focus,
            is_pity_triggered=self.outcome.is_pity_triggered,
            is_wishlist_pity=self.is_wishlist_pity,
        )


class SummonBatch:
    def __init__(  # noqa: PLR0913
        self,
        db: AsyncSession,
        rotation: ElementalRotation,
        *,
        player_id: int,
        server_id: str,
        banner_id: str,
        count: int,
        free: bool = False,
        seed: int,
    ) -> None:
        self.db = db
        self.rotation = rotation
        self.banners = BannerService(db)
        self.players = PlayerService(db)
        self.mythic_service = MythicService(db)
        self.wishlists = WishlistService(db)

        self.player_id = player_id
        self.server_id = server_id
        self.banner_id = banner_id
        self.count = count
        self.free = free
        self.seed = seed
        self.batch_id = uuid.uuid4().hex

        self.rng = random.Random(seed)
        self.roller = RarityRoller(self.rng)
        self.selector = HeroSelector(self.rng)
        self.ownership = OwnershipResolver(settings.fragments_by_rarity)

        self.state = SummonState.VALIDATING
        self.draws: list[Draw] = []
        self.scrolls_granted = 0
        self._fragments: defaultdict[str, int] = defaultdict(int)

        # Loaded while validating
        self.player: Player
        self.banner: Banner
        self.pool: list[Hero]
        self.focus_heroes: list[FocusHero]
        self.cost: PullCost
        self.version: int
        self.owned: set[str]
        self.mythic: MythicPity
        self.pity: BannerPity | None = None
        self.tracker: PityTracker | None = None
        self.wishlist: Wishlist | None = None
        self.wishlist_heroes: list[Hero] = []

    def _transition(self, state: SummonState) -> None:
        logger.debug(f"Summon batch {self.batch_id}: {self.state} -> {state}")
        self.state = state

    async def run(self) -> PullBatchResult:
        try:
            await self._validate()
        except Exception:
            self._transition(SummonState.REJECTED)
            await self.db.rollback()
            raise

        try:
            for pull_number in range(1, self.count + 1):
                await self._draw(pull_number)
            self._transition(SummonState.PERSISTING)
            remaining_gems, remaining_tickets = await self._persist()
        except Exception:
            self._transition(SummonState.ROLLED_BACK)
            await self.db.rollback()
            raise

        self._transition(SummonState.COMPLETED)
        logger.info(
            f"Player {self.player_id} pulled {self.count}x on {self.banner_id} "
            f"(batch={self.batch_id}, seed={self.seed}, free={self.free})"
        )
        return self._build_result(remaining_gems, remaining_tickets)

    # Validating

    async def _validate(self) -> None:
        if self.count not in VALID_PULL_COUNTS:
            msg = "召喚次數必須為 1 或 10"
            raise InvalidRequestError(msg)

        player = await self.players.get_player(self.player_id, for_update=True)
        if player is None:
            msg = "找不到玩家"
            raise InvalidRequestError(msg, status_code=404)
        if player.server_id != self.server_id:
            msg = "玩家不屬於此伺服器"
            raise InvalidRequestError(msg)
        self.player = player
        self.version = player.summon_version

        banner = await self.banners.get_banner(self.banner_id)
        if banner is None:
            msg = "找不到卡池"
            raise InvalidRequestError(msg, status_code=404)
        if not banner.is_available_on(self.server_id):
            msg = "此卡池未在你的伺服器開放"
            raise InvalidRequestError(msg)
        now = get_utc_now()
        if not banner.is_currently_active(now):
            msg = "此卡池目前未開放"
            raise InvalidRequestError(msg)
        if not self.rotation.is_open(banner, now):
            msg = "此元素卡池今日未開放"
            raise InvalidRequestError(msg)
        self.banner = banner

        self.pool = await self.banners.validate(banner)
        self.focus_heroes = banner.get_focus_heroes()

        self.mythic = await self.mythic_service.get_or_create(self.player_id, self.server_id)
        if not banner.is_mythic:
            pity_config = banner.get_pity_config()
            self.tracker = PityTracker.from_config(pity_config)
            self.pity = await self._get_or_create_pity(pity_group_key(banner.id, pity_config))
            await self._load_wishlist()

        self.cost = await self._resolve_cost()
        self._check_resources()

        self.owned = await self.players.get_owned_hero_ids(self.player_id)

    async def _get_or_create_pity(self, pity_group: str) -> BannerPity:
        result = await self.db.exec(
            select(BannerPity).where(
                BannerPity.player_id == self.player_id, BannerPity.pity_group == pity_group
            )
        )
        pity = result.first()
        if pity is None:
            pity = BannerPity(player_id=self.player_id, pity_group=pity_group)
            self.db.add(pity)
        return pity

    def _wishlist_element(self) -> Element | None:
        if self.banner.type != BannerType.ELEMENTAL:
            return None
        elemental = self.banner.get_elemental_config()
        return elemental.element if elemental else None

    async def _load_wishlist(self) -> None:
        self.wishlist = await self.wishlists.get_or_create(
            self.player_id, self.server_id, self._wishlist_element()
        )
        # Only Legendary heroes this banner can actually give out
        pool_ids = {hero.id for hero in self.pool if hero.rarity == HeroRarity.LEGENDARY}
        self.wishlist_heroes = [
            hero for hero in await self.wishlists.get_heroes(self.wishlist) if hero.id in pool_ids
        ]

    async def _has_pulled_banner(self) -> bool:
        result = await self.db.exec(
            select(Summon.id)
            .where(Summon.player_id == self.player_id, Summon.banner_id == self.banner.id)
            .limit(1)
        )
        return result.first() is not None

    async def _resolve_cost(self) -> PullCost:
        if self.free:
            return PullCost()

        costs = self.banner.get_costs()
        configured = costs.single_pull if self.count == 1 else costs.multi_pull

        if self.banner.is_mythic:
            default = (
                settings.mythic_scroll_cost_single
                if self.count == 1
                else settings.mythic_scroll_cost_multi
            )
            return PullCost(mythic_scrolls=configured.mythic_scrolls or default)

        if (
            self.count == 1
            and costs.first_pull_discount is not None
            and not await self._has_pulled_banner()
        ):
            return costs.first_pull_discount
        return configured

    def _check_resources(self) -> None:
        if self.player.gems < self.cost.gems:
            raise InsufficientResourcesError(
                Currency.GEMS, required=self.cost.gems, available=self.player.gems
            )
        if self.player.tickets < self.cost.tickets:
            raise InsufficientResourcesError(
                Currency.TICKETS, required=self.cost.tickets, available=self.player.tickets
            )
        if self.mythic.scrolls_available < self.cost.mythic_scrolls:
            raise InsufficientResourcesError(
                Currency.MYTHIC_SCROLLS,
                required=self.cost.mythic_scrolls,
                available=self.mythic.scrolls_available,
            )

    # Rolling and resolving

    def _roll(self, *, wishlist_due: bool = False) -> RollOutcome:
        rates = self.banner.get_rates()
        if self.banner.is_mythic:
            return self.roller.roll_mythic(rates, force_mythic=self.mythic.is_mythic_pity_due())

        assert self.pity is not None and self.tracker is not None
        return self.roller.roll(
            rates,
            force_legendary=wishlist_due or self.tracker.is_legendary_due(self.pity),
            force_epic=self.tracker.is_epic_due(self.pity),
        )

    async def _draw(self, pull_number: int) -> None:
        self._transition(SummonState.ROLLING)
        # Wishlist pity outranks the banner's Legendary pity
        wishlist_due = self.wishlist is not None and self.wishlist.is_pity_due()
        outcome = self._roll(wishlist_due=wishlist_due)

        self._transition(SummonState.RESOLVING)
        if wishlist_due and self.wishlist_heroes:
            selection = self.selector.select_from(self.wishlist_heroes, self.focus_heroes)
        else:
            guarantee_focus = (
                self.pity is not None
                and outcome.rarity == HeroRarity.LEGENDARY
                and not self.pity.has_received_legendary
            )
            selection = self.selector.select(
                outcome.rarity, self.pool, self.focus_heroes, guarantee_focus=guarantee_focus
            )
        ownership = self.ownership.resolve(selection.hero, self.owned)

        if self.banner.is_mythic:
            self.mythic.record_mythic_pull(outcome.rarity, selection.hero.id)
        else:
            assert self.pity is not None and self.wishlist is not None
            PityTracker.record(self.pity, outcome.rarity)
            self.wishlist.record(outcome.rarity, triggered=wishlist_due)
            self.scrolls_granted += self.mythic.add_fused_pulls(
                1, settings.fused_pulls_per_scroll
            )

        draw = Draw(
            pull_number=pull_number,
            hero=selection.hero,
            outcome=outcome,
            is_focus=selection.is_focus,
            is_new=ownership.is_new,
            fragments_gained=ownership.fragments_gained,
            is_wishlist_pity=wishlist_due,
        )
        await self._apply_draw(draw)
        self.draws.append(draw)

    async def _apply_draw(self, draw: Draw) -> None:
        """Stage the roster, fragment and audit writes of one draw."""
        if draw.is_new:
            self.players.add_hero_to_roster(self.player_id, draw.hero.id)
            self.db.add(
                EventLog(
                    player_id=self.player_id,
                    event_type=EventType.NEW_HERO,
                    context={
                        "hero_id": draw.hero.id,
                        "rarity": draw.outcome.rarity.value,
                        "banner_id": self.banner.id,
                        "batch_id": self.batch_id,
                    },
                )
            )
        else:
            self._fragments[draw.hero.id] += draw.fragments_gained

        self.db.add(
            Summon(
                player_id=self.player_id,
                banner_id=self.banner.id,
                hero_id=draw.hero.id,
                rarity=draw.outcome.rarity,
                batch_id=self.batch_id,
                seed=self.seed,
                pull_number=draw.pull_number,
                is_new=draw.is_new,
                fragments_gained=draw.fragments_gained,
                is_focus=draw.is_focus,
                was_pity=draw.outcome.is_pity_triggered,
            )
        )

    # Persisting

    async def _persist(self) -> tuple[int, int]:
        if self.cost.mythic_scrolls:
            self.mythic.use_scrolls(self.cost.mythic_scrolls)
        self.db.add(self.mythic)
        if self.pity is not None:
            self.db.add(self.pity)
        if self.wishlist is not None:
            self.db.add(self.wishlist)

        # One credit per hero; the session doesn't autoflush, so crediting per
        # draw would stage duplicate fragment rows for a new hero
        for hero_id, amount in self._fragments.items():
            await self.players.credit_fragments(self.player_id, hero_id, amount)

        self._log_batch_events()

        rarity_counts = Counter(draw.outcome.rarity for draw in self.draws)
        await self.banners.record_pull_stats(
            self.banner.id,
            pulls=len(self.draws),
            legendary=rarity_counts[HeroRarity.LEGENDARY],
            epic=rarity_counts[HeroRarity.EPIC],
            mythic=rarity_counts[HeroRarity.MYTHIC],
        )

        # Last before commit: re-checks the balance and claims the player's version
        remaining = await self.players.debit_for_summon(
            self.player_id, version=self.version, gems=self.cost.gems, tickets=self.cost.tickets
        )

        try:
            await self.db.commit()
        except IntegrityError as e:
            msg = "同時有其他召喚正在進行，請稍後再試"
            raise PersistenceConflictError(msg) from e

        await self.db.refresh(self.player)
        return remaining

    def _log_batch_events(self) -> None:
        event_type = EventType.MYTHIC_SUMMON if self.banner.is_mythic else EventType.SUMMON
        self.db.add(
            EventLog(
                player_id=self.player_id,
                event_type=event_type,
                context={
                    "banner_id": self.banner.id,
                    "batch_id": self.batch_id,
                    "seed": self.seed,
                    "count": self.count,
                    "free": self.free,
                    "cost": self.cost.model_dump(),
                    "heroes": [draw.hero.id for draw in self.draws],
                    "rarities": [draw.outcome.rarity.value for draw in self.draws],
                },
            )
        )
        if self.scrolls_granted:
            self.db.add(
                EventLog(
                    player_id=self.player_id,
                    event_type=EventType.SCROLLS_EARNED,
                    context={
                        "amount": self.scrolls_granted,
                        "scrolls_available": self.mythic.scrolls_available,
                        "server_id": self.server_id,
                        "batch_id": self.batch_id,
                    },
                )
            )

    # Result

    def _pity_snapshot(self) -> PitySnapshot | None:
        if self.pity is None or self.tracker is None:
            return None
        return self.tracker.snapshot(self.pity)

    def _summary(self) -> PullBatchSummary:
        rarity_counts: dict[HeroRarity, int] = dict.fromkeys(HeroRarity, 0)
        for draw in self.draws:
            rarity_counts[draw.outcome.rarity] += 1
        return PullBatchSummary(
            rarity_counts=rarity_counts,
            new_heroes=[draw.hero.id for draw in self.draws if draw.is_new],
            total_fragments=sum(draw.fragments_gained for draw in self.draws),
            focus_heroes=[draw.hero.id for draw in self.draws if draw.is_focus],
            pity_triggered=sum(draw.outcome.is_pity_triggered for draw in self.draws),
        )

    def _build_result(self, remaining_gems: int, remaining_tickets: int) -> PullBatchResult:
        return PullBatchResult(
            batch_id=self.batch_id,
            seed=self.seed,
            banner_id=self.banner.id,
            pulls=[draw.to_result() for draw in self.draws],
            cost=self.cost,
            was_free=self.free,
            pity=self._pity_snapshot(),
            mythic=MythicStatus.from_state(self.mythic),
            scrolls_granted=self.scrolls_granted,
            scrolls_spent=self.cost.mythic_scrolls,
            remaining_gems=remaining_gems,
            remaining_tickets=remaining_tickets,
            summary=self._summary(),
        )
