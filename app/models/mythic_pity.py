import datetime

import sqlmodel

from app.core.enums import Currency, HeroRarity
from app.core.exceptions import InsufficientResourcesError
from app.utils.misc import get_utc_now

from ._base import BaseModel


class MythicPity(BaseModel, table=True):
    """Fused pull counter, mythic scroll balance and mythic pity of one player on one server."""

    __tablename__: str = "mythic_pity"
    __table_args__ = (
        sqlmodel.UniqueConstraint("player_id", "server_id", name="uq_mythic_pity_player_server"),
        sqlmodel.CheckConstraint(
            "scrolls_available = scrolls_earned - scrolls_used", name="scroll_balance_consistent"
        ),
        sqlmodel.CheckConstraint("scrolls_available >= 0", name="scroll_balance_non_negative"),
    )

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    player_id: int = sqlmodel.Field(
        foreign_key="players.id", index=True, sa_type=sqlmodel.BigInteger
    )
    server_id: str = sqlmodel.Field(max_length=10, index=True)

    fused_pull_counter: int = sqlmodel.Field(default=0, ge=0)
    """Standard/limited pulls not yet converted into a scroll"""
    scrolls_earned: int = sqlmodel.Field(default=0, ge=0)
    scrolls_used: int = sqlmodel.Field(default=0, ge=0)
    scrolls_available: int = sqlmodel.Field(default=0, ge=0)

    mythic_pulls_since_last: int = sqlmodel.Field(default=0, ge=0)
    mythic_pity_threshold: int = sqlmodel.Field(default=35, ge=1, le=100)
    total_mythic_pulls: int = sqlmodel.Field(default=0, ge=0)

    last_scroll_earned_at: datetime.datetime | None = sqlmodel.Field(
        default=None, sa_type=sqlmodel.DateTime(timezone=True)
    )
    last_mythic_pulled_at: datetime.datetime | None = sqlmodel.Field(
        default=None, sa_type=sqlmodel.DateTime(timezone=True)
    )
    mythic_heroes_obtained: list[str] = sqlmodel.Field(
        default_factory=list, sa_column=sqlmodel.Column(sqlmodel.JSON)
    )
    """Append-only; reassigned rather than mutated so the JSON column is flagged dirty."""

    def add_fused_pulls(self, count: int, pulls_per_scroll: int) -> int:
        """Count ``count`` regular pulls and convert full blocks into scrolls.

        Returns the number of scrolls granted.
        """
        self.fused_pull_counter += count
        scrolls_to_grant = self.fused_pull_counter // pulls_per_scroll
        if scrolls_to_grant > 0:
            self.earn_scrolls(scrolls_to_grant)
            self.fused_pull_counter %= pulls_per_scroll
        return scrolls_to_grant

    def earn_scrolls(self, count: int) -> None:
        self.scrolls_earned += count
        self.scrolls_available += count
        self.last_scroll_earned_at = get_utc_now()

    def use_scrolls(self, count: int) -> None:
        if self.scrolls_available < count:
            raise InsufficientResourcesError(
                Currency.MYTHIC_SCROLLS, required=count, available=self.scrolls_available
            )
        self.scrolls_used += count
        self.scrolls_available -= count

    def is_mythic_pity_due(self) -> bool:
        """Whether the next mythic-banner pull is the guaranteed one."""
        return self.mythic_pulls_since_last + 1 >= self.mythic_pity_threshold

    def record_mythic_pull(self, rarity: HeroRarity, hero_id: str) -> None:
        self.total_mythic_pulls += 1
        if rarity == HeroRarity.MYTHIC:
            self.mythic_pulls_since_last = 0
            self.last_mythic_pulled_at = get_utc_now()
            self.mythic_heroes_obtained = [*self.mythic_heroes_obtained, hero_id]
        else:
            self.mythic_pulls_since_last += 1

    @property
    def pulls_until_mythic_pity(self) -> int:
        return max(0, self.mythic_pity_threshold - self.mythic_pulls_since_last)
