import datetime

import sqlmodel

from app.core.enums import Element, HeroRarity
from app.utils.misc import get_utc_now

from ._base import BaseModel

NORMAL_SCOPE = "normal"


def wishlist_scope(element: Element | None) -> str:
    """Regular banners share the normal wishlist; each element has its own."""
    return NORMAL_SCOPE if element is None else element.value


class Wishlist(BaseModel, table=True):
    """Legendary heroes a player wants, and the counter that eventually forces one of them."""

    __tablename__: str = "wishlists"
    __table_args__ = (
        sqlmodel.UniqueConstraint(
            "player_id", "server_id", "scope", name="uq_wishlists_player_server_scope"
        ),
    )

    id: int = sqlmodel.Field(primary_key=True, index=True, default=None)
    player_id: int = sqlmodel.Field(
        foreign_key="players.id", index=True, sa_type=sqlmodel.BigInteger
    )
    server_id: str = sqlmodel.Field(max_length=10, index=True)
    scope: str = sqlmodel.Field(default=NORMAL_SCOPE, max_length=16)
    """``normal`` or an element name"""

    hero_ids: list[str] = sqlmodel.Field(
        default_factory=list, sa_column=sqlmodel.Column(sqlmodel.JSON)
    )
    """Reassigned rather than mutated so the JSON column is flagged dirty."""
    pity_counter: int = sqlmodel.Field(default=0, ge=0)
    pity_threshold: int = sqlmodel.Field(default=100, ge=1)
    times_triggered: int = sqlmodel.Field(default=0, ge=0)
    last_triggered_at: datetime.datetime | None = sqlmodel.Field(
        default=None, sa_type=sqlmodel.DateTime(timezone=True)
    )

    @property
    def element(self) -> Element | None:
        return None if self.scope == NORMAL_SCOPE else Element(self.scope)

    def is_pity_due(self) -> bool:
        """Whether the next pull is forced to a Legendary by this wishlist."""
        return self.pity_counter + 1 >= self.pity_threshold

    def record(self, rarity: HeroRarity, *, triggered: bool = False) -> None:
        if rarity.at_least(HeroRarity.LEGENDARY):
            self.pity_counter = 0
        else:
            self.pity_counter += 1

        if triggered:
            self.times_triggered += 1
            self.last_triggered_at = get_utc_now()

    @property
    def pulls_until_pity(self) -> int:
        return max(0, self.pity_threshold - self.pity_counter)
