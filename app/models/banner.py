import datetime

import sqlmodel

from app.core.enums import BannerType
from app.schemas.banner import (
    BannerCosts,
    BannerRates,
    ElementalConfig,
    FocusHero,
    HeroPoolConfig,
    PityConfig,
)
from app.utils.misc import ensure_utc, get_utc_now

from ._base import BaseModel

ALL_SERVERS = "ALL"


class Banner(BaseModel, table=True):
    """A summon pool. Nested configuration is stored as JSON and parsed on read."""

    __tablename__: str = "banners"

    id: str = sqlmodel.Field(primary_key=True, index=True, max_length=64)
    name: str = sqlmodel.Field(max_length=100)
    type: BannerType = sqlmodel.Field(index=True)
    description: str = ""

    start_time: datetime.datetime = sqlmodel.Field(sa_type=sqlmodel.DateTime(timezone=True))
    end_time: datetime.datetime = sqlmodel.Field(sa_type=sqlmodel.DateTime(timezone=True))
    allowed_servers: list[str] = sqlmodel.Field(
        default_factory=lambda: [ALL_SERVERS], sa_column=sqlmodel.Column(sqlmodel.JSON)
    )
    is_active: bool = True
    is_visible: bool = True
    sort_order: int = 0

    hero_pool: dict = sqlmodel.Field(default_factory=dict, sa_column=sqlmodel.Column(sqlmodel.JSON))
    focus_heroes: list[dict] = sqlmodel.Field(
        default_factory=list, sa_column=sqlmodel.Column(sqlmodel.JSON)
    )
    rates: dict = sqlmodel.Field(sa_column=sqlmodel.Column(sqlmodel.JSON))
    costs: dict = sqlmodel.Field(default_factory=dict, sa_column=sqlmodel.Column(sqlmodel.JSON))
    pity_config: dict = sqlmodel.Field(
        default_factory=dict, sa_column=sqlmodel.Column(sqlmodel.JSON)
    )
    elemental_config: dict | None = sqlmodel.Field(
        default=None, sa_column=sqlmodel.Column(sqlmodel.JSON, nullable=True)
    )

    # Aggregate stats, only ever incremented
    total_pulls: int = sqlmodel.Field(default=0, ge=0)
    legendary_count: int = sqlmodel.Field(default=0, ge=0)
    epic_count: int = sqlmodel.Field(default=0, ge=0)
    mythic_count: int = sqlmodel.Field(default=0, ge=0)

    def get_rates(self) -> BannerRates:
        return BannerRates.model_validate(self.rates)

    def get_hero_pool(self) -> HeroPoolConfig:
        return HeroPoolConfig.model_validate(self.hero_pool or {})

    def get_focus_heroes(self) -> list[FocusHero]:
        return [FocusHero.model_validate(focus) for focus in self.focus_heroes or []]

    def get_costs(self) -> BannerCosts:
        return BannerCosts.model_validate(self.costs or {})

    def get_pity_config(self) -> PityConfig:
        return PityConfig.model_validate(self.pity_config or {})

    def get_elemental_config(self) -> ElementalConfig | None:
        if not self.elemental_config:
            return None
        return ElementalConfig.model_validate(self.elemental_config)

    @property
    def is_mythic(self) -> bool:
        return self.type == BannerType.MYTHIC

    def is_available_on(self, server_id: str) -> bool:
        return ALL_SERVERS in self.allowed_servers or server_id in self.allowed_servers

    def is_currently_active(self, now: datetime.datetime | None = None) -> bool:
        now = now or get_utc_now()
        return (
            self.is_active
            and self.is_visible
            and ensure_utc(self.start_time) <= now <= ensure_utc(self.end_time)
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"
