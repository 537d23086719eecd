from datetime import datetime

from pydantic import BaseModel, Field

from app.core.enums import BannerType, Element, HeroRarity, STANDARD_RARITIES


class BannerRates(BaseModel):
    """Drop rates in percent.

    On non-Mythic banners common + rare + epic + legendary must add up to 100.
    ``mythic`` is a separate probability only read on Mythic banners.
    """

    common: float = Field(default=0.0, ge=0.0, le=100.0)
    rare: float = Field(default=0.0, ge=0.0, le=100.0)
    epic: float = Field(default=0.0, ge=0.0, le=100.0)
    legendary: float = Field(default=0.0, ge=0.0, le=100.0)
    mythic: float = Field(default=0.0, ge=0.0, le=100.0)

    def for_rarity(self, rarity: HeroRarity) -> float:
        return getattr(self, rarity.value.lower())

    @property
    def standard_total(self) -> float:
        return sum(self.for_rarity(rarity) for rarity in STANDARD_RARITIES)


class FocusHero(BaseModel):
    hero_id: str
    focus_chance: float = Field(default=0.5, ge=0.0, le=1.0)
    """Probability that a pull of this hero's rarity lands on a focus hero."""
    guaranteed: bool = False
    """Selected on the player's first Legendary in the pity group."""


class HeroPoolConfig(BaseModel):
    include_all: bool = True
    specific_heroes: list[str] = Field(default_factory=list)
    excluded_heroes: list[str] = Field(default_factory=list)
    rarity_filters: list[HeroRarity] = Field(default_factory=list)


class PityConfig(BaseModel):
    legendary_pity: int | None = Field(default=None, ge=1, le=200)
    """Falls back to ``settings.default_legendary_pity``."""
    epic_pity: int | None = Field(default=None, ge=0, le=50)
    """Falls back to ``settings.default_epic_pity``; 0 disables it."""
    shared_pity: bool = False
    pity_group: str | None = Field(default=None, max_length=64)
    """Group key for shared pity; defaults to ``settings.default_shared_pity_group``."""


class PullCost(BaseModel):
    gems: int = Field(default=0, ge=0)
    tickets: int = Field(default=0, ge=0)
    mythic_scrolls: int = Field(default=0, ge=0)

    @property
    def is_free(self) -> bool:
        return not (self.gems or self.tickets or self.mythic_scrolls)


class BannerCosts(BaseModel):
    single_pull: PullCost = Field(default_factory=PullCost)
    multi_pull: PullCost = Field(default_factory=PullCost)
    first_pull_discount: PullCost | None = None


class ElementalConfig(BaseModel):
    element: Element
    rotation_days: list[str] = Field(default_factory=list)


class BannerCreate(BaseModel):
    id: str = Field(max_length=64, pattern=r"^[a-zA-Z0-9_-]+$")
    name: str = Field(max_length=100)
    type: BannerType
    description: str = Field(default="", max_length=500)
    start_time: datetime
    end_time: datetime
    allowed_servers: list[str] = Field(default_factory=lambda: ["ALL"])
    is_active: bool = True
    is_visible: bool = True
    sort_order: int = 0

    hero_pool: HeroPoolConfig = Field(default_factory=HeroPoolConfig)
    focus_heroes: list[FocusHero] = Field(default_factory=list)
    rates: BannerRates
    costs: BannerCosts = Field(default_factory=BannerCosts)
    pity_config: PityConfig = Field(default_factory=PityConfig)
    elemental_config: ElementalConfig | None = None


class BannerUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    allowed_servers: list[str] | None = None
    is_active: bool | None = None
    is_visible: bool | None = None
    sort_order: int | None = None

    hero_pool: HeroPoolConfig | None = None
    focus_heroes: list[FocusHero] | None = None
    rates: BannerRates | None = None
    costs: BannerCosts | None = None
    pity_config: PityConfig | None = None
    elemental_config: ElementalConfig | None = None


class BannerRatesInfo(BaseModel):
    """Public odds disclosure for a banner."""

    banner_id: str
    name: str
    rates: BannerRates
    legendary_pity: int
    epic_pity: int
    shared_pity: bool
    focus_heroes: list[FocusHero]
    guarantees: list[str]
