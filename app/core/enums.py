from enum import StrEnum


class HeroRarity(StrEnum):
    COMMON = "Common"
    RARE = "Rare"
    EPIC = "Epic"
    LEGENDARY = "Legendary"
    MYTHIC = "Mythic"

    @property
    def rank(self) -> int:
        return RARITY_ORDER.index(self)

    def at_least(self, other: "HeroRarity") -> bool:
        return self.rank >= other.rank


RARITY_ORDER: tuple[HeroRarity, ...] = (
    HeroRarity.COMMON,
    HeroRarity.RARE,
    HeroRarity.EPIC,
    HeroRarity.LEGENDARY,
    HeroRarity.MYTHIC,
)
"""Most common first. The standard rate table only covers the first four."""

STANDARD_RARITIES: tuple[HeroRarity, ...] = RARITY_ORDER[:4]


class BannerType(StrEnum):
    STANDARD = "Standard"
    LIMITED = "Limited"
    BEGINNER = "Beginner"
    MYTHIC = "Mythic"
    ELEMENTAL = "Elemental"


class Element(StrEnum):
    FIRE = "Fire"
    WATER = "Water"
    WIND = "Wind"
    ELECTRIC = "Electric"
    LIGHT = "Light"
    SHADOW = "Shadow"


class Currency(StrEnum):
    GEMS = "gems"
    TICKETS = "tickets"
    MYTHIC_SCROLLS = "mythic_scrolls"


class SummonState(StrEnum):
    VALIDATING = "validating"
    ROLLING = "rolling"
    RESOLVING = "resolving"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    REJECTED = "rejected"
    ROLLED_BACK = "rolled_back"


class EventType(StrEnum):
    SUMMON = "summon"
    MYTHIC_SUMMON = "mythic_summon"
    NEW_HERO = "new_hero"
    SCROLLS_EARNED = "scrolls_earned"
    WISHLIST_UPDATED = "wishlist_updated"

    ADMIN_INCREASE_CURRENCY = "admin_increase_currency"
    ADMIN_DECREASE_CURRENCY = "admin_decrease_currency"
    ADMIN_SET_CURRENCY = "admin_set_currency"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


class HeroSortField(StrEnum):
    ID = "id"
    NAME = "name"
    RARITY = "rarity"
    CREATED_AT = "created_at"
