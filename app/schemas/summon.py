from datetime import datetime

from pydantic import BaseModel, Field

from app.core.enums import HeroRarity
from app.models.summon import Summon
from app.schemas.banner import PullCost
from app.schemas.mythic import MythicStatus


class SummonRequest(BaseModel):
    banner_id: str
    server_id: str | None = Field(default=None, description="Defaults to the player's server")
    count: int = Field(default=1, description="Number of pulls (1 or 10)")


class PullResult(BaseModel):
    """Outcome of a single draw."""

    hero_id: str
    hero_name: str
    rarity: HeroRarity
    is_new: bool
    fragments_gained: int = 0
    is_focus_hero: bool = False
    is_pity_triggered: bool = False
    is_wishlist_pity: bool = False
    """Forced to a Legendary by the player's wishlist counter"""


class PitySnapshot(BaseModel):
    pity_group: str
    pulls_since_legendary: int
    pulls_since_epic: int
    legendary_pity: int
    epic_pity: int
    legendary_pity_in: int
    """Pulls left until the guaranteed Legendary"""
    epic_pity_in: int
    """0 when the banner has no epic guarantee"""
    total_pulls: int
    has_received_legendary: bool


class PullBatchSummary(BaseModel):
    rarity_counts: dict[HeroRarity, int]
    new_heroes: list[str]
    total_fragments: int
    focus_heroes: list[str]
    pity_triggered: int


class PullBatchResult(BaseModel):
    batch_id: str
    seed: int
    banner_id: str
    pulls: list[PullResult]
    cost: PullCost
    was_free: bool
    pity: PitySnapshot | None
    """``None`` on Mythic banners, which only use mythic pity"""
    mythic: MythicStatus
    scrolls_granted: int
    scrolls_spent: int
    remaining_gems: int
    remaining_tickets: int
    summary: PullBatchSummary


class SummonHistoryEntry(BaseModel):
    id: int
    batch_id: str
    banner_id: str
    banner_name: str
    hero_id: str
    hero_name: str
    rarity: HeroRarity
    pull_number: int
    is_new: bool
    fragments_gained: int
    is_focus: bool
    was_pity: bool
    created_at: datetime

    @classmethod
    def from_row(cls, summon: Summon, hero_name: str, banner_name: str) -> "SummonHistoryEntry":
        return cls(
            id=summon.id,
            batch_id=summon.batch_id,
            banner_id=summon.banner_id,
            banner_name=banner_name,
            hero_id=summon.hero_id,
            hero_name=hero_name,
            rarity=summon.rarity,
            pull_number=summon.pull_number,
            is_new=summon.is_new,
            fragments_gained=summon.fragments_gained,
            is_focus=summon.is_focus,
            was_pity=summon.was_pity,
            created_at=summon.created_at,
        )


class SummonStats(BaseModel):
    """Lifetime summon statistics of a player, counted per draw."""

    total_summons: int
    total_sessions: int
    """Pull requests, a ten pull counts once"""
    rarity_distribution: dict[HeroRarity, int]
    rarity_rates: dict[HeroRarity, float]
    """Share of draws per rarity, in percent"""
    pity_hits: int
    focus_hits: int
    new_heroes: int
    pulls_last_7_days: int
    favorite_rarity: HeroRarity | None = None
    last_pull_at: datetime | None = None
