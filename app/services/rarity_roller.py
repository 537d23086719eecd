import random
from dataclasses import dataclass

from app.core.enums import HeroRarity
from app.schemas.banner import BannerRates

# Rarest first so pity-adjacent tiers are checked first
ROLL_ORDER: tuple[HeroRarity, ...] = (
    HeroRarity.LEGENDARY,
    HeroRarity.EPIC,
    HeroRarity.RARE,
    HeroRarity.COMMON,
)


@dataclass(frozen=True, slots=True)
class RollOutcome:
    rarity: HeroRarity
    is_pity_triggered: bool = False


class RarityRoller:
    """Draws one rarity per pull from a banner's rate table."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def draw(self, rates: BannerRates) -> HeroRarity:
        """Pick the rarity whose cumulative interval contains ``x ~ U(0, 100)``."""
        x = self.rng.random() * 100
        cumulative = 0.0
        fallback = HeroRarity.COMMON
        for rarity in ROLL_ORDER:
            rate = rates.for_rarity(rarity)
            if rate <= 0:
                continue
            cumulative += rate
            fallback = rarity
            if x < cumulative:
                return rarity
        # Only reachable when the table sums slightly under 100
        return fallback

    def roll(
        self, rates: BannerRates, *, force_legendary: bool = False, force_epic: bool = False
    ) -> RollOutcome:
        if force_legendary:
            return RollOutcome(HeroRarity.LEGENDARY, is_pity_triggered=True)

        rarity = self.draw(rates)
        if force_epic and not rarity.at_least(HeroRarity.EPIC):
            return RollOutcome(HeroRarity.EPIC, is_pity_triggered=True)
        return RollOutcome(rarity)

    def roll_mythic(self, rates: BannerRates, *, force_mythic: bool = False) -> RollOutcome:
        """Two-outcome roll used by Mythic banners, independent of the standard table."""
        if force_mythic:
            return RollOutcome(HeroRarity.MYTHIC, is_pity_triggered=True)

        if self.rng.random() * 100 < rates.mythic:
            return RollOutcome(HeroRarity.MYTHIC)
        return RollOutcome(HeroRarity.LEGENDARY)
