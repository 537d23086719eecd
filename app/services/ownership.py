from collections.abc import Mapping
from dataclasses import dataclass

from app.core.enums import HeroRarity
from app.core.exceptions import ConfigurationError
from app.models.hero import Hero


@dataclass(frozen=True, slots=True)
class Ownership:
    is_new: bool
    fragments_gained: int = 0


class OwnershipResolver:
    """Decides between a new roster entry and a duplicate converted to fragments."""

    def __init__(self, fragments_by_rarity: Mapping[HeroRarity, int]) -> None:
        self.fragments_by_rarity = fragments_by_rarity

    def fragments_for(self, rarity: HeroRarity) -> int:
        try:
            return self.fragments_by_rarity[rarity]
        except KeyError:
            msg = f"未設定 {rarity} 稀有度的碎片數量"
            raise ConfigurationError(msg) from None

    def resolve(self, hero: Hero, owned: set[str]) -> Ownership:
        """Resolve a drawn hero against ``owned`` and record it there.

        A second copy drawn later in the same batch is therefore a duplicate.
        """
        if hero.id in owned:
            return Ownership(is_new=False, fragments_gained=self.fragments_for(hero.rarity))

        owned.add(hero.id)
        return Ownership(is_new=True)
