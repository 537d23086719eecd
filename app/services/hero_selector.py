import random
from collections.abc import Sequence
from dataclasses import dataclass

from app.core.enums import HeroRarity
from app.core.exceptions import ConfigurationError
from app.models.hero import Hero
from app.schemas.banner import FocusHero


@dataclass(frozen=True, slots=True)
class Selection:
    hero: Hero
    is_focus: bool


class HeroSelector:
    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def select(
        self,
        rarity: HeroRarity,
        pool: Sequence[Hero],
        focus_heroes: Sequence[FocusHero] = (),
        *,
        guarantee_focus: bool = False,
    ) -> Selection:
        """Resolve a rolled rarity into a concrete hero.

        Focus heroes of the rarity win with probability ``sum(focus_chance)``
        (capped at 1), weighted by their individual ``focus_chance``. Otherwise
        a non-focus hero of the rarity is picked uniformly.

        Args:
            rarity: The rolled rarity.
            pool: The banner's available heroes, any rarity.
            focus_heroes: The banner's focus configuration.
            guarantee_focus: Pick a ``guaranteed`` focus hero if one exists for the rarity.

        Raises:
            ConfigurationError: If the pool has no hero of ``rarity``.
        """
        candidates = [hero for hero in pool if hero.rarity == rarity]
        if not candidates:
            msg = f"卡池中沒有 {rarity} 稀有度的英雄"
            raise ConfigurationError(msg)

        by_id = {hero.id: hero for hero in candidates}
        focus = [f for f in focus_heroes if f.hero_id in by_id]
        if not focus:
            return Selection(self.rng.choice(candidates), is_focus=False)

        if guarantee_focus:
            guaranteed = [f for f in focus if f.guaranteed]
            if guaranteed:
                return Selection(by_id[guaranteed[0].hero_id], is_focus=True)

        total_chance = min(1.0, sum(f.focus_chance for f in focus))
        if total_chance > 0 and self.rng.random() < total_chance:
            chosen = self.rng.choices(focus, weights=[f.focus_chance for f in focus], k=1)[0]
            return Selection(by_id[chosen.hero_id], is_focus=True)

        focus_ids = {f.hero_id for f in focus}
        others = [hero for hero in candidates if hero.id not in focus_ids]
        if others:
            return Selection(self.rng.choice(others), is_focus=False)

        # Every hero of this rarity is a focus hero
        return Selection(by_id[self.rng.choice(focus).hero_id], is_focus=True)

    def select_from(
        self, heroes: Sequence[Hero], focus_heroes: Sequence[FocusHero] = ()
    ) -> Selection:
        """Uniform pick among explicit candidates, such as a player's wishlist."""
        hero = self.rng.choice(heroes)
        return Selection(hero, is_focus=any(f.hero_id == hero.id for f in focus_heroes))
