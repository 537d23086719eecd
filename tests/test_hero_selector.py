import random
from collections import Counter

import pytest

from app.core.enums import HeroRarity
from app.core.exceptions import ConfigurationError
from app.models.hero import Hero
from app.schemas.banner import FocusHero
from app.services.hero_selector import HeroSelector

POOL = [
    Hero(id="paladin", name="Paladin", rarity=HeroRarity.EPIC),
    Hero(id="sorceress", name="Sorceress", rarity=HeroRarity.EPIC),
    Hero(id="dragon_knight", name="Dragon Knight", rarity=HeroRarity.LEGENDARY),
    Hero(id="storm_queen", name="Storm Queen", rarity=HeroRarity.LEGENDARY),
    Hero(id="lich_king", name="Lich King", rarity=HeroRarity.LEGENDARY),
]


def test_missing_rarity_is_a_configuration_error() -> None:
    selector = HeroSelector(random.Random(1))

    with pytest.raises(ConfigurationError) as exc_info:
        selector.select(HeroRarity.COMMON, POOL)

    assert exc_info.value.status_code == 500


def test_selects_only_heroes_of_rarity() -> None:
    selector = HeroSelector(random.Random(1))

    picked = {selector.select(HeroRarity.EPIC, POOL).hero.id for _ in range(200)}

    assert picked == {"paladin", "sorceress"}


def test_uniform_without_focus() -> None:
    selector = HeroSelector(random.Random(11))
    draws = 30_000

    counts = Counter(selector.select(HeroRarity.LEGENDARY, POOL).hero.id for _ in range(draws))

    for hero_id in ("dragon_knight", "storm_queen", "lich_king"):
        assert abs(counts[hero_id] / draws - 1 / 3) < 0.02


def test_full_focus_chance_always_picks_focus() -> None:
    selector = HeroSelector(random.Random(2))
    focus = [FocusHero(hero_id="storm_queen", focus_chance=1.0)]

    selections = [selector.select(HeroRarity.LEGENDARY, POOL, focus) for _ in range(300)]

    assert {selection.hero.id for selection in selections} == {"storm_queen"}
    assert all(selection.is_focus for selection in selections)


def test_zero_focus_chance_never_picks_focus() -> None:
    selector = HeroSelector(random.Random(2))
    focus = [FocusHero(hero_id="storm_queen", focus_chance=0.0)]

    selections = [selector.select(HeroRarity.LEGENDARY, POOL, focus) for _ in range(300)]

    assert "storm_queen" not in {selection.hero.id for selection in selections}
    assert not any(selection.is_focus for selection in selections)


def test_focus_chance_sets_focus_share() -> None:
    selector = HeroSelector(random.Random(8))
    focus = [FocusHero(hero_id="storm_queen", focus_chance=0.5)]
    draws = 20_000

    hits = sum(
        selector.select(HeroRarity.LEGENDARY, POOL, focus).hero.id == "storm_queen"
        for _ in range(draws)
    )

    assert abs(hits / draws - 0.5) < 0.02


def test_focus_heroes_weighted_by_chance() -> None:
    selector = HeroSelector(random.Random(13))
    focus = [
        FocusHero(hero_id="storm_queen", focus_chance=0.6),
        FocusHero(hero_id="lich_king", focus_chance=0.2),
    ]
    draws = 40_000

    counts = Counter(
        selector.select(HeroRarity.LEGENDARY, POOL, focus).hero.id for _ in range(draws)
    )

    # 80% go to focus heroes, split 3:1
    assert abs(counts["storm_queen"] / draws - 0.6) < 0.02
    assert abs(counts["lich_king"] / draws - 0.2) < 0.02
    assert abs(counts["dragon_knight"] / draws - 0.2) < 0.02


def test_all_heroes_focus_falls_back_to_focus() -> None:
    selector = HeroSelector(random.Random(4))
    focus = [
        FocusHero(hero_id="paladin", focus_chance=0.1),
        FocusHero(hero_id="sorceress", focus_chance=0.1),
    ]

    selections = [selector.select(HeroRarity.EPIC, POOL, focus) for _ in range(300)]

    assert {selection.hero.id for selection in selections} == {"paladin", "sorceress"}
    assert all(selection.is_focus for selection in selections)


def test_guaranteed_focus_wins_when_requested() -> None:
    selector = HeroSelector(random.Random(6))
    focus = [
        FocusHero(hero_id="storm_queen", focus_chance=0.0),
        FocusHero(hero_id="lich_king", focus_chance=0.0, guaranteed=True),
    ]

    selection = selector.select(HeroRarity.LEGENDARY, POOL, focus, guarantee_focus=True)

    assert selection.hero.id == "lich_king"
    assert selection.is_focus


def test_guaranteed_focus_ignored_unless_requested() -> None:
    selector = HeroSelector(random.Random(6))
    focus = [FocusHero(hero_id="lich_king", focus_chance=0.0, guaranteed=True)]

    picked = {selector.select(HeroRarity.LEGENDARY, POOL, focus).hero.id for _ in range(200)}

    assert "lich_king" not in picked


def test_focus_of_other_rarity_does_not_apply() -> None:
    selector = HeroSelector(random.Random(9))
    focus = [FocusHero(hero_id="storm_queen", focus_chance=1.0)]

    selections = [selector.select(HeroRarity.EPIC, POOL, focus) for _ in range(100)]

    assert {selection.hero.id for selection in selections} <= {"paladin", "sorceress"}
    assert not any(selection.is_focus for selection in selections)
