import pytest

from app.core.enums import HeroRarity
from app.core.exceptions import ConfigurationError
from app.models.hero import Hero
from app.services.ownership import OwnershipResolver

FRAGMENTS = {
    HeroRarity.COMMON: 5,
    HeroRarity.RARE: 10,
    HeroRarity.EPIC: 25,
    HeroRarity.LEGENDARY: 50,
    HeroRarity.MYTHIC: 100,
}


def test_first_copy_is_new_and_recorded() -> None:
    resolver = OwnershipResolver(FRAGMENTS)
    owned: set[str] = set()

    ownership = resolver.resolve(Hero(id="archer", name="Archer", rarity=HeroRarity.COMMON), owned)

    assert ownership.is_new
    assert ownership.fragments_gained == 0
    assert owned == {"archer"}


@pytest.mark.parametrize(("rarity", "fragments"), list(FRAGMENTS.items()))
def test_duplicate_converts_to_fragments(rarity: HeroRarity, fragments: int) -> None:
    resolver = OwnershipResolver(FRAGMENTS)
    hero = Hero(id="dupe", name="Dupe", rarity=rarity)

    ownership = resolver.resolve(hero, {"dupe"})

    assert not ownership.is_new
    assert ownership.fragments_gained == fragments


def test_second_copy_in_same_batch_is_duplicate() -> None:
    resolver = OwnershipResolver(FRAGMENTS)
    owned: set[str] = set()
    hero = Hero(id="paladin", name="Paladin", rarity=HeroRarity.EPIC)

    first = resolver.resolve(hero, owned)
    second = resolver.resolve(hero, owned)

    assert first.is_new
    assert not second.is_new
    assert second.fragments_gained == 25


def test_missing_fragment_value_is_configuration_error() -> None:
    resolver = OwnershipResolver({HeroRarity.COMMON: 5})

    with pytest.raises(ConfigurationError):
        resolver.fragments_for(HeroRarity.MYTHIC)
