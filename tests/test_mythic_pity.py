import random

import pytest

from app.core.enums import Currency, HeroRarity
from app.core.exceptions import InsufficientResourcesError
from app.models.mythic_pity import MythicPity


def make_ledger(**fields: int) -> MythicPity:
    return MythicPity(player_id=1, server_id="S1", mythic_heroes_obtained=[], **fields)


def assert_balanced(ledger: MythicPity) -> None:
    assert ledger.scrolls_available == ledger.scrolls_earned - ledger.scrolls_used
    assert ledger.scrolls_available >= 0


def test_eightieth_fused_pull_grants_scroll() -> None:
    ledger = make_ledger(fused_pull_counter=79)

    granted = ledger.add_fused_pulls(1, pulls_per_scroll=80)

    assert granted == 1
    assert ledger.fused_pull_counter == 0
    assert ledger.scrolls_available == 1
    assert ledger.last_scroll_earned_at is not None


def test_ten_pull_across_boundary_keeps_remainder() -> None:
    ledger = make_ledger(fused_pull_counter=75)

    granted = ledger.add_fused_pulls(10, pulls_per_scroll=80)

    assert granted == 1
    assert ledger.fused_pull_counter == 5


def test_scroll_balance_stays_consistent() -> None:
    rng = random.Random(17)
    ledger = make_ledger()

    for _ in range(500):
        if rng.random() < 0.7:
            ledger.add_fused_pulls(rng.choice((1, 10)), pulls_per_scroll=80)
        elif ledger.scrolls_available:
            ledger.use_scrolls(1)
        assert_balanced(ledger)
        assert ledger.fused_pull_counter < 80


def test_use_scrolls_without_balance_changes_nothing() -> None:
    ledger = make_ledger(scrolls_earned=3, scrolls_available=3)

    with pytest.raises(InsufficientResourcesError) as exc_info:
        ledger.use_scrolls(10)

    assert exc_info.value.currency == Currency.MYTHIC_SCROLLS
    assert exc_info.value.to_dict() == {
        "kind": "InsufficientResourcesError",
        "currency": "mythic_scrolls",
        "required": 10,
        "available": 3,
    }
    assert ledger.scrolls_available == 3
    assert ledger.scrolls_used == 0


def test_mythic_pity_due_on_threshold_pull() -> None:
    assert not make_ledger(mythic_pulls_since_last=33).is_mythic_pity_due()
    assert make_ledger(mythic_pulls_since_last=34).is_mythic_pity_due()


def test_record_mythic_pull_resets_and_remembers_hero() -> None:
    ledger = make_ledger(mythic_pulls_since_last=20)

    ledger.record_mythic_pull(HeroRarity.LEGENDARY, "storm_queen")
    assert ledger.mythic_pulls_since_last == 21

    ledger.record_mythic_pull(HeroRarity.MYTHIC, "sun_god")

    assert ledger.mythic_pulls_since_last == 0
    assert ledger.total_mythic_pulls == 2
    assert ledger.mythic_heroes_obtained == ["sun_god"]
    assert ledger.last_mythic_pulled_at is not None
    assert ledger.pulls_until_mythic_pity == 35
