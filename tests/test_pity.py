import random

from app.core.enums import HeroRarity
from app.models.banner_pity import BannerPity
from app.schemas.banner import BannerRates, PityConfig
from app.services.pity import PityTracker, pity_group_key
from app.services.rarity_roller import RarityRoller


def make_state(**counters: int) -> BannerPity:
    return BannerPity(player_id=1, pity_group="banner:standard", **counters)


def test_legendary_due_on_threshold_pull() -> None:
    tracker = PityTracker(legendary_pity=90)

    assert not tracker.is_legendary_due(make_state(pulls_since_legendary=88))
    assert tracker.is_legendary_due(make_state(pulls_since_legendary=89))


def test_zero_threshold_disables_guarantee() -> None:
    tracker = PityTracker(legendary_pity=0, epic_pity=0)
    state = make_state(pulls_since_legendary=500, pulls_since_epic=500)

    assert not tracker.is_legendary_due(state)
    assert not tracker.is_epic_due(state)
    assert tracker.pulls_until_epic(state) == 0


def test_record_resets_on_legendary() -> None:
    state = make_state(pulls_since_legendary=40, pulls_since_epic=3)

    PityTracker.record(state, HeroRarity.LEGENDARY)

    assert state.pulls_since_legendary == 0
    assert state.pulls_since_epic == 0
    assert state.has_received_legendary
    assert state.total_pulls == 1
    assert state.last_pull_at is not None


def test_record_epic_resets_only_epic_counter() -> None:
    state = make_state(pulls_since_legendary=40, pulls_since_epic=3)

    PityTracker.record(state, HeroRarity.EPIC)

    assert state.pulls_since_legendary == 41
    assert state.pulls_since_epic == 0
    assert not state.has_received_legendary


def test_record_common_increments_both() -> None:
    state = make_state(pulls_since_legendary=5, pulls_since_epic=2)

    PityTracker.record(state, HeroRarity.COMMON)

    assert (state.pulls_since_legendary, state.pulls_since_epic) == (6, 3)


def test_no_run_exceeds_threshold() -> None:
    tracker = PityTracker(legendary_pity=10, epic_pity=4)
    roller = RarityRoller(random.Random(31))
    rates = BannerRates(common=80, rare=19, epic=0.5, legendary=0.5)
    state = make_state()

    since_legendary = since_epic = 0
    for _ in range(2_000):
        outcome = roller.roll(
            rates,
            force_legendary=tracker.is_legendary_due(state),
            force_epic=tracker.is_epic_due(state),
        )
        PityTracker.record(state, outcome.rarity)

        rarity = outcome.rarity
        since_legendary = 0 if rarity.at_least(HeroRarity.LEGENDARY) else since_legendary + 1
        since_epic = 0 if rarity.at_least(HeroRarity.EPIC) else since_epic + 1
        assert since_legendary < 10
        assert since_epic < 4

    assert state.total_pulls == 2_000


def test_pulls_until_counts_down() -> None:
    tracker = PityTracker(legendary_pity=90, epic_pity=10)
    state = make_state(pulls_since_legendary=85, pulls_since_epic=9)

    assert tracker.pulls_until_legendary(state) == 5
    assert tracker.pulls_until_epic(state) == 1


def test_from_config_uses_defaults() -> None:
    tracker = PityTracker.from_config(PityConfig())

    assert tracker.legendary_pity == 90
    assert tracker.epic_pity == 0


def test_from_config_keeps_explicit_values() -> None:
    tracker = PityTracker.from_config(PityConfig(legendary_pity=50, epic_pity=10))

    assert tracker == PityTracker(legendary_pity=50, epic_pity=10)


def test_snapshot_reports_counters() -> None:
    tracker = PityTracker(legendary_pity=90)
    state = make_state(pulls_since_legendary=12, total_pulls=30)

    snapshot = tracker.snapshot(state)

    assert snapshot.pity_group == "banner:standard"
    assert snapshot.legendary_pity_in == 78
    assert snapshot.epic_pity_in == 0
    assert snapshot.total_pulls == 30


def test_pity_group_per_banner() -> None:
    assert pity_group_key("limited_1", PityConfig()) == "banner:limited_1"


def test_pity_group_shared() -> None:
    assert pity_group_key("limited_1", PityConfig(shared_pity=True)) == "standard+limited"
    assert (
        pity_group_key("limited_1", PityConfig(shared_pity=True, pity_group="collab"))
        == "collab"
    )
