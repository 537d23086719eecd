from dataclasses import dataclass

from app.core.config import settings
from app.core.enums import HeroRarity
from app.models.banner_pity import BannerPity
from app.schemas.banner import PityConfig
from app.schemas.summon import PitySnapshot
from app.utils.misc import get_utc_now


def pity_group_key(banner_id: str, pity_config: PityConfig) -> str:
    """Key under which a banner's pity counters are stored.

    Banners with ``shared_pity`` share one counter per group, every other
    banner keeps its own.
    """
    if pity_config.shared_pity:
        return pity_config.pity_group or settings.default_shared_pity_group
    return f"banner:{banner_id}"


@dataclass(frozen=True, slots=True)
class PityTracker:
    """Thresholds of one banner plus the counter transitions they drive.

    A threshold ``T`` guarantees the rarity on the T-th consecutive pull
    without it. A threshold of 0 disables that guarantee.
    """

    legendary_pity: int
    epic_pity: int = 0

    @classmethod
    def from_config(cls, pity_config: PityConfig) -> "PityTracker":
        legendary = pity_config.legendary_pity
        epic = pity_config.epic_pity
        return cls(
            legendary_pity=settings.default_legendary_pity if legendary is None else legendary,
            epic_pity=settings.default_epic_pity if epic is None else epic,
        )

    def is_legendary_due(self, state: BannerPity) -> bool:
        return self.legendary_pity > 0 and state.pulls_since_legendary + 1 >= self.legendary_pity

    def is_epic_due(self, state: BannerPity) -> bool:
        return self.epic_pity > 0 and state.pulls_since_epic + 1 >= self.epic_pity

    def pulls_until_legendary(self, state: BannerPity) -> int:
        return max(0, self.legendary_pity - state.pulls_since_legendary)

    def pulls_until_epic(self, state: BannerPity) -> int:
        if self.epic_pity <= 0:
            return 0
        return max(0, self.epic_pity - state.pulls_since_epic)

    @staticmethod
    def record(state: BannerPity, rarity: HeroRarity) -> None:
        """Apply one drawn rarity to the counters."""
        if rarity.at_least(HeroRarity.LEGENDARY):
            state.pulls_since_legendary = 0
            state.has_received_legendary = True
        else:
            state.pulls_since_legendary += 1

        if rarity.at_least(HeroRarity.EPIC):
            state.pulls_since_epic = 0
        else:
            state.pulls_since_epic += 1

        state.total_pulls += 1
        state.last_pull_at = get_utc_now()

    def snapshot(self, state: BannerPity) -> PitySnapshot:
        return PitySnapshot(
            pity_group=state.pity_group,
            pulls_since_legendary=state.pulls_since_legendary,
            pulls_since_epic=state.pulls_since_epic,
            legendary_pity=self.legendary_pity,
            epic_pity=self.epic_pity,
            legendary_pity_in=self.pulls_until_legendary(state),
            epic_pity_in=self.pulls_until_epic(state),
            total_pulls=state.total_pulls,
            has_received_legendary=state.has_received_legendary,
        )
