from datetime import datetime

from pydantic import BaseModel

from app.core.config import settings
from app.models.mythic_pity import MythicPity


class MythicStatus(BaseModel):
    server_id: str
    fused_pull_counter: int
    pulls_per_scroll: int
    pulls_until_next_scroll: int
    scrolls_earned: int
    scrolls_used: int
    scrolls_available: int
    mythic_pulls_since_last: int
    mythic_pity_threshold: int
    pulls_until_mythic_pity: int
    total_mythic_pulls: int
    mythic_heroes_obtained: list[str]
    last_scroll_earned_at: datetime | None = None
    last_mythic_pulled_at: datetime | None = None

    @classmethod
    def from_state(cls, state: MythicPity) -> "MythicStatus":
        per_scroll = settings.fused_pulls_per_scroll
        return cls(
            server_id=state.server_id,
            fused_pull_counter=state.fused_pull_counter,
            pulls_per_scroll=per_scroll,
            pulls_until_next_scroll=per_scroll - state.fused_pull_counter,
            scrolls_earned=state.scrolls_earned,
            scrolls_used=state.scrolls_used,
            scrolls_available=state.scrolls_available,
            mythic_pulls_since_last=state.mythic_pulls_since_last,
            mythic_pity_threshold=state.mythic_pity_threshold,
            pulls_until_mythic_pity=state.pulls_until_mythic_pity,
            total_mythic_pulls=state.total_mythic_pulls,
            mythic_heroes_obtained=list(state.mythic_heroes_obtained or []),
            last_scroll_earned_at=state.last_scroll_earned_at,
            last_mythic_pulled_at=state.last_mythic_pulled_at,
        )
