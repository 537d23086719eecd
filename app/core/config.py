from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

from app.core.enums import HeroRarity


def _default_fragments() -> dict[HeroRarity, int]:
    return {
        HeroRarity.COMMON: 5,
        HeroRarity.RARE: 10,
        HeroRarity.EPIC: 25,
        HeroRarity.LEGENDARY: 50,
        HeroRarity.MYTHIC: 100,
    }


class Config(BaseSettings):
    db_url: str
    db_echo: bool = False
    env: Literal["prod", "dev"] = "prod"

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 3011
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Discord
    discord_bot_token: str | None = None
    sync_commands: bool = True
    """Sync slash commands on startup"""

    # JWT & token settings
    # IMPORTANT: set in environment for production
    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"
    access_token_ttl_seconds: int = 15 * 60  # 15 minutes

    # Pity
    default_legendary_pity: int = 90
    default_epic_pity: int = 0  # 0 disables the epic guarantee
    default_shared_pity_group: str = "standard+limited"

    # Mythic economy
    fused_pulls_per_scroll: int = Field(default=80, ge=1)
    mythic_pity_threshold: int = Field(default=35, ge=1, le=100)
    mythic_scroll_cost_single: int = 1
    mythic_scroll_cost_multi: int = 10

    # Wishlist
    wishlist_pity_threshold: int = Field(default=100, ge=1)
    wishlist_max_heroes: int = Field(default=4, ge=1)

    # Duplicate conversion
    fragments_by_rarity: dict[HeroRarity, int] = Field(default_factory=_default_fragments)

    # Banner validation
    rate_sum_tolerance: float = 0.1

    # Same-player write conflicts
    summon_conflict_retries: int = Field(default=3, ge=1)

    @property
    def is_dev(self) -> bool:
        return self.env == "dev"


load_dotenv()
settings = Config()  # pyright: ignore[reportCallIssue]
