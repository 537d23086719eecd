from app.models.banner import Banner
from app.models.banner_pity import BannerPity
from app.models.event_log import EventLog
from app.models.hero import Hero
from app.models.hero_fragment import HeroFragment
from app.models.mythic_pity import MythicPity
from app.models.player import Player
from app.models.player_hero import PlayerHero
from app.models.summon import Summon
from app.models.wishlist import Wishlist

__all__ = (
    "Banner",
    "BannerPity",
    "EventLog",
    "Hero",
    "HeroFragment",
    "MythicPity",
    "Player",
    "PlayerHero",
    "Summon",
    "Wishlist",
)
