from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.core.enums import Currency, Element, HeroRarity


class _PlayerCurrencyMixin(BaseModel):
    currency: Currency = Currency.GEMS

    @field_validator("currency")
    @classmethod
    def reject_scrolls(cls, value: Currency) -> Currency:
        # Mythic scrolls are only earned by pulling
        if value == Currency.MYTHIC_SCROLLS:
            msg = "mythic scrolls cannot be adjusted manually"
            raise ValueError(msg)
        return value


class PlayerUpdate(BaseModel):
    name: str | None = None
    server_id: str | None = Field(default=None, max_length=10)
    is_admin: bool | None = None


class CurrencyAdjustment(_PlayerCurrencyMixin):
    """Schema for adjusting player currency (increase or decrease)."""

    amount: int = Field(gt=0, description="Amount to adjust (must be positive)")
    reason: str = Field(min_length=1, max_length=255, description="Reason for adjustment")


class CurrencySet(_PlayerCurrencyMixin):
    """Schema for setting player currency to a specific amount."""

    amount: int = Field(ge=0, description="New currency amount (must be non-negative)")
    reason: str = Field(min_length=1, max_length=255, description="Reason for setting currency")


class RosterEntry(BaseModel):
    hero_id: str
    hero_name: str
    rarity: HeroRarity
    element: Element | None
    level: int
    stars: int
    fragments: int
    obtained_at: datetime


class FragmentBalance(BaseModel):
    hero_id: str
    hero_name: str
    rarity: HeroRarity
    quantity: int


class HeroStatistics(BaseModel):
    """Schema for player roster statistics."""

    total_owned_heroes: int = Field(description="Number of distinct heroes in the roster")
    heroes_per_rarity: dict[HeroRarity, int] = Field(
        description="Number of owned heroes per rarity level"
    )
    total_fragments: int = Field(description="Fragments held across all heroes")
