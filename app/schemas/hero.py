from pydantic import BaseModel, Field

from app.core.enums import Element, HeroRarity, HeroSortField, SortOrder


class HeroListParams(BaseModel):
    """Query parameters for listing heroes."""

    search_name: str | None = None
    rarity: HeroRarity | None = None
    element: Element | None = None
    sort_by: HeroSortField = HeroSortField.ID
    sort_order: SortOrder = SortOrder.ASC


class HeroCreate(BaseModel):
    id: str = Field(max_length=64, pattern=r"^[a-zA-Z0-9_-]+$")
    name: str = Field(max_length=100)
    rarity: HeroRarity
    element: Element | None = None
    role: str | None = None


class HeroUpdate(BaseModel):
    name: str | None = None
    rarity: HeroRarity | None = None
    element: Element | None = None
    role: str | None = None
