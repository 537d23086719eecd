from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.enums import Element, HeroRarity, HeroSortField, SortOrder
from app.core.security import require_admin
from app.models.hero import Hero
from app.models.player import Player
from app.schemas.common import APIResponse, PaginatedResponse
from app.schemas.hero import HeroCreate, HeroListParams, HeroUpdate
from app.services.hero import HeroService

router = APIRouter(prefix="/heroes", tags=["heroes"])


@router.get("/")
async def get_heroes(  # noqa: PLR0913, PLR0917
    service: Annotated[HeroService, Depends()],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1)] = 10,
    search_name: Annotated[
        str | None, Query(description="Search heroes by name (partial match)")
    ] = None,
    rarity: Annotated[HeroRarity | None, Query(description="Filter by rarity")] = None,
    element: Annotated[Element | None, Query(description="Filter by element")] = None,
    sort_by: Annotated[HeroSortField, Query(description="Field to sort by")] = HeroSortField.ID,
    sort_order: Annotated[SortOrder, Query(description="Sort order")] = SortOrder.ASC,
) -> PaginatedResponse[Sequence[Hero]]:
    params = HeroListParams(
        search_name=search_name,
        rarity=rarity,
        element=element,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    heroes, pagination = await service.get_heroes(page=page, page_size=page_size, params=params)
    return PaginatedResponse(data=heroes, pagination=pagination)


@router.get("/{hero_id}")
async def get_hero(hero_id: str, service: Annotated[HeroService, Depends()]) -> APIResponse[Hero]:
    hero = await service.get_hero(hero_id)
    if not hero:
        raise HTTPException(status_code=404, detail="找不到英雄")
    return APIResponse(data=hero)


@router.post("/")
async def create_hero(
    hero: HeroCreate,
    service: Annotated[HeroService, Depends()],
    _admin: Annotated[Player, Depends(require_admin)],
) -> APIResponse[Hero]:
    created_hero = await service.create_hero(hero)
    return APIResponse(data=created_hero, message="Hero created successfully")


@router.put("/{hero_id}")
async def update_hero(
    hero_id: str,
    hero: HeroUpdate,
    service: Annotated[HeroService, Depends()],
    _admin: Annotated[Player, Depends(require_admin)],
) -> APIResponse[Hero]:
    updated_hero = await service.update_hero(hero_id, hero)
    if not updated_hero:
        raise HTTPException(status_code=404, detail="找不到英雄")
    return APIResponse(data=updated_hero, message="Hero updated successfully")


@router.delete("/{hero_id}")
async def delete_hero(
    hero_id: str,
    service: Annotated[HeroService, Depends()],
    _admin: Annotated[Player, Depends(require_admin)],
) -> APIResponse[None]:
    deleted = await service.delete_hero(hero_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="找不到英雄")
    return APIResponse(message="Hero deleted successfully")
