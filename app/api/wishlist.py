from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.core.enums import Element
from app.core.security import get_current_player
from app.models.hero import Hero
from app.models.player import Player
from app.schemas.common import APIResponse
from app.schemas.wishlist import WishlistAdd, WishlistStatus, WishlistUpdate
from app.services.wishlist import WishlistService

router = APIRouter(prefix="/wishlist", tags=["wishlist"])


@router.get("/")
async def get_wishlist(
    service: Annotated[WishlistService, Depends()],
    player: Annotated[Player, Depends(get_current_player)],
    element: Annotated[
        Element | None, Query(description="Elemental wishlist; omit for the normal one")
    ] = None,
) -> APIResponse[WishlistStatus]:
    status = await service.get_status(player.id, player.server_id, element)
    return APIResponse(data=status)


@router.get("/available")
async def get_available_heroes(
    service: Annotated[WishlistService, Depends()],
    _player: Annotated[Player, Depends(get_current_player)],
    element: Annotated[Element | None, Query()] = None,
) -> APIResponse[Sequence[Hero]]:
    heroes = await service.get_available_heroes(element)
    return APIResponse(data=heroes)


@router.put("/")
async def update_wishlist(
    data: WishlistUpdate,
    service: Annotated[WishlistService, Depends()],
    player: Annotated[Player, Depends(get_current_player)],
) -> APIResponse[WishlistStatus]:
    status = await service.update_wishlist(
        player.id, player.server_id, data.hero_ids, data.element
    )
    return APIResponse(data=status, message="Wishlist updated")


@router.post("/")
async def add_wishlist_hero(
    data: WishlistAdd,
    service: Annotated[WishlistService, Depends()],
    player: Annotated[Player, Depends(get_current_player)],
) -> APIResponse[WishlistStatus]:
    status = await service.add_hero(player.id, player.server_id, data.hero_id, data.element)
    return APIResponse(data=status, message="Hero added to wishlist")


@router.delete("/{hero_id}")
async def remove_wishlist_hero(
    hero_id: str,
    service: Annotated[WishlistService, Depends()],
    player: Annotated[Player, Depends(get_current_player)],
    element: Annotated[Element | None, Query()] = None,
) -> APIResponse[WishlistStatus]:
    status = await service.remove_hero(player.id, player.server_id, hero_id, element)
    return APIResponse(data=status, message="Hero removed from wishlist")
