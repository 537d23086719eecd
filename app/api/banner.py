from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.enums import BannerType
from app.core.security import require_admin
from app.models.banner import Banner
from app.models.hero import Hero
from app.models.player import Player
from app.schemas.banner import BannerCreate, BannerRatesInfo, BannerUpdate
from app.schemas.common import APIResponse, PaginatedResponse
from app.services.banner import BannerService

router = APIRouter(prefix="/banners", tags=["banners"])


@router.get("/")
async def get_active_banners(
    service: Annotated[BannerService, Depends()],
    server_id: Annotated[str, Query(max_length=10, description="Server to list banners for")],
) -> APIResponse[Sequence[Banner]]:
    """Banners currently open on a server, in display order."""
    banners = await service.get_active_banners(server_id)
    return APIResponse(data=banners)


@router.get("/all")
async def get_banners(
    service: Annotated[BannerService, Depends()],
    _admin: Annotated[Player, Depends(require_admin)],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1)] = 10,
    banner_type: Annotated[BannerType | None, Query(description="Filter by banner type")] = None,
) -> PaginatedResponse[Sequence[Banner]]:
    banners, pagination = await service.get_banners(
        page=page, page_size=page_size, banner_type=banner_type
    )
    return PaginatedResponse(data=banners, pagination=pagination)


@router.get("/{banner_id}")
async def get_banner(
    banner_id: str, service: Annotated[BannerService, Depends()]
) -> APIResponse[Banner]:
    banner = await service.get_banner(banner_id)
    if not banner:
        raise HTTPException(status_code=404, detail="找不到卡池")
    return APIResponse(data=banner)


@router.get("/{banner_id}/rates")
async def get_banner_rates(
    banner_id: str, service: Annotated[BannerService, Depends()]
) -> APIResponse[BannerRatesInfo]:
    banner = await service.get_banner(banner_id)
    if not banner:
        raise HTTPException(status_code=404, detail="找不到卡池")
    return APIResponse(data=service.get_rates_info(banner))


@router.get("/{banner_id}/heroes")
async def get_banner_heroes(
    banner_id: str, service: Annotated[BannerService, Depends()]
) -> APIResponse[Sequence[Hero]]:
    banner = await service.get_banner(banner_id)
    if not banner:
        raise HTTPException(status_code=404, detail="找不到卡池")
    heroes = await service.get_available_heroes(banner)
    return APIResponse(data=heroes)


@router.post("/")
async def create_banner(
    banner: BannerCreate,
    service: Annotated[BannerService, Depends()],
    _admin: Annotated[Player, Depends(require_admin)],
) -> APIResponse[Banner]:
    created_banner = await service.create_banner(banner)
    return APIResponse(data=created_banner, message="Banner created successfully")


@router.put("/{banner_id}")
async def update_banner(
    banner_id: str,
    banner: BannerUpdate,
    service: Annotated[BannerService, Depends()],
    _admin: Annotated[Player, Depends(require_admin)],
) -> APIResponse[Banner]:
    updated_banner = await service.update_banner(banner_id, banner)
    if not updated_banner:
        raise HTTPException(status_code=404, detail="找不到卡池")
    return APIResponse(data=updated_banner, message="Banner updated successfully")


@router.delete("/{banner_id}")
async def delete_banner(
    banner_id: str,
    service: Annotated[BannerService, Depends()],
    _admin: Annotated[Player, Depends(require_admin)],
) -> APIResponse[None]:
    deleted = await service.delete_banner(banner_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="找不到卡池")
    return APIResponse(message="Banner deleted successfully")
