from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.core.security import get_current_player
from app.models.player import Player
from app.schemas.common import APIResponse, PaginatedResponse
from app.schemas.summon import (
    PitySnapshot,
    PullBatchResult,
    SummonHistoryEntry,
    SummonRequest,
    SummonStats,
)
from app.services.summon import SummonService

router = APIRouter(prefix="/summon", tags=["summon"])


@router.post("/pull")
async def pull(
    request: SummonRequest,
    service: Annotated[SummonService, Depends()],
    player: Annotated[Player, Depends(get_current_player)],
) -> APIResponse[PullBatchResult]:
    result = await service.pull(
        player.id, request.server_id or player.server_id, request.banner_id, request.count
    )
    return APIResponse(data=result, message=f"Summoned {len(result.pulls)} heroes")


@router.get("/pity/{banner_id}")
async def get_pity(
    banner_id: str,
    service: Annotated[SummonService, Depends()],
    player: Annotated[Player, Depends(get_current_player)],
) -> APIResponse[PitySnapshot]:
    pity = await service.get_pity_status(player.id, banner_id)
    return APIResponse(data=pity)


@router.get("/history")
async def get_summon_history(
    service: Annotated[SummonService, Depends()],
    player: Annotated[Player, Depends(get_current_player)],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1)] = 10,
    banner_id: Annotated[str | None, Query(description="Filter by banner ID")] = None,
) -> PaginatedResponse[Sequence[SummonHistoryEntry]]:
    entries, pagination = await service.get_summon_history(
        player.id, page=page, page_size=page_size, banner_id=banner_id
    )
    return PaginatedResponse(data=entries, pagination=pagination)


@router.get("/stats")
async def get_summon_stats(
    service: Annotated[SummonService, Depends()],
    player: Annotated[Player, Depends(get_current_player)],
) -> APIResponse[SummonStats]:
    stats = await service.get_summon_stats(player.id)
    return APIResponse(data=stats)
