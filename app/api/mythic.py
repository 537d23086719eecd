from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.core.security import get_current_player
from app.models.player import Player
from app.schemas.common import APIResponse, PaginatedResponse
from app.schemas.mythic import MythicStatus
from app.schemas.summon import SummonHistoryEntry
from app.services.mythic import MythicService

router = APIRouter(prefix="/mythic", tags=["mythic"])


@router.get("/status")
async def get_mythic_status(
    service: Annotated[MythicService, Depends()],
    player: Annotated[Player, Depends(get_current_player)],
    server_id: Annotated[str | None, Query(max_length=10)] = None,
) -> APIResponse[MythicStatus]:
    status = await service.get_mythic_status(player.id, server_id or player.server_id)
    return APIResponse(data=status)


@router.get("/history")
async def get_mythic_history(
    service: Annotated[MythicService, Depends()],
    player: Annotated[Player, Depends(get_current_player)],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1)] = 10,
) -> PaginatedResponse[Sequence[SummonHistoryEntry]]:
    entries, pagination = await service.get_mythic_history(
        player.id, page=page, page_size=page_size
    )
    return PaginatedResponse(data=entries, pagination=pagination)
