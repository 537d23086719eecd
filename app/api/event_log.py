from collections.abc import Sequence
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.enums import EventType
from app.core.security import require_admin
from app.models.event_log import EventLog
from app.models.player import Player
from app.schemas.common import APIResponse, PaginatedResponse
from app.schemas.event_log import EventLogFilters, EventLogWithPlayer
from app.services.event_log import EventLogService

router = APIRouter(prefix="/event-logs", tags=["event-logs"])


@router.get("/")
async def get_event_logs(  # noqa: PLR0913, PLR0917
    service: Annotated[EventLogService, Depends()],
    _admin: Annotated[Player, Depends(require_admin)],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1)] = 10,
    player_id: Annotated[int | None, Query(description="Filter by player ID")] = None,
    player_name: Annotated[
        str | None, Query(description="Filter by player name (case-insensitive partial match)")
    ] = None,
    event_type: Annotated[
        list[EventType] | None, Query(description="Filter by one or more event types")
    ] = None,
    since: Annotated[datetime | None, Query(description="Only events at or after")] = None,
) -> PaginatedResponse[Sequence[EventLogWithPlayer]]:
    filters = EventLogFilters(
        player_id=player_id,
        player_name=player_name,
        event_types=event_type or [],
        since=since,
    )
    event_logs, pagination = await service.get_event_logs(
        page=page, page_size=page_size, filters=filters
    )
    return PaginatedResponse(data=event_logs, pagination=pagination)


@router.get("/{event_log_id}")
async def get_event_log(
    event_log_id: int,
    service: Annotated[EventLogService, Depends()],
    _admin: Annotated[Player, Depends(require_admin)],
) -> APIResponse[EventLogWithPlayer]:
    event_log = await service.get_event_log(event_log_id)
    if not event_log:
        raise HTTPException(status_code=404, detail="找不到事件記錄")
    return APIResponse(data=event_log)


@router.get("/batch/{batch_id}")
async def get_batch_events(
    batch_id: str,
    service: Annotated[EventLogService, Depends()],
    _admin: Annotated[Player, Depends(require_admin)],
) -> APIResponse[Sequence[EventLog]]:
    events = await service.get_batch_events(batch_id)
    return APIResponse(data=events)
