from collections.abc import Sequence
from typing import Annotated

from fastapi import Depends
from sqlmodel import col, desc, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import get_db
from app.models.event_log import EventLog
from app.models.player import Player
from app.schemas.common import PaginationData
from app.schemas.event_log import EventLogFilters, EventLogWithPlayer


class EventLogService:
    """Read side of the event log. Events are only ever written by the services that emit them."""

    def __init__(self, db: Annotated[AsyncSession, Depends(get_db)]) -> None:
        self.db = db

    async def get_event_logs(
        self, *, page: int, page_size: int, filters: EventLogFilters
    ) -> tuple[Sequence[EventLogWithPlayer], PaginationData]:
        offset = (page - 1) * page_size

        query = select(EventLog, Player.name).join(
            Player, col(EventLog.player_id) == col(Player.id)
        )

        conditions = []
        if filters.player_id is not None:
            conditions.append(col(EventLog.player_id) == filters.player_id)
        if filters.player_name is not None:
            # Case-insensitive partial match
            conditions.append(col(Player.name).ilike(f"%{filters.player_name}%"))
        if filters.event_types:
            conditions.append(col(EventLog.event_type).in_(filters.event_types))
        if filters.since is not None:
            conditions.append(col(EventLog.created_at) >= filters.since)
        if conditions:
            query = query.where(*conditions)

        total_items_result = await self.db.exec(query)
        total_items = len(total_items_result.all())

        result = await self.db.exec(
            query.order_by(desc(col(EventLog.created_at)), desc(col(EventLog.id)))
            .offset(offset)
            .limit(page_size)
        )
        event_logs = [
            EventLogWithPlayer.from_row(event_log, player_name)
            for event_log, player_name in result.all()
        ]

        pagination = PaginationData.for_page(page, page_size, total_items)

        return event_logs, pagination

    async def get_event_log(self, event_log_id: int) -> EventLogWithPlayer | None:
        result = await self.db.exec(
            select(EventLog, Player.name)
            .join(Player, col(EventLog.player_id) == col(Player.id))
            .where(EventLog.id == event_log_id)
        )
        row = result.first()
        if not row:
            return None

        event_log, player_name = row
        return EventLogWithPlayer.from_row(event_log, player_name)

    async def get_batch_events(self, batch_id: str) -> list[EventLog]:
        """Every event emitted by one summon batch, oldest first."""
        result = await self.db.exec(
            select(EventLog)
            .where(col(EventLog.context)["batch_id"].as_string() == batch_id)
            .order_by(col(EventLog.created_at), col(EventLog.id))
        )
        return list(result.all())
