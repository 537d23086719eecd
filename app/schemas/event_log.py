from datetime import datetime

from pydantic import BaseModel, Field

from app.core.enums import EventType
from app.models.event_log import EventLog


class EventLogFilters(BaseModel):
    player_id: int | None = None
    player_name: str | None = None
    event_types: list[EventType] = Field(default_factory=list)
    since: datetime | None = None


class EventLogWithPlayer(BaseModel):
    id: int
    player_id: int
    player_name: str | None
    event_type: EventType
    context: dict
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, event_log: EventLog, player_name: str | None) -> "EventLogWithPlayer":
        return cls(
            id=event_log.id,
            player_id=event_log.player_id,
            player_name=player_name,
            event_type=event_log.event_type,
            context=event_log.context,
            created_at=event_log.created_at,
            updated_at=event_log.updated_at,
        )
