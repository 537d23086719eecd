import sqlmodel
from pydantic import field_serializer

from ._base import BaseModel


class Player(BaseModel, table=True):
    __tablename__: str = "players"

    id: int = sqlmodel.Field(
        primary_key=True,
        index=True,
        sa_type=sqlmodel.BigInteger,
        sa_column_kwargs={"autoincrement": False},
    )
    """Discord user ID"""
    name: str | None = sqlmodel.Field(default=None, nullable=True)
    """Discord username"""
    is_admin: bool = False
    server_id: str = sqlmodel.Field(default="S1", max_length=10, index=True)
    gems: int = sqlmodel.Field(default=0, ge=0)
    tickets: int = sqlmodel.Field(default=0, ge=0)
    summon_version: int = sqlmodel.Field(default=0, ge=0)
    """Bumped by every committed summon batch; used for optimistic locking."""

    @field_serializer("id")
    def serialize_id(self, value: int) -> str:
        """Serialize ID as string for JavaScript compatibility with large Discord IDs."""
        return str(value)
