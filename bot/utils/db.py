from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import new_session


def get_session() -> AsyncSession:
    """Session for one bot command; use as ``async with get_session() as session``."""
    return new_session()
