from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings

engine = create_async_engine(settings.db_url, echo=settings.db_echo, pool_pre_ping=True)


def new_session() -> AsyncSession:
    """A session that neither autoflushes nor expires on commit.

    Summon batches stage every write and flush once at commit, and their
    results are read after the commit.
    """
    return AsyncSession(engine, autoflush=False, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with new_session() as session:
        yield session
