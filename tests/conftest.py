import os
from collections.abc import AsyncGenerator
from pathlib import Path

os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

import app.models  # noqa: E402, F401
from app.models.hero import Hero  # noqa: E402
from factories import HEROES, SessionFactory  # noqa: E402


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    # File-backed so several sessions see each other's commits
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'summon.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> SessionFactory:
    def factory() -> AsyncSession:
        return AsyncSession(engine, autoflush=False, expire_on_commit=False)

    return factory


@pytest.fixture
async def session(session_factory: SessionFactory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def heroes(session: AsyncSession) -> dict[str, Hero]:
    created = {
        hero_id: Hero(id=hero_id, name=hero_id.replace("_", " ").title(), rarity=rarity)
        for hero_id, rarity in HEROES
    }
    session.add_all(created.values())
    await session.commit()
    return created
