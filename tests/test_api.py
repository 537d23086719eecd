from collections.abc import AsyncGenerator

import httpx
import pytest
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import get_db
from app.core.security import create_access_token
from app.main import app
from app.schemas.banner import BannerCreate
from factories import SessionFactory, banner_data, create_banner, create_player

pytestmark = pytest.mark.usefixtures("heroes")

ADMIN_ID = 9001


@pytest.fixture
async def client(session_factory: SessionFactory) -> AsyncGenerator[httpx.AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def auth(player_id: int, *, is_admin: bool = False) -> dict[str, str]:
    token = create_access_token(sub=str(player_id), is_admin=is_admin)
    return {"Authorization": f"Bearer {token}"}


async def test_list_active_banners(client: httpx.AsyncClient, session: AsyncSession) -> None:
    await create_banner(session, sort_order=1)
    await create_banner(session, "s2_only", allowed_servers=["S2"])

    response = await client.get("/api/banners/", params={"server_id": "S1"})

    assert response.status_code == 200
    assert [banner["id"] for banner in response.json()["data"]] == ["standard"]


async def test_banner_rates(client: httpx.AsyncClient, session: AsyncSession) -> None:
    await create_banner(session)

    response = await client.get("/api/banners/standard/rates")

    data = response.json()["data"]
    assert data["rates"]["legendary"] == 5
    assert data["legendary_pity"] == 90
    assert data["guarantees"] == ["90 抽內必定獲得傳說英雄"]


async def test_unknown_banner_is_404(client: httpx.AsyncClient) -> None:
    response = await client.get("/api/banners/missing")

    assert response.status_code == 404
    assert response.json()["status"] == "error"


async def test_pull(client: httpx.AsyncClient, session: AsyncSession) -> None:
    await create_player(session)
    await create_banner(session)

    response = await client.post(
        "/api/summon/pull", json={"banner_id": "standard", "count": 10}, headers=auth(1001)
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert len(data["pulls"]) == 10
    assert data["remaining_gems"] == 4000
    assert data["pity"]["total_pulls"] == 10
    assert data["mythic"]["fused_pull_counter"] == 10


async def test_pull_requires_auth(client: httpx.AsyncClient) -> None:
    response = await client.post("/api/summon/pull", json={"banner_id": "standard"})

    assert response.status_code == 401


async def test_pull_insufficient_gems(client: httpx.AsyncClient, session: AsyncSession) -> None:
    await create_player(session, gems=0)
    await create_banner(session)

    response = await client.post(
        "/api/summon/pull", json={"banner_id": "standard"}, headers=auth(1001)
    )

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "error"
    assert body["data"] == {
        "kind": "InsufficientResourcesError",
        "currency": "gems",
        "required": 100,
        "available": 0,
    }


async def test_pull_invalid_count(client: httpx.AsyncClient, session: AsyncSession) -> None:
    await create_player(session)
    await create_banner(session)

    response = await client.post(
        "/api/summon/pull", json={"banner_id": "standard", "count": 3}, headers=auth(1001)
    )

    assert response.status_code == 400
    assert response.json()["data"]["kind"] == "InvalidRequestError"


async def test_pull_broken_banner_is_server_error(
    client: httpx.AsyncClient, session: AsyncSession
) -> None:
    await create_player(session)
    await create_banner(session, rates={"common": 10})

    response = await client.post(
        "/api/summon/pull", json={"banner_id": "standard"}, headers=auth(1001)
    )

    assert response.status_code == 500
    assert response.json()["data"]["kind"] == "ConfigurationError"


async def test_pity_and_history(client: httpx.AsyncClient, session: AsyncSession) -> None:
    await create_player(session)
    await create_banner(session, rates={"common": 100})
    await client.post("/api/summon/pull", json={"banner_id": "standard"}, headers=auth(1001))

    pity = await client.get("/api/summon/pity/standard", headers=auth(1001))
    history = await client.get("/api/summon/history", headers=auth(1001))

    assert pity.json()["data"]["legendary_pity_in"] == 89
    assert history.json()["pagination"]["total_items"] == 1


async def test_mythic_status(client: httpx.AsyncClient, session: AsyncSession) -> None:
    await create_player(session)

    status = await client.get("/api/mythic/status", headers=auth(1001))
    history = await client.get("/api/mythic/history", headers=auth(1001))

    assert status.json()["data"]["pulls_per_scroll"] == 80
    assert status.json()["data"]["scrolls_available"] == 0
    assert history.json()["pagination"]["total_items"] == 0


async def test_create_banner_requires_admin(
    client: httpx.AsyncClient, session: AsyncSession
) -> None:
    await create_player(session)
    payload = BannerCreate(**banner_data()).model_dump(mode="json")

    response = await client.post("/api/banners/", json=payload, headers=auth(1001))

    assert response.status_code == 403


async def test_admin_creates_banner(client: httpx.AsyncClient, session: AsyncSession) -> None:
    await create_player(session, id=ADMIN_ID, is_admin=True)
    headers = auth(ADMIN_ID, is_admin=True)

    bad = BannerCreate(**banner_data(rates={"common": 99})).model_dump(mode="json")
    rejected = await client.post("/api/banners/", json=bad, headers=headers)
    assert rejected.status_code == 400
    assert rejected.json()["data"]["kind"] == "ConfigurationError"

    good = BannerCreate(**banner_data()).model_dump(mode="json")
    created = await client.post("/api/banners/", json=good, headers=headers)
    assert created.status_code == 200
    assert created.json()["data"]["id"] == "standard"

    listed = await client.get("/api/banners/all", headers=headers)
    assert listed.json()["pagination"]["total_items"] == 1


async def test_summon_stats(client: httpx.AsyncClient, session: AsyncSession) -> None:
    await create_player(session)
    await create_banner(session, rates={"common": 100})
    await client.post(
        "/api/summon/pull", json={"banner_id": "standard", "count": 10}, headers=auth(1001)
    )

    response = await client.get("/api/summon/stats", headers=auth(1001))

    data = response.json()["data"]
    assert data["total_summons"] == 10
    assert data["total_sessions"] == 1
    assert data["rarity_distribution"]["Common"] == 10
    assert data["favorite_rarity"] == "Common"


async def test_wishlist(client: httpx.AsyncClient, session: AsyncSession) -> None:
    await create_player(session)

    updated = await client.put(
        "/api/wishlist/", json={"hero_ids": ["lich_king"]}, headers=auth(1001)
    )
    rejected = await client.post("/api/wishlist/", json={"hero_id": "paladin"}, headers=auth(1001))
    status = await client.get("/api/wishlist/", headers=auth(1001))

    assert updated.status_code == 200
    assert rejected.status_code == 400
    assert rejected.json()["data"]["kind"] == "InvalidRequestError"
    data = status.json()["data"]
    assert [hero["hero_id"] for hero in data["heroes"]] == ["lich_king"]
    assert data["pity_threshold"] == 100
