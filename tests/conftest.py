import os
import uuid

import pytest
from httpx import ASGITransport, AsyncClient

# IMPORTANT:
# Set env vars BEFORE importing hangtime settings/main (pydantic settings load at import time)
os.environ["ENV"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./hangtime_test.db")
os.environ.setdefault("JWT_SECRET", "dev-test-secret")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:3000")

from hangtime.main import app as fastapi_app  # noqa: E402
from hangtime.api.deps import get_db  # noqa: E402
from hangtime.core.security import create_access_token  # noqa: E402
from hangtime.db.base_class import Base  # noqa: E402
from hangtime.db.session import engine, AsyncSessionLocal  # noqa: E402
from hangtime.models.user import User  # noqa: E402


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session")
async def _test_schema(anyio_backend):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(_test_schema):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def client(db_session):
    """HTTP client whose requests all run on the test's session."""

    async def _override_get_db():
        yield db_session

    fastapi_app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    fastapi_app.dependency_overrides.pop(get_db, None)


# --- Small helpers ---

def _unique(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}"


@pytest.fixture
def unique_str():
    return _unique


@pytest.fixture
def auth_headers():
    def _headers(user_id) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(str(user_id))}"}

    return _headers


@pytest.fixture
def onboarded_user(unique_str, auth_headers):
    async def _create(client: AsyncClient, *, display_name: str | None = None, username: str | None = None):
        user_id = uuid.uuid4()
        username = username or unique_str("user")
        display_name = display_name or username.upper()
        headers = auth_headers(user_id)
        r = await client.post(
            "/onboarding/profile",
            json={
                "email": f"{username}@example.com",
                "display_name": display_name,
                "username": username,
            },
            headers=headers,
        )
        assert r.status_code == 201, r.text
        return {
            "id": str(user_id),
            "uuid": user_id,
            "username": username,
            "display_name": display_name,
            "headers": headers,
        }

    return _create


@pytest.fixture
def make_user(db_session, unique_str):
    """Insert a user row directly, bypassing the HTTP layer."""

    async def _create() -> User:
        username = unique_str("u")
        user = User(
            id=uuid.uuid4(),
            email=f"{username}@example.com",
            username=username,
            display_name=username,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _create


@pytest.fixture
def befriend():
    async def _befriend(client: AsyncClient, a: dict, b: dict) -> str:
        r = await client.post("/friends/requests", json={"recipient_ids": [b["id"]]}, headers=a["headers"])
        assert r.status_code == 201, r.text
        link_id = r.json()["results"][0]["link_id"]
        r = await client.post(f"/friends/requests/{link_id}/accept", headers=b["headers"])
        assert r.status_code == 200, r.text
        return link_id

    return _befriend
