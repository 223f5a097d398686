import pytest
from datetime import datetime
from typing import AsyncGenerator
from zoneinfo import ZoneInfo
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from main import app
from app.auth.jwt_handler import create_access_token
from app.core.clock import Clock, get_clock
from app.core.config import settings
from app.core.database import get_async_session
from app.db.base import Base
from app.models.shared.enums import UserRole

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite://"

ADMIN_UID = "admin-uid"
STAFF_UID = "staff-uid"

# At the cafe, and roughly 1.1 km north of it
AT_CAFE = {"latitude": settings.CAFE_LATITUDE, "longitude": settings.CAFE_LONGITUDE}
AWAY_FROM_CAFE = {"latitude": settings.CAFE_LATITUDE + 0.01, "longitude": settings.CAFE_LONGITUDE}


class FrozenClock(Clock):
    """Clock whose 'now' is set by the test (naive values are Colombo wall time)."""

    def __init__(self, current: datetime):
        super().__init__(ZoneInfo("Asia/Colombo"), now_fn=lambda: self.current)
        self.current = current


@pytest.fixture
async def session_maker():
    """Fresh in-memory database per test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2024, 5, 1, 9, 0))


@pytest.fixture
async def client(session_maker, clock) -> AsyncGenerator[AsyncClient, None]:
    """Create test client"""
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def bearer(uid: str, role: UserRole) -> dict:
    return {"Authorization": f"Bearer {create_access_token(uid, role)}"}


@pytest.fixture
def admin_headers() -> dict:
    return bearer(ADMIN_UID, UserRole.ADMIN)


@pytest.fixture
def staff_headers() -> dict:
    return bearer(STAFF_UID, UserRole.STAFF)


@pytest.fixture
async def staff(client: AsyncClient, admin_headers: dict) -> dict:
    """A registered staff member behind ``staff_headers``"""
    response = await client.post(
        "/api/v1/hr/staff/",
        json={"user_uid": STAFF_UID, "full_name": "Nimal Perera", "phone": "0771234567"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    return response.json()


@pytest.fixture
async def salaried_staff(client: AsyncClient, admin_headers: dict, staff: dict) -> dict:
    response = await client.put(
        f"/api/v1/hr/salary/{staff['id']}",
        json={"monthly_salary": "30000"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    return staff
