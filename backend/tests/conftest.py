"""
Pytest fixtures for test database, client, authentication and listings.

An in-memory SQLite database (aiosqlite) stands in for PostgreSQL; tables
are created and dropped around every test for isolation. Redis is off.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REDIS_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "test"

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from wayfare.core.security import create_access_token
from wayfare.db.base import Base
from wayfare.db.session import get_db, get_optional_db
from wayfare.infrastructure.sql_store import SqlAlchemyResourceStore
from wayfare.main import app
from wayfare.models import Accommodation, Event, Flight, TransportOption

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

USER_ID = "user-alice"
OTHER_USER_ID = "user-bob"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def store(db_session: AsyncSession) -> SqlAlchemyResourceStore:
    return SqlAlchemyResourceStore(db_session)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependencies with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_optional_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    """Authorization headers with a Bearer token for USER_ID."""
    return {"Authorization": f"Bearer {create_access_token(data={'sub': USER_ID})}"}


@pytest.fixture
def other_auth_headers() -> dict:
    return {"Authorization": f"Bearer {create_access_token(data={'sub': OTHER_USER_ID})}"}


async def _persist(session: AsyncSession, obj):
    session.add(obj)
    await session.commit()
    await session.refresh(obj)
    return obj


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession) -> Event:
    """Event with 100 spots and two ticket tiers."""
    start = datetime.now(timezone.utc) + timedelta(days=30)
    return await _persist(db_session, Event(
        title="Test Concert",
        description="A test event",
        category="music",
        start_date=start,
        end_date=start + timedelta(hours=4),
        location="Test Venue",
        city="Lagos",
        country="Nigeria",
        capacity=100,
        available_spots=100,
        ticket_types=[{"type": "regular", "price": 50}, {"type": "vip", "price": 120}],
        currency="USD",
    ))


@pytest_asyncio.fixture
async def single_spot_event(db_session: AsyncSession) -> Event:
    start = datetime.now(timezone.utc) + timedelta(days=10)
    return await _persist(db_session, Event(
        title="Intimate Show",
        category="music",
        start_date=start,
        end_date=start + timedelta(hours=2),
        city="Lagos",
        country="Nigeria",
        capacity=1,
        available_spots=1,
        ticket_types=[{"type": "general", "price": 30}],
    ))


@pytest_asyncio.fixture
async def sold_out_event(db_session: AsyncSession) -> Event:
    start = datetime.now(timezone.utc) + timedelta(days=30)
    return await _persist(db_session, Event(
        title="Sold Out Show",
        category="music",
        start_date=start,
        end_date=start + timedelta(hours=3),
        city="Abuja",
        country="Nigeria",
        capacity=50,
        available_spots=0,
        ticket_types=[],
    ))


@pytest_asyncio.fixture
async def test_stay(db_session: AsyncSession) -> Accommodation:
    return await _persist(db_session, Accommodation(
        name="Lekki Loft",
        property_type="loft",
        city="Lagos",
        country="Nigeria",
        bedrooms=1,
        max_guests=2,
        price_per_night=Decimal("100.00"),
        currency="USD",
        amenities=["WiFi"],
    ))


@pytest_asyncio.fixture
async def test_transport(db_session: AsyncSession) -> TransportOption:
    departure = datetime.now(timezone.utc) + timedelta(days=5)
    return await _persist(db_session, TransportOption(
        provider="GIG Mobility",
        transport_type="bus",
        route_name="Lagos - Ibadan Express",
        origin="Lagos",
        destination="Ibadan",
        departure_time=departure,
        arrival_time=departure + timedelta(hours=2),
        price=Decimal("25.00"),
        currency="USD",
        total_seats=10,
        available_seats=10,
    ))


@pytest_asyncio.fixture
async def test_flight(db_session: AsyncSession) -> Flight:
    departure = datetime.now(timezone.utc) + timedelta(days=7)
    return await _persist(db_session, Flight(
        airline="Air Peace",
        flight_number="P47120",
        origin_airport="LOS",
        destination_airport="ABV",
        departure_time=departure,
        arrival_time=departure + timedelta(hours=1),
        available_seats=12,
        price=Decimal("180.00"),
    ))
