"""
Shared test fixtures.

The in-memory backends need nothing external.  The SQL backend is
exercised against an in-memory SQLite database (via aiosqlite) so tests
run without PostgreSQL; Redis is replaced by mocks where it appears.
"""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from seed import insert_reference_data
from src.config import Settings
from src.domain.entities import Location, User
from src.domain.enums import UserRole
from src.infrastructure import demo_data
from src.infrastructure.database import Base
from src.infrastructure.memory import InMemoryDirectory, InMemoryRequestRepository
from src.services.dispatch import DispatchGateway

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

GUARDIAN = 1
RIDER = 2
OTHER_GUARDIAN = 3
SECOND_RIDER = 5

PICKUP = Location(37.4979, 127.0276)
HOSPITAL_1 = Location(37.5012, 127.0396)


class FakeClock:
    """Deterministic clock that ticks one second per reading."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def make_directory() -> InMemoryDirectory:
    directory = InMemoryDirectory(demo_data.USERS, demo_data.PETS, demo_data.HOSPITALS)
    directory.add_user(
        User(id=SECOND_RIDER, email="rider2@demo.com", name="Choi Un-jeon", role=UserRole.RIDER)
    )
    return directory


# ── In-memory fixtures ────────────────────────────────────────────────


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repo(clock) -> InMemoryRequestRepository:
    return InMemoryRequestRepository(clock=clock)


@pytest.fixture
def directory() -> InMemoryDirectory:
    return make_directory()


@pytest.fixture
def gateway(repo, directory) -> DispatchGateway:
    return DispatchGateway(repo, directory)


# ── SQL fixtures (SQLite in-memory) ───────────────────────────────────


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, load reference rows, yield a session, then drop everything."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        await insert_reference_data(session)
        await session.commit()
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


# ── API fixtures ──────────────────────────────────────────────────────


@pytest.fixture
def app():
    from src.api.app import create_app
    from src.api.middleware import limiter

    # The limiter's counters are process-wide; start every test from zero
    limiter.reset()
    application = create_app(
        Settings(
            storage_backend="memory",
            presence_backend="memory",
            seed_demo_data=False,
        )
    )
    application.state.directory = make_directory()
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
