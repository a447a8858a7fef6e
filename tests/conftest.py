from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from parkinglot.core.dependencies import get_db
from parkinglot.database import Base
from parkinglot.domain.entities import Vehicle
from parkinglot.domain.lot import ParkingLot
from parkinglot.domain.registry import SpotRegistry
from parkinglot.main import app
from parkinglot.models import LotSnapshot  # noqa: F401

TEST_DATABASE_URL = "sqlite+aiosqlite:///./test_parkinglot.db"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
test_session_maker = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# A Wednesday, outside peak hours
START = datetime(2026, 3, 4, 12, 0, tzinfo=UTC)


class FrozenClock:
    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, now: datetime) -> datetime:
        self.now = now
        return self.now


@pytest.fixture
def make_vehicle():
    def _make(plate: str, category: str = "car", permit: bool = False) -> Vehicle:
        return Vehicle(license_plate=plate, category=category, accessibility_permit=permit)

    return _make


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def lot(clock: FrozenClock) -> ParkingLot:
    # 10 spots: C1-C5, B1-B2, T1, E1, H1
    return ParkingLot.create("Test Lot", 10, clock=clock)


@pytest.fixture
def small_lot(clock: FrozenClock) -> ParkingLot:
    return ParkingLot("Small Lot", SpotRegistry.build({"standard": 1}), clock=clock)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_session_maker() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, lot: ParkingLot) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.state.lot = lot

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
