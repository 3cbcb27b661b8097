import contextlib
from collections.abc import AsyncIterator, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.costumes.orm_models import Costume  # noqa: F401  registers the table
from src.events.dtos import Event
from src.events.repository.orm_models import EventRow  # noqa: F401  registers the table
from src.events.tests.factories import make_event
from src.identity.dtos import Actor
from src.identity.permissions import MANAGE_EVENTS
from src.main import app
from src.models.base import BaseModel

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    """A session on a fresh in-memory database."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def client_factory() -> Callable:
    """Build a test client with the given dependency overrides applied."""

    @contextlib.asynccontextmanager
    async def factory(overrides: dict | None = None) -> AsyncIterator[AsyncClient]:
        app.dependency_overrides.update(overrides or {})
        try:
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client
        finally:
            app.dependency_overrides.clear()

    return factory


@pytest.fixture
async def client(client_factory) -> AsyncIterator[AsyncClient]:
    async with client_factory() as client:
        yield client


@pytest.fixture
def member() -> Actor:
    return Actor(
        identity="auth0|member-1",
        groups=frozenset({"dutch_garrison"}),
        permissions=frozenset({"view:dgevents", "signup:dgevent"}),
    )


@pytest.fixture
def organizer() -> Actor:
    return Actor(
        identity="auth0|organizer",
        groups=frozenset({"dutch_garrison", "dune_sea_base"}),
        permissions=frozenset(
            {"view:dgevents", "view:dsbevents", "signup:dgevent", MANAGE_EVENTS}
        ),
    )


@pytest.fixture
def event() -> Event:
    return make_event()
